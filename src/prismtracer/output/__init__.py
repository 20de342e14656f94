"""Output module for encoding and saving rendered images.

Components:
    export: Pillow-based framebuffer encoding
"""

from .export import (
    ImageExportError,
    save_framebuffer,
    save_render,
)

__all__ = [
    "ImageExportError",
    "save_framebuffer",
    "save_render",
]
