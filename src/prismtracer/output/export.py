"""Image export utilities for rendered framebuffers.

The framebuffer is already gamma corrected 8-bit RGB, so export only encodes
it. The file format follows the path's extension (BMP, PNG, ...), as decided
by Pillow.

Encoding or file system failures are raised as ImageExportError, which
carries the target path.

Example:
    >>> from prismtracer.output.export import save_render
    >>> from prismtracer.core.scheduler import RenderScheduler
    >>>
    >>> scheduler = RenderScheduler(400, 225)
    >>> scheduler.render()
    >>> save_render(scheduler, "img.bmp")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from prismtracer.core.scheduler import RenderScheduler

logger = logging.getLogger(__name__)


class ImageExportError(RuntimeError):
    """Raised when an image cannot be encoded or written.

    Attributes:
        path: The path that could not be written.
    """

    def __init__(self, path: str | Path, message: str) -> None:
        super().__init__(f"Could not save image to {path}: {message}")
        self.path = Path(path)


def save_framebuffer(image: npt.NDArray[np.uint8], filepath: str | Path) -> Path:
    """Encode an 8-bit RGB image and write it to disk.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8, row 0 at the top.
        filepath: Output path. The extension selects the format.

    Returns:
        The path written.

    Raises:
        ValueError: If the array is not an (H, W, 3) uint8 image.
        ImageExportError: If encoding or writing fails.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {image.dtype}")

    path = Path(filepath)
    pil_image = PILImage.fromarray(np.ascontiguousarray(image), mode="RGB")
    try:
        pil_image.save(path)
    except (OSError, ValueError) as exc:
        raise ImageExportError(path, str(exc)) from exc

    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], path)
    return path


def save_render(scheduler: RenderScheduler, filepath: str | Path) -> Path:
    """Save the scheduler's framebuffer to a file.

    Raises:
        RuntimeError: If the scheduler has not rendered anything yet.
        ImageExportError: If encoding or writing fails.
    """
    return save_framebuffer(scheduler.get_framebuffer_numpy(), filepath)
