"""Camera module for primary ray generation.

Components:
    pinhole: Perspective camera with a fixed viewport in front of the origin

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across the image
    v in [0, 1]: bottom to top across the image
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_ray,
    is_camera_configured,
    reset_camera,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "reset_camera",
    "is_camera_configured",
    "get_ray",
    "get_camera_info",
]
