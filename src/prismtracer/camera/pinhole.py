"""Pinhole camera model for perspective projection ray generation.

The camera is described by its origin, a focal length and a rectangular
viewport. The viewport sits focal_length in front of the origin (along -z)
and is spanned by two world-space edge vectors:

- horizontal: left to right across the image, length viewport_width
- vertical: bottom to top across the image, length viewport_height

viewport_width is derived as aspect_ratio * viewport_height. Primary rays run
from the origin through image_origin + u * horizontal + v * vertical, where
image_origin is the lower-left corner of the viewport. Ray directions are not
normalized.

All ray generation is Taichi-compatible for GPU acceleration.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from prismtracer.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(
    ...     origin=(0.0, 0.0, 0.0),
    ...     focal_length=1.0,
    ...     viewport_height=2.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image centre
"""

import logging
from dataclasses import dataclass

import numpy as np
import taichi as ti

from prismtracer.core.ray import Ray, make_ray, vec3

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        origin: Camera position in world space (x, y, z).
        focal_length: Distance from the origin to the viewport along -z.
        viewport_height: Height of the viewport in world units.
        aspect_ratio: Viewport width divided by viewport height.
        horizontal: Unit direction of the viewport's left-to-right edge.
        vertical: Unit direction of the viewport's bottom-to-top edge.
    """

    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    focal_length: float = 1.0
    viewport_height: float = 2.0
    aspect_ratio: float = 16.0 / 9.0
    horizontal: tuple[float, float, float] = (1.0, 0.0, 0.0)
    vertical: tuple[float, float, float] = (0.0, 1.0, 0.0)

    @property
    def viewport_width(self) -> float:
        return self.aspect_ratio * self.viewport_height


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Viewport edge vectors scaled to the viewport size
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())

# Lower-left corner of the viewport
_image_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Flag to track if setup_camera() has run
_camera_configured = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Must be called before rendering. Writes to Taichi fields, so call it from
    Python, not from within a kernel.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the focal length, viewport height or aspect ratio is
            not positive, or an edge direction has zero length.
    """
    if camera.focal_length <= 0.0:
        raise ValueError(f"focal_length must be positive, got {camera.focal_length}")
    if camera.viewport_height <= 0.0:
        raise ValueError(f"viewport_height must be positive, got {camera.viewport_height}")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {camera.aspect_ratio}")

    origin = np.array(camera.origin, dtype=np.float32)
    h_dir = np.array(camera.horizontal, dtype=np.float32)
    v_dir = np.array(camera.vertical, dtype=np.float32)
    for name, axis in (("horizontal", h_dir), ("vertical", v_dir)):
        if np.linalg.norm(axis) == 0.0:
            raise ValueError(f"Camera {name} direction must be non-zero")

    horizontal = camera.viewport_width * h_dir / np.linalg.norm(h_dir)
    vertical = camera.viewport_height * v_dir / np.linalg.norm(v_dir)

    # Origin - horizontal/2 (left) - vertical/2 (down) - focal length (forward)
    image_origin = (
        origin
        - horizontal / 2.0
        - vertical / 2.0
        - np.array([0.0, 0.0, camera.focal_length], dtype=np.float32)
    )

    _camera_origin[None] = origin.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _image_origin[None] = image_origin.tolist()
    _camera_configured[None] = 1

    logger.debug(
        "Camera at %s, viewport %.3f x %.3f, image origin %s",
        camera.origin,
        camera.viewport_width,
        camera.viewport_height,
        tuple(image_origin.tolist()),
    )


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a WHITE ray through normalized image coordinates (u, v).

    - u = 0: left edge, u = 1: right edge
    - v = 0: bottom edge, v = 1: top edge

    Args:
        u: Horizontal coordinate in [0, 1].
        v: Vertical coordinate in [0, 1].

    Returns:
        A Ray from the camera origin toward the point on the viewport. The
        direction is not normalized.
    """
    origin = _camera_origin[None]
    point_on_viewport = (
        _image_origin[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    return make_ray(origin, point_on_viewport - origin)


# =============================================================================
# Utility Functions
# =============================================================================


def is_camera_configured() -> bool:
    """Check if setup_camera() has been called."""
    return bool(_camera_configured[None])


def reset_camera() -> None:
    """Mark the camera as not configured."""
    _camera_configured[None] = 0


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, horizontal, vertical, image_origin.
    """
    origin_vec = _camera_origin[None]
    h_vec = _viewport_horizontal[None]
    vert_vec = _viewport_vertical[None]
    io_vec = _image_origin[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "horizontal": (float(h_vec[0]), float(h_vec[1]), float(h_vec[2])),
        "vertical": (float(vert_vec[0]), float(vert_vec[1]), float(vert_vec[2])),
        "image_origin": (float(io_vec[0]), float(io_vec[1]), float(io_vec[2])),
    }
