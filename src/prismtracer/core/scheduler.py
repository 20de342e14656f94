"""Parallel render scheduler with static row partitioning.

A render is one Taichi kernel launch. The kernel's outermost loop runs over
worker ids, which Taichi spreads across its thread pool. Worker w owns every
row with row % num_workers == w and walks those rows and all their columns
serially, so every row belongs to exactly one worker and no two workers ever
write the same pixel. The framebuffer needs no lock; kernel completion
followed by ti.sync() is the join.

For each pixel the worker draws S jittered camera rays,

    u = (column + rand) / (width - 1)
    v = (height - 1 - row + rand) / (height - 1)

so row 0 is the top of the image. Each ray is evaluated by the integrator,
the samples are averaged and the result is gamma corrected into the 8-bit
framebuffer. A per-pixel write counter is checked after the join.

Random numbers come from ti.random, which keeps one generator state per
runtime thread. The stream is seeded by ti.init(random_seed=...). Pixel noise
depends on how workers are mapped to threads; the expected image does not.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=7)
    >>> from prismtracer.core.scheduler import RenderScheduler, RenderSettings
    >>> from prismtracer.scene.default_scene import create_default_scene
    >>> from prismtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> scheduler = RenderScheduler(400, 225)
    >>> scheduler.render(RenderSettings(samples_per_pixel=100, max_depth=50))
    >>> image = scheduler.get_framebuffer_numpy()  # (225, 400, 3) uint8
"""

import logging
import time
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from prismtracer.camera.pinhole import get_ray, is_camera_configured
from prismtracer.core.integrator import MAX_DEPTH, gamma_correct, ray_colour, sanitize_colour

logger = logging.getLogger(__name__)

# Type aliases
vec3 = tm.vec3
ivec3 = tm.ivec3

# =============================================================================
# Framebuffer
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Smallest supported dimension; jitter divides by (size - 1)
MIN_IMAGE_SIZE = 2

# 8-bit RGB framebuffer indexed [row, column], row 0 at the top
_framebuffer = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Number of times each pixel was written during the last render
_write_counts = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))


@dataclass
class RenderSettings:
    """Parameters of a single render.

    Attributes:
        samples_per_pixel: Number of jittered rays averaged per pixel.
        max_depth: Maximum number of bounces per ray. 0 renders black.
        num_workers: Number of row-partitioned workers.
    """

    samples_per_pixel: int = 100
    max_depth: int = MAX_DEPTH
    num_workers: int = 8

    def __post_init__(self) -> None:
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.num_workers <= 0:
            raise ValueError(f"num_workers must be positive, got {self.num_workers}")


@ti.func
def _render_pixel(
    row: ti.i32,
    column: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Average samples jittered rays through one pixel."""
    colour = vec3(0.0, 0.0, 0.0)
    for _ in range(samples):
        u = (ti.cast(column, ti.f32) + ti.random(ti.f32)) / ti.cast(width - 1, ti.f32)
        v = (ti.cast(height - 1 - row, ti.f32) + ti.random(ti.f32)) / ti.cast(height - 1, ti.f32)
        colour += sanitize_colour(ray_colour(get_ray(u, v), max_depth))
    return colour / ti.cast(samples, ti.f32)


@ti.kernel
def _render_kernel(
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    max_depth: ti.i32,
    num_workers: ti.i32,
):
    # Outermost loop: one parallel task per worker
    for worker in range(num_workers):
        row = worker
        while row < height:
            for column in range(width):
                colour = _render_pixel(row, column, width, height, samples, max_depth)
                rgb = ivec3(
                    gamma_correct(colour[0]),
                    gamma_correct(colour[1]),
                    gamma_correct(colour[2]),
                )
                _framebuffer[row, column] = ti.cast(rgb, ti.u8)
                _write_counts[row, column] += 1
            row += num_workers


class RenderScheduler:
    """Renders the current scene into the shared framebuffer.

    The scene is whatever is stored in the scene and material fields (see
    SceneManager); the camera must be configured with setup_camera().

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        last_render_seconds: Wall-clock duration of the last render, or None.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the scheduler.

        Args:
            width: Image width in pixels (2 to MAX_IMAGE_WIDTH).
            height: Image height in pixels (2 to MAX_IMAGE_HEIGHT).

        Raises:
            ValueError: If a dimension is outside the supported range.
        """
        if not MIN_IMAGE_SIZE <= width <= MAX_IMAGE_WIDTH:
            raise ValueError(
                f"Image width {width} outside supported range "
                f"[{MIN_IMAGE_SIZE}, {MAX_IMAGE_WIDTH}]"
            )
        if not MIN_IMAGE_SIZE <= height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image height {height} outside supported range "
                f"[{MIN_IMAGE_SIZE}, {MAX_IMAGE_HEIGHT}]"
            )
        self._width = width
        self._height = height
        self._rendered = False
        self.last_render_seconds: float | None = None

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def rendered(self) -> bool:
        """Whether render() has completed since construction."""
        return self._rendered

    def render(self, settings: RenderSettings | None = None) -> None:
        """Render every pixel of the image exactly once.

        Args:
            settings: Render parameters. Defaults to RenderSettings().

        Raises:
            RuntimeError: If the camera has not been set up, or a pixel was
                not written exactly once.
        """
        if settings is None:
            settings = RenderSettings()
        if not is_camera_configured():
            raise RuntimeError("Camera not set up. Call setup_camera() first.")

        logger.info(
            "Rendering %dx%d at %d spp, max depth %d, %d workers",
            self._width,
            self._height,
            settings.samples_per_pixel,
            settings.max_depth,
            settings.num_workers,
        )

        _write_counts.fill(0)
        start = time.perf_counter()
        _render_kernel(
            self._width,
            self._height,
            settings.samples_per_pixel,
            settings.max_depth,
            settings.num_workers,
        )
        ti.sync()
        self.last_render_seconds = time.perf_counter() - start

        self._check_write_counts()
        self._rendered = True
        logger.info("Render finished in %.2f s", self.last_render_seconds)

    def _check_write_counts(self) -> None:
        counts = self.get_write_counts_numpy()
        bad = np.argwhere(counts != 1)
        if bad.size > 0:
            row, column = (int(x) for x in bad[0])
            raise RuntimeError(
                f"{len(bad)} pixels not written exactly once, first at "
                f"row {row}, column {column} ({counts[row, column]} writes)"
            )

    def get_write_counts_numpy(self) -> npt.NDArray[np.int32]:
        """Per-pixel write counts of the last render, shape (height, width)."""
        return _write_counts.to_numpy()[: self._height, : self._width]

    def get_framebuffer_numpy(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image as a NumPy array.

        Returns:
            Array of shape (height, width, 3) with dtype uint8, row 0 at the
            top of the image.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        if not self._rendered:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        image = _framebuffer.to_numpy()[: self._height, : self._width, :]
        return np.ascontiguousarray(image, dtype=np.uint8)

    def __repr__(self) -> str:
        return f"RenderScheduler(width={self.width}, height={self.height})"
