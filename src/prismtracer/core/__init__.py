"""Core rendering module.

Components:
    ray: Ray data structure, chroma tags and vector utilities
    integrator: Radiance estimation along a ray (work-list path tracing)
    scheduler: Row-partitioned parallel rendering into the framebuffer

All compute-intensive operations use Taichi kernels for GPU acceleration.
"""

from .ray import (
    Chroma,
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_chroma_ray,
    make_ray,
    normalize,
    offset_origin,
    random_in_unit_sphere,
    ray_at,
    reflect,
    sample_unit_ball,
    schlick_reflectance,
    vec3,
)

# Note: integrator and scheduler are NOT imported here to avoid circular imports.
# Import directly from prismtracer.core.integrator or prismtracer.core.scheduler.

__all__ = [
    "Chroma",
    "Ray",
    "ray_at",
    "make_ray",
    "make_chroma_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "schlick_reflectance",
    "offset_origin",
    "random_in_unit_sphere",
    "sample_unit_ball",
]
