"""Geometry module for shape primitives.

This module provides geometric primitives and their intersection routines:

Components:
    sphere: Sphere primitive, the shared HitRecord, ray-sphere intersection
    plane: Bounded plane (parallelogram) primitive and ray-plane intersection

All intersection routines are Taichi functions (@ti.func) and follow the
pattern:
    record = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)

Geometric edge cases (negative discriminant, parallel rays, hits outside the
t window or the plane bounds) produce a record with hit == 0 rather than an
error.
"""

from .plane import PARALLEL_EPSILON, Plane, hit_plane, make_plane, plane_normal
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
    "Plane",
    "hit_plane",
    "make_plane",
    "plane_normal",
    "PARALLEL_EPSILON",
]
