"""Bounded plane (parallelogram) primitive with ray-plane intersection.

A plane is defined by:
- origin: One corner of the bounded region
- x_axis: Unit vector along the first edge
- y_axis: Unit vector along the second edge, orthogonal to x_axis
- extents: Edge lengths along x_axis and y_axis

The plane covers the points origin + x * x_axis + y * y_axis with
0 < x < extents.x and 0 < y < extents.y. Points exactly on an edge are not
part of the plane.

The normal is cross(x_axis, y_axis) and is not renormalized, so the axes must
be unit length and orthogonal. The scene manager validates this when a plane
is added.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from prismtracer.geometry.plane import Plane, hit_plane
    >>> # Floor at y=0, spanning x=[0,4] and z=[-4,0]
    >>> plane = Plane(
    ...     origin=ti.math.vec3(0, 0, 0),
    ...     x_axis=ti.math.vec3(1, 0, 0),
    ...     y_axis=ti.math.vec3(0, 0, -1),
    ...     extents=ti.math.vec2(4, 4),
    ... )
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3
vec2 = tm.vec2

# Rays closer than this to parallel with the plane never hit it
PARALLEL_EPSILON = 1e-4


@ti.dataclass
class Plane:
    """A bounded plane spanned by two orthonormal axes.

    Attributes:
        origin: The corner point of the plane (vec3).
        x_axis: Unit edge direction from origin (vec3).
        y_axis: Unit edge direction from origin, orthogonal to x_axis (vec3).
        extents: Lengths of the edges along x_axis and y_axis (vec2).
    """

    origin: vec3
    x_axis: vec3
    y_axis: vec3
    extents: vec2


@ti.func
def plane_normal(plane: Plane) -> vec3:
    """Compute the plane normal as cross(x_axis, y_axis)."""
    return tm.cross(plane.x_axis, plane.y_axis)


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-plane intersection.

    1. Reject rays (nearly) parallel to the plane
    2. Solve for t where the ray meets the infinite plane
    3. Project the hit point onto the plane axes and check the bounds

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        plane: The plane to test intersection against.
        t_min: Minimum t value for a valid hit (inclusive).
        t_max: Maximum t value for a valid hit (inclusive).

    Returns:
        A HitRecord containing intersection information. Check hit field
        to determine if intersection occurred.
    """
    normal = plane_normal(plane)
    denom = tm.dot(normal, ray_direction)

    # Initialize result
    did_hit = 0
    hit_t = 0.0
    hit_position = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if ti.abs(denom) >= PARALLEL_EPSILON:
        t = tm.dot(plane.origin - ray_origin, normal) / denom

        if t >= t_min and t <= t_max:
            position = ray_origin + t * ray_direction

            # Local coordinates along the plane axes
            local = position - plane.origin
            x = tm.dot(local, plane.x_axis)
            y = tm.dot(local, plane.y_axis)

            # Strict interior: edge-exact hits are misses
            if x > 0.0 and x < plane.extents.x and y > 0.0 and y < plane.extents.y:
                did_hit = 1
                hit_t = t
                hit_position = position
                hit_normal = normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        position=hit_position,
        normal=hit_normal,
    )


@ti.func
def make_plane(origin: vec3, x_axis: vec3, y_axis: vec3, extents: vec2) -> Plane:
    """Create a plane inside a Taichi kernel."""
    return Plane(origin=origin, x_axis=x_axis, y_axis=y_axis, extents=extents)
