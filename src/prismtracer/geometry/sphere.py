"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord shared by all
primitives, and the ray-sphere intersection routine.

The intersection solves the half-b quadratic

    a*t^2 + 2*half_b*t + c = 0

with a = d.d, half_b = (o - centre).d and c = |o - centre|^2 - r^2. The
smaller root is tried first and the larger root only when the smaller one
falls outside [t_min, t_max].

The returned normal always points away from the centre, also for rays that
start inside the sphere. Materials that care about the side of the surface
(dielectrics) work it out from the ray direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from prismtracer.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(centre=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by centre point and radius.

    Attributes:
        centre: The centre point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    centre: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1, and then within [t_min, t_max].
        position: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal at the intersection point.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Minimum t value for a valid hit (inclusive).
        t_max: Maximum t value for a valid hit (inclusive).

    Returns:
        A HitRecord with the nearest root inside [t_min, t_max], or a miss
        record when the discriminant is negative or both roots are outside.
    """
    # Vector from sphere centre to ray origin
    oc = ray_origin - sphere.centre

    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_position = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearer root first
        t = (-half_b - sqrt_d) / a
        valid = t >= t_min and t <= t_max

        if not valid:
            t = (-half_b + sqrt_d) / a
            valid = t >= t_min and t <= t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_position = ray_origin + t * ray_direction
            hit_normal = tm.normalize(hit_position - sphere.centre)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        position=hit_position,
        normal=hit_normal,
    )


@ti.func
def make_sphere(centre: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from centre and radius inside a Taichi kernel."""
    return Sphere(centre=centre, radius=radius)
