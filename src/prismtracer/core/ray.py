"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass, the chroma tag carried by rays after a
dispersive split, and the vector helpers used by the geometry and material
code. All helpers are Taichi functions and can only be called from inside
Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> # Inside a kernel:
    >>> # ray = make_ray(origin, direction)
    >>> # point = ray_at(ray, 5.0)
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Distance continuation origins are moved off the surface they leave
SURFACE_OFFSET = 1e-4

# Rejection sampling gives up after this many draws
MAX_SAMPLE_TRIES = 100


class Chroma(IntEnum):
    """Colour channel carried by a ray.

    WHITE rays carry all three channels. A ray tagged RED, GREEN or BLUE has
    already been split by a dispersive surface and represents only that
    channel; its value is the channel index.
    """

    RED = 0
    GREEN = 1
    BLUE = 2
    WHITE = 3


@ti.dataclass
class Ray:
    """A ray with an origin point, a direction and a chroma tag.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            normalized; diffuse continuations in particular are not.
        chroma: The Chroma value as an integer.
    """

    origin: vec3
    direction: vec3
    chroma: ti.i32


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a WHITE ray from origin and direction."""
    return Ray(origin=origin, direction=direction, chroma=int(Chroma.WHITE))


@ti.func
def make_chroma_ray(origin: vec3, direction: vec3, chroma: ti.i32) -> Ray:
    """Create a ray restricted to the given chroma."""
    return Ray(origin=origin, direction=direction, chroma=chroma)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes incident - 2 (incident . normal) normal. The normal should be
    unit length for a length-preserving reflection.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal.

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def schlick_reflectance(cosine: ti.f32, ratio: ti.f32) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    r0 = ((1 - ratio) / (1 + ratio))^2
    reflectance = r0 + (1 - r0) (1 - cosine)^5

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ratio: Ratio of refractive indices across the interface.

    Returns:
        The approximate Fresnel reflectance coefficient.
    """
    r0 = ((1.0 - ratio) / (1.0 + ratio)) ** 2
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def offset_origin(position: vec3, normal: vec3, direction: vec3) -> vec3:
    """Move a continuation origin off the surface it leaves.

    The origin is pushed SURFACE_OFFSET along the normal, towards the side the
    direction points into, so f32 rounding in the hit position cannot put it
    on the wrong side of a large body.

    Args:
        position: The hit position.
        normal: Unit surface normal at the hit.
        direction: The continuation direction.

    Returns:
        The offset origin.
    """
    side = 1.0
    if tm.dot(direction, normal) < 0.0:
        side = -1.0
    return position + side * SURFACE_OFFSET * normal


# =============================================================================
# Random Sampling
# =============================================================================


@ti.func
def sample_unit_ball(max_tries: ti.template()) -> vec3:
    """Rejection-sample a point inside the unit ball.

    Each try draws the components uniformly in [-1, 1) and is accepted when
    |p| <= 1. If no try is accepted the centre is returned.

    Args:
        max_tries: Number of draws before giving up (compile-time constant).

    Returns:
        A random point with length <= 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(max_tries):
        if not found:
            candidate = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
            )
            if length_squared(candidate) <= 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit ball.

    The acceptance rate of a single draw is about 52%, so the cap of
    MAX_SAMPLE_TRIES is never reached in practice.
    """
    return sample_unit_ball(MAX_SAMPLE_TRIES)
