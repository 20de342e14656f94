"""Dielectric (glass/water) material implementation.

This module implements transparent materials with refraction and Fresnel
reflection.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when ratio * sin(theta) > 1

The side of the surface is taken from the ray direction: when the ray travels
along the normal it is leaving the medium, the normal is flipped for the
refraction and the index ratio is inverted. Reflection or refraction is then
chosen randomly with probability equal to the Schlick reflectance, so the
response always holds exactly one entry.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from prismtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # response = scatter_dielectric(colour, ior, direction, chroma, position, normal)
"""

import taichi as ti
import taichi.math as tm

from prismtracer.core.ray import (
    length_squared,
    reflect,
    schlick_reflectance,
)
from prismtracer.materials.response import Response, single_response

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def dielectric_direction(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
) -> vec3:
    """Choose and compute the reflected or refracted direction.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (need not be normalized).
        normal: The outward surface normal as returned by the geometry.

    Returns:
        The continuation direction. Reflection mirrors the normalized
        incident direction about the outward normal; refraction is the sum
        of the tangential and normal components of the transmitted ray.
    """
    d = tm.normalize(incident_direction)

    # Flip to the side the ray is coming from when leaving the medium
    side_normal = normal
    d_dot_n = tm.dot(d, normal)
    ratio = 1.0 / ior
    if d_dot_n > 0.0:
        side_normal = -normal
        d_dot_n = -d_dot_n
        ratio = ior

    cos_theta = tm.min(-d_dot_n, 1.0)
    sin_theta = tm.sqrt(1.0 - cos_theta * cos_theta)

    cannot_refract = ratio * sin_theta > 1.0

    direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or schlick_reflectance(cos_theta, ratio) > ti.random(ti.f32):
        direction = reflect(d, normal)
    else:
        out_tangent = ratio * (d + cos_theta * side_normal)
        out_normal = -tm.sqrt(ti.abs(1.0 - length_squared(out_tangent))) * side_normal
        direction = out_tangent + out_normal

    return direction


@ti.func
def scatter_dielectric(
    colour: vec3,
    ior: ti.f32,
    incident_direction: vec3,
    chroma: ti.i32,
    position: vec3,
    normal: vec3,
) -> Response:
    """Reflect or refract a ray at a dielectric surface.

    Args:
        colour: Transmission tint (RGB).
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        chroma: Chroma of the incoming ray, carried over to the continuation.
        position: The hit position, used as continuation origin.
        normal: The outward surface normal.

    Returns:
        A single-entry Response. Dielectrics never absorb a ray.
    """
    direction = dielectric_direction(ior, incident_direction, normal)
    return single_response(colour, position, direction, chroma)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_colours = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def validate_ior(ior: float) -> None:
    """Raise ValueError for an index of refraction below 1.0."""
    if ior < 1.0:
        raise ValueError(
            f"Index of refraction = {ior} is less than 1.0. "
            "IOR must be >= 1.0 for physically meaningful materials."
        )


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(
    colour: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ior: float = 1.5,
) -> int:
    """Add a dielectric material to the material registry.

    Args:
        colour: Transmission tint as (R, G, B). Default is clear glass.
            Each component must be in [0, 1].
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be >= 1.0.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If a colour component is outside [0, 1] or IOR < 1.0.
    """
    for i, component in enumerate(colour):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Colour component {i} = {component} is outside [0, 1].")
    validate_ior(ior)

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_colours[idx] = vec3(colour[0], colour[1], colour[2])
    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_colour(material_idx: ti.i32) -> vec3:
    return dielectric_colours[material_idx]


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    chroma: ti.i32,
    position: vec3,
    normal: vec3,
) -> Response:
    """Scatter off a dielectric material looked up by registry index."""
    return scatter_dielectric(
        get_dielectric_colour(material_idx),
        get_dielectric_ior(material_idx),
        incident_direction,
        chroma,
        position,
        normal,
    )
