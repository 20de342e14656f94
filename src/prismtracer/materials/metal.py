"""Metal (mirror) material implementation.

This module implements perfect specular reflection. The normalized incident
direction d is mirrored about the surface normal n:

    R = d - 2(d . n)n

A ray only reflects when it arrives against the normal (d . n < 0). A ray
that meets the surface from behind (d . n >= 0) is absorbed and the response
is empty.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from prismtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # response = scatter_metal(colour, direction, chroma, position, normal)
"""

import taichi as ti
import taichi.math as tm

from prismtracer.materials.response import Response, empty_response, single_response

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    colour: vec3,
    incident_direction: vec3,
    chroma: ti.i32,
    position: vec3,
    normal: vec3,
) -> Response:
    """Reflect a ray off a metal surface.

    Args:
        colour: The reflective colour (RGB).
        incident_direction: The incoming ray direction (need not be normalized).
        chroma: Chroma of the incoming ray, carried over to the reflection.
        position: The hit position, used as continuation origin.
        normal: The surface normal at the hit point (unit length).

    Returns:
        A single-entry Response holding the mirror reflection, or an empty
        Response when the ray arrives from behind the surface.
    """
    d = tm.normalize(incident_direction)
    d_dot_n = tm.dot(d, normal)

    response = empty_response(position)
    if d_dot_n < 0.0:
        reflected = d - 2.0 * d_dot_n * normal
        response = single_response(colour, position, reflected, chroma)

    return response


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_colours = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(colour: tuple[float, float, float]) -> int:
    """Add a metal material to the material registry.

    Args:
        colour: The reflective colour as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any colour component is outside [0, 1].
    """
    for i, component in enumerate(colour):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Colour component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_colours[idx] = vec3(colour[0], colour[1], colour[2])
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_colour(material_idx: ti.i32) -> vec3:
    """Get the colour for a metal material by index."""
    return metal_colours[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    chroma: ti.i32,
    position: vec3,
    normal: vec3,
) -> Response:
    """Reflect off a metal material looked up by registry index."""
    colour = get_metal_colour(material_idx)
    return scatter_metal(colour, incident_direction, chroma, position, normal)
