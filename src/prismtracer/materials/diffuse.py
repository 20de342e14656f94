"""Diffuse (matte) material implementation.

A diffuse surface scatters every incoming ray. The continuation direction is
the surface normal plus a random point in the unit ball, which concentrates
scattered rays around the normal without any explicit cosine weighting. The
direction is left unnormalized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from prismtracer.materials.diffuse import scatter_diffuse
    >>> # Use within a Taichi kernel:
    >>> # response = scatter_diffuse(colour, chroma, position, normal)
"""

import taichi as ti
import taichi.math as tm

from prismtracer.core.ray import length_squared, random_in_unit_sphere
from prismtracer.materials.response import Response, single_response

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def diffuse_direction(normal: vec3) -> vec3:
    """Sample a diffuse continuation direction: normal + random_in_unit_sphere().

    A sample that almost cancels the normal is replaced by the normal itself.
    """
    direction = normal + random_in_unit_sphere()
    if length_squared(direction) < 1e-8:
        direction = normal
    return direction


@ti.func
def scatter_diffuse(
    colour: vec3,
    chroma: ti.i32,
    position: vec3,
    normal: vec3,
) -> Response:
    """Scatter a ray off a diffuse surface.

    Args:
        colour: The reflectance colour (RGB).
        chroma: Chroma of the incoming ray, carried over to the continuation.
        position: The hit position, used as continuation origin.
        normal: The surface normal at the hit point.

    Returns:
        A single-entry Response with attenuation equal to colour.
    """
    return single_response(colour, position, diffuse_direction(normal), chroma)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of diffuse materials in the scene
MAX_DIFFUSE_MATERIALS = 256

# Storage for diffuse material properties
diffuse_colours = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DIFFUSE_MATERIALS)
num_diffuse_materials = ti.field(dtype=ti.i32, shape=())


def clear_diffuse_materials() -> None:
    """Clear all diffuse materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_diffuse_materials[None] = 0


def add_diffuse_material(colour: tuple[float, float, float]) -> int:
    """Add a diffuse material to the material registry.

    Args:
        colour: The reflectance colour as (R, G, B) tuple.
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
                "A diffuse surface cannot reflect more light than it receives."
            )

    idx = num_diffuse_materials[None]
    if idx >= MAX_DIFFUSE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of diffuse materials ({MAX_DIFFUSE_MATERIALS}) exceeded"
        )

    diffuse_colours[idx] = vec3(colour[0], colour[1], colour[2])
    num_diffuse_materials[None] = idx + 1
    return idx


def get_diffuse_material_count() -> int:
    """Get the number of diffuse materials in the registry."""
    return int(num_diffuse_materials[None])


@ti.func
def get_diffuse_colour(material_idx: ti.i32) -> vec3:
    """Get the colour for a diffuse material by index."""
    return diffuse_colours[material_idx]


@ti.func
def scatter_diffuse_by_id(
    material_idx: ti.i32,
    chroma: ti.i32,
    position: vec3,
    normal: vec3,
) -> Response:
    """Scatter off a diffuse material looked up by registry index."""
    return scatter_diffuse(get_diffuse_colour(material_idx), chroma, position, normal)
