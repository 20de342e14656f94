"""Dispersive dielectric (prism glass) material implementation.

A dispersive dielectric behaves like an ordinary dielectric, except that each
colour channel has its own index of refraction, so red, green and blue light
bend by different amounts.

A WHITE ray meeting the surface is split into three continuation rays, one
per channel. Each one carries only its own channel of the material colour and
is tagged with that channel's chroma. A ray that has already been split keeps
its single channel: only that channel's physics is evaluated and exactly one
continuation is produced, so a path is split at most once.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from prismtracer.materials.dispersive import scatter_dispersive
    >>> # Use within a Taichi kernel:
    >>> # response = scatter_dispersive(colour, iors, direction, chroma, position, normal)
"""

import taichi as ti
import taichi.math as tm

from prismtracer.core.ray import Chroma
from prismtracer.materials.dielectric import dielectric_direction, validate_ior
from prismtracer.materials.response import Response

# Type aliases
vec3 = tm.vec3
ivec3 = tm.ivec3


@ti.func
def scatter_dispersive(
    colour: vec3,
    iors: vec3,
    incident_direction: vec3,
    chroma: ti.i32,
    position: vec3,
    normal: vec3,
) -> Response:
    """Split or follow a ray through a dispersive surface.

    Args:
        colour: Transmission tint (RGB).
        iors: Per-channel indices of refraction (R, G, B).
        incident_direction: The incoming ray direction.
        chroma: Chroma of the incoming ray.
        position: The hit position, used as continuation origin.
        normal: The outward surface normal.

    Returns:
        A Response with slots 0, 1 and 2 populated for a WHITE ray, or only
        the slot matching the ray's chroma otherwise. Slot k's attenuation is
        zero except for channel k.
    """
    white = int(Chroma.WHITE)
    active = ivec3(0, 0, 0)
    attenuation = ti.Matrix.zero(ti.f32, 3, 3)
    directions = ti.Matrix.zero(ti.f32, 3, 3)

    for c in ti.static(range(3)):
        if chroma == white or chroma == c:
            direction = dielectric_direction(iors[c], incident_direction, normal)
            active[c] = 1
            attenuation[c, c] = colour[c]
            for j in ti.static(range(3)):
                directions[c, j] = direction[j]

    return Response(
        active=active,
        origin=position,
        attenuation=attenuation,
        direction=directions,
        chroma=ivec3(int(Chroma.RED), int(Chroma.GREEN), int(Chroma.BLUE)),
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dispersive materials in the scene
MAX_DISPERSIVE_MATERIALS = 256

# Storage for dispersive material properties
dispersive_colours = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DISPERSIVE_MATERIALS)
dispersive_iors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DISPERSIVE_MATERIALS)
num_dispersive_materials = ti.field(dtype=ti.i32, shape=())


def clear_dispersive_materials() -> None:
    """Clear all dispersive materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dispersive_materials[None] = 0


def add_dispersive_material(
    colour: tuple[float, float, float],
    iors: tuple[float, float, float],
) -> int:
    """Add a dispersive material to the material registry.

    Args:
        colour: Transmission tint as (R, G, B). Each component must be in [0, 1].
        iors: Indices of refraction for the (R, G, B) channels. Real glass
            refracts blue more strongly than red, e.g. (1.51, 1.52, 1.53).
            Each must be >= 1.0.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If a colour component is outside [0, 1], an IOR is
            below 1.0, or iors does not have three entries.
    """
    for i, component in enumerate(colour):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Colour component {i} = {component} is outside [0, 1].")
    if len(iors) != 3:
        raise ValueError(f"Expected 3 refractive indices (R, G, B), got {len(iors)}")
    for ior in iors:
        validate_ior(ior)

    idx = num_dispersive_materials[None]
    if idx >= MAX_DISPERSIVE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dispersive materials ({MAX_DISPERSIVE_MATERIALS}) exceeded"
        )

    dispersive_colours[idx] = vec3(colour[0], colour[1], colour[2])
    dispersive_iors[idx] = vec3(iors[0], iors[1], iors[2])
    num_dispersive_materials[None] = idx + 1
    return idx


def get_dispersive_material_count() -> int:
    """Get the number of dispersive materials in the registry."""
    return int(num_dispersive_materials[None])


@ti.func
def get_dispersive_colour(material_idx: ti.i32) -> vec3:
    return dispersive_colours[material_idx]


@ti.func
def get_dispersive_iors(material_idx: ti.i32) -> vec3:
    return dispersive_iors[material_idx]


@ti.func
def scatter_dispersive_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    chroma: ti.i32,
    position: vec3,
    normal: vec3,
) -> Response:
    """Scatter off a dispersive material looked up by registry index."""
    return scatter_dispersive(
        get_dispersive_colour(material_idx),
        get_dispersive_iors(material_idx),
        incident_direction,
        chroma,
        position,
        normal,
    )
