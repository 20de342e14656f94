"""Materials module for surface scattering models.

Components:
    response: Fixed three-slot record of (attenuation, continuation ray) pairs
    diffuse: Matte surfaces scattering around the normal
    metal: Mirror reflection, absorbing rays that arrive from behind
    dielectric: Glass-like refraction with Schlick reflectance
    dispersive: Dielectric with one refractive index per colour channel

Each material provides:
    - scatter_*(): map an incoming ray and hit to a Response
    - a type-local registry (add_*, clear_*, get_*_material_count)
    - scatter_*_by_id(): scatter using registry parameters

Materials never create energy: every attenuation component is bounded by
the material colour, which the registries keep inside [0, 1].

All scattering is implemented as Taichi functions for kernel execution.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    dielectric_direction,
    get_dielectric_colour,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
)
from .diffuse import (
    add_diffuse_material,
    clear_diffuse_materials,
    get_diffuse_colour,
    get_diffuse_material_count,
    scatter_diffuse,
    scatter_diffuse_by_id,
)
from .dispersive import (
    add_dispersive_material,
    clear_dispersive_materials,
    get_dispersive_colour,
    get_dispersive_iors,
    get_dispersive_material_count,
    scatter_dispersive,
    scatter_dispersive_by_id,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_colour,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)
from .response import (
    MAX_RESPONSE_ENTRIES,
    Response,
    empty_response,
    response_attenuation,
    response_count,
    response_direction,
    response_ray,
    single_response,
)

__all__ = [
    # Response
    "Response",
    "MAX_RESPONSE_ENTRIES",
    "empty_response",
    "single_response",
    "response_count",
    "response_attenuation",
    "response_direction",
    "response_ray",
    # Diffuse
    "scatter_diffuse",
    "scatter_diffuse_by_id",
    "add_diffuse_material",
    "clear_diffuse_materials",
    "get_diffuse_material_count",
    "get_diffuse_colour",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_colour",
    # Dielectric
    "dielectric_direction",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_colour",
    "get_dielectric_ior",
    # Dispersive
    "scatter_dispersive",
    "scatter_dispersive_by_id",
    "add_dispersive_material",
    "clear_dispersive_materials",
    "get_dispersive_material_count",
    "get_dispersive_colour",
    "get_dispersive_iors",
]
