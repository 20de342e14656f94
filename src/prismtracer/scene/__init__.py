"""Scene module for body storage, hit queries and scene assembly.

Components:
    intersection: Per-kind body storage and the nearest-hit query
    manager: Scene manager coordinating bodies and the material arena
    default_scene: Ready-made demonstration scenes

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for geometric data
    - A body table fixing the scan order across body kinds
    - Unified material IDs dispatched by MaterialType
"""

from .default_scene import (
    create_default_camera,
    create_default_scene,
    create_prism_scene,
)
from .intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    T_MAX,
    T_MIN,
    BodyKind,
    SceneHitRecord,
    add_plane,
    add_sphere,
    clear_scene,
    get_body_count,
    get_hit,
    get_plane_count,
    get_sphere_count,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    PlaneInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "BodyKind",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_sphere_count",
    "get_plane_count",
    "get_body_count",
    "get_hit",
    "MAX_SPHERES",
    "MAX_PLANES",
    "T_MIN",
    "T_MAX",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "PlaneInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Default scenes
    "create_default_camera",
    "create_default_scene",
    "create_prism_scene",
]
