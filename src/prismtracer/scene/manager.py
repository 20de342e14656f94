"""Unified scene manager for coordinating bodies and materials.

This module provides a high-level scene management API that coordinates body
storage (spheres, planes) with material assignment. It tracks which material
type (Diffuse, Metal, Dielectric, Dispersive) each material ID corresponds to,
so the integrator can dispatch to the right scattering function.

The SceneManager maintains:
- A unified material_id space across all material types (the material arena)
- Mapping from material_id to (material_type, type_local_index)
- High-level methods for adding bodies with materials in one call
- Scene serialization/configuration support

Bodies refer to materials by ID only. Materials are owned by the registries
and stay unchanged for the lifetime of the scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from prismtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_diffuse_material(colour=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(centre=(0, 0, -1), radius=0.5, material_id=mat_id)
"""

import logging
import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from prismtracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from prismtracer.materials.diffuse import (
    add_diffuse_material,
    clear_diffuse_materials,
)
from prismtracer.materials.dispersive import (
    add_dispersive_material,
    clear_dispersive_materials,
)
from prismtracer.materials.metal import (
    add_metal_material,
    clear_metal_materials,
)
from prismtracer.scene.intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    add_plane,
    add_sphere,
    clear_scene,
    get_body_count,
    get_plane_count,
    get_sphere_count,
)

logger = logging.getLogger(__name__)

# Type aliases
vec3 = tm.vec3
vec2 = tm.vec2

# Tolerance for the unit-length and orthogonality checks on plane axes
AXIS_TOLERANCE = 1e-4


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator to determine which
    scattering function to call.
    """

    DIFFUSE = 0
    METAL = 1
    DIELECTRIC = 2
    DISPERSIVE = 3


# Maximum number of materials across all types
MAX_MATERIALS = 1024  # 256 per type * 4 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    Returns:
        The index into the type-specific material array, or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material.
        type_index: The index within the type-specific material array.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene."""

    sphere_index: int
    centre: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class PlaneInfo:
    """Information about a bounded plane in the scene."""

    plane_index: int
    origin: tuple[float, float, float]
    x_axis: tuple[float, float, float]
    y_axis: tuple[float, float, float]
    extents: tuple[float, float]
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        bodies: List of body configurations in scan order. Each has a
            "type" key of "sphere" or "plane".
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    bodies: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _as_pair(values: Any, name: str) -> tuple[float, float]:
    if len(values) != 2:
        raise ValueError(f"{name} must have 2 components, got {len(values)}")
    return (float(values[0]), float(values[1]))


def _check_plane_axes(
    x_axis: tuple[float, float, float],
    y_axis: tuple[float, float, float],
) -> None:
    """Raise ValueError unless both axes are unit length and orthogonal."""
    for name, axis in (("x_axis", x_axis), ("y_axis", y_axis)):
        norm = math.sqrt(sum(c * c for c in axis))
        if abs(norm - 1.0) > AXIS_TOLERANCE:
            raise ValueError(f"Plane {name} {axis} must be unit length (length is {norm:.6f})")
    axis_dot = sum(a * b for a, b in zip(x_axis, y_axis))
    if abs(axis_dot) > AXIS_TOLERANCE:
        raise ValueError(
            f"Plane axes {x_axis} and {y_axis} must be orthogonal (dot product is {axis_dot:.6f})"
        )


class SceneManager:
    """Unified scene manager coordinating bodies and materials.

    The SceneManager provides a high-level API for building scenes with
    automatic material tracking. It maintains a unified material_id space
    that maps to type-specific material registries.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.
        planes: List of PlaneInfo for all planes in the scene.
        bodies: Sphere and plane infos in scan (insertion) order.

    Example:
        >>> scene = SceneManager()
        >>> red = scene.add_diffuse_material(colour=(0.8, 0.1, 0.1))
        >>> mirror = scene.add_metal_material(colour=(0.8, 0.8, 0.8))
        >>> prism = scene.add_dispersive_material((1.0, 1.0, 1.0), (1.51, 1.52, 1.53))
        >>> scene.add_sphere((0, 0, -1), 0.5, red)
        >>> scene.add_sphere((1, 0, -1), 0.5, prism)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self.bodies: list[SphereInfo | PlaneInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_diffuse_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_dispersive_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()
        self.planes.clear()
        self.bodies.clear()

    def clear(self) -> None:
        """Clear the entire scene (bodies and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        """Assign a unified material ID to a type-local registry entry."""
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Registered %s material %d: %s", material_type.name, material_id, params)
        return material_id

    def add_diffuse_material(self, colour: tuple[float, float, float]) -> int:
        """Add a diffuse material to the scene.

        Args:
            colour: The reflectance colour as (R, G, B), each in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any colour component is outside [0, 1].
        """
        type_index = add_diffuse_material(colour)
        return self._register_material(MaterialType.DIFFUSE, type_index, {"colour": colour})

    def add_metal_material(self, colour: tuple[float, float, float]) -> int:
        """Add a metal (mirror) material to the scene.

        Args:
            colour: The reflective colour as (R, G, B), each in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any colour component is outside [0, 1].
        """
        type_index = add_metal_material(colour)
        return self._register_material(MaterialType.METAL, type_index, {"colour": colour})

    def add_dielectric_material(
        self,
        colour: tuple[float, float, float] = (1.0, 1.0, 1.0),
        ior: float = 1.5,
    ) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            colour: Transmission tint as (R, G, B), each in [0, 1].
            ior: Index of refraction. Default is 1.5 (typical glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If a colour component is outside [0, 1] or IOR < 1.0.
        """
        type_index = add_dielectric_material(colour, ior)
        return self._register_material(
            MaterialType.DIELECTRIC, type_index, {"colour": colour, "ior": ior}
        )

    def add_dispersive_material(
        self,
        colour: tuple[float, float, float],
        iors: tuple[float, float, float],
    ) -> int:
        """Add a dispersive dielectric material to the scene.

        Args:
            colour: Transmission tint as (R, G, B), each in [0, 1].
            iors: Indices of refraction for the (R, G, B) channels.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If a colour component or an IOR is invalid.
        """
        type_index = add_dispersive_material(colour, iors)
        return self._register_material(
            MaterialType.DISPERSIVE, type_index, {"colour": colour, "iors": iors}
        )

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the material type for a given material ID (Python side).

        For kernel-side lookup, use the get_material_type() Taichi function.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Body Management
    # =========================================================================

    def add_sphere(
        self,
        centre: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            centre: The centre point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is not positive.
        """
        self._check_material_id(material_id)
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")

        centre = _as_triple(centre, "centre")
        sphere_index = add_sphere(vec3(*centre), radius, material_id)

        info = SphereInfo(
            sphere_index=sphere_index,
            centre=centre,
            radius=radius,
            material_id=material_id,
        )
        self.spheres.append(info)
        self.bodies.append(info)
        logger.debug("Added sphere %d at %s (r=%s)", sphere_index, centre, radius)
        return sphere_index

    def add_plane(
        self,
        origin: tuple[float, float, float],
        x_axis: tuple[float, float, float],
        y_axis: tuple[float, float, float],
        extents: tuple[float, float],
        material_id: int,
    ) -> int:
        """Add a bounded plane to the scene.

        The plane covers origin + x * x_axis + y * y_axis for
        0 < x < extents[0] and 0 < y < extents[1].

        Args:
            origin: The corner point of the plane as (x, y, z).
            x_axis: Unit edge direction.
            y_axis: Unit edge direction orthogonal to x_axis.
            extents: Edge lengths (along x_axis, along y_axis), positive.
            material_id: The unified material ID to assign to the plane.

        Returns:
            The index of the added plane.

        Raises:
            RuntimeError: If the maximum number of planes is exceeded.
            ValueError: If material_id is invalid, the axes are not
                orthonormal, or an extent is not positive.
        """
        self._check_material_id(material_id)
        origin = _as_triple(origin, "origin")
        x_axis = _as_triple(x_axis, "x_axis")
        y_axis = _as_triple(y_axis, "y_axis")
        _check_plane_axes(x_axis, y_axis)
        extents = _as_pair(extents, "extents")
        if extents[0] <= 0.0 or extents[1] <= 0.0:
            raise ValueError(f"Plane extents must be two positive lengths, got {extents}")

        plane_index = add_plane(
            vec3(*origin),
            vec3(*x_axis),
            vec3(*y_axis),
            vec2(*extents),
            material_id,
        )

        info = PlaneInfo(
            plane_index=plane_index,
            origin=origin,
            x_axis=x_axis,
            y_axis=y_axis,
            extents=extents,
            material_id=material_id,
        )
        self.planes.append(info)
        self.bodies.append(info)
        logger.debug("Added plane %d at %s (extents=%s)", plane_index, origin, extents)
        return plane_index

    # =========================================================================
    # Convenience Methods (add body with material in one call)
    # =========================================================================

    def add_diffuse_sphere(
        self,
        centre: tuple[float, float, float],
        radius: float,
        colour: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new diffuse material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_diffuse_material(colour)
        return self.add_sphere(centre, radius, material_id), material_id

    def add_metal_sphere(
        self,
        centre: tuple[float, float, float],
        radius: float,
        colour: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(colour)
        return self.add_sphere(centre, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        centre: tuple[float, float, float],
        radius: float,
        colour: tuple[float, float, float] = (1.0, 1.0, 1.0),
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(colour, ior)
        return self.add_sphere(centre, radius, material_id), material_id

    def add_dispersive_sphere(
        self,
        centre: tuple[float, float, float],
        radius: float,
        colour: tuple[float, float, float],
        iors: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new dispersive material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dispersive_material(colour, iors)
        return self.add_sphere(centre, radius, material_id), material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return get_plane_count()

    def get_body_count(self) -> int:
        """Get the total number of bodies in the scene."""
        return get_body_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            config.materials.append({"type": mat.material_type.name.lower(), **mat.params})

        for body in self.bodies:
            if isinstance(body, SphereInfo):
                config.bodies.append(
                    {
                        "type": "sphere",
                        "centre": list(body.centre),
                        "radius": body.radius,
                        "material_id": body.material_id,
                    }
                )
            else:
                config.bodies.append(
                    {
                        "type": "plane",
                        "origin": list(body.origin),
                        "x_axis": list(body.x_axis),
                        "y_axis": list(body.y_axis),
                        "extents": list(body.extents),
                        "material_id": body.material_id,
                    }
                )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration. Bodies are
        added in the order they appear, which fixes the scan order.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first, bodies refer to them by ID
        for mat_config in config.materials:
            mat_type = mat_config.get("type", "").lower()
            if mat_type == "diffuse":
                self.add_diffuse_material(
                    _as_triple(mat_config.get("colour", [0.5, 0.5, 0.5]), "colour")
                )
            elif mat_type == "metal":
                self.add_metal_material(
                    _as_triple(mat_config.get("colour", [0.8, 0.8, 0.8]), "colour")
                )
            elif mat_type == "dielectric":
                self.add_dielectric_material(
                    _as_triple(mat_config.get("colour", [1.0, 1.0, 1.0]), "colour"),
                    mat_config.get("ior", 1.5),
                )
            elif mat_type == "dispersive":
                self.add_dispersive_material(
                    _as_triple(mat_config.get("colour", [1.0, 1.0, 1.0]), "colour"),
                    _as_triple(mat_config.get("iors", [1.51, 1.52, 1.53]), "iors"),
                )
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for body_config in config.bodies:
            body_type = body_config.get("type", "").lower()
            material_id = body_config.get("material_id", 0)
            if body_type == "sphere":
                self.add_sphere(
                    _as_triple(body_config.get("centre", [0, 0, 0]), "centre"),
                    body_config.get("radius", 1.0),
                    material_id,
                )
            elif body_type == "plane":
                self.add_plane(
                    _as_triple(body_config.get("origin", [0, 0, 0]), "origin"),
                    _as_triple(body_config.get("x_axis", [1, 0, 0]), "x_axis"),
                    _as_triple(body_config.get("y_axis", [0, 1, 0]), "y_axis"),
                    _as_pair(body_config.get("extents", [1.0, 1.0]), "extents"),
                    material_id,
                )
            else:
                raise ValueError(f"Unknown body type: {body_type}")

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "bodies": config.bodies}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'bodies' keys."""
        config = SceneConfig(
            materials=data.get("materials", []),
            bodies=data.get("bodies", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_planes() -> int:
        """Get the maximum number of planes supported."""
        return MAX_PLANES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
