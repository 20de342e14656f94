"""Scene-level body storage and nearest-hit queries.

Bodies of different kinds (spheres, planes) are stored in per-kind
Structure-of-Arrays fields. A separate body table records, for every body in
insertion order, its kind and its index in the per-kind storage. Queries walk
that table, so the scan order is the order in which bodies were added,
whatever their kind.

The nearest-hit query keeps a shrinking upper bound: each body is tested
against [t_min, closest] and every hit tightens closest. On an exact tie the
body that was added first keeps the hit.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from prismtracer.scene.intersection import (
    ...     SceneHitRecord, add_sphere, add_plane, get_hit, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> add_plane(vec3(-1, -0.5, 0), vec3(1, 0, 0), vec3(0, 0, -1), vec2(2, 2), material_id=1)
    >>> # Use get_hit within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from prismtracer.geometry.plane import hit_plane, make_plane
from prismtracer.geometry.sphere import HitRecord, hit_sphere, make_miss_record, make_sphere

# Type aliases
vec3 = tm.vec3
vec2 = tm.vec2

# Default t window for scene queries. T_MIN keeps continuation rays from
# re-hitting the surface they start on.
T_MIN = 1e-4
T_MAX = tm.inf


class BodyKind(IntEnum):
    """Kinds of bodies stored in the scene."""

    SPHERE = 0
    PLANE = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any body (1 if hit, 0 if miss).
        t: The parameter value along the ray. Only valid if hit == 1.
        position: The intersection point. Only valid if hit == 1.
        normal: The surface normal as returned by the body. Only valid if
            hit == 1.
        material_id: Unified material ID of the body that was hit.
            -1 for a miss.
    """

    hit: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of bodies supported in the scene
MAX_SPHERES = 1024
MAX_PLANES = 1024
MAX_BODIES = MAX_SPHERES + MAX_PLANES

# Sphere storage: Structure of Arrays layout
sphere_centres = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage: Structure of Arrays layout
plane_origins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_x_axes = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_y_axes = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_extents = ti.Vector.field(2, dtype=ti.f32, shape=MAX_PLANES)
plane_material_ids = ti.field(dtype=ti.i32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())

# Body table in insertion order: kind and index into the per-kind storage
body_kinds = ti.field(dtype=ti.i32, shape=MAX_BODIES)
body_kind_indices = ti.field(dtype=ti.i32, shape=MAX_BODIES)
num_bodies = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all bodies from the scene.

    Resets the counts to zero. The actual field data is not cleared but
    will be overwritten when new bodies are added.
    """
    num_spheres[None] = 0
    num_planes[None] = 0
    num_bodies[None] = 0


def _append_body(kind: BodyKind, kind_index: int) -> int:
    """Record a body in the insertion-order table and return its body index."""
    body_index = num_bodies[None]
    body_kinds[body_index] = int(kind)
    body_kind_indices[body_index] = kind_index
    num_bodies[None] = body_index + 1
    return body_index


def add_sphere(centre: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        centre: The centre point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere in the sphere storage.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centres[idx] = centre
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    _append_body(BodyKind.SPHERE, idx)
    return idx


def add_plane(
    origin: vec3,
    x_axis: vec3,
    y_axis: vec3,
    extents: vec2,
    material_id: int = 0,
) -> int:
    """Add a bounded plane to the scene.

    Args:
        origin: The corner point of the plane.
        x_axis: Unit edge direction.
        y_axis: Unit edge direction orthogonal to x_axis.
        extents: Edge lengths along x_axis and y_axis.
        material_id: The material ID to associate with this plane.

    Returns:
        The index of the added plane in the plane storage.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_origins[idx] = origin
    plane_x_axes[idx] = x_axis
    plane_y_axes[idx] = y_axis
    plane_extents[idx] = extents
    plane_material_ids[idx] = material_id
    num_planes[None] = idx + 1
    _append_body(BodyKind.PLANE, idx)
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


def get_body_count() -> int:
    """Get the number of bodies of all kinds in the scene."""
    return int(num_bodies[None])


@ti.func
def _hit_body(
    body_index: ti.i32,
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
):
    """Intersect one body of the body table.

    Returns:
        A tuple of (HitRecord, material_id).
    """
    kind = body_kinds[body_index]
    idx = body_kind_indices[body_index]

    rec = make_miss_record()
    material_id = -1

    if kind == int(BodyKind.SPHERE):
        sphere = make_sphere(sphere_centres[idx], sphere_radii[idx])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
        material_id = sphere_material_ids[idx]
    elif kind == int(BodyKind.PLANE):
        plane = make_plane(
            plane_origins[idx], plane_x_axes[idx], plane_y_axes[idx], plane_extents[idx]
        )
        rec = hit_plane(ray_origin, ray_direction, plane, t_min, t_max)
        material_id = plane_material_ids[idx]

    return rec, material_id


@ti.func
def _to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    """Convert a HitRecord to a SceneHitRecord with material ID."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        position=rec.position,
        normal=rec.normal,
        material_id=material_id,
    )


@ti.func
def make_scene_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def get_hit(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the nearest body hit by a ray within [t_min, t_max].

    Walks the bodies in insertion order. Each body is tested against
    [t_min, closest], where closest starts at t_max and shrinks to the t of
    every accepted hit.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value for a valid hit.
        t_max: Maximum t value for a valid hit.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    closest_t = t_max
    found = 0
    result = make_scene_miss_record()

    for b in range(num_bodies[None]):
        rec, material_id = _hit_body(b, ray_origin, ray_direction, t_min, closest_t)
        # Equal t keeps the earlier body
        if rec.hit == 1 and (found == 0 or rec.t < closest_t):
            found = 1
            closest_t = rec.t
            result = _to_scene_hit_record(rec, material_id)

    return result
