"""Radiance integrator for the stochastic path tracer.

The colour carried back along a ray is defined recursively:

    colour(ray, 0)      = black
    colour(ray, depth)  = background(ray)                          on a miss
                        = sum_k attenuation_k * colour(ray_k, depth - 1)
                                                                   on a hit

where (attenuation_k, ray_k) are the entries of the material response at the
hit point. Taichi functions cannot recurse, so the sum is evaluated with an
explicit work list:

    - A single-entry bounce multiplies a running throughput and continues.
    - An empty response ends the path with no contribution.
    - A multi-entry bounce (only a WHITE ray at a dispersive surface) parks up
      to three channel continuations together with the throughput so far and
      the remaining depth. Each parked continuation is traced afterwards.

A parked continuation carries a single-channel chroma and every material
propagates chroma, so it can never split again. This keeps the work list at
one level and the result equal to the recursive sum.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from prismtracer.core.integrator import trace_ray
    >>> # With a scene built through SceneManager:
    >>> colour = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=50)
"""

import taichi as ti
import taichi.math as tm

from prismtracer.core.ray import Ray, make_chroma_ray, make_ray, normalize, offset_origin
from prismtracer.materials.dielectric import scatter_dielectric_by_id
from prismtracer.materials.diffuse import scatter_diffuse_by_id
from prismtracer.materials.dispersive import scatter_dispersive_by_id
from prismtracer.materials.metal import scatter_metal_by_id
from prismtracer.materials.response import (
    MAX_RESPONSE_ENTRIES,
    Response,
    empty_response,
    response_attenuation,
    response_count,
    response_ray,
)
from prismtracer.scene.intersection import T_MAX, T_MIN, SceneHitRecord, get_hit
from prismtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum number of bounces
MAX_DEPTH = 50

# Sky gradient endpoints
BACKGROUND_BOTTOM = vec3(1.0, 1.0, 1.0)
BACKGROUND_TOP = vec3(0.5, 0.7, 1.0)

# Largest value below 256; maps 1.0 to 255 after rounding down
GAMMA_SCALE = 255.999


# =============================================================================
# Background
# =============================================================================


@ti.func
def background_colour(direction: vec3) -> vec3:
    """Vertical sky gradient seen by rays that leave the scene.

    t = 0.5 * (normalize(direction).y + 1) blends white (t = 0, looking
    straight down) into sky blue (t = 1, looking straight up).
    """
    t = 0.5 * (normalize(direction).y + 1.0)
    return (1.0 - t) * BACKGROUND_BOTTOM + t * BACKGROUND_TOP


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def material_response(material_id: ti.i32, ray: Ray, hit: SceneHitRecord) -> Response:
    """Dispatch to the scattering function of the hit material.

    Args:
        material_id: The unified material ID.
        ray: The incoming ray.
        hit: The scene hit record.

    Returns:
        The material's Response. Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    response = empty_response(hit.position)

    if mat_type == int(MaterialType.DIFFUSE):
        response = scatter_diffuse_by_id(type_index, ray.chroma, hit.position, hit.normal)

    elif mat_type == int(MaterialType.METAL):
        response = scatter_metal_by_id(
            type_index, ray.direction, ray.chroma, hit.position, hit.normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        response = scatter_dielectric_by_id(
            type_index, ray.direction, ray.chroma, hit.position, hit.normal
        )

    elif mat_type == int(MaterialType.DISPERSIVE):
        response = scatter_dispersive_by_id(
            type_index, ray.direction, ray.chroma, hit.position, hit.normal
        )

    return response


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def continuation_ray(response: Response, k: ti.template(), normal: vec3) -> Ray:
    """Continuation ray of slot k, its origin moved off the surface it leaves."""
    ray = response_ray(response, k)
    origin = offset_origin(ray.origin, normal, ray.direction)
    return make_chroma_ray(origin, ray.direction, ray.chroma)


@ti.func
def _trace_path(ray: Ray, depth: ti.i32, throughput: vec3):
    """Follow one path until it leaves the scene, is absorbed or splits.

    Args:
        ray: The ray to follow.
        depth: Remaining bounce budget for this ray.
        throughput: Product of the attenuations collected before this ray.

    Returns:
        A tuple (radiance, split, parked, parked_normal, parked_throughput,
        parked_depth):
        - radiance: Contribution gathered by the path itself.
        - split: 1 if the path stopped at a multi-entry response.
        - parked: That response, valid only when split == 1.
        - parked_normal: Surface normal at the split point.
        - parked_throughput: Throughput up to the split point.
        - parked_depth: Depth left for each parked continuation.
    """
    radiance = vec3(0.0, 0.0, 0.0)
    split = 0
    parked = empty_response(vec3(0.0, 0.0, 0.0))
    parked_normal = vec3(0.0, 0.0, 0.0)
    parked_throughput = vec3(0.0, 0.0, 0.0)
    parked_depth = 0

    current = ray
    remaining = depth
    weight = throughput
    # Taichi doesn't support break in ti.func loops
    active = 1

    while active == 1:
        if remaining <= 0:
            # Bounce budget exhausted: black
            active = 0
        else:
            hit = get_hit(current.origin, current.direction, T_MIN, T_MAX)

            if hit.hit == 0:
                radiance += weight * background_colour(current.direction)
                active = 0
            else:
                response = material_response(hit.material_id, current, hit)
                count = response_count(response)
                remaining -= 1

                if count == 0:
                    active = 0
                elif count == 1:
                    for k in ti.static(range(MAX_RESPONSE_ENTRIES)):
                        if response.active[k] == 1:
                            weight = weight * response_attenuation(response, k)
                            current = continuation_ray(response, k, hit.normal)
                else:
                    split = 1
                    parked = response
                    parked_normal = hit.normal
                    parked_throughput = weight
                    parked_depth = remaining
                    active = 0

    return radiance, split, parked, parked_normal, parked_throughput, parked_depth


@ti.func
def ray_colour(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the colour carried back along a ray.

    Args:
        ray: The ray to evaluate.
        depth: Maximum number of bounces. A depth of 0 yields black.

    Returns:
        The linear RGB colour.
    """
    radiance, split, parked, parked_normal, parked_throughput, parked_depth = _trace_path(
        ray, depth, vec3(1.0, 1.0, 1.0)
    )

    if split == 1:
        for k in ti.static(range(MAX_RESPONSE_ENTRIES)):
            if parked.active[k] == 1:
                branch, _split, _parked, _normal, _throughput, _depth = _trace_path(
                    continuation_ray(parked, k, parked_normal),
                    parked_depth,
                    parked_throughput * response_attenuation(parked, k),
                )
                radiance += branch

    return radiance


# =============================================================================
# Display Mapping
# =============================================================================


@ti.func
def sanitize_colour(colour: vec3) -> vec3:
    """Replace NaN, infinite and negative components with zero."""
    result = colour
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]) or result[c] < 0.0:
            result[c] = 0.0
    return result


@ti.func
def gamma_correct(value: ti.f32) -> ti.i32:
    """Map a linear channel value to an 8-bit display value.

    Applies gamma 2 (square root), scales by 255.999 and rounds to the
    nearest integer, clamped to [0, 255]. 0 maps to 0, 1 maps to 255 and
    0.25 maps to 128.
    """
    scaled = tm.sqrt(tm.max(value, 0.0)) * GAMMA_SCALE
    return ti.cast(tm.clamp(ti.floor(scaled + 0.5), 0.0, 255.0), ti.i32)


# =============================================================================
# Python-callable Entry Points
# =============================================================================


@ti.kernel
def _ray_colour_kernel(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    return ray_colour(make_ray(origin, direction), depth)


@ti.kernel
def _gamma_correct_kernel(value: ti.f32) -> ti.i32:
    return gamma_correct(value)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Evaluate ray_colour for a single WHITE ray from Python.

    Used for testing and debugging. For full images use the RenderScheduler,
    which evaluates all pixels in parallel.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), need not be normalized.
        depth: Maximum number of bounces.

    Returns:
        Tuple of (R, G, B) linear colour values.

    Raises:
        ValueError: If depth is negative.
    """
    if depth < 0:
        raise ValueError(f"depth must be non-negative, got {depth}")
    colour = _ray_colour_kernel(vec3(*origin), vec3(*direction), depth)
    return (float(colour[0]), float(colour[1]), float(colour[2]))


def gamma_to_byte(value: float) -> int:
    """Apply the kernel-side gamma mapping to one value from Python."""
    return int(_gamma_correct_kernel(value))
