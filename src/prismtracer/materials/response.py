"""Material response record shared by all scattering models.

A material interaction produces between zero and three continuation rays,
each with its own attenuation. Taichi functions cannot return variable-length
sequences, so the result is a fixed three-slot record:

    active[k]        1 if slot k holds an entry
    attenuation[k,:] colour multiplier of entry k
    direction[k,:]   continuation direction of entry k
    chroma[k]        chroma tag of continuation k
    origin           shared continuation origin (the hit position)

Single-entry materials fill slot 0. The dispersive material fills the slot of
each channel it evaluates, so slot k of a split always belongs to channel k.
"""

import taichi as ti
import taichi.math as tm

from prismtracer.core.ray import Chroma, Ray, make_chroma_ray

# Type aliases
vec3 = tm.vec3
ivec3 = tm.ivec3
mat3 = tm.mat3

# Maximum number of entries in a response
MAX_RESPONSE_ENTRIES = 3


@ti.dataclass
class Response:
    """Up to three (attenuation, continuation ray) pairs.

    Attributes:
        active: Per-slot occupancy flags (ivec3 of 0/1).
        origin: Origin shared by all continuation rays (vec3).
        attenuation: Row k is the attenuation colour of slot k (mat3).
        direction: Row k is the continuation direction of slot k (mat3).
        chroma: Chroma tag of each slot's continuation ray (ivec3).
    """

    active: ivec3
    origin: vec3
    attenuation: mat3
    direction: mat3
    chroma: ivec3


@ti.func
def empty_response(origin: vec3) -> Response:
    """A response with no entries (the ray is absorbed)."""
    white = int(Chroma.WHITE)
    return Response(
        active=ivec3(0, 0, 0),
        origin=origin,
        attenuation=ti.Matrix.zero(ti.f32, 3, 3),
        direction=ti.Matrix.zero(ti.f32, 3, 3),
        chroma=ivec3(white, white, white),
    )


@ti.func
def single_response(
    attenuation: vec3,
    origin: vec3,
    direction: vec3,
    chroma: ti.i32,
) -> Response:
    """A response with one entry in slot 0."""
    white = int(Chroma.WHITE)
    att = ti.Matrix.zero(ti.f32, 3, 3)
    dirs = ti.Matrix.zero(ti.f32, 3, 3)
    for c in ti.static(range(3)):
        att[0, c] = attenuation[c]
        dirs[0, c] = direction[c]
    return Response(
        active=ivec3(1, 0, 0),
        origin=origin,
        attenuation=att,
        direction=dirs,
        chroma=ivec3(chroma, white, white),
    )


@ti.func
def response_count(response: Response) -> ti.i32:
    """Number of populated slots."""
    return response.active[0] + response.active[1] + response.active[2]


@ti.func
def response_attenuation(response: Response, k: ti.template()) -> vec3:
    """Attenuation colour of slot k (k must be a compile-time constant)."""
    return vec3(
        response.attenuation[k, 0],
        response.attenuation[k, 1],
        response.attenuation[k, 2],
    )


@ti.func
def response_direction(response: Response, k: ti.template()) -> vec3:
    """Continuation direction of slot k (k must be a compile-time constant)."""
    return vec3(
        response.direction[k, 0],
        response.direction[k, 1],
        response.direction[k, 2],
    )


@ti.func
def response_ray(response: Response, k: ti.template()) -> Ray:
    """Continuation ray of slot k (k must be a compile-time constant)."""
    return make_chroma_ray(response.origin, response_direction(response, k), response.chroma[k])
