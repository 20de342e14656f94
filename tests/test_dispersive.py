"""Unit tests for the dispersive dielectric material and the response record.

Tests cover:
- WHITE rays split into three single-channel continuations
- Channel rays produce exactly one continuation in their own slot
- Attenuation restricted to each continuation's channel
- Per-channel refraction angles
- Registry validation
"""

import math

import numpy as np
import pytest
import taichi as ti


def _scatter_once(chroma, colour=(0.9, 0.8, 0.7), iors=(1.5, 1.5, 1.5)):
    """Scatter a ray at normal incidence and return the response contents."""
    from prismtracer.materials.dispersive import scatter_dispersive, vec3
    from prismtracer.materials.response import response_count

    count = ti.field(dtype=ti.i32, shape=())
    active = ti.Vector.field(3, dtype=ti.i32, shape=())
    chromas = ti.Vector.field(3, dtype=ti.i32, shape=())
    attenuation = ti.Matrix.field(3, 3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(c: ti.i32, col: vec3, etas: vec3):
        response = scatter_dispersive(
            col, etas, vec3(0.0, -1.0, 0.0), c, vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0)
        )
        count[None] = response_count(response)
        active[None] = response.active
        chromas[None] = response.chroma
        attenuation[None] = response.attenuation

    test_kernel(chroma, vec3(*colour), vec3(*iors))
    return count[None], active[None], chromas[None], attenuation.to_numpy()


class TestResponseRecord:
    """Tests for the fixed three-slot response helpers."""

    def test_empty_and_single(self):
        from prismtracer.core.ray import Chroma
        from prismtracer.materials.dispersive import vec3
        from prismtracer.materials.response import (
            empty_response,
            response_attenuation,
            response_count,
            response_ray,
            single_response,
        )

        counts = ti.field(dtype=ti.i32, shape=2)
        attenuation = ti.field(dtype=ti.math.vec3, shape=())
        ray_origin = ti.field(dtype=ti.math.vec3, shape=())
        ray_direction = ti.field(dtype=ti.math.vec3, shape=())
        ray_chroma = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            empty = empty_response(vec3(0.0, 0.0, 0.0))
            single = single_response(
                vec3(0.1, 0.2, 0.3),
                vec3(1.0, 1.0, 1.0),
                vec3(0.0, 0.0, -1.0),
                int(Chroma.RED),
            )
            counts[0] = response_count(empty)
            counts[1] = response_count(single)
            attenuation[None] = response_attenuation(single, 0)
            ray = response_ray(single, 0)
            ray_origin[None] = ray.origin
            ray_direction[None] = ray.direction
            ray_chroma[None] = ray.chroma

        test_kernel()
        assert counts[0] == 0
        assert counts[1] == 1
        assert abs(attenuation[None][2] - 0.3) < 1e-6
        assert abs(ray_origin[None][0] - 1.0) < 1e-6
        assert abs(ray_direction[None][2] + 1.0) < 1e-6
        assert ray_chroma[None] == int(Chroma.RED)


class TestDispersiveSplit:
    """Tests for the arity and channel content of dispersive responses."""

    def test_white_ray_splits_into_three(self):
        from prismtracer.core.ray import Chroma

        count, active, chromas, attenuation = _scatter_once(int(Chroma.WHITE))

        assert count == 3
        assert active.to_list() == [1, 1, 1]
        assert chromas.to_list() == [int(Chroma.RED), int(Chroma.GREEN), int(Chroma.BLUE)]
        # Slot k carries only channel k of the colour
        expected = np.diag([0.9, 0.8, 0.7])
        assert np.allclose(attenuation, expected, atol=1e-6)

    @pytest.mark.parametrize("channel", [0, 1, 2])
    def test_channel_ray_single_entry(self, channel):
        colour = (0.9, 0.8, 0.7)
        count, active, chromas, attenuation = _scatter_once(channel, colour=colour)

        assert count == 1
        assert active[channel] == 1
        assert chromas[channel] == channel
        row = attenuation[channel]
        for c in range(3):
            expected = colour[c] if c == channel else 0.0
            assert abs(row[c] - expected) < 1e-6

    def test_attenuation_never_exceeds_colour(self):
        """Summed over entries, no channel gains energy."""
        from prismtracer.core.ray import Chroma

        colour = (1.0, 0.5, 0.25)
        _, _, _, attenuation = _scatter_once(int(Chroma.WHITE), colour=colour)

        totals = attenuation.sum(axis=0)
        for c in range(3):
            assert totals[c] <= colour[c] + 1e-6

    def test_channels_refract_by_their_own_index(self):
        """Red bends least and blue most when entering at 45 degrees."""
        from prismtracer.core.ray import Chroma
        from prismtracer.materials.dispersive import scatter_dispersive, vec3

        n = 2000
        directions = ti.Matrix.field(3, 3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            s = 1.0 / ti.sqrt(2.0)
            for i in range(n):
                response = scatter_dispersive(
                    vec3(1.0, 1.0, 1.0),
                    vec3(1.3, 1.5, 1.7),
                    vec3(s, -s, 0.0),
                    int(Chroma.WHITE),
                    vec3(0.0, 0.0, 0.0),
                    vec3(0.0, 1.0, 0.0),
                )
                directions[i] = response.direction

        test_kernel()
        d = directions.to_numpy()  # (n, slot, xyz)

        s = 1.0 / math.sqrt(2.0)
        for slot, ior in enumerate((1.3, 1.5, 1.7)):
            refracted = d[d[:, slot, 1] < 0.0, slot, :]
            assert len(refracted) > 0.8 * n
            assert np.allclose(refracted[:, 0], s / ior, atol=1e-4)


class TestDispersiveRegistry:
    """Tests for the dispersive material registry."""

    def test_add_and_lookup(self):
        from prismtracer.materials.dispersive import (
            add_dispersive_material,
            get_dispersive_iors,
            get_dispersive_material_count,
        )

        idx = add_dispersive_material((1.0, 1.0, 1.0), (1.51, 1.52, 1.53))
        assert get_dispersive_material_count() == 1

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            result[None] = get_dispersive_iors(i)

        test_kernel(idx)
        assert abs(result[None][2] - 1.53) < 1e-6

    def test_wrong_number_of_iors_raises(self):
        from prismtracer.materials.dispersive import add_dispersive_material

        with pytest.raises(ValueError):
            add_dispersive_material((1.0, 1.0, 1.0), (1.5, 1.5))

    def test_ior_below_one_raises(self):
        from prismtracer.materials.dispersive import add_dispersive_material

        with pytest.raises(ValueError):
            add_dispersive_material((1.0, 1.0, 1.0), (1.5, 0.5, 1.5))
