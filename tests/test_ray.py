"""Unit tests for the Ray dataclass, chroma tags and vector utilities."""

import math

import taichi as ti


class TestChroma:
    """Tests for the Chroma enumeration."""

    def test_channel_values_are_rgb_indices(self):
        from prismtracer.core.ray import Chroma

        assert int(Chroma.RED) == 0
        assert int(Chroma.GREEN) == 1
        assert int(Chroma.BLUE) == 2

    def test_white_is_distinct_from_channels(self):
        from prismtracer.core.ray import Chroma

        assert Chroma.WHITE not in (Chroma.RED, Chroma.GREEN, Chroma.BLUE)


class TestRayBasics:
    """Tests for ray construction and evaluation."""

    def test_make_ray_is_white(self):
        """Test that make_ray produces a WHITE ray."""
        from prismtracer.core.ray import Chroma, make_ray, vec3

        chroma = ti.field(dtype=ti.i32, shape=())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -2.0))
            chroma[None] = ray.chroma
            direction[None] = ray.direction

        test_kernel()
        assert chroma[None] == int(Chroma.WHITE)
        # Directions are not normalized
        assert abs(direction[None][2] + 2.0) < 1e-6

    def test_make_chroma_ray(self):
        from prismtracer.core.ray import Chroma, make_chroma_ray, vec3

        chroma = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_chroma_ray(vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0), int(Chroma.BLUE))
            chroma[None] = ray.chroma

        test_kernel()
        assert chroma[None] == int(Chroma.BLUE)

    def test_ray_at(self):
        """Test point evaluation along a ray."""
        from prismtracer.core.ray import make_ray, ray_at, vec3

        point = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 1.0, 0.0))
            point[None] = ray_at(ray, 2.5)

        test_kernel()
        p = point[None]
        assert abs(p[0] - 1.0) < 1e-6
        assert abs(p[1] - 4.5) < 1e-6
        assert abs(p[2] - 3.0) < 1e-6


class TestVectorUtilities:
    """Tests for vector helper functions."""

    def test_dot_cross_length(self):
        from prismtracer.core.ray import cross, dot, length, length_squared, vec3

        d = ti.field(dtype=ti.f32, shape=())
        c = ti.field(dtype=ti.math.vec3, shape=())
        ln = ti.field(dtype=ti.f32, shape=())
        ln2 = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            d[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))
            c[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
            ln[None] = length(vec3(3.0, 4.0, 0.0))
            ln2[None] = length_squared(vec3(3.0, 4.0, 0.0))

        test_kernel()
        assert abs(d[None] - 12.0) < 1e-6
        assert abs(c[None][2] - 1.0) < 1e-6
        assert abs(ln[None] - 5.0) < 1e-6
        assert abs(ln2[None] - 25.0) < 1e-5

    def test_normalize(self):
        from prismtracer.core.ray import length, normalize, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = length(normalize(vec3(3.0, -7.0, 2.0)))

        test_kernel()
        assert abs(result[None] - 1.0) < 1e-6

    def test_reflect(self):
        """Test mirror reflection about a normal."""
        from prismtracer.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_schlick_reflectance_normal_incidence(self):
        """At normal incidence reflectance equals r0."""
        from prismtracer.core.ray import schlick_reflectance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = schlick_reflectance(1.0, 1.0 / 1.5)

        test_kernel()
        ratio = 1.0 / 1.5
        r0 = ((1.0 - ratio) / (1.0 + ratio)) ** 2
        assert abs(result[None] - r0) < 1e-6

    def test_schlick_reflectance_grazing(self):
        """At grazing incidence reflectance approaches 1."""
        from prismtracer.core.ray import schlick_reflectance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = schlick_reflectance(0.0, 1.5)

        test_kernel()
        assert abs(result[None] - 1.0) < 1e-6

    def test_offset_origin_follows_direction_side(self):
        """Outgoing rays start above the surface, transmitted rays below it."""
        from prismtracer.core.ray import SURFACE_OFFSET, offset_origin, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            position = vec3(1.0, 2.0, 3.0)
            normal = vec3(0.0, 1.0, 0.0)
            result[0] = offset_origin(position, normal, vec3(0.3, 0.5, 0.0))
            result[1] = offset_origin(position, normal, vec3(0.3, -0.5, 0.0))

        test_kernel()
        above, below = result.to_numpy()
        assert abs(above[1] - (2.0 + SURFACE_OFFSET)) < 1e-6
        assert abs(below[1] - (2.0 - SURFACE_OFFSET)) < 1e-6
        assert above[0] == below[0] == 1.0


class TestRandomSampling:
    """Tests for rejection sampling of the unit ball."""

    def test_points_inside_unit_ball(self):
        from prismtracer.core.ray import random_in_unit_sphere

        n = 2000
        samples = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_in_unit_sphere()

        test_kernel()
        points = samples.to_numpy()
        norms = (points**2).sum(axis=1)
        assert (norms <= 1.0 + 1e-6).all()

    def test_points_are_centred(self):
        """The mean of many samples is close to the origin."""
        from prismtracer.core.ray import random_in_unit_sphere

        n = 5000
        samples = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_in_unit_sphere()

        test_kernel()
        mean = samples.to_numpy().mean(axis=0)
        # Standard error of each component is about 0.45 / sqrt(5000)
        assert math.sqrt(float((mean**2).sum())) < 0.05

    def test_exhausted_tries_return_the_centre(self):
        """With a single draw, rejected samples fall back to the origin."""
        from prismtracer.core.ray import sample_unit_ball

        n = 4000
        samples = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = sample_unit_ball(1)

        test_kernel()
        norms = (samples.to_numpy() ** 2).sum(axis=1)
        assert (norms <= 1.0 + 1e-6).all()
        # A draw from the cube lands in the ball with probability pi / 6
        centre_share = float((norms == 0.0).mean())
        assert abs(centre_share - (1.0 - math.pi / 6.0)) < 0.04
