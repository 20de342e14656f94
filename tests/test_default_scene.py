"""Tests for the demonstration scenes."""

import pytest


class TestDefaultScene:
    """Tests for create_default_scene."""

    def test_bodies_in_order(self):
        from prismtracer.scene.default_scene import GROUND_CENTRE, GROUND_RADIUS, create_default_scene

        scene, _ = create_default_scene()

        assert scene.get_body_count() == 4
        assert scene.get_plane_count() == 0
        centres = [s.centre for s in scene.spheres]
        radii = [s.radius for s in scene.spheres]
        assert centres == [(0.0, 0.0, -1.0), (1.0, 0.0, -1.0), (-1.0, 0.0, -1.0), GROUND_CENTRE]
        assert radii == [0.5, 0.2, 0.4, GROUND_RADIUS]

    def test_materials(self):
        from prismtracer.scene.default_scene import create_default_scene
        from prismtracer.scene.manager import MaterialType

        scene, _ = create_default_scene()

        types = [scene.get_material_type_python(i) for i in range(scene.get_material_count())]
        assert types == [
            MaterialType.DIELECTRIC,
            MaterialType.DIFFUSE,
            MaterialType.DIFFUSE,
            MaterialType.DIFFUSE,
        ]
        glass = scene.get_material_info(0)
        assert glass.params["ior"] == pytest.approx(1.5)
        assert tuple(scene.get_material_info(3).params["colour"]) == (0.0, 1.0, 0.0)

    def test_camera(self):
        from prismtracer.scene.default_scene import create_default_scene

        _, camera = create_default_scene(aspect_ratio=2.0)

        assert camera.origin == (0.0, 0.0, 0.0)
        assert camera.focal_length == 1.0
        assert camera.viewport_height == 2.0
        assert camera.viewport_width == pytest.approx(4.0)

    def test_ray_above_scene_sees_sky(self):
        from prismtracer.core.integrator import trace_ray
        from prismtracer.scene.default_scene import create_default_scene

        create_default_scene()
        colour = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=50)
        assert colour == pytest.approx((0.5, 0.7, 1.0), abs=1e-6)


class TestPrismScene:
    """Tests for create_prism_scene."""

    def test_contents(self):
        from prismtracer.scene.default_scene import PRISM_IORS, create_prism_scene
        from prismtracer.scene.manager import MaterialType

        scene, _ = create_prism_scene()

        assert scene.get_sphere_count() == 4
        assert scene.get_plane_count() == 1
        assert scene.get_material_type_python(0) == MaterialType.DISPERSIVE
        assert tuple(scene.get_material_info(0).params["iors"]) == pytest.approx(PRISM_IORS)

        mirror_id = scene.planes[0].material_id
        assert scene.get_material_type_python(mirror_id) == MaterialType.METAL

    def test_mirror_faces_camera(self):
        from prismtracer.scene.default_scene import create_prism_scene

        scene, _ = create_prism_scene()
        plane = scene.planes[0]
        x, y = plane.x_axis, plane.y_axis
        normal_z = x[0] * y[1] - x[1] * y[0]
        assert normal_z > 0.0
