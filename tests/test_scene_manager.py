"""Tests for the unified scene manager.

Tests cover:
- Unified material IDs across the four material types
- Kernel-side material type lookup
- Body creation with validation
- Convenience methods
- Scene serialization round trips
"""

import pytest
import taichi as ti


class TestMaterialRegistration:
    """Tests for material ID assignment."""

    def test_material_ids_are_sequential_across_types(self):
        from prismtracer.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        ids = [
            scene.add_diffuse_material((0.5, 0.5, 0.5)),
            scene.add_metal_material((0.8, 0.8, 0.8)),
            scene.add_dielectric_material((1.0, 1.0, 1.0), 1.5),
            scene.add_dispersive_material((1.0, 1.0, 1.0), (1.51, 1.52, 1.53)),
            scene.add_diffuse_material((0.1, 0.2, 0.3)),
        ]

        assert ids == [0, 1, 2, 3, 4]
        assert scene.get_material_count() == 5
        assert scene.get_material_type_python(3) == MaterialType.DISPERSIVE
        # Second diffuse material has type-local index 1
        assert scene.get_material_info(4).type_index == 1
        assert scene.get_material_info(99) is None

    def test_kernel_side_lookup(self):
        from prismtracer.scene.manager import (
            MaterialType,
            SceneManager,
            get_material_type,
            get_material_type_index,
        )

        scene = SceneManager()
        scene.add_metal_material((0.8, 0.8, 0.8))
        scene.add_metal_material((0.7, 0.7, 0.7))
        scene.add_dielectric_material()

        types = ti.field(dtype=ti.i32, shape=4)
        indices = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            for i in range(4):
                types[i] = get_material_type(i)
                indices[i] = get_material_type_index(i)

        test_kernel()
        assert types[0] == int(MaterialType.METAL)
        assert types[2] == int(MaterialType.DIELECTRIC)
        assert indices[1] == 1
        assert indices[2] == 0
        # Unknown IDs
        assert types[3] == -1
        assert indices[3] == -1

    def test_clear_resets_everything(self):
        from prismtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_diffuse_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        scene.clear()

        assert scene.get_material_count() == 0
        assert scene.get_body_count() == 0
        assert scene.materials == []
        assert scene.bodies == []


class TestBodies:
    """Tests for adding spheres and planes."""

    def test_add_sphere_requires_valid_material(self):
        from prismtracer.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)

    def test_add_sphere_rejects_non_positive_radius(self):
        from prismtracer.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_diffuse_material((0.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0, -1.0), 0.0, mat)

    def test_add_plane(self):
        from prismtracer.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_metal_material((0.8, 0.8, 0.8))
        idx = scene.add_plane(
            (0.0, 0.0, -2.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (2.0, 1.0), mat
        )

        assert idx == 0
        assert scene.get_plane_count() == 1
        assert scene.planes[0].extents == (2.0, 1.0)

    def test_add_plane_rejects_non_unit_axis(self):
        from prismtracer.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_metal_material((0.8, 0.8, 0.8))
        with pytest.raises(ValueError, match="unit length"):
            scene.add_plane((0.0, 0.0, 0.0), (2.0, 0.0, 0.0), (0.0, 1.0, 0.0), (1.0, 1.0), mat)

    def test_add_plane_rejects_non_orthogonal_axes(self):
        from prismtracer.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_metal_material((0.8, 0.8, 0.8))
        s = 2.0**-0.5
        with pytest.raises(ValueError, match="orthogonal"):
            scene.add_plane((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (s, s, 0.0), (1.0, 1.0), mat)

    def test_add_plane_rejects_bad_extents(self):
        from prismtracer.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_metal_material((0.8, 0.8, 0.8))
        with pytest.raises(ValueError):
            scene.add_plane((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (1.0, -1.0), mat)
        with pytest.raises(ValueError):
            scene.add_plane((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (1.0,), mat)

    def test_convenience_methods(self):
        from prismtracer.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        s0, m0 = scene.add_diffuse_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        s1, m1 = scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.8, 0.8))
        s2, m2 = scene.add_dielectric_sphere((-1.0, 0.0, -1.0), 0.5)
        s3, m3 = scene.add_dispersive_sphere(
            (0.0, 1.0, -1.0), 0.5, (1.0, 1.0, 1.0), (1.5, 1.52, 1.54)
        )

        assert (s0, s1, s2, s3) == (0, 1, 2, 3)
        assert scene.get_material_type_python(m1) == MaterialType.METAL
        assert scene.get_material_type_python(m2) == MaterialType.DIELECTRIC
        assert scene.get_material_type_python(m3) == MaterialType.DISPERSIVE
        assert scene.get_sphere_count() == 4

    def test_invalid_material_parameters_propagate(self):
        from prismtracer.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.add_dielectric_material((1.0, 1.0, 1.0), 0.5)
        # Failed registration does not consume an ID
        assert scene.get_material_count() == 0


class TestSerialization:
    """Tests for scene config round trips."""

    def test_round_trip_preserves_order_and_materials(self):
        from prismtracer.scene.manager import SceneManager

        scene = SceneManager()
        glass = scene.add_dielectric_material((0.9, 0.8, 0.9), 1.5)
        prism = scene.add_dispersive_material((1.0, 1.0, 1.0), (1.5, 1.52, 1.54))
        mirror = scene.add_metal_material((0.8, 0.8, 0.8))
        scene.add_sphere((0.0, 0.0, -1.0), 0.5, glass)
        scene.add_plane((-1.0, -1.0, -3.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (2.0, 2.0), mirror)
        scene.add_sphere((1.0, 0.0, -1.0), 0.2, prism)

        data = scene.to_dict()
        assert [b["type"] for b in data["bodies"]] == ["sphere", "plane", "sphere"]
        assert [m["type"] for m in data["materials"]] == ["dielectric", "dispersive", "metal"]

        restored = SceneManager()
        restored.from_dict(data)

        assert restored.to_dict() == data
        assert restored.get_body_count() == 3
        assert restored.get_plane_count() == 1

    def test_unknown_types_raise(self):
        from prismtracer.scene.manager import SceneConfig, SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.from_config(SceneConfig(materials=[{"type": "plasma"}]))
        with pytest.raises(ValueError):
            scene.from_config(
                SceneConfig(
                    materials=[{"type": "diffuse", "colour": [0.5, 0.5, 0.5]}],
                    bodies=[{"type": "torus", "material_id": 0}],
                )
            )

    @pytest.mark.parametrize("extents", [[2.0], [1.0, 1.0, 1.0]])
    def test_plane_extents_of_wrong_length_raise(self, extents):
        from prismtracer.scene.manager import SceneConfig, SceneManager

        config = SceneConfig(
            materials=[{"type": "metal", "colour": [0.8, 0.8, 0.8]}],
            bodies=[{"type": "plane", "material_id": 0, "extents": extents}],
        )
        with pytest.raises(ValueError, match="extents must have 2 components"):
            SceneManager().from_config(config)

    def test_capacities(self):
        from prismtracer.scene.manager import MAX_MATERIALS, SceneManager

        assert SceneManager.get_max_materials() == MAX_MATERIALS
        assert SceneManager.get_max_spheres() > 0
        assert SceneManager.get_max_planes() > 0
