"""Pytest configuration for prismtracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material and camera data around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before any field is declared
    from prismtracer.camera.pinhole import reset_camera
    from prismtracer.materials.dielectric import clear_dielectric_materials
    from prismtracer.materials.diffuse import clear_diffuse_materials
    from prismtracer.materials.dispersive import clear_dispersive_materials
    from prismtracer.materials.metal import clear_metal_materials
    from prismtracer.scene.intersection import clear_scene
    from prismtracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_diffuse_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_dispersive_materials()
        _clear_material_tracking()
        reset_camera()

    _clear_all()

    yield

    _clear_all()
