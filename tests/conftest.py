"""Pytest configuration for pathlite tests.

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
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material and camera state around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so that fields are created after ti.init()
    from pathlite.camera.camera import reset_camera
    from pathlite.materials.dielectric import clear_dielectric_materials
    from pathlite.materials.lambertian import clear_lambertian_materials
    from pathlite.materials.metal import clear_metal_materials
    from pathlite.scene.intersection import clear_scene
    from pathlite.scene.world import HittableList, clear_material_table

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_table()
        HittableList._active = None
        reset_camera()

    # Clear everything before test
    _clear_all()

    yield

    # Clear everything after test
    _clear_all()
