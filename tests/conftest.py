"""Pytest configuration for path tracer tests.

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
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized
    from src.pathtracer.materials.material import clear_materials
    from src.pathtracer.scene.storage import clear_spheres

    clear_spheres()
    clear_materials()

    yield

    clear_spheres()
    clear_materials()


@pytest.fixture
def grey_scene():
    """A single grey diffuse sphere at (0, 0, -1) with radius 0.5."""
    from src.pathtracer.geometry.sphere import Sphere
    from src.pathtracer.materials.lambertian import Lambertian
    from src.pathtracer.scene.scene import Scene

    return Scene([Sphere(0.5, (0.0, 0.0, -1.0), Lambertian((0.5, 0.5, 0.5)))])
