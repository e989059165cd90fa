"""Pytest configuration for ray marcher tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. Double precision
    keeps kernel results comparable with the NumPy reference path.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture
def sphere_scene():
    """Single sphere of radius 2 at (0, 0, -5), seen from the origin."""
    from src.raymarcher.geometry.sdf import Sphere
    from src.raymarcher.scene.scene import Scene

    scene = Scene()
    scene.add(Sphere(center=(0.0, 0.0, -5.0), color=(200, 0, 0)))
    return scene


@pytest.fixture
def small_config():
    """A 20x12 depth-shaded configuration."""
    from src.raymarcher.core.marcher import RayMarcherConfig

    return RayMarcherConfig(image_width=20, image_height=12)
