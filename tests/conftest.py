"""Pytest configuration for prism tests.

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
    """Clear scene, camera and render target state before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before any field is declared
    from src.prism.camera.pinhole import clear_camera
    from src.prism.core.integrator import reset_render_target
    from src.prism.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_camera()
        reset_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from src.prism.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()
