"""Pytest configuration for raycaster tests.

Taichi must be initialized once per session, before any Scene, Rasterizer
or test kernel allocates fields.
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


@pytest.fixture
def scene():
    """A fresh Scene with the default configuration."""
    from raycaster.scene.manager import Scene

    return Scene()


@pytest.fixture
def small_scene():
    """A Scene that holds at most three shapes."""
    from raycaster.core.config import TracerConfig
    from raycaster.scene.manager import Scene

    return Scene(TracerConfig(max_shapes=3))
