"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import numpy as np
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
def rng():
    """A freshly seeded NumPy generator."""
    return np.random.default_rng(12345)


@pytest.fixture
def white():
    """A white, non-emissive material."""
    from lumen.materials import Material

    return Material(color=(1.0, 1.0, 1.0), name="white")


@pytest.fixture
def light():
    """A black material emitting (10, 10, 10)."""
    from lumen.materials import Material

    return Material(color=(0.0, 0.0, 0.0), emission=(10.0, 10.0, 10.0), name="light")


@pytest.fixture
def head_on_camera():
    """Camera config at the origin looking down +z with a square film."""
    from lumen.camera import CameraConfig

    return CameraConfig(
        position=(0.0, 0.0, 0.0),
        direction=(1.0, 1.0, 1.0),
        focal_length=1.0,
        film_size=(1.0, 1.0),
    )
