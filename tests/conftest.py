"""
Pytest fixtures and configuration for Voxel Timelapse Renderer tests.

This module provides small hand-built scenes and light environments so tests
can predict exact pixel colors.
"""

import numpy as np
import pytest
from voxel_timelapse.daynight import LightEnvironment
from voxel_timelapse.materials import Material, MaterialTable
from voxel_timelapse.scene import Scene, Voxel
from voxel_timelapse.tracer import RayTracer


@pytest.fixture
def materials():
    """Matte materials with no specular so diffuse math is exact."""
    return MaterialTable([
        Material("ground", albedo=[0.4, 0.5, 0.3], specular=0.0),
        Material("block", albedo=[0.5, 0.5, 0.5], specular=0.0),
        Material("mirror", albedo=[0.2, 0.2, 0.2], specular=0.0, reflection=0.5),
        Material("torch", albedo=[1.0, 0.8, 0.4], specular=0.0, emissive=[1.0, 0.65, 0.3]),
    ])


@pytest.fixture
def single_voxel_scene(materials):
    """One matte block at the origin on an infinite ground plane."""
    return Scene(materials, [Voxel(0, 0, 0, materials.id_of("block"))], ground_material="ground")


@pytest.fixture
def empty_scene(materials):
    return Scene(materials, [], ground_material="ground")


@pytest.fixture
def tracer(single_voxel_scene):
    return RayTracer(single_voxel_scene)


def make_env(sun_direction=(0.0, 1.0, 0.0), sun_intensity=1.0, sun_color=(1.0, 1.0, 1.0),
             sky_color=(0.2, 0.3, 0.4), ambient_intensity=0.25, time_of_day=0.5):
    """Build a LightEnvironment by hand; ambient color follows the sky."""
    sky = np.array(sky_color, dtype=np.float64)
    direction = np.array(sun_direction, dtype=np.float64)
    return LightEnvironment(
        time_of_day=time_of_day,
        sun_direction=direction / np.linalg.norm(direction),
        sun_color=np.array(sun_color, dtype=np.float64),
        sun_intensity=sun_intensity,
        sky_color=sky,
        ambient_color=sky,
        ambient_intensity=ambient_intensity,
    )


@pytest.fixture
def noon_env():
    """Overhead white sun with a quarter-strength ambient term."""
    return make_env()


@pytest.fixture
def dark_env():
    """No sun and no ambient light."""
    return make_env(sun_intensity=0.0, ambient_intensity=0.0)


def assert_color_close(actual, expected, rtol=1e-9, atol=1e-12, err_msg=""):
    """Assert that two colors are close, with helpful error messages."""
    np.testing.assert_allclose(
        actual, expected, rtol=rtol, atol=atol,
        err_msg=f"Color mismatch: {err_msg}"
    )


def assert_color_in_range(color, min_val=0.0, max_val=1.0, err_msg=""):
    """Assert that all color components are within valid range."""
    assert np.all(color >= min_val), f"Color below minimum {min_val}: {color} - {err_msg}"
    assert np.all(color <= max_val), f"Color above maximum {max_val}: {color} - {err_msg}"
