"""
Tests for the day/night lighting model.
"""
import numpy as np
import pytest
from voxel_timelapse import constants
from voxel_timelapse.daynight import DayNightModel


@pytest.fixture
def model():
    return DayNightModel()


def test_noon_sun_overhead(model):
    env = model.evaluate(0.5)
    np.testing.assert_allclose(env.sun_direction, [0.0, 1.0, 0.0], atol=1e-12)
    assert env.sun_intensity == pytest.approx(constants.SUN_PEAK_INTENSITY)
    np.testing.assert_allclose(env.sun_color, constants.SUN_COLOR_NOON)
    np.testing.assert_allclose(env.sky_color, constants.SKY_DAY)


def test_midnight_sun_below_horizon(model):
    env = model.evaluate(0.0)
    assert env.sun_elevation == pytest.approx(-1.0)
    assert env.sun_intensity == pytest.approx(constants.SUN_NIGHT_FLOOR)
    np.testing.assert_allclose(env.sky_color, constants.SKY_NIGHT)


@pytest.mark.parametrize("t", [0.25, 0.75])
def test_sun_on_horizon_at_sunrise_and_sunset(model, t):
    env = model.evaluate(t)
    assert abs(env.sun_elevation) < 1e-9
    assert env.sun_intensity < 1e-6


def test_sunrise_and_sunset_are_opposite(model):
    rise = model.sun_direction(0.25)
    fall = model.sun_direction(0.75)
    np.testing.assert_allclose(rise, -fall, atol=1e-12)


def test_sun_direction_is_unit(model):
    for t in np.linspace(0.0, 1.0, 37):
        assert np.linalg.norm(model.sun_direction(t)) == pytest.approx(1.0)


def test_ambient_never_black(model):
    for t in np.linspace(0.0, 1.0, 25):
        env = model.evaluate(t)
        assert np.all(env.ambient_color * env.ambient_intensity > 0.0), f"black ambient at t={t}"


def test_evaluate_is_pure(model):
    first = model.evaluate(0.3)
    second = model.evaluate(0.3)
    for name in ("sun_direction", "sun_color", "sky_color", "ambient_color"):
        np.testing.assert_array_equal(getattr(first, name), getattr(second, name))
    assert first.sun_intensity == second.sun_intensity


def test_time_wraps(model):
    np.testing.assert_allclose(model.evaluate(1.3).sun_direction, model.evaluate(0.3).sun_direction)
    np.testing.assert_allclose(model.evaluate(-0.2).sky_color, model.evaluate(0.8).sky_color)


def test_cycle_is_continuous(model):
    """Small steps in time, including across the wrap, give small steps in light."""
    times = np.linspace(0.0, 1.0, 10001)
    envs = [model.evaluate(t) for t in times]
    intensity = np.array([e.sun_intensity for e in envs])
    sky = np.array([e.sky_color for e in envs])
    sun = np.array([e.sun_direction for e in envs])

    assert np.max(np.abs(np.diff(intensity))) < 0.01
    assert np.max(np.abs(np.diff(sky, axis=0))) < 0.01
    assert np.max(np.abs(np.diff(sun, axis=0))) < 0.01

    # Wrap: last sample (t=1) matches the first (t=0)
    np.testing.assert_allclose(sky[-1], sky[0])
    np.testing.assert_allclose(sun[-1], sun[0], atol=1e-12)


def test_non_finite_time_rejected(model):
    with pytest.raises(ValueError):
        model.evaluate(np.nan)
    with pytest.raises(ValueError):
        model.evaluate(np.inf)


def test_keyframes_must_wrap():
    with pytest.raises(ValueError):
        DayNightModel(sky_keyframes=[(0.0, [0, 0, 0]), (1.0, [1, 1, 1])])
    with pytest.raises(ValueError):
        DayNightModel(sky_keyframes=[(0.1, [0, 0, 0]), (1.0, [0, 0, 0])])


def test_sample_cycle_shapes(model):
    times, intensity, sky, elevation = model.sample_cycle(11)
    assert times.shape == (11,)
    assert intensity.shape == (11,)
    assert sky.shape == (11, 3)
    assert elevation.shape == (11,)
    assert np.argmax(intensity) == 5


if __name__ == "__main__":
    pytest.main([__file__])
