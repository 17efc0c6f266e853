"""
Day/night lighting model.

time_of_day is normalized and periodic: 0 = midnight, 0.25 = sunrise,
0.5 = noon, 0.75 = sunset. Every quantity is a pure, continuous function of
it, so the same time always yields the same LightEnvironment and consecutive
frames never jump at sunrise or sunset.
"""
from dataclasses import dataclass

import numpy as np

from voxel_timelapse import constants
from voxel_timelapse.utils import lerp


@dataclass(frozen=True, eq=False)
class LightEnvironment:
    """
    Per-frame lighting parameters.

    Attributes:
        time_of_day: Normalized time in [0, 1)
        sun_direction: Unit vector pointing toward the sun
        sun_color: RGB tint of sunlight
        sun_intensity: Scalar sun strength
        sky_color: RGB returned for rays that escape the scene
        ambient_color: RGB of the ambient term
        ambient_intensity: Scalar ambient strength
    """
    time_of_day: float
    sun_direction: np.ndarray
    sun_color: np.ndarray
    sun_intensity: float
    sky_color: np.ndarray
    ambient_color: np.ndarray
    ambient_intensity: float

    @property
    def sun_elevation(self):
        """Sine of the sun's altitude above the horizon."""
        return float(self.sun_direction[1])


class DayNightModel:
    """
    Maps a time of day to sun, sky and ambient lighting.
    """

    def __init__(self, axis_tilt_deg=constants.SUN_AXIS_TILT_DEG,
                 peak_intensity=constants.SUN_PEAK_INTENSITY,
                 night_floor=constants.SUN_NIGHT_FLOOR,
                 elevation_gamma=constants.SUN_ELEVATION_GAMMA,
                 ambient_fraction=constants.AMBIENT_FRACTION,
                 sky_keyframes=None):
        tilt = np.deg2rad(axis_tilt_deg)
        # Fixed horizontal rotation axis, tilted away from +Z
        self.axis = np.array([np.sin(tilt), 0.0, np.cos(tilt)])
        self.peak_intensity = float(peak_intensity)
        self.night_floor = float(night_floor)
        self.elevation_gamma = float(elevation_gamma)
        self.ambient_fraction = float(ambient_fraction)

        keyframes = sky_keyframes if sky_keyframes is not None else constants.SKY_KEYFRAMES
        self._key_times = np.array([k[0] for k in keyframes], dtype=np.float64)
        self._key_colors = np.array([k[1] for k in keyframes], dtype=np.float64)
        if self._key_times[0] != 0.0 or self._key_times[-1] != 1.0:
            raise ValueError("sky keyframes must span [0, 1]")
        if not np.allclose(self._key_colors[0], self._key_colors[-1]):
            raise ValueError("sky keyframes must wrap: first and last colors differ")

        self.warm_color = np.array(constants.SUN_COLOR_WARM)
        self.noon_color = np.array(constants.SUN_COLOR_NOON)

    @staticmethod
    def _wrap(time_of_day):
        t = float(time_of_day)
        if not np.isfinite(t):
            raise ValueError(f"time_of_day must be finite, got {time_of_day}")
        return t % 1.0

    def sun_direction(self, time_of_day):
        """
        Rotate the noon direction (+Y) about the fixed axis.

        The rotation angle is 2*pi*(t - 0.5); since the axis is perpendicular to
        +Y, Rodrigues' formula reduces to up*cos + (axis x up)*sin.
        """
        theta = 2.0 * np.pi * (self._wrap(time_of_day) - 0.5)
        kx, _, kz = self.axis
        return np.array([-kz * np.sin(theta), np.cos(theta), kx * np.sin(theta)])

    def sun_intensity(self, time_of_day):
        elevation = max(self.sun_direction(time_of_day)[1], 0.0)
        return self.night_floor + (self.peak_intensity - self.night_floor) * elevation ** self.elevation_gamma

    def sun_color(self, time_of_day):
        # Golden near the horizon, warm white overhead
        k = float(np.clip(self.sun_direction(time_of_day)[1], 0.0, 1.0))
        return lerp(self.warm_color, self.noon_color, k)

    def sky_color(self, time_of_day):
        t = self._wrap(time_of_day)
        return np.array([
            np.interp(t, self._key_times, self._key_colors[:, c]) for c in range(3)
        ])

    def evaluate(self, time_of_day):
        """
        Compute the full light environment for one instant.

        Args:
            time_of_day: Normalized time; wrapped into [0, 1)

        Returns:
            LightEnvironment
        """
        t = self._wrap(time_of_day)
        sky = self.sky_color(t)
        return LightEnvironment(
            time_of_day=t,
            sun_direction=self.sun_direction(t),
            sun_color=self.sun_color(t),
            sun_intensity=self.sun_intensity(t),
            sky_color=sky,
            ambient_color=sky,
            ambient_intensity=self.ambient_fraction,
        )

    def sample_cycle(self, samples=241):
        """
        Tabulate one full cycle for diagnostics.

        Returns:
            tuple: (times (S,), sun_intensity (S,), sky_color (S, 3), elevation (S,))
        """
        times = np.linspace(0.0, 1.0, samples)
        intensity = np.array([self.sun_intensity(t) for t in times])
        sky = np.array([self.sky_color(t) for t in times])
        elevation = np.array([self.sun_direction(t)[1] for t in times])
        return times, intensity, sky, elevation
