"""
Camera pose and orbit for the Voxel Timelapse Renderer.
"""
from dataclasses import dataclass

import numpy as np

from voxel_timelapse import constants
from voxel_timelapse.errors import DegenerateGeometryError

WORLD_UP = np.array([0.0, 1.0, 0.0])
# Substitutes when the view direction is parallel to the requested up vector
SECONDARY_UPS = (np.array([0.0, 0.0, 1.0]), np.array([1.0, 0.0, 0.0]))


@dataclass(frozen=True, eq=False)
class Camera:
    """
    Pinhole camera with an orthonormal basis.

    Attributes:
        position: Eye position
        forward, right, up: Orthonormal basis (right-handed: right = forward x up)
        fov_deg: Vertical field of view in degrees
        aspect: Image width / height
    """
    position: np.ndarray
    forward: np.ndarray
    right: np.ndarray
    up: np.ndarray
    fov_deg: float = constants.FOV_DEG
    aspect: float = 16.0 / 9.0

    def primary_rays(self, xs, ys, width, height):
        """
        Build one ray through the center of each requested pixel.

        Args:
            xs: (N,) pixel columns
            ys: (N,) pixel rows (0 = top)
            width, height: Full image size in pixels

        Returns:
            tuple: (origins (N, 3), directions (N, 3) unit vectors)
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        tan_half_fov = np.tan(np.deg2rad(self.fov_deg) / 2.0)

        px = ((xs + 0.5) / width) * 2.0 - 1.0
        py = 1.0 - ((ys + 0.5) / height) * 2.0

        directions = (self.forward[None, :]
                      + (px * self.aspect * tan_half_fov)[:, None] * self.right[None, :]
                      + (py * tan_half_fov)[:, None] * self.up[None, :])
        directions = directions / np.linalg.norm(directions, axis=1, keepdims=True)
        origins = np.broadcast_to(self.position, directions.shape)
        return origins, directions


def look_at(eye, target, up=WORLD_UP, fov_deg=constants.FOV_DEG, aspect=16.0 / 9.0):
    """
    Build a camera at eye facing target.

    If the view direction is parallel to up, a secondary up vector is
    substituted so the basis stays orthonormal.

    Raises:
        DegenerateGeometryError: if eye and target coincide or a vector is not finite
    """
    eye = np.asarray(eye, dtype=np.float64)
    target = np.asarray(target, dtype=np.float64)
    up = np.asarray(up, dtype=np.float64)
    if not (np.all(np.isfinite(eye)) and np.all(np.isfinite(target)) and np.all(np.isfinite(up))):
        raise DegenerateGeometryError("camera vectors must be finite")

    view = target - eye
    dist = np.linalg.norm(view)
    if dist < 1e-12:
        raise DegenerateGeometryError(f"camera eye and target coincide at {eye}")
    forward = view / dist

    right = np.cross(forward, up)
    for candidate in SECONDARY_UPS:
        if np.linalg.norm(right) > 1e-9:
            break
        right = np.cross(forward, candidate)
    right = right / np.linalg.norm(right)
    true_up = np.cross(right, forward)

    return Camera(position=eye, forward=forward, right=right, up=true_up,
                  fov_deg=float(fov_deg), aspect=float(aspect))


class CameraOrbit:
    """
    Circular orbit around a fixed look-at target at a fixed elevation angle.
    """

    def __init__(self, target=constants.ORBIT_TARGET,
                 base_radius=constants.ORBIT_BASE_RADIUS,
                 zoom_amplitude=constants.ORBIT_ZOOM_AMPLITUDE,
                 elevation_deg=constants.ORBIT_ELEVATION_DEG,
                 period_seconds=constants.ORBIT_PERIOD_SECONDS,
                 fov_deg=constants.FOV_DEG):
        self.target = np.asarray(target, dtype=np.float64)
        self.base_radius = float(base_radius)
        self.zoom_amplitude = float(zoom_amplitude)
        self.elevation = np.deg2rad(elevation_deg)
        self.period_seconds = float(period_seconds)
        self.fov_deg = float(fov_deg)

    def pose(self, angle, radius, aspect=16.0 / 9.0):
        """
        Camera on the orbit at the given angle (radians) and distance from the target.

        Raises:
            DegenerateGeometryError: if radius is not a positive finite number
        """
        if not np.isfinite(radius) or radius <= 0.0:
            raise DegenerateGeometryError(f"orbit radius must be positive, got {radius}")
        ce = np.cos(self.elevation)
        offset = radius * np.array([
            ce * np.cos(angle),
            np.sin(self.elevation),
            ce * np.sin(angle),
        ])
        return look_at(self.target + offset, self.target, WORLD_UP, self.fov_deg, aspect)

    def angle_at(self, seconds):
        return 2.0 * np.pi * seconds / self.period_seconds

    def radius_at(self, seconds):
        """Zoom in and out twice per revolution."""
        return self.base_radius + self.zoom_amplitude * np.sin(2.0 * self.angle_at(seconds))

    def pose_at(self, seconds, aspect=16.0 / 9.0):
        """Camera pose for an animation time in seconds."""
        return self.pose(self.angle_at(seconds), self.radius_at(seconds), aspect)
