"""
Ray tracer core: direct sun and torch lighting with hard shadows, Phong
highlights, hemispherical ambient light with ambient occlusion, emissive
self-light and a bounded mirror recursion.

All rays of a batch are shaded together. Reflection recursion only follows
the subset of rays whose material reflects, so the batch shrinks with depth.
"""
import logging

import numpy as np

from voxel_timelapse import constants
from voxel_timelapse.errors import ConfigurationError
from voxel_timelapse.scene import HitType
from voxel_timelapse.utils import (
    dot,
    ensure_batch,
    lerp,
    reflect,
    unbatch_if_needed,
    validate_directions,
)

logger = logging.getLogger(__name__)


class RayTracer:
    """
    Colors rays against a read-only scene.

    Args:
        scene: Scene to trace
        sampler: Optional TextureSampler; without one materials use plain albedo
        max_depth: Reflection recursion limit used when shade() gets no depth
        ambient_occlusion: Darken the ambient term where geometry sits just
            above a surface
    """

    def __init__(self, scene, sampler=None, max_depth=constants.MAX_DEPTH,
                 ambient_occlusion=True):
        if max_depth < 0:
            raise ConfigurationError(f"max_depth must be >= 0, got {max_depth}")
        self.scene = scene
        self.materials = scene.materials
        self.sampler = sampler
        self.max_depth = int(max_depth)
        self.ambient_occlusion = bool(ambient_occlusion)
        self.ground_bounce = np.array(constants.GROUND_BOUNCE_COLOR)

    def shade(self, origins, directions, env, depth=None, seconds=0.0):
        """
        Color each ray.

        Args:
            origins: (3,) or (N, 3) ray origins
            directions: (3,) or (N, 3) ray directions; normalized here
            env: LightEnvironment for this frame
            depth: Remaining reflection bounces (defaults to max_depth)
            seconds: Animation time, used to scroll animated textures

        Returns:
            (3,) or (N, 3) RGB colors in [0, 1]

        Raises:
            DegenerateGeometryError: for zero-length or non-finite directions
        """
        origins, directions, was_single = ensure_batch(origins, directions)
        lengths = validate_directions(directions)
        directions = directions / lengths[:, None]
        depth = self.max_depth if depth is None else int(depth)

        colors = self._shade(origins, directions, env, depth, float(seconds))
        return unbatch_if_needed(colors, was_single)

    def _shade(self, origins, directions, env, depth, seconds):
        n_rays = directions.shape[0]
        colors = np.empty((n_rays, 3))

        hits = self.scene.intersect(origins, directions)
        mask = hits.hit_mask
        colors[~mask] = env.sky_color
        if not np.any(mask):
            return colors

        points = hits.point[mask]
        normals = hits.normal[mask]
        mat = hits.material[mask]
        view = -directions[mask]
        albedo = self._albedo(hits, mask, seconds)

        local = self._ambient(points, normals, albedo, env)

        # Sun: directional, unlimited shadow distance
        if env.sun_intensity > 0.0:
            n_hit = points.shape[0]
            sun_dirs = np.broadcast_to(env.sun_direction, (n_hit, 3))
            sun_rgb = np.broadcast_to(env.sun_color * env.sun_intensity, (n_hit, 3))
            local += self._direct(points, normals, view, albedo, mat,
                                  sun_dirs, sun_rgb, np.full(n_hit, np.inf))

        # Torches: point lights with a quadratic window falloff
        for light in self.scene.lights:
            to_light = light.position[None, :] - points
            dist = np.sqrt(dot(to_light, to_light))
            reach = (dist > 1e-6) & (dist < light.range)
            if not np.any(reach):
                continue
            light_dirs = np.zeros_like(to_light)
            light_dirs[reach] = to_light[reach] / dist[reach, None]
            falloff = (1.0 - np.minimum(dist / light.range, 1.0)) ** 2
            light_rgb = (light.color * light.intensity)[None, :] * falloff[:, None]
            light_rgb[~reach] = 0.0
            local += self._direct(points, normals, view, albedo, mat,
                                  light_dirs, light_rgb, dist,
                                  ignore_voxel=light.voxel_index, active=reach)

        local += np.clip(self.materials.emissive[mat], 0.0, 1.0)
        local = np.clip(local, 0.0, 1.0)

        if depth > 0:
            refl = self.materials.reflection[mat]
            bounce = refl > 0.0
            if np.any(bounce):
                r_dirs = reflect(-view[bounce], normals[bounce])
                r_origins = points[bounce] + normals[bounce] * constants.EPSILON
                reflected = self._shade(r_origins, r_dirs, env, depth - 1, seconds)
                local[bounce] = np.clip(lerp(local[bounce], reflected, refl[bounce, None]), 0.0, 1.0)

        colors[mask] = local
        return colors

    def _direct(self, points, normals, view, albedo, mat, light_dirs, light_rgb,
                max_distance, ignore_voxel=None, active=None):
        """
        Diffuse plus specular contribution of one light, gated by shadow rays.

        Returns:
            (N, 3) contribution, zero where the light is behind the surface or blocked
        """
        contrib = np.zeros_like(points)
        n_dot_l = dot(normals, light_dirs)
        lit = n_dot_l > 0.0
        if active is not None:
            lit &= active
        if not np.any(lit):
            return contrib

        shadow_origins = points[lit] + normals[lit] * constants.EPSILON
        blocked = self.scene.occluded(shadow_origins, light_dirs[lit],
                                      max_distance[lit], ignore_voxel=ignore_voxel)
        lit_idx = np.flatnonzero(lit)[~blocked]
        if lit_idx.size == 0:
            return contrib

        rgb = light_rgb[lit_idx]
        diffuse = albedo[lit_idx] * n_dot_l[lit_idx, None] * rgb

        # Phong: light direction mirrored about the normal against the view direction
        mirrored = reflect(-light_dirs[lit_idx], normals[lit_idx])
        r_dot_v = np.maximum(dot(mirrored, view[lit_idx]), 0.0)
        m = mat[lit_idx]
        highlight = self.materials.specular[m] * r_dot_v ** self.materials.shininess[m]

        contrib[lit_idx] = diffuse + highlight[:, None] * rgb
        return contrib

    def _ambient(self, points, normals, albedo, env):
        """
        Sky light from above blended with ground bounce from below, by normal.y.
        """
        if env.ambient_intensity <= 0.0:
            return np.zeros_like(albedo)
        k = np.clip(normals[:, 1] * 0.5 + 0.5, 0.0, 1.0)[:, None]
        hemi = env.ambient_color[None, :] * k + self.ground_bounce[None, :] * (1.0 - k)
        ambient = albedo * hemi * env.ambient_intensity
        if self.ambient_occlusion:
            ambient *= self._occlusion(points, normals)[:, None]
        return ambient

    def _occlusion(self, points, normals):
        """
        Ambient visibility in [AO_FLOOR, 1]: short probes along the normal,
        nearer blockers weigh more.
        """
        occ = np.zeros(points.shape[0])
        for k in range(1, constants.AO_PROBES + 1):
            probe = points + normals * (constants.AO_EPSILON + constants.AO_STEP * k)
            blocked = self.scene.occluded(probe, normals, constants.AO_REACH)
            occ += blocked / k
        return np.clip(1.0 - constants.AO_STRENGTH * occ, constants.AO_FLOOR, 1.0)

    def _albedo(self, hits, mask, seconds=0.0):
        """Material albedo, multiplied by the texture where a sampler is set."""
        mat = hits.material[mask]
        albedo = np.array(self.materials.albedo[mat])
        if self.sampler is None:
            return albedo

        u, v = self._surface_uv(hits, mask)
        u = u * self.materials.uv_scale[mat]
        v = v * self.materials.uv_scale[mat]
        animated = self.materials.animated_uv[mat]
        if np.any(animated):
            u = np.where(animated, u + seconds * constants.UV_SCROLL_SPEED, u)
        for material_id in np.unique(mat):
            handle = self.materials.textures[material_id]
            if handle is None:
                continue
            sel = mat == material_id
            albedo[sel] = np.clip(albedo[sel] * self.sampler.sample(handle, u[sel], v[sel]), 0.0, 1.0)
        return albedo

    def _surface_uv(self, hits, mask):
        """Face-planar UVs for voxels, world x/z for planes."""
        points = hits.point[mask]
        normals = hits.normal[mask]
        u = points[:, 0].copy()
        v = points[:, 2].copy()

        is_voxel = hits.hit_type[mask] == HitType.VOXEL.value
        if np.any(is_voxel):
            local = points[is_voxel] - self.scene.box_min[hits.voxel_index[mask][is_voxel]]
            axis = np.argmax(np.abs(normals[is_voxel]), axis=1)
            # x faces -> (z, y); y faces -> (x, z); z faces -> (x, y)
            u_axis = np.array([2, 0, 0])[axis]
            v_axis = np.array([1, 2, 1])[axis]
            rows = np.arange(local.shape[0])
            u[is_voxel] = local[rows, u_axis]
            v[is_voxel] = local[rows, v_axis]
        return u, v
