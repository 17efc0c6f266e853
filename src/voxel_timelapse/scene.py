"""
Data structures and the intersection query for the voxel scene.
"""
from dataclasses import dataclass
from enum import Enum

import numpy as np

from voxel_timelapse import constants
from voxel_timelapse.errors import SceneError
from voxel_timelapse.intersections import (
    any_box_hit,
    intersect_boxes,
    intersect_horizontal_plane,
)
from voxel_timelapse.utils import ensure_batch, unbatch_if_needed, validate_directions

# Rays x voxels are tested in blocks to bound the (N, V, 3) temporaries
VOXEL_BLOCK = 256


class HitType(Enum):
    """Enumeration of possible intersection types, in tie-break precedence order."""
    VOXEL = "voxel"
    WATER = "water"
    GROUND = "ground"
    SKY = "sky"


@dataclass
class HitResult:
    """
    Result of ray intersection calculations.

    Attributes:
        distance: Distance to hit point (N,), inf on miss
        hit_type: Type of surface hit (N,) HitType values
        point: 3D coordinates of hit point (N, 3), nan on miss
        normal: Surface normal at hit point (N, 3)
        material: Material id (N,), -1 on miss
        voxel_index: Index of the voxel hit (N,), -1 unless a voxel was hit
    """
    distance: np.ndarray
    hit_type: np.ndarray
    point: np.ndarray
    normal: np.ndarray
    material: np.ndarray
    voxel_index: np.ndarray

    def __post_init__(self):
        """Validate array shapes and types."""
        if self.distance.ndim != 1:
            raise ValueError(f"distance must be 1D array, got shape {self.distance.shape}")
        n_rays = self.distance.shape[0]
        for name in ("hit_type", "material", "voxel_index"):
            arr = getattr(self, name)
            if arr.shape != (n_rays,):
                raise ValueError(f"{name} shape {arr.shape} doesn't match distance shape {self.distance.shape}")
        for name in ("point", "normal"):
            arr = getattr(self, name)
            if arr.shape != (n_rays, 3):
                raise ValueError(f"{name} must be ({n_rays},3) array, got shape {arr.shape}")

        valid_types = {ht.value for ht in HitType}
        invalid_types = set(self.hit_type) - valid_types
        if invalid_types:
            raise ValueError(f"Invalid hit types: {invalid_types}. Valid types: {valid_types}")

    @property
    def hit_mask(self):
        return self.hit_type != HitType.SKY.value


@dataclass(frozen=True)
class Voxel:
    """A unit cube cell at integer grid coordinate (i, j, k)."""
    i: int
    j: int
    k: int
    material: int
    solid: bool = True

    @property
    def coord(self):
        return (self.i, self.j, self.k)

    @property
    def center(self):
        return np.array([self.i + 0.5, self.j + 0.5, self.k + 0.5])


@dataclass(frozen=True)
class WaterPlane:
    """Bounded horizontal water surface."""
    height: float
    bounds: tuple  # (x_min, x_max, z_min, z_max)
    material: int


@dataclass(frozen=True, eq=False)
class PointLight:
    """A torch: point light placed at the center of an emissive voxel."""
    position: np.ndarray
    color: np.ndarray
    intensity: float = constants.TORCH_INTENSITY
    range: float = constants.TORCH_RANGE
    voxel_index: int = -1


class Scene:
    """
    Static voxel scene: solid unit cubes plus ground and water planes.

    Coordinate System:
    - Y-Axis: Up. The ground plane is y = ground_height.
    - Voxel (i, j, k) occupies [i, i+1] x [j, j+1] x [k, k+1].

    The scene never changes after construction; only camera and sun move
    between frames, so one instance is shared read-only by all tile workers.
    """

    def __init__(self, materials, voxels, ground_material, ground_height=0.0,
                 water=None):
        self.materials = materials
        self.ground_material = materials.id_of(ground_material) if isinstance(ground_material, str) else int(ground_material)
        self.ground_height = float(ground_height)
        self.water = water

        seen = set()
        solid = []
        for voxel in voxels:
            if voxel.coord in seen:
                raise SceneError(f"duplicate voxel at {voxel.coord}")
            seen.add(voxel.coord)
            if voxel.solid:
                solid.append(voxel)
        self.voxels = tuple(solid)

        ids = [v.material for v in self.voxels] + [self.ground_material]
        if water is not None:
            ids.append(water.material)
        materials.validate_ids(ids)

        # Packed geometry for vectorized intersection
        self.box_min = np.array([v.coord for v in self.voxels], dtype=np.float64).reshape(-1, 3)
        self.box_max = self.box_min + 1.0
        self.voxel_material = np.array([v.material for v in self.voxels], dtype=np.int64)
        for arr in (self.box_min, self.box_max, self.voxel_material):
            arr.setflags(write=False)

        self.lights = tuple(
            PointLight(position=v.center, color=materials[v.material].emissive, voxel_index=i)
            for i, v in enumerate(self.voxels)
            if materials[v.material].is_emissive
        )

    @property
    def voxel_count(self):
        return len(self.voxels)

    def voxel_at(self, i, j, k):
        """Return the index of the solid voxel at a grid coordinate, or -1."""
        match = np.flatnonzero(np.all(self.box_min == (i, j, k), axis=1))
        return int(match[0]) if match.size else -1

    def _intersect_voxels(self, origins, directions):
        n_rays = directions.shape[0]
        t = np.full(n_rays, np.inf)
        index = np.full(n_rays, -1, dtype=np.int64)
        normal = np.zeros((n_rays, 3))

        for start in range(0, self.voxel_count, VOXEL_BLOCK):
            stop = start + VOXEL_BLOCK
            t_blk, idx_blk, n_blk = intersect_boxes(
                origins, directions, self.box_min[start:stop], self.box_max[start:stop]
            )
            closer = t_blk < t
            t[closer] = t_blk[closer]
            index[closer] = idx_blk[closer] + start
            normal[closer] = n_blk[closer]
        return t, index, normal

    def intersect(self, origins, directions):
        """
        Find the nearest intersection for each ray.

        Args:
            origins: (3,) or (N, 3) ray origins
            directions: (3,) or (N, 3) ray directions (need not be normalized)

        Returns:
            HitResult with the nearest hit per ray. Ties resolve voxel > water > ground.
        """
        origins, directions, _ = ensure_batch(origins, directions)
        validate_directions(directions)
        n_rays = directions.shape[0]

        t_vox, vox_index, n_vox = self._intersect_voxels(origins, directions)
        t_ground, n_ground = intersect_horizontal_plane(origins, directions, self.ground_height)
        if self.water is not None:
            t_water, n_water = intersect_horizontal_plane(
                origins, directions, self.water.height, self.water.bounds
            )
        else:
            t_water, n_water = np.full(n_rays, np.inf), np.zeros((n_rays, 3))

        t_min = np.minimum(t_vox, np.minimum(t_water, t_ground))
        finite = np.isfinite(t_min)

        # Precedence by assignment order: later (higher priority) masks exclude earlier
        hit_vox = finite & (t_vox == t_min)
        hit_water = finite & (t_water == t_min) & ~hit_vox
        hit_ground = finite & (t_ground == t_min) & ~hit_vox & ~hit_water

        hit_types = np.full(n_rays, HitType.SKY.value, dtype=object)
        hit_types[hit_ground] = HitType.GROUND.value
        hit_types[hit_water] = HitType.WATER.value
        hit_types[hit_vox] = HitType.VOXEL.value

        material = np.full(n_rays, -1, dtype=np.int64)
        material[hit_ground] = self.ground_material
        if self.water is not None:
            material[hit_water] = self.water.material
        material[hit_vox] = self.voxel_material[vox_index[hit_vox]]

        normal = np.zeros((n_rays, 3))
        normal[hit_ground] = n_ground[hit_ground]
        normal[hit_water] = n_water[hit_water]
        normal[hit_vox] = n_vox[hit_vox]

        voxel_index = np.where(hit_vox, vox_index, -1)

        points = np.full((n_rays, 3), np.nan)
        if np.any(finite):
            points[finite] = origins[finite] + t_min[finite, None] * directions[finite]

        # Always batched; a single ray comes back as a batch of one
        return HitResult(
            distance=t_min,
            hit_type=hit_types,
            point=points,
            normal=normal,
            material=material,
            voxel_index=voxel_index,
        )

    def occluded(self, origins, directions, max_distance=np.inf, ignore_voxel=None):
        """
        Shadow query: is anything between each origin and its light?

        Args:
            origins: (N, 3) shadow ray origins (already offset off the surface)
            directions: (N, 3) unit directions toward the light
            max_distance: (N,) or scalar distance to the light
            ignore_voxel: Index of the emitting voxel, excluded from the test

        Returns:
            (N,) boolean array, True where the light is blocked
        """
        origins, directions, was_single = ensure_batch(origins, directions)
        n_rays = directions.shape[0]
        max_distance = np.broadcast_to(np.asarray(max_distance, dtype=np.float64), (n_rays,))

        blocked = np.zeros(n_rays, dtype=bool)
        for start in range(0, self.voxel_count, VOXEL_BLOCK):
            stop = start + VOXEL_BLOCK
            ignore = None
            if ignore_voxel is not None and start <= ignore_voxel < stop:
                ignore = ignore_voxel - start
            pending = ~blocked
            if not np.any(pending):
                break
            blocked[pending] = any_box_hit(
                origins[pending], directions[pending],
                self.box_min[start:stop], self.box_max[start:stop],
                max_distance[pending], ignore=ignore,
            )

        t_ground, _ = intersect_horizontal_plane(origins, directions, self.ground_height)
        blocked |= t_ground < max_distance
        if self.water is not None:
            t_water, _ = intersect_horizontal_plane(
                origins, directions, self.water.height, self.water.bounds
            )
            blocked |= t_water < max_distance

        return unbatch_if_needed(blocked, was_single)
