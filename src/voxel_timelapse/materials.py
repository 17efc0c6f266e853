"""
Material table for the Voxel Timelapse Renderer.

Materials are plain data indexed by a small integer id. The table packs every
coefficient into numpy arrays so the tracer can look up a whole batch of hits
with one fancy-indexing operation instead of dispatching per object.
"""
from dataclasses import dataclass, field

import numpy as np

from voxel_timelapse import constants
from voxel_timelapse.errors import SceneError


def _rgb(value, upper=1.0):
    rgb = np.asarray(value, dtype=np.float64).reshape(3)
    return np.clip(rgb, 0.0, upper)


@dataclass(frozen=True, eq=False)
class Material:
    """
    Shading parameters of a surface.

    Attributes:
        name: Unique identifier within a table
        albedo: Diffuse RGB reflectance, clamped to [0, 1]
        specular: Highlight strength, clamped to [0, 1]
        shininess: Phong exponent, at least 1
        emissive: Self-light RGB, non-negative. Emissive voxels act as torches.
        reflection: Mirror blend coefficient, clamped to [0, 1]
        texture: Opaque texture handle resolved by a TextureSampler
        uv_scale: Texture tiling per world unit, positive
        animated_uv: Scroll the texture along u with animation time (water)
    """
    name: str
    albedo: np.ndarray
    specular: float = constants.DEFAULT_SPECULAR
    shininess: float = constants.DEFAULT_SHININESS
    emissive: np.ndarray = field(default_factory=lambda: np.zeros(3))
    reflection: float = 0.0
    texture: str | None = None
    uv_scale: float = 1.0
    animated_uv: bool = False

    def __post_init__(self):
        """Clamp all coefficients into their valid ranges."""
        # frozen dataclass: assign through object.__setattr__
        object.__setattr__(self, "albedo", _rgb(self.albedo))
        object.__setattr__(self, "emissive", _rgb(self.emissive, upper=np.inf))
        object.__setattr__(self, "specular", float(np.clip(self.specular, 0.0, 1.0)))
        object.__setattr__(self, "shininess", float(max(self.shininess, 1.0)))
        object.__setattr__(self, "reflection", float(np.clip(self.reflection, 0.0, 1.0)))
        uv_scale = float(self.uv_scale)
        if not np.isfinite(uv_scale) or uv_scale <= 0.0:
            uv_scale = 1.0
        object.__setattr__(self, "uv_scale", uv_scale)

    @property
    def is_emissive(self):
        return bool(np.any(self.emissive > 0.0))


class MaterialTable:
    """
    Ordered, read-only collection of materials addressed by integer id.
    """

    def __init__(self, materials):
        self._materials = list(materials)
        self._ids = {}
        for i, material in enumerate(self._materials):
            if material.name in self._ids:
                raise SceneError(f"duplicate material name {material.name!r}")
            self._ids[material.name] = i

        # Packed arrays for vectorized lookup by id
        self.albedo = np.array([m.albedo for m in self._materials]).reshape(-1, 3)
        self.emissive = np.array([m.emissive for m in self._materials]).reshape(-1, 3)
        self.specular = np.array([m.specular for m in self._materials])
        self.shininess = np.array([m.shininess for m in self._materials])
        self.reflection = np.array([m.reflection for m in self._materials])
        self.uv_scale = np.array([m.uv_scale for m in self._materials])
        self.animated_uv = np.array([bool(m.animated_uv) for m in self._materials], dtype=bool)
        self.textures = [m.texture for m in self._materials]

        for arr in (self.albedo, self.emissive, self.specular, self.shininess,
                    self.reflection, self.uv_scale, self.animated_uv):
            arr.setflags(write=False)

    def __len__(self):
        return len(self._materials)

    def __iter__(self):
        return iter(self._materials)

    def __getitem__(self, material_id):
        return self._materials[material_id]

    def id_of(self, name):
        """Return the id of a material by name."""
        try:
            return self._ids[name]
        except KeyError:
            raise SceneError(f"unknown material {name!r}") from None

    def by_name(self, name):
        return self._materials[self.id_of(name)]

    def validate_ids(self, ids):
        """Raise SceneError if any id falls outside the table."""
        ids = np.asarray(ids)
        if ids.size and (ids.min() < 0 or ids.max() >= len(self)):
            raise SceneError(
                f"material ids must be in [0, {len(self) - 1}], got range "
                f"[{ids.min()}, {ids.max()}]"
            )
