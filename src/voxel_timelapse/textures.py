"""
Texture sampling collaborators.

The tracer treats texturing as an opaque lookup: sample(handle, u, v) returns
an RGB multiplier for each UV pair. UV wrapping is the sampler's job.
"""
import logging
import threading
from pathlib import Path

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


class TextureSampler:
    """Neutral sampler: every texture is plain white, so albedo passes through."""

    def sample(self, handle, u, v):
        """
        Args:
            handle: Opaque texture reference from the material table
            u, v: (N,) texture coordinates

        Returns:
            (N, 3) RGB values in [0, 1]
        """
        return np.ones((np.size(u), 3))


class ImageTextureSampler(TextureSampler):
    """
    Nearest-neighbour sampler over image files loaded with Pillow.

    Handles are file names relative to root. Images are decoded once and
    cached; the cache is shared by tile workers, so loading is serialized.
    """

    def __init__(self, root="."):
        self.root = Path(root)
        self._cache = {}
        self._lock = threading.Lock()

    def load(self, handle):
        with self._lock:
            texels = self._cache.get(handle)
            if texels is None:
                path = self.root / handle
                if not path.is_file():
                    raise FileNotFoundError(f"texture {handle!r} not found at {path}")
                with Image.open(path) as img:
                    texels = np.asarray(img.convert("RGB"), dtype=np.float64) / 255.0
                texels.setflags(write=False)
                self._cache[handle] = texels
                logger.info("Loaded texture %s (%dx%d)", path, texels.shape[1], texels.shape[0])
        return texels

    def preload(self, handles):
        """Decode every texture up front so missing files fail before rendering."""
        for handle in handles:
            if handle is not None:
                self.load(handle)

    def sample(self, handle, u, v):
        texels = self.load(handle)
        h, w, _ = texels.shape
        # Wrap UVs into [0, 1)
        u = np.mod(np.asarray(u, dtype=np.float64), 1.0)
        v = np.mod(np.asarray(v, dtype=np.float64), 1.0)
        x = np.clip(np.floor(u * w).astype(np.int64), 0, w - 1)
        y = np.clip(np.floor(v * h).astype(np.int64), 0, h - 1)
        return texels[y, x]
