"""
Tile-parallel frame renderer.

The frame is cut into disjoint rectangles. Each tile builds its own primary
rays, shades them and returns its own color block; nothing is shared between
tiles while they run. Blocks are copied into the frame buffer only after every
tile has finished, so the result does not depend on worker count or
completion order.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from voxel_timelapse import constants
from voxel_timelapse.errors import ConfigurationError, TilePartitionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tile:
    """Half-open pixel rectangle [x0, x1) x [y0, y1)."""
    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self):
        return self.x1 - self.x0

    @property
    def height(self):
        return self.y1 - self.y0

    def pixels(self):
        """Column and row index of every pixel, row-major."""
        ys, xs = np.mgrid[self.y0:self.y1, self.x0:self.x1]
        return xs.ravel(), ys.ravel()


def partition(width, height, tile_size=constants.DEFAULT_TILE_SIZE):
    """
    Split a width x height image into row-major square tiles.

    Edge tiles are clipped to the image.
    """
    if width <= 0 or height <= 0:
        raise TilePartitionError(f"image size must be positive, got {width}x{height}")
    if tile_size <= 0:
        raise TilePartitionError(f"tile size must be positive, got {tile_size}")
    return [
        Tile(x0, y0, min(x0 + tile_size, width), min(y0 + tile_size, height))
        for y0 in range(0, height, tile_size)
        for x0 in range(0, width, tile_size)
    ]


def validate_partition(tiles, width, height):
    """
    Check that tiles cover every pixel of the image exactly once.

    Raises:
        TilePartitionError: on gaps, overlaps or tiles outside the image
    """
    coverage = np.zeros((height, width), dtype=np.int64)
    for tile in tiles:
        if tile.x0 < 0 or tile.y0 < 0 or tile.x1 > width or tile.y1 > height:
            raise TilePartitionError(f"{tile} lies outside the {width}x{height} image")
        if tile.width <= 0 or tile.height <= 0:
            raise TilePartitionError(f"{tile} is empty")
        coverage[tile.y0:tile.y1, tile.x0:tile.x1] += 1

    if np.any(coverage == 0):
        raise TilePartitionError(f"{int(np.sum(coverage == 0))} pixel(s) not covered by any tile")
    if np.any(coverage > 1):
        raise TilePartitionError(f"{int(np.sum(coverage > 1))} pixel(s) covered by more than one tile")


def sample_offsets(samples):
    """
    Fixed sub-pixel sample positions in [0, 1)^2.

    x is stratified, y follows the base-2 radical inverse shifted by half a
    stratum, so one sample sits at the pixel center.

    Returns:
        (samples, 2) array
    """
    if samples < 1:
        raise ConfigurationError(f"samples must be >= 1, got {samples}")
    index = np.arange(samples)
    radical = np.zeros(samples)
    bits = index.copy()
    scale = 0.5
    while np.any(bits):
        radical += scale * (bits & 1)
        bits >>= 1
        scale *= 0.5
    ox = (index + 0.5) / samples
    oy = np.mod(radical + 0.5 / samples, 1.0)
    return np.stack([ox, oy], axis=1)


class TileRenderer:
    """
    Renders frames by shading tiles on a fixed-size thread pool.

    Args:
        tracer: RayTracer used for every pixel
        workers: Number of worker threads; 1 renders inline
        tile_size: Edge length of the square tiles in pixels
        samples: Primary rays per pixel, averaged
    """

    def __init__(self, tracer, workers=constants.DEFAULT_WORKERS,
                 tile_size=constants.DEFAULT_TILE_SIZE, samples=constants.DEFAULT_SAMPLES):
        if workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {workers}")
        self.tracer = tracer
        self.workers = int(workers)
        self.tile_size = int(tile_size)
        self.offsets = sample_offsets(int(samples))

    def render_tile(self, tile, env, camera, width, height, depth, seconds=0.0):
        """Shade one tile. Returns a (tile.height, tile.width, 3) block."""
        xs, ys = tile.pixels()
        colors = np.zeros((xs.size, 3))
        for ox, oy in self.offsets:
            # primary_rays aims at x + 0.5; shift to the sample position
            origins, directions = camera.primary_rays(xs + (ox - 0.5), ys + (oy - 0.5), width, height)
            colors += self.tracer.shade(origins, directions, env, depth=depth, seconds=seconds)
        colors /= len(self.offsets)
        return colors.reshape(tile.height, tile.width, 3)

    def render(self, env, camera, width, height, tiles=None, depth=None, seconds=0.0):
        """
        Render a complete frame.

        Args:
            env: LightEnvironment for this frame
            camera: Camera for this frame
            width, height: Frame size in pixels
            tiles: Optional explicit partition; validated before rendering
            depth: Reflection depth for every tile (defaults to tracer.max_depth)
            seconds: Animation time passed to the tracer

        Returns:
            (height, width, 3) float64 frame buffer in [0, 1]
        """
        if tiles is None:
            tiles = partition(width, height, self.tile_size)
        validate_partition(tiles, width, height)
        # Resolved once so every tile of this frame uses the same depth
        depth = self.tracer.max_depth if depth is None else int(depth)

        t0 = time.perf_counter()
        if self.workers == 1:
            blocks = [self.render_tile(tile, env, camera, width, height, depth, seconds)
                      for tile in tiles]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                futures = [
                    pool.submit(self.render_tile, tile, env, camera, width, height, depth, seconds)
                    for tile in tiles
                ]
                # Join: every tile must finish before assembly
                blocks = [future.result() for future in futures]

        frame = np.empty((height, width, 3))
        for tile, block in zip(tiles, blocks):
            frame[tile.y0:tile.y1, tile.x0:tile.x1] = block

        logger.debug("Rendered %dx%d frame as %d tiles (%d sample(s), depth %d) on %d worker(s) in %.2fs",
                     width, height, len(tiles), len(self.offsets), depth, self.workers,
                     time.perf_counter() - t0)
        return frame
