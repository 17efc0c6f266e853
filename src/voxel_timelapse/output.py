"""
Frame encoding: float frame buffers to 8-bit image files.
"""
import logging
from pathlib import Path

import numpy as np
import PIL.Image

from voxel_timelapse import constants

logger = logging.getLogger(__name__)


def tonemap_aces(colors):
    """Narkowicz ACES filmic curve, clamped to [0, 1]."""
    a, b, c, d, e = 2.51, 0.03, 2.43, 0.59, 0.14
    return np.clip((colors * (a * colors + b)) / (colors * (c * colors + d) + e), 0.0, 1.0)


def to_uint8(frame, tonemap=True):
    """
    Quantize a (H, W, 3) float frame to uint8.

    Args:
        frame: Linear colors, nominally in [0, 1]
        tonemap: Apply the ACES curve and 1/2.2 gamma before quantizing

    Returns:
        (H, W, 3) uint8 array
    """
    colors = np.clip(np.asarray(frame, dtype=np.float64), 0.0, 1.0)
    if tonemap:
        colors = tonemap_aces(colors) ** (1.0 / 2.2)
    return np.floor(colors * 255.0 + 0.5).astype(np.uint8)


class FrameWriter:
    """
    Writes one image per frame index into an output directory.

    The file suffix of the pattern selects the format (.png or .bmp).
    """

    def __init__(self, outdir=constants.DEFAULT_OUTPUT_DIR,
                 pattern=constants.FRAME_PATTERN, tonemap=True):
        self.outdir = Path(outdir)
        self.pattern = pattern
        self.tonemap = tonemap

    def path_for(self, index):
        return self.outdir / self.pattern.format(index=index)

    def write(self, frame, index):
        """Encode and save a frame. Returns the written path."""
        self.outdir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(index)
        PIL.Image.fromarray(to_uint8(frame, self.tonemap)).save(path)
        logger.debug("Wrote %s", path)
        return path
