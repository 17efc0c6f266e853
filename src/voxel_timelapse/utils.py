"""
Vector utilities for the Voxel Timelapse Renderer.

This module provides the batch handling shared by the scene and the tracer
(single rays are promoted to batches of one) plus small vector helpers that
operate row-wise on (N, 3) arrays.
"""

import numpy as np

from voxel_timelapse.errors import DegenerateGeometryError


def ensure_batch(origins, directions):
    """
    Promote ray origins and directions to matching (N, 3) float arrays.

    A single (3,) origin is broadcast against a batch of directions, which is
    how the camera issues primary rays.

    Args:
        origins: (3,) or (N, 3) ray origins
        directions: (3,) or (N, 3) ray directions

    Returns:
        tuple: (origins, directions, was_single)
    """
    origins = np.asarray(origins, dtype=np.float64)
    directions = np.asarray(directions, dtype=np.float64)
    was_single = directions.ndim == 1

    directions = np.atleast_2d(directions)
    origins = np.broadcast_to(np.atleast_2d(origins), directions.shape)
    return origins, directions, was_single


def unbatch_if_needed(arrays, was_single):
    """
    Convert batched arrays back to single arrays if they were originally single.

    Args:
        arrays: Single array or list/tuple of arrays to potentially unbatch
        was_single: Boolean indicating if original input was single (not batched)

    Returns:
        Arrays in original format (single or batched)
    """
    if not was_single:
        return arrays

    if isinstance(arrays, (list, tuple)):
        return type(arrays)(arr[0] if arr.shape[0] == 1 else arr for arr in arrays)
    return arrays[0] if arrays.shape[0] == 1 else arrays


def dot(a, b):
    """Row-wise dot product of two (N, 3) arrays."""
    return a[:, 0] * b[:, 0] + a[:, 1] * b[:, 1] + a[:, 2] * b[:, 2]


def reflect(d, n):
    """Mirror directions d about normals n (both (N, 3))."""
    return d - 2.0 * dot(d, n)[:, None] * n


def validate_directions(directions):
    """
    Reject ray directions that would poison the color computation.

    Args:
        directions: (N, 3) array of ray directions

    Raises:
        DegenerateGeometryError: if any direction is zero-length or non-finite
    """
    if not np.all(np.isfinite(directions)):
        raise DegenerateGeometryError("ray directions contain NaN or infinite components")
    lengths = np.sqrt(dot(directions, directions))
    if np.any(lengths < 1e-12):
        raise DegenerateGeometryError(
            f"{int(np.sum(lengths < 1e-12))} ray direction(s) have zero length"
        )
    return lengths


def lerp(a, b, k):
    """Linear blend between a and b."""
    return a * (1.0 - k) + b * k
