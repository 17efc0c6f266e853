"""
Ray-geometry intersection calculations for the Voxel Timelapse Renderer.

This module contains the vectorized solvers for rays against the primitives of
the voxel scene: axis-aligned unit cubes (slab method) and horizontal planes
(ground and water).
"""
import numpy as np

from voxel_timelapse import constants


def slab_distances(origins, directions, box_min, box_max):
    """
    Vectorized slab test of N rays against V axis-aligned boxes.

    A direction component smaller than PARALLEL_EPSILON is treated as parallel
    to that slab pair: the pair is passed (-inf, inf) when the origin lies
    between its planes and rejected (inf, -inf) otherwise, so no division by
    that component ever happens.

    Args:
        origins: (N, 3) ray origins
        directions: (N, 3) ray directions
        box_min: (V, 3) lower corners
        box_max: (V, 3) upper corners

    Returns:
        tuple: (t_near, t_far, entry_axis), each (N, V). t_near > t_far marks a miss.
    """
    o = origins[:, None, :]
    d = directions[:, None, :]

    parallel = np.abs(d) < constants.PARALLEL_EPSILON
    safe_d = np.where(parallel, 1.0, d)

    t1 = (box_min[None, :, :] - o) / safe_d
    t2 = (box_max[None, :, :] - o) / safe_d
    t_lo = np.minimum(t1, t2)
    t_hi = np.maximum(t1, t2)

    if np.any(parallel):
        inside = (o >= box_min[None, :, :]) & (o <= box_max[None, :, :])
        parallel = np.broadcast_to(parallel, t_lo.shape)
        t_lo = np.where(parallel, np.where(inside, -np.inf, np.inf), t_lo)
        t_hi = np.where(parallel, np.where(inside, np.inf, -np.inf), t_hi)

    entry_axis = np.argmax(t_lo, axis=2)
    t_near = np.max(t_lo, axis=2)
    t_far = np.min(t_hi, axis=2)
    return t_near, t_far, entry_axis


def intersect_boxes(origins, directions, box_min, box_max, eps=constants.EPSILON):
    """
    Nearest entry intersection of each ray with a set of boxes.

    Only entries in front of the origin (t > eps) count; a ray starting inside
    a box passes through it.

    Args:
        origins: (N, 3) ray origins
        directions: (N, 3) ray directions
        box_min: (V, 3) lower corners
        box_max: (V, 3) upper corners
        eps: Minimum accepted distance

    Returns:
        tuple: (t, index, normal) with t (N,) inf on miss, index (N,) -1 on
        miss and normal (N, 3) the outward normal of the entered face.
    """
    n_rays = directions.shape[0]
    t = np.full(n_rays, np.inf)
    index = np.full(n_rays, -1, dtype=np.int64)
    normal = np.zeros((n_rays, 3))

    if box_min.shape[0] == 0 or n_rays == 0:
        return t, index, normal

    t_near, t_far, entry_axis = slab_distances(origins, directions, box_min, box_max)
    valid = (t_near <= t_far) & (t_near > eps)
    t_cand = np.where(valid, t_near, np.inf)

    best = np.argmin(t_cand, axis=1)
    rows = np.arange(n_rays)
    t_best = t_cand[rows, best]
    hit = np.isfinite(t_best)

    if np.any(hit):
        t[hit] = t_best[hit]
        index[hit] = best[hit]
        axis = entry_axis[rows[hit], best[hit]]
        # Entered face faces against the ray on that axis
        normal[rows[hit], axis] = -np.sign(directions[rows[hit], axis])

    return t, index, normal


def any_box_hit(origins, directions, box_min, box_max, max_distance,
                eps=constants.EPSILON, ignore=None):
    """
    Shadow query: does each ray enter any box with eps < t < max_distance?

    Args:
        origins: (N, 3) ray origins
        directions: (N, 3) ray directions
        box_min: (V, 3) lower corners
        box_max: (V, 3) upper corners
        max_distance: (N,) or scalar upper bound on t
        eps: Minimum accepted distance
        ignore: Optional box index excluded from the test

    Returns:
        (N,) boolean array
    """
    n_rays = directions.shape[0]
    if box_min.shape[0] == 0 or n_rays == 0:
        return np.zeros(n_rays, dtype=bool)

    t_near, t_far, _ = slab_distances(origins, directions, box_min, box_max)
    max_distance = np.broadcast_to(np.asarray(max_distance, dtype=np.float64), (n_rays,))
    blocked = (t_near <= t_far) & (t_near > eps) & (t_near < max_distance[:, None])
    if ignore is not None and ignore >= 0:
        blocked[:, ignore] = False
    return np.any(blocked, axis=1)


def intersect_horizontal_plane(origins, directions, height, bounds=None,
                               eps=constants.EPSILON):
    """
    Vectorized intersection with the plane y = height.

    Args:
        origins: (N, 3) ray origins
        directions: (N, 3) ray directions
        height: Plane height
        bounds: Optional (x_min, x_max, z_min, z_max) rectangle limiting the plane
        eps: Minimum accepted distance

    Returns:
        tuple: (t, normal) with t (N,) inf where no intersection and normal
        (N, 3) pointing toward the ray origin side.
    """
    n_rays = directions.shape[0]
    dy = directions[:, 1]
    oy = origins[:, 1]

    t = np.full(n_rays, np.inf)
    # Rays parallel to the plane never hit it
    valid = np.abs(dy) > constants.PARALLEL_EPSILON
    t[valid] = (height - oy[valid]) / dy[valid]
    t[~(t > eps)] = np.inf

    if bounds is not None:
        finite = np.isfinite(t)
        if np.any(finite):
            x_min, x_max, z_min, z_max = bounds
            hx = origins[finite, 0] + t[finite] * directions[finite, 0]
            hz = origins[finite, 2] + t[finite] * directions[finite, 2]
            inside = (hx >= x_min) & (hx <= x_max) & (hz >= z_min) & (hz <= z_max)
            subset = t[finite]
            subset[~inside] = np.inf
            t[finite] = subset

    normal = np.zeros((n_rays, 3))
    normal[:, 1] = np.where(oy >= height, 1.0, -1.0)
    return t, normal
