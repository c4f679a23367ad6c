"""Voxel grid downsampling.

Space is divided into axis-aligned cubes ("voxels") of a fixed edge
length and only the first point that falls into each occupied voxel is
kept.  Retained points are copied unchanged; they are not averaged with
their neighbours, so colours stay exact byte values.
"""

import math

import numpy as np

from ..common.point_cloud import PointCloud

_INDEX_LIMIT = float(2 ** 63)


def voxel_keys(points: np.ndarray, voxel_size: float) -> np.ndarray:
    """Compute the integer voxel index of each point.

    Parameters
    ----------
    points : numpy.ndarray
        Array of shape (N, 3) with XYZ coordinates.
    voxel_size : float
        Edge length of a voxel.

    Returns
    -------
    numpy.ndarray
        Integer array of shape (N, 3) holding ``floor(p / voxel_size)``.

    Raises
    ------
    ValueError
        If a coordinate is not finite or its voxel index does not fit
        in a 64-bit integer.
    """
    cells = np.floor(points[:, :3] / voxel_size)
    # 2**63 itself is exactly representable and already out of range
    if not np.all((cells >= -_INDEX_LIMIT) & (cells < _INDEX_LIMIT)):
        raise ValueError(
            f"voxel indices out of range for voxel_size {voxel_size}; "
            "coordinates must be finite and not too large for the grid"
        )
    return cells.astype(np.int64)


def voxel_downsample(cloud: PointCloud, voxel_size: float) -> int:
    """Keep the first point of every occupied voxel, in place.

    Points are scanned in input order and the first point seen in a
    voxel wins.  The retained points keep their relative input order,
    which makes the result reproducible and the operation idempotent
    for a fixed voxel size.

    Parameters
    ----------
    cloud : PointCloud
        Cloud to downsample.  Colours and normals, when present, are
        reduced with the same selection.
    voxel_size : float
        Edge length of a voxel.  Must be a positive, finite number.

    Returns
    -------
    int
        Number of points removed.

    Raises
    ------
    ValueError
        If `voxel_size` is invalid or the voxel indices overflow (see
        `voxel_keys`).  The cloud is left unchanged.
    """
    if not math.isfinite(voxel_size) or voxel_size <= 0:
        raise ValueError(f"voxel_size must be a positive number, got {voxel_size}")
    n_before = len(cloud)
    if n_before == 0:
        return 0

    keys = voxel_keys(cloud.points, voxel_size)
    # return_index gives the first occurrence of every distinct key
    _, first = np.unique(keys, axis=0, return_index=True)
    cloud.select(np.sort(first))
    return n_before - len(cloud)
