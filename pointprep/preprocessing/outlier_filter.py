"""Distance based outlier removal.

Points are scored by their Euclidean distance to the centroid of the
whole cloud.  Anything at or beyond ``mean + std_ratio * std`` of that
distance distribution is treated as noise.  This is a global heuristic:
it does not look at local neighbourhoods, so it removes stray points
far away from the scan but not noise embedded inside it.  For a real
statistical filter you should use a k-nearest neighbour search.
"""

from typing import Tuple

import numpy as np

from ..common.point_cloud import PointCloud


def centroid_distances(points: np.ndarray) -> np.ndarray:
    """Return the distance of every point to the centroid of `points`."""
    centroid = points[:, :3].mean(axis=0)
    return np.linalg.norm(points[:, :3] - centroid, axis=1)


def distance_threshold(distances: np.ndarray, std_ratio: float) -> Tuple[float, float, float]:
    """Compute the rejection threshold of a distance distribution.

    Parameters
    ----------
    distances : numpy.ndarray
        One-dimensional array of distances.
    std_ratio : float
        Multiplier applied to the population standard deviation.

    Returns
    -------
    (float, float, float)
        Tuple of (mean, std, threshold).
    """
    mean = float(np.mean(distances))
    std = float(np.std(distances))
    return mean, std, mean + std_ratio * std


def outlier_mask(points: np.ndarray, std_ratio: float) -> np.ndarray:
    """Boolean mask of the points to keep.

    A point is kept when its centroid distance is strictly below the
    threshold.  If all distances are identical nothing is rejected.
    """
    if len(points) == 0:
        return np.ones(0, dtype=bool)
    distances = centroid_distances(points)
    if np.all(distances == distances[0]):
        return np.ones(len(points), dtype=bool)
    _, _, threshold = distance_threshold(distances, std_ratio)
    return distances < threshold


def remove_outliers(cloud: PointCloud, k: int = 20, std_ratio: float = 2.0) -> int:
    """Remove points far from the cloud centroid, in place.

    Parameters
    ----------
    cloud : PointCloud
        Cloud to filter.  Colours and normals, when present, are
        filtered with the same mask.
    k : int, optional
        Minimum number of points required before filtering is applied.
        Clouds with fewer than `k` points are left untouched.  Default
        is 20.
    std_ratio : float, optional
        Number of standard deviations above the mean distance at which
        a point is rejected.  Default is 2.0.

    Returns
    -------
    int
        Number of points removed.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    n_before = len(cloud)
    if n_before == 0 or n_before < k:
        return 0

    mask = outlier_mask(cloud.points, std_ratio)
    cloud.select(mask)
    return n_before - len(cloud)
