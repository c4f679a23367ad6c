"""Preprocessing package.

Filters that clean a freshly loaded point cloud: voxel grid
downsampling to remove duplicate samples and distance based outlier
removal to drop stray points.  Both operate in place on a
`PointCloud` and keep colours and normals aligned with the points.
"""

from .voxel_filter import voxel_downsample, voxel_keys
from .outlier_filter import remove_outliers, outlier_mask, centroid_distances, distance_threshold

__all__ = [
    "voxel_downsample",
    "voxel_keys",
    "remove_outliers",
    "outlier_mask",
    "centroid_distances",
    "distance_threshold",
]
