"""pointprep: load ASCII PLY point clouds and clean them up.

The package is split into a small core and a boundary layer:

- `pointprep.common` holds the `PointCloud` model, PLY input/output,
  tabular export and the error types.
- `pointprep.preprocessing` holds the voxel downsampling and outlier
  removal filters, which mutate a cloud in place.
- `pointprep.session` holds `ProcessingSession`, the stateful object an
  application talks to (load / process / status).
"""

from .common import (
    CloudParseError,
    CloudReadError,
    NoCloudLoadedError,
    PointCloud,
    PointCloudError,
    read_ascii_ply,
    write_ascii_ply,
)
from .preprocessing import remove_outliers, voxel_downsample
from .session import LoadResult, ProcessingSession, ProcessingStatus, ProcessOptions

__version__ = "0.1.0"

__all__ = [
    "PointCloud",
    "PointCloudError",
    "CloudReadError",
    "CloudParseError",
    "NoCloudLoadedError",
    "read_ascii_ply",
    "write_ascii_ply",
    "voxel_downsample",
    "remove_outliers",
    "ProcessingSession",
    "ProcessOptions",
    "ProcessingStatus",
    "LoadResult",
]
