"""Point cloud data model, file input/output and errors."""

from .errors import CloudParseError, CloudReadError, NoCloudLoadedError, PointCloudError
from .point_cloud import PointCloud
from .ply_io import read_ascii_ply, write_ascii_ply
from .cloud_export import cloud_to_dataframe, export_cloud

__all__ = [
    "PointCloud",
    "PointCloudError",
    "CloudReadError",
    "CloudParseError",
    "NoCloudLoadedError",
    "read_ascii_ply",
    "write_ascii_ply",
    "cloud_to_dataframe",
    "export_cloud",
]
