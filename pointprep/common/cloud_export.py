"""Export point clouds to files.

Clouds can be written back as ASCII PLY or flattened into a table with
one row per point for analysis tools.  Tables are written as CSV or
Parquet depending on the file suffix.
"""

from pathlib import Path
from typing import Union

import pandas as pd

from .ply_io import write_ascii_ply
from .point_cloud import PointCloud


def cloud_to_dataframe(cloud: PointCloud) -> pd.DataFrame:
    """Convert a cloud to a DataFrame.

    Parameters
    ----------
    cloud : PointCloud
        Cloud to convert.  Colours and normals must be empty or have
        one row per point.

    Returns
    -------
    pandas.DataFrame
        Columns ``x, y, z``, followed by ``r, g, b`` when colours are
        present and ``nx, ny, nz`` when normals are present.
    """
    if not cloud.is_aligned():
        raise ValueError("colours/normals are not aligned with points")

    df = pd.DataFrame(cloud.points, columns=["x", "y", "z"])
    if cloud.has_colors:
        for i, name in enumerate(["r", "g", "b"]):
            df[name] = cloud.colors[:, i]
    if cloud.has_normals:
        for i, name in enumerate(["nx", "ny", "nz"]):
            df[name] = cloud.normals[:, i]
    return df


def export_cloud(cloud: PointCloud, path: Union[str, Path]) -> Path:
    """Write a cloud to `path`, choosing the format from the suffix.

    Supported suffixes are ``.ply``, ``.csv`` and ``.parquet``.

    Returns
    -------
    Path
        The path written.
    """
    path = Path(path)
    ext = path.suffix.lower()

    if ext == ".ply":
        write_ascii_ply(cloud, path)
    elif ext == ".csv":
        cloud_to_dataframe(cloud).to_csv(path, index=False)
    elif ext == ".parquet":
        cloud_to_dataframe(cloud).to_parquet(path, index=False)
    else:
        raise ValueError(f"unsupported export format: {ext or path.name}")
    return path
