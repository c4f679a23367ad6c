"""Reading and writing ASCII PLY point clouds.

Only the simple ASCII layout produced by scanning apps is supported:
a header terminated by ``end_header`` that declares the vertex count
via ``element vertex <N>`` and, optionally, colour properties, followed
by exactly N body lines ``x y z [r g b]``.  Anything else in the header
(format line, comments, other property declarations) is skipped.

Parsing is all-or-nothing: a malformed line raises before any
`PointCloud` is built, so callers never see a partial cloud.
"""

import re
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from .errors import CloudParseError, CloudReadError
from .point_cloud import PointCloud

_UNSIGNED = re.compile(r"\+?[0-9]+")
# plain decimal or exponent notation, plus inf / infinity / nan; no
# underscores, hex floats or other spellings Python's float() allows
_FLOAT = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)

PathLike = Union[str, Path]


def _parse_unsigned(token: str, what: str, line_number: int,
                     limit: Optional[int] = None) -> int:
    if not _UNSIGNED.fullmatch(token):
        raise CloudParseError(f"invalid {what} {token!r}", line_number)
    value = int(token)
    if limit is not None and value > limit:
        raise CloudParseError(f"{what} {token!r} out of range 0-{limit}", line_number)
    return value


def _parse_float(token: str, line_number: int) -> float:
    if not _FLOAT.fullmatch(token):
        raise CloudParseError(f"invalid coordinate {token!r}", line_number)
    return float(token)


def read_ascii_ply(path: PathLike) -> PointCloud:
    """Parse an ASCII PLY file into a `PointCloud`.

    Parameters
    ----------
    path : str or Path
        File to read.

    Returns
    -------
    PointCloud
        Cloud with points, colours if the header declares a ``red``
        property, and empty normals.

    Raises
    ------
    CloudReadError
        If the file cannot be opened or read, or ends before the header
        terminator or before all declared vertices were read.
    CloudParseError
        If the vertex count, a coordinate or a colour value is
        malformed, or a line declared with colour lacks colour values.
    """
    path = Path(path)
    vertex_count = 0
    has_color = False
    xyz: List[List[float]] = []
    rgb: List[List[int]] = []

    try:
        with open(path, "r", encoding="utf-8") as f:
            line_number = 0
            while True:
                line = f.readline()
                line_number += 1
                if not line:
                    raise CloudReadError(f"{path}: end of file reached before end_header")
                if line.startswith("element vertex"):
                    tokens = line.split()
                    if len(tokens) < 3:
                        raise CloudParseError("missing vertex count", line_number)
                    vertex_count = _parse_unsigned(tokens[2], "vertex count", line_number)
                if "red" in line:
                    has_color = True
                if line.strip() == "end_header":
                    break

            for i in range(vertex_count):
                line = f.readline()
                line_number += 1
                if not line:
                    raise CloudReadError(
                        f"{path}: unexpected end of file after {i} of {vertex_count} vertices"
                    )
                tokens = line.split()
                if len(tokens) < 3:
                    raise CloudParseError(
                        f"expected at least 3 values, got {len(tokens)}", line_number
                    )
                xyz.append([_parse_float(t, line_number) for t in tokens[:3]])
                if has_color:
                    if len(tokens) < 6:
                        raise CloudParseError(
                            "colour declared in header but missing on vertex line", line_number
                        )
                    rgb.append([
                        _parse_unsigned(t, "colour value", line_number, limit=255)
                        for t in tokens[3:6]
                    ])
    except UnicodeDecodeError as e:
        raise CloudReadError(f"{path}: {e}") from e
    except OSError as e:
        raise CloudReadError(f"{path}: {e.strerror or e}") from e

    cloud = PointCloud()
    if xyz:
        cloud.points = np.asarray(xyz, dtype=np.float64)
    if rgb:
        cloud.colors = np.asarray(rgb, dtype=np.uint8)
    return cloud


def write_ascii_ply(cloud: PointCloud, path: PathLike) -> None:
    """Write a cloud in the ASCII PLY layout understood by `read_ascii_ply`.

    Colour properties are declared only when the cloud carries colours.
    Normals are not written.
    """
    if not cloud.is_aligned():
        raise ValueError("colours/normals are not aligned with points")
    path = Path(path)

    header = [
        "ply",
        "format ascii 1.0",
        f"element vertex {len(cloud)}",
        "property float x",
        "property float y",
        "property float z",
    ]
    fmt = ["%.17g"] * 3
    data = cloud.points
    if cloud.has_colors:
        header += [
            "property uchar red",
            "property uchar green",
            "property uchar blue",
        ]
        fmt += ["%d"] * 3
        data = np.column_stack([cloud.points, cloud.colors.astype(np.float64)])
    header.append("end_header")

    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(header) + "\n")
        if len(cloud):
            np.savetxt(f, data, fmt=fmt)
