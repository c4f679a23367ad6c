"""In-memory point cloud model.

A `PointCloud` holds three index-aligned arrays: positions, optional
RGB colours and optional normals.  The optional arrays are either
empty or have exactly one row per point.  Filters never touch the
arrays directly; they go through `PointCloud.select` so that the same
selection is applied to every populated array.
"""

from dataclasses import dataclass, field
from typing import Tuple, Union

import numpy as np

Bounds = Tuple[Tuple[float, float, float], Tuple[float, float, float]]


def _empty_points() -> np.ndarray:
    return np.empty((0, 3), dtype=np.float64)


def _empty_colors() -> np.ndarray:
    return np.empty((0, 3), dtype=np.uint8)


@dataclass(eq=False)
class PointCloud:
    """Positions with optional per-point colours and normals."""

    points: np.ndarray = field(default_factory=_empty_points)
    """Array of shape (N, 3) with XYZ coordinates."""

    colors: np.ndarray = field(default_factory=_empty_colors)
    """Array of shape (N, 3) with RGB bytes, or shape (0, 3)."""

    normals: np.ndarray = field(default_factory=_empty_points)
    """Array of shape (N, 3) with normal vectors, or shape (0, 3)."""

    def __len__(self) -> int:
        return len(self.points)

    @property
    def has_colors(self) -> bool:
        return len(self.colors) > 0

    @property
    def has_normals(self) -> bool:
        return len(self.normals) > 0

    def is_aligned(self) -> bool:
        """Return True if colours and normals are empty or match the points."""
        n = len(self.points)
        return all(len(arr) in (0, n) for arr in (self.colors, self.normals))

    def bounds(self) -> Bounds:
        """Compute the axis-aligned bounding box.

        Returns
        -------
        tuple
            ``((x_min, y_min, z_min), (x_max, y_max, z_max))``.  An empty
            cloud yields two zero vectors.
        """
        if len(self.points) == 0:
            return (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)
        mins = self.points.min(axis=0)
        maxs = self.points.max(axis=0)
        return (
            (float(mins[0]), float(mins[1]), float(mins[2])),
            (float(maxs[0]), float(maxs[1]), float(maxs[2])),
        )

    def select(self, selection: Union[np.ndarray, list]) -> None:
        """Keep only the selected points, in place.

        Parameters
        ----------
        selection : numpy.ndarray or list
            Either a boolean mask of length N or an array of integer
            indices.  Indices may reorder the points.  The identical
            selection is applied to colours and normals when they are
            populated.
        """
        selection = np.asarray(selection)
        if selection.dtype != bool:
            selection = selection.astype(np.intp)
        self.points = self.points[selection]
        if self.has_colors:
            self.colors = self.colors[selection]
        if self.has_normals:
            self.normals = self.normals[selection]

    def copy(self) -> "PointCloud":
        """Return a deep copy of the cloud."""
        return PointCloud(
            points=self.points.copy(),
            colors=self.colors.copy(),
            normals=self.normals.copy(),
        )
