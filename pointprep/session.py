"""Processing session: the boundary between the application and the core.

A `ProcessingSession` owns the currently loaded point cloud and a
status record describing the most recent processing run.  Each of the
two is guarded by its own lock, so a UI thread can poll `status()`
while another thread is busy inside `process()`.

Typical use::

    with ProcessingSession() as session:
        info = session.load("scan.ply")
        count = session.process(ProcessOptions(voxel_size=0.05,
                                               remove_outliers=True))
"""

import math
import numbers
import threading
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .common.cloud_export import export_cloud
from .common.errors import NoCloudLoadedError, PointCloudError
from .common.ply_io import read_ascii_ply
from .common.point_cloud import Bounds, PointCloud
from .preprocessing.outlier_filter import remove_outliers
from .preprocessing.voxel_filter import voxel_downsample
from .utils.config import load_config
from .utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_OUTLIER_K = 20
DEFAULT_OUTLIER_STD = 2.0


def _as_float(value: Any, name: str) -> float:
    # bool is a numbers.Real subclass
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return float(value)


@dataclass
class LoadResult:
    """Summary of a freshly loaded point cloud."""

    point_count: int
    """Number of points read."""

    has_colors: bool
    """Whether the cloud carries per-point colours."""

    bounds: Bounds
    """Bounding box as ((x_min, y_min, z_min), (x_max, y_max, z_max))."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ProcessingStatus:
    """Bookkeeping of the most recent processing run."""

    stage: str = ""
    progress: float = 0.0
    point_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ProcessOptions:
    """Which cleanup steps to run and with which parameters."""

    voxel_size: Optional[float] = None
    """Voxel edge length; downsampling is skipped when None."""

    remove_outliers: bool = False
    """Whether to run outlier removal after downsampling."""

    outlier_k: Optional[int] = None
    """Minimum cloud size for outlier removal (default 20)."""

    outlier_std: Optional[float] = None
    """Standard deviation multiplier (default 2.0)."""

    def __post_init__(self):
        if not isinstance(self.remove_outliers, bool):
            raise ValueError(f"remove_outliers must be true or false, got {self.remove_outliers!r}")
        if self.voxel_size is not None:
            self.voxel_size = _as_float(self.voxel_size, "voxel_size")
            if not (math.isfinite(self.voxel_size) and self.voxel_size > 0):
                raise ValueError(f"voxel_size must be positive, got {self.voxel_size}")
        if self.outlier_k is not None:
            if isinstance(self.outlier_k, bool) or not isinstance(self.outlier_k, numbers.Integral):
                raise ValueError(f"outlier_k must be an integer, got {self.outlier_k!r}")
            self.outlier_k = int(self.outlier_k)
            if self.outlier_k < 0:
                raise ValueError(f"outlier_k must be non-negative, got {self.outlier_k}")
        if self.outlier_std is not None:
            self.outlier_std = _as_float(self.outlier_std, "outlier_std")

    @property
    def k(self) -> int:
        return DEFAULT_OUTLIER_K if self.outlier_k is None else self.outlier_k

    @property
    def std_ratio(self) -> float:
        return DEFAULT_OUTLIER_STD if self.outlier_std is None else self.outlier_std

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessOptions":
        """Build options from a mapping, e.g. a parsed configuration file.

        The options may sit at the top level or under a ``processing``
        key.  Unknown keys raise `ValueError`.
        """
        if "processing" in data:
            data = data["processing"] or {}
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown processing options: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_config(cls, path: Union[str, Path]) -> "ProcessOptions":
        """Load options from a YAML file; a missing file gives the defaults."""
        return cls.from_dict(load_config(path))

    def merged(self, **overrides: Any) -> "ProcessOptions":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


class ProcessingSession:
    """Holds the current point cloud and processing status.

    The session is created when the application starts and closed when
    it shuts down.  The filtering functions it calls are stateless; all
    mutable state lives here.
    """

    def __init__(self):
        self._cloud: Optional[PointCloud] = None
        self._cloud_lock = threading.Lock()
        self._status = ProcessingStatus()
        self._status_lock = threading.Lock()

    def __enter__(self) -> "ProcessingSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Drop the loaded cloud and reset the status."""
        with self._cloud_lock:
            self._cloud = None
        with self._status_lock:
            self._status = ProcessingStatus()

    @property
    def has_cloud(self) -> bool:
        with self._cloud_lock:
            return self._cloud is not None

    def load(self, path: Union[str, Path]) -> LoadResult:
        """Read a point cloud file and make it the current cloud.

        Parameters
        ----------
        path : str or Path
            ASCII PLY file to load.

        Returns
        -------
        LoadResult
            Point count, colour flag and bounding box of the new cloud.

        Raises
        ------
        PointCloudError
            If the file cannot be read or parsed.  The previously loaded
            cloud, if any, is kept.
        """
        try:
            cloud = read_ascii_ply(path)
        except PointCloudError as e:
            logger.error(f"Failed to load {path}: {e}")
            raise

        result = LoadResult(
            point_count=len(cloud),
            has_colors=cloud.has_colors,
            bounds=cloud.bounds(),
        )
        with self._cloud_lock:
            self._cloud = cloud
        logger.info(
            f"Loaded {result.point_count} points from {path} "
            f"(colors: {'yes' if result.has_colors else 'no'})"
        )
        return result

    def process(self, options: Optional[ProcessOptions] = None) -> int:
        """Run the requested cleanup steps on the current cloud.

        Downsampling runs first (when `voxel_size` is set), then outlier
        removal (when enabled).

        Returns
        -------
        int
            Number of points left in the cloud.

        Raises
        ------
        NoCloudLoadedError
            If no cloud has been loaded.
        ValueError
            If a step rejects its parameters.  The status stage is then
            ``"Failed"`` and holds the size of the cloud as left behind.
        """
        options = options or ProcessOptions()
        with self._cloud_lock:
            cloud = self._cloud
            if cloud is None:
                raise NoCloudLoadedError()

            self._set_status("Processing", 0.0)
            n_original = len(cloud)

            try:
                if options.voxel_size is not None:
                    removed = voxel_downsample(cloud, options.voxel_size)
                    logger.info(
                        f"Voxel downsample ({options.voxel_size}): "
                        f"{len(cloud)}/{n_original} points retained, {removed} removed"
                    )

                if options.remove_outliers:
                    removed = remove_outliers(cloud, options.k, options.std_ratio)
                    logger.info(
                        f"Outlier removal (k={options.k}, std={options.std_ratio}): "
                        f"{removed} points removed"
                    )
            except ValueError as e:
                self._set_status("Failed", 0.0, len(cloud))
                logger.error(f"Processing failed: {e}")
                raise

            point_count = len(cloud)
            self._set_status("Complete", 1.0, point_count)

        logger.info(f"Processing complete: {point_count}/{n_original} points")
        return point_count

    def status(self) -> ProcessingStatus:
        """Return a snapshot of the processing status."""
        with self._status_lock:
            return replace(self._status)

    def export(self, path: Union[str, Path]) -> Path:
        """Write the current cloud to `path` (.ply, .csv or .parquet)."""
        with self._cloud_lock:
            if self._cloud is None:
                raise NoCloudLoadedError()
            written = export_cloud(self._cloud, path)
        logger.info(f"Point cloud exported to {written}")
        return written

    def _set_status(self, stage: str, progress: float, point_count: Optional[int] = None) -> None:
        with self._status_lock:
            self._status.stage = stage
            self._status.progress = progress
            if point_count is not None:
                self._status.point_count = point_count
