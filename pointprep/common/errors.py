"""Exceptions raised while loading and processing point clouds.

All errors derive from `PointCloudError` so that a caller presenting
failures to a user can catch a single type.  The message of each
exception is the human readable description of the failure.
"""

from typing import Optional


class PointCloudError(Exception):
    """Base class for point cloud failures."""


class CloudReadError(PointCloudError):
    """The point cloud file could not be opened or read completely."""


class CloudParseError(CloudReadError):
    """The point cloud file was read but its content is malformed."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class NoCloudLoadedError(PointCloudError):
    """An operation needed a loaded point cloud but none was present."""

    def __init__(self, message: str = "no point cloud loaded"):
        super().__init__(message)
