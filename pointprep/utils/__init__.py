"""Utility functions for the point cloud pipeline."""

from .logging import get_logger, set_log_level
from .config import load_config

__all__ = ["get_logger", "set_log_level", "load_config"]
