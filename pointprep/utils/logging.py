"""Logging setup shared by the session and the command line.

Wraps Python's standard logging module so that every pointprep
logger writes the same ``[time] [LEVEL] name: message`` lines to
stderr.  The handler lives on the package logger; module loggers
propagate to it, so the level can be changed in one place.  The
filtering code itself does not log; callers report what happened.
"""

import logging
from typing import Union

PACKAGE_LOGGER = "pointprep"


def get_logger(name: str) -> logging.Logger:
    """Return a logger whose records go through the package handler."""
    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='[%(asctime)s] [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return logging.getLogger(name)


def set_log_level(level: Union[int, str]) -> None:
    """Set the level of every pointprep logger."""
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
