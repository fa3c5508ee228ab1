"""Utility functions for tinydb-migrator."""

import logging
import os
from pathlib import Path

from .constants import LOG_DATE_FORMAT, LOG_FORMAT


def ensure_dir(path: Path) -> Path:
    """
    Create directory if it doesn't exist.

    Args:
        path: Directory path to create

    Returns:
        The created/existing directory path
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def expand_path(path: str) -> Path:
    """
    Expand ~ and environment variables in path.

    Args:
        path: Path string to expand

    Returns:
        Expanded Path object
    """
    return Path(os.path.expanduser(os.path.expandvars(path))).resolve()


def configure_logging(verbose: bool) -> None:
    """
    Configure root logging for command line use.

    Args:
        verbose: Show debug messages instead of warnings only
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
