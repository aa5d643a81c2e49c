"""Utility functions for path handling."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

LOGGER = logging.getLogger("type-safety")


def resolve_relative_path(path: str, root: Optional[Path]) -> str:
    """Convert absolute path to a POSIX path relative to root, if possible."""
    if not root:
        return Path(path).as_posix()
    try:
        return Path(path).resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return Path(path).as_posix()


def resolve_report_path(cli_path: Optional[str], env_name: str, default: str) -> Path:
    """Pick a report location: CLI flag, then environment variable, then default."""
    if cli_path:
        source, value = "command line", cli_path
    elif os.environ.get(env_name):
        source, value = env_name, os.environ[env_name]
    else:
        source, value = "default", default
    path = Path(value).expanduser()
    LOGGER.debug("Report path %s (from %s)", path, source)
    return path
