"""Source unit discovery over files and directory trees."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from type_safety_audit.analysis_core.config import SKIPPED_WALK_DIRS, SOURCE_FILE_EXTENSIONS
from type_safety_audit.analysis_core.models import SourceUnit
from type_safety_audit.analysis_core.utils import resolve_relative_path

LOGGER = logging.getLogger("type-safety")


def safe_walk(root: Path) -> Iterator[Tuple[Path, List[str], List[str]]]:
    """Walk a directory tree in sorted order, logging unreadable directories."""
    def onerror(exc: OSError) -> None:
        LOGGER.warning("Unable to access directory %s: %s", exc.filename or root, exc)

    try:
        for dirpath, dirnames, filenames in os.walk(
            root,
            topdown=True,
            onerror=onerror,
            followlinks=False,
        ):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_WALK_DIRS)
            yield Path(dirpath), dirnames, sorted(filenames)
    except (OSError, InterruptedError) as exc:  # noqa: PERF203 - want explicit handling
        LOGGER.warning("Traversal aborted in %s: %s", root, exc)


def collect_targets(paths: Sequence[str]) -> List[Path]:
    """Collect and validate analysis target paths."""
    resolved: List[Path] = []
    for raw in paths:
        path = Path(raw).expanduser().resolve()
        if not path.exists():
            LOGGER.warning("Path %s does not exist; skipping.", path)
            continue
        resolved.append(path)
    return resolved


def is_source_file(path: Path) -> bool:
    return path.suffix in SOURCE_FILE_EXTENSIONS


def discover_units(targets: Sequence[Path], root: Optional[Path] = None) -> List[SourceUnit]:
    """Expand targets into source units, in a deterministic order without duplicates."""
    units: List[SourceUnit] = []
    seen = set()

    def add(path: Path) -> None:
        key = path.resolve()
        if key in seen:
            return
        seen.add(key)
        units.append(SourceUnit(path=path, unit_path=resolve_relative_path(str(path), root)))

    for target in targets:
        if target.is_file():
            if is_source_file(target):
                add(target)
            else:
                LOGGER.debug("Skipping non-source file %s", target)
            continue
        for current_dir, _dirnames, filenames in safe_walk(target):
            for filename in filenames:
                file_path = current_dir / filename
                if is_source_file(file_path):
                    add(file_path)

    LOGGER.debug("Discovered %d source unit(s)", len(units))
    return units
