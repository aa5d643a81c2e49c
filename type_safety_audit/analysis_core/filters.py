"""Path-based exclusion of dependency, generated and test units."""
from __future__ import annotations

import logging
from fnmatch import fnmatch
from pathlib import PurePosixPath
from typing import List, Optional, Sequence

from type_safety_audit.analysis_core.config import (
    DEPENDENCY_PATH_MARKERS,
    GENERATED_FILE_SUFFIXES,
    TEST_FILE_MARKER,
    TEST_FILE_NAMES,
    TEST_FILE_PREFIXES,
    TEST_FILE_SUFFIXES,
)
from type_safety_audit.analysis_core.models import SourceUnit

LOGGER = logging.getLogger("type-safety")


def exclusion_reason(unit_path: str, patterns: Sequence[str] = ()) -> Optional[str]:
    """Return why a unit is excluded, or None if it should be analysed."""
    path = PurePosixPath(unit_path.replace("\\", "/"))
    if any(part in DEPENDENCY_PATH_MARKERS for part in path.parts[:-1]):
        return "dependency"
    name = path.name
    if (
        name in TEST_FILE_NAMES
        or name.startswith(TEST_FILE_PREFIXES)
        or name.endswith(TEST_FILE_SUFFIXES)
        or TEST_FILE_MARKER in name
    ):
        return "test"
    if name.endswith(GENERATED_FILE_SUFFIXES):
        return "generated"
    for pattern in patterns:
        if fnmatch(path.as_posix(), pattern) or fnmatch(name, pattern):
            return f"pattern {pattern}"
    return None


def is_excluded(unit_path: str, patterns: Sequence[str] = ()) -> bool:
    return exclusion_reason(unit_path, patterns) is not None


def filter_units(units: Sequence[SourceUnit], patterns: Sequence[str] = ()) -> List[SourceUnit]:
    """Drop excluded units, keeping discovery order for the rest."""
    kept: List[SourceUnit] = []
    for unit in units:
        reason = exclusion_reason(unit.unit_path, patterns)
        if reason:
            LOGGER.debug("Excluding %s (%s)", unit.unit_path, reason)
            continue
        kept.append(unit)
    excluded = len(units) - len(kept)
    if excluded:
        LOGGER.info("Excluded %d of %d discovered unit(s)", excluded, len(units))
    return kept
