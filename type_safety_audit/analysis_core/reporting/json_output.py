"""Structured JSON report."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict

from type_safety_audit.analysis_core.errors import ReportWriteError
from type_safety_audit.analysis_core.models import Run

LOGGER = logging.getLogger("type-safety")


def build_structured_report(run: Run) -> Dict[str, object]:
    """Convert a run into the machine-readable report document."""
    stats = run.statistics
    return {
        "timestamp": run.timestamp,
        "totalFiles": stats.total_units,
        "filesWithIssues": stats.units_with_issues,
        "issues": [finding.to_dict() for finding in run.findings],
        "summary": stats.counts_by_severity.to_dict(),
        "fileStats": {
            unit_path: counts.to_dict()
            for unit_path, counts in sorted(stats.per_unit_counts, key=lambda item: item[0])
        },
    }


def write_text_report(path: Path, content: str) -> Path:
    """Write a report file, creating parent directories first."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ReportWriteError(path, exc) from exc
    return path


def write_structured_report(run: Run, path: Path) -> Path:
    """Serialise the run to ``path`` as indented JSON."""
    content = json.dumps(build_structured_report(run), indent=2) + "\n"
    write_text_report(path, content)
    LOGGER.info("Structured report written to %s", path)
    return path
