"""Narrative Markdown report for humans."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from type_safety_audit.analysis_core.config import RECOMMENDATIONS, SEVERITY_ERROR, TOP_UNITS_LIMIT
from type_safety_audit.analysis_core.models import Run
from type_safety_audit.analysis_core.reporting.json_output import write_text_report

LOGGER = logging.getLogger("type-safety")


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _overview(run: Run) -> List[str]:
    stats = run.statistics
    counts = stats.counts_by_severity
    return [
        "## Overview",
        "",
        f"- **Generated:** {run.timestamp}",
        f"- **Total files analyzed:** {stats.total_units}",
        f"- **Files with issues:** {stats.units_with_issues}",
        f"- **Total issues:** {stats.total_findings}",
        f"- **Errors:** {counts.errors}",
        f"- **Warnings:** {counts.warnings}",
        f"- **Info:** {counts.info}",
        f"- **Status:** {'PASSED' if run.passed else 'FAILED'}",
        "",
    ]


def _critical_issues(run: Run) -> List[str]:
    lines = ["## Critical Issues", ""]
    errors = [finding for finding in run.findings if finding.severity == SEVERITY_ERROR]
    if not errors:
        return lines + ["No critical issues found.", ""]
    lines += ["| File | Line | Column | Code | Message |", "| --- | --- | --- | --- | --- |"]
    for finding in errors:
        lines.append(
            f"| {_cell(finding.unit_path)} | {finding.line} | {finding.column} "
            f"| {finding.code} | {_cell(finding.message)} |"
        )
    return lines + [""]


def _issue_patterns(run: Run) -> List[str]:
    lines = ["## Common Issue Patterns", ""]
    if not run.statistics.top_codes:
        return lines + ["No issues found.", ""]
    lines += ["| Code | Occurrences |", "| --- | --- |"]
    lines += [f"| {code} | {count} |" for code, count in run.statistics.top_codes]
    return lines + [""]


def _top_files(run: Run) -> List[str]:
    lines = ["## Files with Most Issues", ""]
    top = run.statistics.per_unit_counts[:TOP_UNITS_LIMIT]
    if not top:
        return lines + ["No files with issues.", ""]
    lines += ["| File | Total | Errors | Warnings | Info |", "| --- | --- | --- | --- | --- |"]
    for unit_path, counts in top:
        lines.append(
            f"| {_cell(unit_path)} | {counts.total} | {counts.errors} | {counts.warnings} | {counts.info} |"
        )
    return lines + [""]


def _recommendations() -> List[str]:
    lines = ["## Recommendations", ""]
    lines += [f"{index}. {text}" for index, text in enumerate(RECOMMENDATIONS, start=1)]
    return lines + [""]


def render_markdown_report(run: Run) -> str:
    """Render the narrative report; a pure function of the run."""
    lines = ["# Type Safety Report", ""]
    lines += _overview(run)
    lines += _critical_issues(run)
    lines += _issue_patterns(run)
    lines += _top_files(run)
    lines += _recommendations()
    return "\n".join(lines)


def write_markdown_report(run: Run, path: Path) -> Path:
    write_text_report(path, render_markdown_report(run))
    LOGGER.info("Markdown report written to %s", path)
    return path
