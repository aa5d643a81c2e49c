"""Plain stdout summary printed at the end of every run."""
from __future__ import annotations

from typing import List

from type_safety_audit.analysis_core.models import Run


def summary_lines(run: Run) -> List[str]:
    stats = run.statistics
    counts = stats.counts_by_severity
    return [
        "Type Safety Analysis Summary:",
        f"Total files analyzed: {stats.total_units}",
        f"Files with issues: {stats.units_with_issues}",
        f"Total issues: {stats.total_findings}",
        f"  - Errors: {counts.errors}",
        f"  - Warnings: {counts.warnings}",
        f"  - Info: {counts.info}",
    ]


def print_summary(run: Run) -> None:
    """Print the summary block to stdout, uncoloured so it stays parseable."""
    print()
    for line in summary_lines(run):
        print(line)
