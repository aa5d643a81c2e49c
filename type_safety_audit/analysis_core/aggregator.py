"""Fold per-unit results into run statistics."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from type_safety_audit.analysis_core.config import TOP_CODES_LIMIT
from type_safety_audit.analysis_core.models import Finding, PerUnitResult, Run, RunStatistics, SeverityCounts


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def count_severities(findings: Sequence[Finding]) -> SeverityCounts:
    counts = SeverityCounts()
    for finding in findings:
        counts = counts.add(finding.severity)
    return counts


def rank_codes(findings: Sequence[Finding], limit: int = TOP_CODES_LIMIT) -> Tuple[Tuple[str, int], ...]:
    """Count findings per code; most frequent first, ties by code name."""
    counter = Counter(finding.code for finding in findings)
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return tuple(ranked[:limit])


def compute_statistics(results: Sequence[PerUnitResult]) -> RunStatistics:
    """Derive run statistics; deterministic for a given ordered input."""
    findings: List[Finding] = [finding for result in results for finding in result.findings]
    per_unit = [
        (result.unit_path, count_severities(result.findings))
        for result in results
        if result.has_issues
    ]
    # sorted() is stable, so ties keep unit order
    per_unit.sort(key=lambda item: -item[1].total)
    return RunStatistics(
        total_units=len(results),
        units_with_issues=len(per_unit),
        counts_by_severity=count_severities(findings),
        top_codes=rank_codes(findings),
        per_unit_counts=tuple(per_unit),
    )


def aggregate(results: Sequence[PerUnitResult], timestamp: Optional[str] = None) -> Run:
    """Build the write-once run record from ordered per-unit results."""
    findings = tuple(finding for result in results for finding in result.findings)
    return Run(
        timestamp=timestamp or utc_timestamp(),
        statistics=compute_statistics(results),
        findings=findings,
    )
