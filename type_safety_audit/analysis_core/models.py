"""Data models for findings, per-unit results and run statistics."""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional, Tuple

from type_safety_audit.analysis_core.config import SEVERITY_ERROR, SEVERITY_INFO, SEVERITY_WARNING


@dataclass(frozen=True)
class Finding:
    """Represents a single type-safety issue at a source position."""

    unit_path: str
    line: int
    column: int
    severity: str  # error, warning, info
    code: str
    message: str
    suggested_fix: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        """Convert finding to the structured report issue format."""
        return {
            "filePath": self.unit_path,
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "severity": self.severity,
            "code": self.code,
        }


@dataclass(frozen=True)
class SeverityCounts:
    """Finding counts split by severity."""

    errors: int = 0
    warnings: int = 0
    info: int = 0

    @property
    def total(self) -> int:
        return self.errors + self.warnings + self.info

    def add(self, severity: str) -> "SeverityCounts":
        """Return a copy with one more finding of ``severity``."""
        if severity == SEVERITY_ERROR:
            return replace(self, errors=self.errors + 1)
        if severity == SEVERITY_WARNING:
            return replace(self, warnings=self.warnings + 1)
        if severity == SEVERITY_INFO:
            return replace(self, info=self.info + 1)
        raise ValueError(f"Unknown severity: {severity!r}")

    def to_dict(self) -> Dict[str, int]:
        return {"errors": self.errors, "warnings": self.warnings, "info": self.info}


@dataclass(frozen=True)
class PerUnitResult:
    """Ordered findings produced for one source unit."""

    unit_path: str
    findings: Tuple[Finding, ...] = ()

    @property
    def has_issues(self) -> bool:
        return bool(self.findings)


@dataclass(frozen=True)
class RunStatistics:
    """Aggregate statistics over all analysed units of a run."""

    total_units: int
    units_with_issues: int
    counts_by_severity: SeverityCounts
    top_codes: Tuple[Tuple[str, int], ...]
    per_unit_counts: Tuple[Tuple[str, SeverityCounts], ...]

    @property
    def total_findings(self) -> int:
        return self.counts_by_severity.total


@dataclass(frozen=True)
class Run:
    """Write-once result of a complete analysis run."""

    timestamp: str
    statistics: RunStatistics
    findings: Tuple[Finding, ...]

    @property
    def passed(self) -> bool:
        """The gate passes when no error-severity finding was recorded."""
        return self.statistics.counts_by_severity.errors == 0


@dataclass(frozen=True)
class SourceUnit:
    """A discovered source file and its stable display identifier."""

    path: Path
    unit_path: str
