"""Exceptions raised by the analysis pipeline."""
from __future__ import annotations

from pathlib import Path
from typing import Union


class TypeSafetyAuditError(Exception):
    """Base class for analysis failures."""


class UnitAnalysisError(TypeSafetyAuditError):
    """A source unit could not be parsed or traversed."""

    def __init__(self, unit_path: str, cause: BaseException) -> None:
        super().__init__(f"Unable to analyse {unit_path}: {cause}")
        self.unit_path = unit_path
        self.cause = cause

    def __reduce__(self):
        # keeps the exception picklable across worker processes
        return (type(self), (self.unit_path, self.cause))


class ReportWriteError(TypeSafetyAuditError):
    """A report artifact could not be written."""

    def __init__(self, path: Union[str, Path], cause: BaseException) -> None:
        super().__init__(f"Unable to write report {path}: {cause}")
        self.path = Path(path)
        self.cause = cause
