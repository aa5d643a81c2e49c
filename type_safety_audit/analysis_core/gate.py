"""CI gate: map a run's outcome to a process exit status."""
from __future__ import annotations

import logging

from type_safety_audit.analysis_core.models import Run

LOGGER = logging.getLogger("type-safety")

EXIT_OK = 0
EXIT_FAILURE = 1


def gate_exit_code(run: Run, ci_mode: bool) -> int:
    """Return 1 in CI mode when the run recorded any error finding, else 0."""
    if run.passed:
        return EXIT_OK
    errors = run.statistics.counts_by_severity.errors
    if not ci_mode:
        LOGGER.debug("%d error finding(s); not gating outside CI mode", errors)
        return EXIT_OK
    LOGGER.error("Type safety gate failed: %d error finding(s)", errors)
    return EXIT_FAILURE
