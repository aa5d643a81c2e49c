"""Console listing of findings through the logger."""
from __future__ import annotations

import logging
from typing import Sequence

from type_safety_audit.analysis_core.config import SEVERITY_ERROR, SEVERITY_WARNING
from type_safety_audit.analysis_core.models import Finding
from type_safety_audit.analysis_core.reporting.formatters import Colors, Emojis, severity_color, severity_emoji

LOGGER = logging.getLogger("type-safety")


def log_findings(findings: Sequence[Finding]) -> None:
    """Log each finding as ``path:line:col [CODE] message``."""
    if not findings:
        LOGGER.info("%s No type safety issues detected.", Emojis.get(Emojis.CLEAN))
        return

    for finding in findings:
        location = f"{finding.unit_path}:{finding.line}:{finding.column}"
        code = Colors.colorize(f"[{finding.code}]", severity_color(finding.severity))
        line = f"{severity_emoji(finding.severity)} {location} {code} {finding.message}"
        if finding.suggested_fix:
            line = f"{line} -> {finding.suggested_fix}"
        if finding.severity == SEVERITY_ERROR:
            LOGGER.error(line)
        elif finding.severity == SEVERITY_WARNING:
            LOGGER.warning(line)
        else:
            LOGGER.info(line)
