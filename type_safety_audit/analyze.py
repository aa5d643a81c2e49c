#!/usr/bin/env python3
"""Type-safety audit for gradually-typed Python codebases.

Walks the syntax tree of every discovered module and flags patterns that
weaken static typing: implicit ``Any`` bindings, ``cast()`` calls, non-null
asserts, primitive coercions, missing annotations and unchecked indexing.
Writes a JSON report (always) and a Markdown report (outside CI mode), prints
a short summary and, in CI mode, fails the process when any error-severity
finding was recorded.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from type_safety_audit.analysis_core.aggregator import aggregate
from type_safety_audit.analysis_core.config import (
    DEFAULT_JSON_REPORT,
    DEFAULT_MARKDOWN_REPORT,
    ENV_JSON_REPORT,
    ENV_MARKDOWN_REPORT,
    ENV_TARGET_FILE,
    ISSUE_CODES,
)
from type_safety_audit.analysis_core.detectors.registry import build_engine
from type_safety_audit.analysis_core.discovery import collect_targets, discover_units
from type_safety_audit.analysis_core.filters import filter_units
from type_safety_audit.analysis_core.gate import EXIT_FAILURE, gate_exit_code
from type_safety_audit.analysis_core.models import PerUnitResult
from type_safety_audit.analysis_core.reporting.compact import log_findings
from type_safety_audit.analysis_core.reporting.formatters import ColoredFormatter, Colors, Emojis
from type_safety_audit.analysis_core.reporting.json_output import write_structured_report
from type_safety_audit.analysis_core.reporting.markdown import write_markdown_report
from type_safety_audit.analysis_core.reporting.summary import print_summary
from type_safety_audit.analysis_core.runner import UnitOutcome, analyze_units
from type_safety_audit.analysis_core.utils import resolve_report_path

LOGGER = logging.getLogger("type-safety")

FATAL_ERROR_PREFIX = "Error running type safety analysis:"


def setup_logging(log_dir: Path, level: str, use_color: bool = False) -> Path:
    """Initialise console and file logging for the current execution."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"type_safety_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    for handler in list(LOGGER.handlers):
        handler.close()
    LOGGER.handlers.clear()
    LOGGER.setLevel(numeric_level)
    LOGGER.propagate = False

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    LOGGER.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    formatter_class = ColoredFormatter if use_color else logging.Formatter
    console_handler.setFormatter(formatter_class("%(levelname)s: %(message)s"))
    LOGGER.addHandler(console_handler)

    return log_path


def configure_output(no_color: bool) -> bool:
    """Enable or disable ANSI colours and emojis for this run."""
    use_color = not no_color and Colors.supports_color()
    if use_color:
        Colors.enable()
        Emojis.enable()
    else:
        Colors.disable()
        Emojis.disable()
    return use_color


def resolve_target_paths(paths: Sequence[str]) -> List[str]:
    """A single-file override from the environment replaces positional paths."""
    override = os.environ.get(ENV_TARGET_FILE)
    if override:
        LOGGER.info("Restricting analysis to %s (from %s)", override, ENV_TARGET_FILE)
        return [override]
    return list(paths)


def settle_outcomes(outcomes: Sequence[UnitOutcome], skip_errors: bool) -> List[PerUnitResult]:
    """Split unit outcomes into results, skipping or raising on failures."""
    results: List[PerUnitResult] = []
    failures = []
    for outcome in outcomes:
        if isinstance(outcome, PerUnitResult):
            results.append(outcome)
        else:
            failures.append(outcome)

    if not failures:
        return results
    if skip_errors:
        for failure in failures:
            LOGGER.warning("Skipping unit: %s", failure)
        LOGGER.warning("%d unit(s) could not be analysed and were skipped.", len(failures))
        return results
    for failure in failures:
        LOGGER.error("%s", failure)
    raise failures[0]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Flag type-safety weaknesses in Python source trees.")
    parser.add_argument(
        "paths",
        nargs="*",
        default=["."],
        help="Files or directories to analyse (default: current directory).",
    )
    parser.add_argument(
        "--ci",
        action="store_true",
        help="CI mode: skip the Markdown report and exit 1 when any error-severity issue is found.",
    )
    parser.add_argument(
        "--json-report",
        help=f"Structured report path (default: ${ENV_JSON_REPORT} or {DEFAULT_JSON_REPORT}).",
    )
    parser.add_argument(
        "--markdown-report",
        help=f"Narrative report path (default: ${ENV_MARKDOWN_REPORT} or {DEFAULT_MARKDOWN_REPORT}).",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Skip units whose path or file name matches GLOB (repeatable).",
    )
    parser.add_argument(
        "--disable",
        action="append",
        default=[],
        choices=ISSUE_CODES,
        metavar="CODE",
        help=f"Turn off one rule (repeatable). Codes: {', '.join(ISSUE_CODES)}.",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Worker processes for analysis; 0 uses one per CPU (default: 1).",
    )
    parser.add_argument(
        "--skip-errors",
        action="store_true",
        help="Log and skip units that cannot be parsed instead of aborting the run.",
    )
    parser.add_argument(
        "--list-findings",
        action="store_true",
        help="Log every finding to the console.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable coloured console output.")
    parser.add_argument(
        "--log-dir",
        default="logs",
        help="Directory where timestamped analysis logs are written (default: logs).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console/log verbosity (default: INFO).",
    )
    return parser.parse_args(argv)


def execute(args: argparse.Namespace) -> int:
    json_path = resolve_report_path(args.json_report, ENV_JSON_REPORT, DEFAULT_JSON_REPORT)
    markdown_path = resolve_report_path(args.markdown_report, ENV_MARKDOWN_REPORT, DEFAULT_MARKDOWN_REPORT)

    targets = collect_targets(resolve_target_paths(args.paths))
    if not targets:
        LOGGER.warning("No valid targets to analyse.")

    units = filter_units(discover_units(targets, root=Path.cwd()), args.exclude)
    LOGGER.info("Analysing %d source unit(s)", len(units))

    engine = build_engine(args.disable)
    results = settle_outcomes(analyze_units(engine, units, args.jobs), args.skip_errors)
    run_record = aggregate(results)

    if args.list_findings:
        log_findings(run_record.findings)

    write_structured_report(run_record, json_path)
    if not args.ci:
        write_markdown_report(run_record, markdown_path)

    print_summary(run_record)
    return gate_exit_code(run_record, args.ci)


def run(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        use_color = configure_output(args.no_color)
        log_path = setup_logging(Path(args.log_dir).expanduser().resolve(), args.log_level, use_color)
    except Exception as exc:  # noqa: BLE001 - no log file to write to yet
        print(f"{FATAL_ERROR_PREFIX} {exc}", file=sys.stderr)
        return EXIT_FAILURE
    LOGGER.info("Detailed execution log: %s", log_path)

    try:
        return execute(args)
    except Exception as exc:  # noqa: BLE001 - every fault fails the run with one message
        LOGGER.exception("%s %s", FATAL_ERROR_PREFIX, exc)
        return EXIT_FAILURE


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
