import json
import re

import pytest

from type_safety_audit.analysis_core.aggregator import aggregate, compute_statistics, rank_codes
from type_safety_audit.analysis_core.gate import gate_exit_code
from type_safety_audit.analysis_core.models import Finding, PerUnitResult, SeverityCounts
from type_safety_audit.analysis_core.reporting.json_output import build_structured_report


def _finding(unit: str, code: str, severity: str, line: int = 1) -> Finding:
    return Finding(unit_path=unit, line=line, column=1, severity=severity, code=code, message=f"{code} in {unit}")


def _results():
    return [
        PerUnitResult("a.py", (
            _finding("a.py", "UNSAFE-COERCION", "error"),
            _finding("a.py", "MISSING-RETURN-TYPE", "warning", 2),
        )),
        PerUnitResult("clean.py", ()),
        PerUnitResult("b.py", (
            _finding("b.py", "MISSING-RETURN-TYPE", "warning"),
            _finding("b.py", "MISSING-PARAM-TYPE", "warning", 2),
            _finding("b.py", "UNCHECKED-INDEX-ACCESS", "info", 3),
        )),
        PerUnitResult("c.py", (
            _finding("c.py", "TYPE-ASSERTION", "info"),
            _finding("c.py", "MISSING-PARAM-TYPE", "warning", 2),
        )),
    ]


def test_statistics_conserve_finding_counts() -> None:
    stats = compute_statistics(_results())
    assert stats.total_units == 4
    assert stats.units_with_issues == 3
    assert stats.counts_by_severity == SeverityCounts(errors=1, warnings=4, info=2)
    assert stats.total_findings == 7
    assert sum(counts.total for _unit, counts in stats.per_unit_counts) == 7
    assert sum(count for _code, count in stats.top_codes) == 7


def test_per_unit_counts_sorted_by_total_with_stable_ties() -> None:
    stats = compute_statistics(_results())
    assert [unit for unit, _counts in stats.per_unit_counts] == ["b.py", "a.py", "c.py"]
    assert dict(stats.per_unit_counts)["a.py"] == SeverityCounts(errors=1, warnings=1, info=0)


def test_top_codes_break_ties_by_code_name() -> None:
    stats = compute_statistics(_results())
    assert stats.top_codes == (
        ("MISSING-PARAM-TYPE", 2),
        ("MISSING-RETURN-TYPE", 2),
        ("TYPE-ASSERTION", 1),
        ("UNCHECKED-INDEX-ACCESS", 1),
        ("UNSAFE-COERCION", 1),
    )


def test_top_codes_truncated_to_ten() -> None:
    findings = [_finding("x.py", f"CODE-{index:02d}", "info") for index in range(12)]
    findings += [_finding("x.py", "CODE-11", "info")]
    ranked = rank_codes(findings)
    assert len(ranked) == 10
    assert ranked[0] == ("CODE-11", 2)
    assert ranked[1] == ("CODE-00", 1)


def test_aggregate_preserves_unit_order_and_is_order_insensitive_for_counts() -> None:
    results = _results()
    run = aggregate(results, timestamp="2024-01-01T00:00:00.000Z")
    assert run.timestamp == "2024-01-01T00:00:00.000Z"
    assert [f.unit_path for f in run.findings] == ["a.py", "a.py", "b.py", "b.py", "b.py", "c.py", "c.py"]

    reversed_stats = compute_statistics(list(reversed(results)))
    assert reversed_stats.counts_by_severity == run.statistics.counts_by_severity
    assert reversed_stats.top_codes == run.statistics.top_codes
    assert reversed_stats.units_with_issues == run.statistics.units_with_issues


def test_repeated_aggregation_yields_identical_reports() -> None:
    assert compute_statistics(_results()) == compute_statistics(_results())

    first = json.dumps(build_structured_report(aggregate(_results(), timestamp="2024-01-01T00:00:00.000Z")))
    second = json.dumps(build_structured_report(aggregate(_results(), timestamp="2024-01-01T00:00:00.000Z")))
    assert first == second
    assert json.loads(first)["timestamp"] == "2024-01-01T00:00:00.000Z"


def test_default_timestamp_is_iso_utc() -> None:
    run = aggregate([])
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", run.timestamp)
    assert run.statistics.total_units == 0
    assert run.passed


def test_unknown_severity_is_rejected() -> None:
    with pytest.raises(ValueError):
        SeverityCounts().add("fatal")


def test_scenario_a_summary_counts() -> None:
    unit = PerUnitResult("mixed.py", (
        _finding("mixed.py", "UNSAFE-COERCION", "error"),
        _finding("mixed.py", "NON-NULL-ASSERTION", "warning"),
        _finding("mixed.py", "TYPE-ASSERTION", "info"),
    ))
    run = aggregate([unit])
    assert run.statistics.counts_by_severity.to_dict() == {"errors": 1, "warnings": 1, "info": 1}
    assert not run.passed
    assert gate_exit_code(run, ci_mode=True) == 1


@pytest.mark.parametrize(
    "severities, ci_mode, expected",
    [
        (("error",), True, 1),
        (("error",), False, 0),
        (("warning", "info"), True, 0),
        (("warning", "info"), False, 0),
        ((), True, 0),
    ],
)
def test_gate_fails_only_on_errors_in_ci_mode(severities, ci_mode: bool, expected: int) -> None:
    unit = PerUnitResult("g.py", tuple(_finding("g.py", "X", severity) for severity in severities))
    run = aggregate([unit])
    assert run.passed == ("error" not in severities)
    assert gate_exit_code(run, ci_mode) == expected
