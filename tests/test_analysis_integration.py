import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import type_safety_audit.analyze as analyzer  # noqa: E402

SERVICE = '''\
import json
from typing import Any, Dict, Optional, cast

Payload = Dict[str, Any]


class OrderService:
    retries = 3

    def __init__(self, client, timeout: float = 5.0) -> None:
        self.client = client
        self.timeout = timeout

    def total(self, order: Payload) -> float:
        return float(order["amount"]) if "amount" in order else 0.0

    def lookup(self, orders: list, index: int) -> Optional[Payload]:
        found = orders[index]
        assert found is not None
        return cast(Payload, found)

    def decode(self, raw: bytes, hooks: Any = None):
        return json.loads(raw)
'''

HELPERS = '''\
def first(items: list[str]) -> str:
    return items[0] if len(items) > 0 else ""
'''


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_run_reports_findings_across_project(tmp_path, monkeypatch, capsys):
    workspace = tmp_path / "workspace"
    _write(workspace / "shop" / "service.py", SERVICE)
    _write(workspace / "shop" / "helpers.py", HELPERS)
    _write(workspace / "shop" / "conftest.py", "def fixture(x):\n    return int(x)\n")
    _write(workspace / ".venv" / "lib" / "site.py", "value = int('1')\n")
    monkeypatch.chdir(workspace)
    for name in ("TYPE_SAFETY_JSON_REPORT", "TYPE_SAFETY_MARKDOWN_REPORT", "TYPE_SAFETY_TARGET_FILE"):
        monkeypatch.delenv(name, raising=False)

    exit_code = analyzer.run(["--no-color", "--ci", "--log-dir", str(tmp_path / "logs"), "."])

    assert exit_code == 1
    report = json.loads((workspace / "type-safety-report.json").read_text(encoding="utf-8"))
    assert not (workspace / "docs" / "TYPE_SAFETY_REPORT.md").exists()
    assert report["totalFiles"] == 2
    assert report["filesWithIssues"] == 1
    assert list(report["fileStats"]) == ["shop/service.py"]

    found = sorted((issue["line"], issue["code"]) for issue in report["issues"])
    assert found == [
        (10, "IMPLICIT-DYNAMIC"),
        (10, "MISSING-PARAM-TYPE"),
        (11, "IMPLICIT-DYNAMIC"),
        (15, "UNSAFE-COERCION"),
        (18, "UNCHECKED-INDEX-ACCESS"),
        (19, "NON-NULL-ASSERTION"),
        (20, "TYPE-ASSERTION"),
        (22, "MISSING-RETURN-TYPE"),
    ]
    assert report["summary"] == {"errors": 1, "warnings": 5, "info": 2}
    assert report["summary"]["errors"] + report["summary"]["warnings"] + report["summary"]["info"] == len(report["issues"])

    out = capsys.readouterr().out
    assert "Total files analyzed: 2" in out
    assert "Total issues: 8" in out

    assert list((tmp_path / "logs").glob("type_safety_*.log"))


def test_unexpected_failure_is_reported_and_fails(tmp_path, monkeypatch, capsys):
    _write(tmp_path / "app.py", "x = 1\n")
    monkeypatch.chdir(tmp_path)

    def boom(results, timestamp=None):
        raise RuntimeError("aggregation exploded")

    monkeypatch.setattr(analyzer, "aggregate", boom)
    exit_code = analyzer.run(["--no-color", "--log-dir", str(tmp_path / "logs"), str(tmp_path)])

    assert exit_code == 1
    assert "Error running type safety analysis: aggregation exploded" in capsys.readouterr().err


def test_main_exits_with_run_status(monkeypatch):
    monkeypatch.setattr(analyzer, "run", lambda argv=None: 1)
    with pytest.raises(SystemExit) as excinfo:
        analyzer.main()
    assert excinfo.value.code == 1
