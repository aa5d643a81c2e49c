import ast
import textwrap

import pytest

from type_safety_audit.analysis_core.config import (
    CODE_IMPLICIT_DYNAMIC,
    CODE_MISSING_PARAM_TYPE,
    CODE_MISSING_RETURN_TYPE,
    CODE_NON_NULL_ASSERTION,
    CODE_TYPE_ASSERTION,
    CODE_UNCHECKED_INDEX_ACCESS,
    CODE_UNSAFE_COERCION,
    ISSUE_CODES,
)
from type_safety_audit.analysis_core.detectors.registry import build_engine
from type_safety_audit.analysis_core.oracle import AnnotationTypeOracle


def _analyze(source: str, only: str = None):
    tree = ast.parse(textwrap.dedent(source))
    disabled = [code for code in ISSUE_CODES if only and code != only]
    engine = build_engine(disabled)
    return engine.analyze("sample.py", tree, AnnotationTypeOracle.from_tree(tree)).findings


def _messages(findings) -> list:
    return [finding.message for finding in findings]


def test_coercion_call_is_the_only_issue_in_annotated_function() -> None:
    findings = _analyze(
        """
        def parse(value: str) -> int:
            return int(value)
        """
    )
    assert [(f.code, f.severity, f.line, f.column) for f in findings] == [
        (CODE_UNSAFE_COERCION, "error", 3, 12)
    ]
    assert findings[0].message == "Unsafe type coercion: int(value)"
    assert findings[0].suggested_fix


@pytest.mark.parametrize(
    "expression",
    [
        "int(raw)",
        "float(raw)",
        "str(raw)",
        "bool(raw)",
        "complex(raw)",
        "[str(item) for item in raw]",
        "{'total': float(raw)}",
        "print(int(raw))",
    ],
)
def test_each_coercion_call_yields_exactly_one_error(expression: str) -> None:
    findings = _analyze(f"result = {expression}\n", only=CODE_UNSAFE_COERCION)
    assert len(findings) == 1
    assert findings[0].code == CODE_UNSAFE_COERCION
    assert findings[0].severity == "error"


def test_coercion_ignores_empty_constructor_and_resolves_builtins_module() -> None:
    findings = _analyze(
        """
        import builtins
        zero = int()
        value = builtins.str(42)
        """,
        only=CODE_UNSAFE_COERCION,
    )
    assert _messages(findings) == ["Unsafe type coercion: builtins.str(42)"]


def test_cast_is_flagged_under_any_import_spelling() -> None:
    findings = _analyze(
        """
        import typing as t
        from typing import cast
        from typing_extensions import cast as force

        a = cast(int, raw)
        b = t.cast(str, raw)
        c = force(bytes, raw)
        d = caster.cast(int, raw)
        """,
        only=CODE_TYPE_ASSERTION,
    )
    assert [f.severity for f in findings] == ["info", "info", "info"]
    assert _messages(findings) == [
        "Unsafe type assertion: cast(int, raw)",
        "Unsafe type assertion: t.cast(str, raw)",
        "Unsafe type assertion: force(bytes, raw)",
    ]


def test_non_null_assertion_alone_and_in_and_chain() -> None:
    findings = _analyze(
        """
        def pick(user, limit):
            assert user is not None
            assert limit > 0 and user.name is not None
            assert limit is None
            assert limit > 0
        """,
        only=CODE_NON_NULL_ASSERTION,
    )
    assert [(f.line, f.severity) for f in findings] == [(3, "warning"), (4, "warning")]
    assert findings[0].message == "Non-null assertion: assert user is not None"


def test_non_null_assertion_with_none_on_the_left() -> None:
    findings = _analyze(
        """
        def pick(user):
            assert None is not user
            assert None is user
        """,
        only=CODE_NON_NULL_ASSERTION,
    )
    assert [(f.line, f.message) for f in findings] == [(3, "Non-null assertion: assert None is not user")]


def test_missing_parameter_type_reports_function_name() -> None:
    findings = _analyze(
        """
        def handle_click(event, *args, label: str = "", **kwargs) -> None:
            pass
        """,
        only=CODE_MISSING_PARAM_TYPE,
    )
    assert _messages(findings) == [
        "Missing parameter type: 'event' in handle_click",
        "Missing parameter type: '*args' in handle_click",
        "Missing parameter type: '**kwargs' in handle_click",
    ]
    assert all(f.severity == "warning" for f in findings)


def test_missing_parameter_type_skips_receivers_and_lambdas() -> None:
    findings = _analyze(
        """
        class Widget:
            def render(self, theme: str) -> str:
                return theme

            @classmethod
            def build(cls) -> "Widget":
                return cls()

            @staticmethod
            def helper(value) -> None:
                pass

        key = lambda item: item
        """,
        only=CODE_MISSING_PARAM_TYPE,
    )
    assert _messages(findings) == ["Missing parameter type: 'value' in helper"]


def test_missing_return_type_on_sync_and_async_functions() -> None:
    findings = _analyze(
        """
        def load(path: str):
            return path

        async def fetch(url: str):
            return url

        def close() -> None:
            pass
        """,
        only=CODE_MISSING_RETURN_TYPE,
    )
    assert [(f.message, f.line) for f in findings] == [
        ("Missing return type: function 'load'", 2),
        ("Missing return type: function 'fetch'", 5),
    ]


def test_explicit_any_parameter_is_not_implicit_dynamic() -> None:
    explicit = _analyze(
        """
        from typing import Any

        def render(props: Any) -> None:
            pass
        """,
        only=CODE_IMPLICIT_DYNAMIC,
    )
    implicit = _analyze(
        """
        def render(props) -> None:
            pass
        """,
        only=CODE_IMPLICIT_DYNAMIC,
    )
    assert explicit == ()
    assert _messages(implicit) == ["Implicit Any type: parameter 'props' (props: Any)"]


def test_implicit_dynamic_survives_a_local_name_any() -> None:
    findings = _analyze(
        """
        import json
        from mylib import Any

        class Store:
            def __init__(self, raw: str) -> None:
                self.data = json.loads(raw)

        def render(props) -> None:
            pass
        """,
        only=CODE_IMPLICIT_DYNAMIC,
    )
    assert _messages(findings) == [
        "Implicit Any type: field 'self.data' (self.data: Any)",
        "Implicit Any type: parameter 'props' (props: Any)",
    ]
    assert findings[0].severity == "warning"


def test_implicit_dynamic_resolves_aliases_and_literal_defaults() -> None:
    findings = _analyze(
        """
        import typing
        from typing import Any

        JSON = Any

        def send(payload: JSON, retries=3, timeout=None, mode: typing.Any = None) -> None:
            pass
        """,
        only=CODE_IMPLICIT_DYNAMIC,
    )
    assert _messages(findings) == [
        "Implicit Any type: parameter 'payload' (payload: JSON)",
        "Implicit Any type: parameter 'timeout' (timeout: Any)",
    ]


def test_implicit_dynamic_fields_in_class_body_and_methods() -> None:
    findings = _analyze(
        """
        import json

        class Settings:
            raw = json.loads("{}")
            retries = 3

            def __init__(self, source, name: str) -> None:
                self.source = source
                self.name = name
                self.count = 0
        """,
        only=CODE_IMPLICIT_DYNAMIC,
    )
    assert _messages(findings) == [
        "Implicit Any type: field 'raw' (raw: Any)",
        "Implicit Any type: parameter 'source' (source: Any)",
        "Implicit Any type: field 'self.source' (self.source: Any)",
    ]


def test_unchecked_index_access_on_plain_reads() -> None:
    findings = _analyze(
        """
        def first(items: list[int], table: dict) -> int:
            table["seen"] = True
            head = items[1:]
            return items[0] + table["count"]
        """,
        only=CODE_UNCHECKED_INDEX_ACCESS,
    )
    assert [(f.message, f.severity) for f in findings] == [
        ("Unsafe indexing: items[0] has no membership or bounds check", "info"),
        ("Unsafe indexing: table['count'] has no membership or bounds check", "info"),
    ]


def test_unchecked_index_access_respects_guards_in_same_expression() -> None:
    findings = _analyze(
        """
        def lookup(table: dict, key: str, items: list) -> object:
            a = table[key] if key in table else None
            b = len(items) > 2 and items[2]
            c = items[0] if flag else None
            return a, b, c
        """,
        only=CODE_UNCHECKED_INDEX_ACCESS,
    )
    assert _messages(findings) == ["Unsafe indexing: items[0] has no membership or bounds check"]


def test_unchecked_index_access_guard_covers_only_the_checked_branch() -> None:
    findings = _analyze(
        """
        def lookup(table: dict, key: str) -> object:
            a = None if key in table else table[key]
            b = table[key] if key not in table else None
            c = None if key not in table else table[key]
            d = key not in table or table[key]
            e = not key in table or table[key]
            f = key in table or table[key]
            return a, b, c, d, e, f
        """,
        only=CODE_UNCHECKED_INDEX_ACCESS,
    )
    assert [(f.line, f.message) for f in findings] == [
        (3, "Unsafe indexing: table[key] has no membership or bounds check"),
        (4, "Unsafe indexing: table[key] has no membership or bounds check"),
        (8, "Unsafe indexing: table[key] has no membership or bounds check"),
    ]


def test_type_expressions_are_not_index_access() -> None:
    findings = _analyze(
        """
        from typing import Dict, List, Optional
        import collections.abc

        Pairs = Dict[str, List[int]]
        Names = list[str]
        Handler = collections.abc.Callable[[int], None]

        def build(pairs: Dict[str, int]) -> Optional[List[str]]:
            scratch: List[int] = []
            return None
        """,
        only=CODE_UNCHECKED_INDEX_ACCESS,
    )
    assert findings == ()


def test_findings_follow_source_order() -> None:
    findings = _analyze(
        """
        def handle(event):
            return str(event)
        """
    )
    assert [f.code for f in findings] == [
        CODE_MISSING_RETURN_TYPE,
        CODE_IMPLICIT_DYNAMIC,
        CODE_MISSING_PARAM_TYPE,
        CODE_UNSAFE_COERCION,
    ]
