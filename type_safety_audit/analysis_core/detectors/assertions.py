"""Casts and nullability assertions that bypass the checker."""
from __future__ import annotations

import ast
from typing import Optional

from type_safety_audit.analysis_core.config import (
    CODE_NON_NULL_ASSERTION,
    CODE_TYPE_ASSERTION,
    SEVERITY_INFO,
    SEVERITY_WARNING,
    TYPE_ASSERTION_CALLS,
)
from type_safety_audit.analysis_core.detectors.common import source_text
from type_safety_audit.analysis_core.engine import Detector, Match, NodeContext
from type_safety_audit.analysis_core.oracle import TypeOracle


def classify_type_assertion(context: NodeContext, oracle: TypeOracle) -> Optional[Match]:
    call = context.node
    if oracle.resolve_name(call.func) not in TYPE_ASSERTION_CALLS:
        return None
    return Match(
        message=f"Unsafe type assertion: {source_text(call)}",
        suggested_fix="Narrow with isinstance() or a TypeGuard instead of cast()",
    )


def _asserts_not_none(test: ast.expr) -> bool:
    if isinstance(test, ast.BoolOp) and isinstance(test.op, ast.And):
        return any(_asserts_not_none(value) for value in test.values)
    if not isinstance(test, ast.Compare):
        return False
    operands = [test.left] + list(test.comparators)
    for index, op in enumerate(test.ops):
        if not isinstance(op, ast.IsNot):
            continue
        for operand in operands[index:index + 2]:
            if isinstance(operand, ast.Constant) and operand.value is None:
                return True
    return False


def classify_non_null_assertion(context: NodeContext, oracle: TypeOracle) -> Optional[Match]:
    statement = context.node
    if not _asserts_not_none(statement.test):
        return None
    return Match(
        message=f"Non-null assertion: assert {source_text(statement.test)}",
        suggested_fix="Check for None explicitly and raise; assert statements are stripped under -O",
    )


TYPE_ASSERTION = Detector(
    code=CODE_TYPE_ASSERTION,
    severity=SEVERITY_INFO,
    node_types=(ast.Call,),
    classify=classify_type_assertion,
)

NON_NULL_ASSERTION = Detector(
    code=CODE_NON_NULL_ASSERTION,
    severity=SEVERITY_WARNING,
    node_types=(ast.Assert,),
    classify=classify_non_null_assertion,
)
