"""Subscript reads that are not guarded in the same expression."""
from __future__ import annotations

import ast
from typing import Optional

from type_safety_audit.analysis_core.config import (
    CODE_UNCHECKED_INDEX_ACCESS,
    GENERIC_ALIAS_MODULES,
    GENERIC_ALIAS_NAMES,
    SEVERITY_INFO,
)
from type_safety_audit.analysis_core.detectors.common import source_text
from type_safety_audit.analysis_core.engine import Detector, Match, NodeContext
from type_safety_audit.analysis_core.oracle import TypeOracle


def _is_slice(index: ast.expr) -> bool:
    if isinstance(index, ast.Slice):
        return True
    return isinstance(index, ast.Tuple) and any(isinstance(item, ast.Slice) for item in index.elts)


def _is_generic_alias(subscript: ast.Subscript, oracle: TypeOracle) -> bool:
    name = oracle.resolve_name(subscript.value)
    if not name:
        return False
    return name in GENERIC_ALIAS_NAMES or name.startswith(GENERIC_ALIAS_MODULES)


def _in_annotation(context: NodeContext) -> bool:
    for parent, child in context.chain():
        if isinstance(parent, ast.arg) and child is parent.annotation:
            return True
        if isinstance(parent, ast.AnnAssign) and child is parent.annotation:
            return True
        if isinstance(parent, (ast.FunctionDef, ast.AsyncFunctionDef)) and child is parent.returns:
            return True
    return False


def _is_len_of(node: ast.AST, target: str) -> bool:
    return (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id == "len"
        and bool(node.args)
        and ast.dump(node.args[0]) == target
    )


def _membership(test: ast.Compare, op_type: type, target: str) -> bool:
    return any(
        isinstance(op, op_type) and ast.dump(right) == target
        for op, right in zip(test.ops, test.comparators)
    )


def guards(test: ast.expr, container: ast.expr) -> bool:
    """True when ``test`` holding implies ``container`` was checked by membership or length."""
    target = ast.dump(container)
    if isinstance(test, ast.BoolOp) and isinstance(test.op, ast.And):
        return any(guards(value, container) for value in test.values)
    if _is_len_of(test, target):
        return True
    if isinstance(test, ast.Compare):
        if _membership(test, ast.In, target):
            return True
        return any(_is_len_of(operand, target) for operand in [test.left] + list(test.comparators))
    return False


def refutes(test: ast.expr, container: ast.expr) -> bool:
    """True when ``test`` failing implies the membership or length check passed."""
    if isinstance(test, ast.BoolOp) and isinstance(test.op, ast.Or):
        return any(refutes(value, container) for value in test.values)
    if isinstance(test, ast.UnaryOp) and isinstance(test.op, ast.Not):
        return guards(test.operand, container)
    if isinstance(test, ast.Compare):
        return _membership(test, ast.NotIn, ast.dump(container))
    return False


def _is_guarded(subscript: ast.Subscript, context: NodeContext) -> bool:
    for parent, child in context.chain():
        if isinstance(parent, ast.IfExp):
            if child is parent.body and guards(parent.test, subscript.value):
                return True
            if child is parent.orelse and refutes(parent.test, subscript.value):
                return True
        elif isinstance(parent, ast.BoolOp):
            check = guards if isinstance(parent.op, ast.And) else refutes
            for earlier in parent.values:
                if earlier is child:
                    break
                if check(earlier, subscript.value):
                    return True
        elif isinstance(parent, ast.stmt):
            return False
    return False


def classify_unchecked_index(context: NodeContext, oracle: TypeOracle) -> Optional[Match]:
    subscript = context.node
    if not isinstance(subscript.ctx, ast.Load) or _is_slice(subscript.slice):
        return None
    if _in_annotation(context) or _is_generic_alias(subscript, oracle):
        return None
    if _is_guarded(subscript, context):
        return None
    return Match(
        message=f"Unsafe indexing: {source_text(subscript)} has no membership or bounds check",
        suggested_fix="Check 'key in container' or len() first, or use .get() with a default",
    )


UNCHECKED_INDEX_ACCESS = Detector(
    code=CODE_UNCHECKED_INDEX_ACCESS,
    severity=SEVERITY_INFO,
    node_types=(ast.Subscript,),
    classify=classify_unchecked_index,
)
