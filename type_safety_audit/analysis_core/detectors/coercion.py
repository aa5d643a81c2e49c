"""Primitive conversion calls applied to arbitrary values."""
from __future__ import annotations

import ast
from typing import Optional

from type_safety_audit.analysis_core.config import (
    CODE_UNSAFE_COERCION,
    COERCION_BUILTINS,
    SEVERITY_ERROR,
)
from type_safety_audit.analysis_core.detectors.common import source_text
from type_safety_audit.analysis_core.engine import Detector, Match, NodeContext
from type_safety_audit.analysis_core.oracle import TypeOracle


def coercion_target(call: ast.Call, oracle: TypeOracle) -> Optional[str]:
    """Name of the builtin conversion ``call`` invokes, if any."""
    callee = oracle.resolve_name(call.func)
    if callee.startswith("builtins."):
        callee = callee[len("builtins."):]
    return callee if callee in COERCION_BUILTINS else None


def classify_unsafe_coercion(context: NodeContext, oracle: TypeOracle) -> Optional[Match]:
    call = context.node
    target = coercion_target(call, oracle)
    if target is None or not call.args:
        return None
    return Match(
        message=f"Unsafe type coercion: {source_text(call)}",
        suggested_fix=f"Validate the input and reject bad values instead of coercing with {target}()",
    )


UNSAFE_COERCION = Detector(
    code=CODE_UNSAFE_COERCION,
    severity=SEVERITY_ERROR,
    node_types=(ast.Call,),
    classify=classify_unsafe_coercion,
)
