"""Missing parameter and return annotations."""
from __future__ import annotations

import ast
from typing import Optional

from type_safety_audit.analysis_core.config import (
    CODE_MISSING_PARAM_TYPE,
    CODE_MISSING_RETURN_TYPE,
    SEVERITY_WARNING,
)
from type_safety_audit.analysis_core.detectors.common import owning_function, receiver_of
from type_safety_audit.analysis_core.engine import FUNCTION_NODES, Detector, Match, NodeContext
from type_safety_audit.analysis_core.oracle import TypeOracle


def _display_name(parameter: ast.arg, function: ast.AST) -> str:
    if parameter is function.args.vararg:
        return f"*{parameter.arg}"
    if parameter is function.args.kwarg:
        return f"**{parameter.arg}"
    return parameter.arg


def classify_missing_parameter_type(context: NodeContext, oracle: TypeOracle) -> Optional[Match]:
    parameter = context.node
    if parameter.annotation is not None:
        return None
    function = owning_function(context)
    if function is None or parameter is receiver_of(function, context):
        return None
    name = _display_name(parameter, function)
    return Match(
        message=f"Missing parameter type: '{name}' in {function.name}",
        suggested_fix=f"Annotate '{parameter.arg}' with the type callers are expected to pass",
    )


def classify_missing_return_type(context: NodeContext, oracle: TypeOracle) -> Optional[Match]:
    function = context.node
    if function.returns is not None:
        return None
    return Match(
        message=f"Missing return type: function '{function.name}'",
        suggested_fix="Add a return annotation (use '-> None' for procedures)",
    )


MISSING_PARAMETER_TYPE = Detector(
    code=CODE_MISSING_PARAM_TYPE,
    severity=SEVERITY_WARNING,
    node_types=(ast.arg,),
    classify=classify_missing_parameter_type,
)

MISSING_RETURN_TYPE = Detector(
    code=CODE_MISSING_RETURN_TYPE,
    severity=SEVERITY_WARNING,
    node_types=FUNCTION_NODES,
    classify=classify_missing_return_type,
)
