"""Parameters and fields that silently end up typed as ``Any``.

A binding is reported only when the oracle says its apparent type is the
dynamic one and the source did not spell that type out. ``x: Any`` is a
deliberate choice and stays quiet; ``x`` with no annotation, ``x: JSON`` where
``JSON = Any``, or ``self.data = json.loads(raw)`` are reported.
"""
from __future__ import annotations

import ast
from typing import Optional

from type_safety_audit.analysis_core.config import CODE_IMPLICIT_DYNAMIC, SEVERITY_WARNING
from type_safety_audit.analysis_core.detectors.common import (
    display_type,
    owning_function,
    receiver_of,
    written_as_dynamic,
)
from type_safety_audit.analysis_core.engine import Detector, Match, NodeContext
from type_safety_audit.analysis_core.oracle import TypeOracle

FIX_HINT = "Declare a concrete type, or annotate with 'Any' explicitly if dynamism is intended"


def classify_implicit_dynamic_parameter(context: NodeContext, oracle: TypeOracle) -> Optional[Match]:
    parameter = context.node
    function = owning_function(context)
    if function is None or parameter is receiver_of(function, context):
        return None
    if written_as_dynamic(parameter.annotation):
        return None
    apparent = oracle.apparent_type(parameter, context)
    if not oracle.is_dynamic(apparent):
        return None
    return Match(
        message=f"Implicit Any type: parameter '{parameter.arg}' ({parameter.arg}: {display_type(apparent)})",
        suggested_fix=FIX_HINT,
    )


def _field_name(assignment: ast.AST, context: NodeContext) -> Optional[str]:
    if isinstance(assignment, ast.Assign):
        if len(assignment.targets) != 1:
            return None
        target = assignment.targets[0]
    else:
        target = assignment.target

    if isinstance(context.parent, ast.ClassDef):
        return target.id if isinstance(target, ast.Name) else None

    if not isinstance(target, ast.Attribute) or not isinstance(target.value, ast.Name):
        return None
    function = context.enclosing_function()
    if function is None:
        return None
    receiver = receiver_of(function, context)
    if receiver is None or receiver.arg != target.value.id:
        return None
    return f"{receiver.arg}.{target.attr}"


def classify_implicit_dynamic_field(context: NodeContext, oracle: TypeOracle) -> Optional[Match]:
    assignment = context.node
    name = _field_name(assignment, context)
    if name is None:
        return None
    if isinstance(assignment, ast.AnnAssign) and written_as_dynamic(assignment.annotation):
        return None
    apparent = oracle.apparent_type(assignment, context)
    if not oracle.is_dynamic(apparent):
        return None
    return Match(
        message=f"Implicit Any type: field '{name}' ({name}: {display_type(apparent)})",
        suggested_fix=FIX_HINT,
    )


IMPLICIT_DYNAMIC_PARAMETER = Detector(
    code=CODE_IMPLICIT_DYNAMIC,
    severity=SEVERITY_WARNING,
    node_types=(ast.arg,),
    classify=classify_implicit_dynamic_parameter,
)

IMPLICIT_DYNAMIC_FIELD = Detector(
    code=CODE_IMPLICIT_DYNAMIC,
    severity=SEVERITY_WARNING,
    node_types=(ast.Assign, ast.AnnAssign),
    classify=classify_implicit_dynamic_field,
)
