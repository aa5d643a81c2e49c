"""Helpers shared by the detector rules."""
from __future__ import annotations

import ast
from typing import Optional

from type_safety_audit.analysis_core.engine import FUNCTION_NODES, NodeContext
from type_safety_audit.analysis_core.oracle import DYNAMIC


def parent_of(context: NodeContext, node: ast.AST) -> Optional[ast.AST]:
    """Return the ancestor directly above ``node`` on the context's path."""
    for index in range(len(context.ancestors) - 1, 0, -1):
        if context.ancestors[index] is node:
            return context.ancestors[index - 1]
    return None


def owning_function(context: NodeContext) -> Optional[ast.AST]:
    """Function whose signature declares the ``ast.arg`` in ``context``."""
    if len(context.ancestors) < 2 or not isinstance(context.parent, ast.arguments):
        return None
    function = context.ancestors[-2]
    return function if isinstance(function, FUNCTION_NODES) else None


def is_staticmethod(function: ast.AST) -> bool:
    for decorator in getattr(function, "decorator_list", []):
        if isinstance(decorator, ast.Name) and decorator.id == "staticmethod":
            return True
        if isinstance(decorator, ast.Attribute) and decorator.attr == "staticmethod":
            return True
    return False


def receiver_of(function: ast.AST, context: NodeContext) -> Optional[ast.arg]:
    """Return the implicit ``self``/``cls`` parameter when ``function`` is a method."""
    if not isinstance(parent_of(context, function), ast.ClassDef) or is_staticmethod(function):
        return None
    positional = list(function.args.posonlyargs) + list(function.args.args)
    return positional[0] if positional else None


def source_text(node: ast.AST) -> str:
    return ast.unparse(node)


def written_as_dynamic(annotation: Optional[ast.expr]) -> bool:
    """True when the annotation literally spells the dynamic type (``Any``, ``typing.Any``)."""
    if annotation is None:
        return False
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        text = annotation.value.strip()
    else:
        text = ast.unparse(annotation)
    return text.split(".")[-1] == "Any"


def display_type(type_text: Optional[str]) -> str:
    """Spell the oracle's dynamic answer the way users write it."""
    return "Any" if type_text == DYNAMIC else str(type_text)
