"""Narrow type-query capability consumed by the detectors.

The engine never infers types itself. Detectors ask an oracle two questions:
what is the apparent type of this declaration or expression, and is that type
the fully dynamic one. ``AnnotationTypeOracle`` answers from what a single
module states: annotations, literal values, module-level aliases of ``Any``
and a short list of calls known to return ``Any``. ``None`` means the oracle
cannot tell, and detectors treat that as "not flagged".
"""
from __future__ import annotations

import ast
from typing import Dict, Iterator, Mapping, Optional, Protocol

from type_safety_audit.analysis_core.config import (
    DYNAMIC_RETURNING_CALLS,
    DYNAMIC_TYPE_NAMES,
    LITERAL_DISPLAY_TYPES,
)
from type_safety_audit.analysis_core.engine import FUNCTION_NODES, NodeContext

# The oracle's own "fully dynamic" answer, qualified so that a module
# rebinding the name `Any` cannot change its meaning
DYNAMIC = "typing.Any"


class TypeOracle(Protocol):
    """Capability interface over an external type checker."""

    def apparent_type(self, node: ast.AST, context: NodeContext) -> Optional[str]:
        """Return the declared or inferred type text of ``node``, or None if unknown."""

    def is_dynamic(self, type_text: Optional[str]) -> bool:
        """Return True when ``type_text`` is the fully dynamic type."""

    def resolve_name(self, node: ast.AST) -> str:
        """Return the qualified name a ``Name``/``Attribute`` chain refers to, or ''."""


def build_import_map(tree: ast.AST) -> Dict[str, str]:
    """Map local names to fully qualified names from the module's imports."""
    import_map: Dict[str, str] = {}
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.asname:
                    import_map[alias.asname] = alias.name
                else:
                    root = alias.name.split(".")[0]
                    import_map[root] = root
        elif isinstance(node, ast.ImportFrom) and node.module:
            for alias in node.names:
                import_map[alias.asname or alias.name] = f"{node.module}.{alias.name}"
    return import_map


def qualified_name(node: ast.AST, import_map: Mapping[str, str]) -> str:
    """Resolve a ``Name``/``Attribute`` chain to its qualified name, or ''."""
    if isinstance(node, ast.Name):
        return import_map.get(node.id, node.id)
    if isinstance(node, ast.Attribute):
        base = qualified_name(node.value, import_map)
        return f"{base}.{node.attr}" if base else ""
    return ""


def literal_type(node: ast.AST) -> Optional[str]:
    """Name the type of a literal expression, or None if it is not a literal."""
    if isinstance(node, ast.Constant):
        if node.value is None:
            return None
        return type(node.value).__name__
    return LITERAL_DISPLAY_TYPES.get(type(node).__name__)


class AnnotationTypeOracle:
    """Per-module oracle built from the module's own declarations."""

    def __init__(
        self,
        import_map: Mapping[str, str],
        dynamic_aliases: frozenset = frozenset(),
        return_types: Optional[Mapping[str, Optional[str]]] = None,
        class_names: frozenset = frozenset(),
    ) -> None:
        self.import_map = dict(import_map)
        self.dynamic_aliases = frozenset(dynamic_aliases)
        self.return_types = dict(return_types or {})
        self.class_names = frozenset(class_names)

    @classmethod
    def from_tree(cls, tree: ast.AST) -> "AnnotationTypeOracle":
        """Index imports, ``Any`` aliases, function returns and classes of a module."""
        import_map = build_import_map(tree)
        aliases = set()
        return_types: Dict[str, Optional[str]] = {}
        class_names = set()
        for node in getattr(tree, "body", []):
            if isinstance(node, ast.ClassDef):
                class_names.add(node.name)
            elif isinstance(node, FUNCTION_NODES):
                return_types[node.name] = ast.unparse(node.returns) if node.returns else None
            elif isinstance(node, ast.Assign) and len(node.targets) == 1:
                target, value = node.targets[0], node.value
                if isinstance(target, ast.Name) and qualified_name(value, import_map) in DYNAMIC_TYPE_NAMES:
                    aliases.add(target.id)
            elif isinstance(node, ast.AnnAssign) and node.value is not None:
                if isinstance(node.target, ast.Name) and qualified_name(node.value, import_map) in DYNAMIC_TYPE_NAMES:
                    aliases.add(node.target.id)
        return cls(import_map, frozenset(aliases), return_types, frozenset(class_names))

    def is_dynamic(self, type_text: Optional[str]) -> bool:
        if not type_text:
            return False
        if type_text == DYNAMIC:
            return True
        text = type_text.strip().strip("'\"")
        if text in self.dynamic_aliases:
            return True
        head, _, rest = text.partition(".")
        resolved = self.import_map.get(head, head)
        if rest:
            resolved = f"{resolved}.{rest}"
        return resolved in DYNAMIC_TYPE_NAMES

    def resolve_name(self, node: ast.AST) -> str:
        return qualified_name(node, self.import_map)

    def apparent_type(self, node: ast.AST, context: NodeContext) -> Optional[str]:
        if isinstance(node, ast.arg):
            return self._parameter_type(node, context)
        if isinstance(node, ast.AnnAssign):
            return ast.unparse(node.annotation)
        if isinstance(node, ast.Assign):
            return self.expression_type(node.value, context)
        if isinstance(node, ast.expr):
            return self.expression_type(node, context)
        return None

    def expression_type(self, expr: ast.AST, context: NodeContext) -> Optional[str]:
        """Best-effort type of an expression evaluated inside ``context``."""
        named = literal_type(expr)
        if named:
            return named
        if isinstance(expr, ast.Name):
            return self._name_type(expr.id, context)
        if isinstance(expr, ast.Call):
            callee = qualified_name(expr.func, self.import_map)
            if callee in DYNAMIC_RETURNING_CALLS:
                return DYNAMIC
            if isinstance(expr.func, ast.Name):
                if expr.func.id in self.class_names:
                    return expr.func.id
                if expr.func.id in self.return_types:
                    return self.return_types[expr.func.id]
        return None

    def _name_type(self, name: str, context: NodeContext) -> Optional[str]:
        function = context.enclosing_function()
        if function is None:
            return None
        for parameter in _all_parameters(function.args):
            if parameter.arg == name:
                return self._parameter_type(parameter, context, function)
        return None

    def _parameter_type(
        self,
        parameter: ast.arg,
        context: NodeContext,
        function: Optional[ast.AST] = None,
    ) -> Optional[str]:
        if parameter.annotation is not None:
            return ast.unparse(parameter.annotation)
        arguments = getattr(function, "args", None) or _arguments_of(context)
        if arguments is None:
            return DYNAMIC
        default = _default_for(parameter, arguments)
        if default is not None:
            inferred = literal_type(default)
            if inferred:
                return inferred
        return DYNAMIC


def _all_parameters(arguments: ast.arguments) -> Iterator[ast.arg]:
    yield from getattr(arguments, "posonlyargs", [])
    yield from arguments.args
    if arguments.vararg:
        yield arguments.vararg
    yield from arguments.kwonlyargs
    if arguments.kwarg:
        yield arguments.kwarg


def _arguments_of(context: NodeContext) -> Optional[ast.arguments]:
    parent = context.parent
    return parent if isinstance(parent, ast.arguments) else None


def _default_for(parameter: ast.arg, arguments: ast.arguments) -> Optional[ast.expr]:
    positional = list(getattr(arguments, "posonlyargs", [])) + list(arguments.args)
    if parameter in positional:
        offset = len(positional) - len(arguments.defaults)
        index = positional.index(parameter) - offset
        return arguments.defaults[index] if index >= 0 else None
    if parameter in arguments.kwonlyargs:
        return arguments.kw_defaults[arguments.kwonlyargs.index(parameter)]
    return None
