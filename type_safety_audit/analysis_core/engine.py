"""Single-pass AST traversal that dispatches every detector at every node."""
from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, List, Optional, Tuple, Type

from type_safety_audit.analysis_core.errors import UnitAnalysisError
from type_safety_audit.analysis_core.models import Finding, PerUnitResult

if TYPE_CHECKING:
    from type_safety_audit.analysis_core.oracle import TypeOracle

LOGGER = logging.getLogger("type-safety")

FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef)


@dataclass(frozen=True)
class NodeContext:
    """A node together with its ancestors, nearest ancestor last."""

    node: ast.AST
    ancestors: Tuple[ast.AST, ...] = ()

    @property
    def parent(self) -> Optional[ast.AST]:
        return self.ancestors[-1] if self.ancestors else None

    def enclosing(self, *node_types: Type[ast.AST]) -> Optional[ast.AST]:
        """Return the nearest ancestor of one of ``node_types``."""
        for ancestor in reversed(self.ancestors):
            if isinstance(ancestor, node_types):
                return ancestor
        return None

    def enclosing_function(self) -> Optional[ast.AST]:
        return self.enclosing(*FUNCTION_NODES)

    def chain(self) -> Iterator[Tuple[ast.AST, ast.AST]]:
        """Yield ``(parent, child)`` pairs from the node up to the root."""
        child = self.node
        for ancestor in reversed(self.ancestors):
            yield ancestor, child
            child = ancestor


@dataclass(frozen=True)
class Match:
    """What a detector reports about one node."""

    message: str
    suggested_fix: Optional[str] = None
    anchor: Optional[ast.AST] = None  # position source when not the visited node


Classifier = Callable[[NodeContext, "TypeOracle"], Optional[Match]]


@dataclass(frozen=True)
class Detector:
    """A fixed rule: node kinds it inspects, its code/severity and classifier."""

    code: str
    severity: str
    node_types: Tuple[Type[ast.AST], ...]
    classify: Classifier

    def applies_to(self, node: ast.AST) -> bool:
        return isinstance(node, self.node_types)


def iter_node_contexts(tree: ast.AST) -> Iterator[NodeContext]:
    """Depth-first pre-order walk visiting every node exactly once."""
    stack: List[Tuple[ast.AST, Tuple[ast.AST, ...]]] = [(tree, ())]
    while stack:
        node, ancestors = stack.pop()
        yield NodeContext(node, ancestors)
        lineage = ancestors + (node,)
        children = list(ast.iter_child_nodes(node))
        for child in reversed(children):
            stack.append((child, lineage))


def node_position(node: ast.AST) -> Tuple[int, int]:
    """Return the 1-based ``(line, column)`` of a node's start offset."""
    line = getattr(node, "lineno", None) or 1
    column = (getattr(node, "col_offset", None) or 0) + 1
    return line, column


@dataclass(frozen=True)
class AnalysisEngine:
    """Runs a fixed detector set over one unit's syntax tree."""

    detectors: Tuple[Detector, ...]

    @property
    def codes(self) -> Tuple[str, ...]:
        return tuple(detector.code for detector in self.detectors)

    def without(self, codes: Iterable[str]) -> "AnalysisEngine":
        """Return an engine with the rules for ``codes`` removed."""
        disabled = set(codes)
        return AnalysisEngine(tuple(d for d in self.detectors if d.code not in disabled))

    def analyze(self, unit_path: str, tree: ast.AST, oracle: "TypeOracle") -> PerUnitResult:
        """Traverse ``tree`` once and collect every detector's findings."""
        if not isinstance(tree, ast.AST):
            raise UnitAnalysisError(unit_path, TypeError(f"expected an AST node, got {type(tree).__name__}"))

        findings: List[Finding] = []
        try:
            for context in iter_node_contexts(tree):
                for detector in self.detectors:
                    if not detector.applies_to(context.node):
                        continue
                    finding = self._evaluate(detector, context, oracle, unit_path)
                    if finding is not None:
                        findings.append(finding)
        except (AttributeError, TypeError, RecursionError) as exc:
            raise UnitAnalysisError(unit_path, exc) from exc
        return PerUnitResult(unit_path=unit_path, findings=tuple(findings))

    @staticmethod
    def _evaluate(
        detector: Detector,
        context: NodeContext,
        oracle: "TypeOracle",
        unit_path: str,
    ) -> Optional[Finding]:
        try:
            match = detector.classify(context, oracle)
        except Exception as exc:  # noqa: BLE001 - an unclassifiable node is not flagged
            LOGGER.debug(
                "%s could not classify %s in %s: %s",
                detector.code,
                type(context.node).__name__,
                unit_path,
                exc,
            )
            return None
        if match is None:
            return None
        line, column = node_position(match.anchor or context.node)
        return Finding(
            unit_path=unit_path,
            line=line,
            column=column,
            severity=detector.severity,
            code=detector.code,
            message=match.message,
            suggested_fix=match.suggested_fix,
        )
