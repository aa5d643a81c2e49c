"""Batch runner: read, parse and analyse units sequentially or in a process pool."""
from __future__ import annotations

import ast
import logging
from multiprocessing import Pool, cpu_count
from typing import List, Sequence, Tuple, Union

from type_safety_audit.analysis_core.engine import AnalysisEngine
from type_safety_audit.analysis_core.errors import UnitAnalysisError
from type_safety_audit.analysis_core.models import PerUnitResult, SourceUnit
from type_safety_audit.analysis_core.oracle import AnnotationTypeOracle

LOGGER = logging.getLogger("type-safety")

UnitOutcome = Union[PerUnitResult, UnitAnalysisError]

# Below this many units a pool costs more than it saves
MIN_UNITS_FOR_POOL = 3


def parse_unit(unit: SourceUnit) -> ast.Module:
    """Read and parse one unit, honouring its PEP 263 encoding declaration."""
    try:
        source = unit.path.read_bytes()
        return ast.parse(source, filename=unit.unit_path)
    except (SyntaxError, ValueError, OSError, RecursionError) as exc:
        raise UnitAnalysisError(unit.unit_path, exc) from exc


def analyze_unit(engine: AnalysisEngine, unit: SourceUnit) -> UnitOutcome:
    """Analyse one unit; failures are returned, not raised."""
    try:
        tree = parse_unit(unit)
        oracle = AnnotationTypeOracle.from_tree(tree)
        return engine.analyze(unit.unit_path, tree, oracle)
    except UnitAnalysisError as exc:
        LOGGER.debug("%s", exc)
        return exc


def _analyze_unit_worker(args: Tuple[AnalysisEngine, SourceUnit]) -> UnitOutcome:
    """Worker function for multiprocessing (must be top-level for pickling)."""
    engine, unit = args
    return analyze_unit(engine, unit)


def resolve_jobs(jobs: int) -> int:
    """Translate the ``--jobs`` value; 0 means one worker per CPU."""
    if jobs <= 0:
        return max(1, cpu_count())
    return jobs


def analyze_units(engine: AnalysisEngine, units: Sequence[SourceUnit], jobs: int = 1) -> List[UnitOutcome]:
    """Analyse every unit and return outcomes in the order of ``units``."""
    workers = min(resolve_jobs(jobs), len(units))
    if workers <= 1 or len(units) < MIN_UNITS_FOR_POOL:
        return [analyze_unit(engine, unit) for unit in units]

    LOGGER.debug("Analysing %d unit(s) with %d worker process(es)", len(units), workers)
    with Pool(processes=workers) as pool:
        return pool.map(_analyze_unit_worker, [(engine, unit) for unit in units])
