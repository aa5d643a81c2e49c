"""Fixed rule set and engine construction."""
from __future__ import annotations

from typing import Iterable, Tuple

from type_safety_audit.analysis_core.detectors.annotations import MISSING_PARAMETER_TYPE, MISSING_RETURN_TYPE
from type_safety_audit.analysis_core.detectors.assertions import NON_NULL_ASSERTION, TYPE_ASSERTION
from type_safety_audit.analysis_core.detectors.coercion import UNSAFE_COERCION
from type_safety_audit.analysis_core.detectors.dynamic import IMPLICIT_DYNAMIC_FIELD, IMPLICIT_DYNAMIC_PARAMETER
from type_safety_audit.analysis_core.detectors.indexing import UNCHECKED_INDEX_ACCESS
from type_safety_audit.analysis_core.engine import AnalysisEngine, Detector

DEFAULT_DETECTORS: Tuple[Detector, ...] = (
    IMPLICIT_DYNAMIC_PARAMETER,
    IMPLICIT_DYNAMIC_FIELD,
    TYPE_ASSERTION,
    NON_NULL_ASSERTION,
    UNSAFE_COERCION,
    MISSING_PARAMETER_TYPE,
    MISSING_RETURN_TYPE,
    UNCHECKED_INDEX_ACCESS,
)


def build_engine(disabled: Iterable[str] = ()) -> AnalysisEngine:
    """Construct the engine once per run, minus any disabled codes."""
    return AnalysisEngine(DEFAULT_DETECTORS).without(disabled)
