"""Cohort incidence execution module."""

from .design import AnalysisSpec, DesignError, IncidenceDesign, OutcomeDef
from .job_context import JobContextError, validate
from .main import create_data_model_schema, execute
from .reference import BrokenReferenceError, TargetOutcomePair, build_target_outcome_ref, target_outcome_pairs
from .suppression import enforce_min_cell_count, suppress_derived_stats, suppress_field

__all__ = [
    "AnalysisSpec",
    "BrokenReferenceError",
    "DesignError",
    "IncidenceDesign",
    "JobContextError",
    "OutcomeDef",
    "TargetOutcomePair",
    "build_target_outcome_ref",
    "create_data_model_schema",
    "enforce_min_cell_count",
    "execute",
    "suppress_derived_stats",
    "suppress_field",
    "target_outcome_pairs",
    "validate",
]
