"""Target-outcome lookup table derived from an incidence design."""

from __future__ import annotations

from itertools import product
from typing import NamedTuple

import pandas as pd

from .design import DesignError, IncidenceDesign

REF_COLUMNS = ["target_cohort_id", "outcome_cohort_id", "ref_id"]


class BrokenReferenceError(DesignError):
    """An analysis names an outcome id with no outcome definition."""


class TargetOutcomePair(NamedTuple):
    target_cohort_id: int
    outcome_cohort_id: int
    ref_id: int


def target_outcome_pairs(design: IncidenceDesign, ref_id: int) -> set[TargetOutcomePair]:
    cohort_by_outcome = {o.id: o.cohort_id for o in design.outcome_defs}

    pairs: set[tuple[int, int]] = set()
    for idx, analysis in enumerate(design.analysis_list):
        missing = [o for o in analysis.outcomes if o not in cohort_by_outcome]
        if missing:
            raise BrokenReferenceError(
                f"Analysis {idx} references outcome ids with no outcome definition: {missing}"
            )
        outcome_cohort_ids = [cohort_by_outcome[o] for o in analysis.outcomes]
        pairs.update(product(analysis.targets, outcome_cohort_ids))

    return {TargetOutcomePair(t, o, ref_id) for t, o in pairs}


def build_target_outcome_ref(design: IncidenceDesign, ref_id: int) -> pd.DataFrame:
    """Return the deduplicated (target, outcome) pairs tagged with ref_id.

    Row order is not meaningful; rows are sorted only so exports are stable.
    """
    pairs = sorted(target_outcome_pairs(design, ref_id))
    return pd.DataFrame(pairs, columns=REF_COLUMNS).astype("int64")
