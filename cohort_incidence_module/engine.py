"""Interface to the external cohort incidence analysis engine."""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Protocol

import pandas as pd
from google.cloud import bigquery


@dataclass(frozen=True)
class BuildOptions:
    cohort_table: str
    cdm_database_schema: str
    source_name: str
    ref_id: int


class IncidenceEngine(Protocol):
    def execute_analysis(
        self,
        client: bigquery.Client,
        incidence_design: str,
        build_options: BuildOptions,
    ) -> dict[str, pd.DataFrame]:
        """Run the design and return result tables keyed by table name."""
        ...


def load_engine(spec: str) -> IncidenceEngine:
    """Resolve an engine from a 'package.module:attribute' path.

    A class or zero-argument factory is called; anything else is used as is.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Engine must be given as 'module:attribute', got {spec!r}")
    target = getattr(importlib.import_module(module_name), attr)
    if isinstance(target, type) or (callable(target) and not hasattr(target, "execute_analysis")):
        engine = target()
    else:
        engine = target
    if not hasattr(engine, "execute_analysis"):
        raise ValueError(f"{spec} does not provide an execute_analysis method")
    return engine
