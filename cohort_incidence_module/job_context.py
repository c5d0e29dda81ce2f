"""Strategus job context parsing and validation."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .config import CONFIG, default_ref_id
from .design import IncidenceDesign

REQUIRED_SECTIONS = {
    "settings": "Analysis settings not found in job context",
    "sharedResources": "Shared resources not found in job context",
    "moduleExecutionSettings": "Execution settings not found in job context",
}


class JobContextError(ValueError):
    """Raised when a job context is missing or malformed."""


def _int_setting(raw: Mapping[str, Any], key: str, default: int | None) -> int | None:
    value = raw.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise JobContextError(f"{key} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise JobContextError(f"{key} must be an integer, got {value!r}")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise JobContextError(f"{key} must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class ConnectionDetails:
    dbms: str = "bigquery"
    project: str | None = None
    location: str = "US"

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None, label: str) -> ConnectionDetails:
        if not isinstance(raw, Mapping):
            raise JobContextError(f"{label} must be an object")
        dbms = str(raw.get("dbms", "bigquery")).lower()
        if dbms != "bigquery":
            raise JobContextError(f"{label}: unsupported dbms {dbms!r}; only 'bigquery' is supported")
        project = raw.get("project")
        return cls(
            dbms=dbms,
            project=str(project) if project else None,
            location=str(raw.get("location") or CONFIG["bq_location"]),
        )


@dataclass(frozen=True)
class ExecutionSettings:
    connection_details: ConnectionDetails | None
    work_database_schema: str
    cohort_table: str
    cdm_database_schema: str
    database_id: str
    results_sub_folder: str
    min_cell_count: int = 0
    ref_id: int = 1
    results_connection_details: ConnectionDetails | None = None
    results_database_schema: str | None = None

    @property
    def cohort_table_fqn(self) -> str:
        return f"{self.work_database_schema}.{self.cohort_table}"

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ExecutionSettings:
        if not isinstance(raw, Mapping):
            raise JobContextError("moduleExecutionSettings must be an object")

        def _str(key: str) -> str:
            value = raw.get(key)
            return "" if value is None else str(value)

        cohort_table_names = raw.get("cohortTableNames") or {}
        if not isinstance(cohort_table_names, Mapping):
            raise JobContextError("cohortTableNames must be an object")

        min_cell_count = _int_setting(raw, "minCellCount", 0)
        ref_id = _int_setting(raw, "refId", None)
        if ref_id is None:
            ref_id = default_ref_id()
        if min_cell_count < 0:
            raise JobContextError(f"minCellCount must be non-negative, got {min_cell_count}")

        conn = raw.get("connectionDetails")
        results_conn = raw.get("resultsConnectionDetails")
        return cls(
            connection_details=None if conn is None else ConnectionDetails.from_dict(conn, "connectionDetails"),
            work_database_schema=_str("workDatabaseSchema"),
            cohort_table=str(cohort_table_names.get("cohortTable") or "cohort"),
            cdm_database_schema=_str("cdmDatabaseSchema"),
            database_id=_str("databaseId"),
            results_sub_folder=_str("resultsSubFolder"),
            min_cell_count=min_cell_count,
            ref_id=ref_id,
            results_connection_details=(
                None
                if results_conn is None
                else ConnectionDetails.from_dict(results_conn, "resultsConnectionDetails")
            ),
            results_database_schema=raw.get("resultsDatabaseSchema"),
        )


def load_job_context(path: str | Path) -> dict:
    path = Path(path)
    logging.info("Loading job context: %s", path)
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def validate(job_context: Mapping[str, Any]) -> IncidenceDesign:
    """Check the job context sections and deserialize the incidence design."""
    if not isinstance(job_context, Mapping):
        raise JobContextError(f"Job context must be an object, got {type(job_context).__name__}")
    for key, message in REQUIRED_SECTIONS.items():
        if job_context.get(key) is None:
            raise JobContextError(message)

    settings = job_context["settings"]
    if not isinstance(settings, Mapping) or settings.get("irDesign") is None:
        raise JobContextError("Incidence design (settings.irDesign) not found in job context")

    return IncidenceDesign.load(settings["irDesign"])


def execution_settings(job_context: Mapping[str, Any]) -> ExecutionSettings:
    return ExecutionSettings.from_dict(job_context["moduleExecutionSettings"])
