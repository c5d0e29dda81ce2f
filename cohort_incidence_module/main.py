"""Module entrypoints: execute a cohort incidence job and create the results schema."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

from google.cloud import bigquery

from .config import (
    CONFIG,
    INCIDENCE_SUMMARY_TABLE,
    TARGET_OUTCOME_REF_TABLE,
    ensure_output_dir,
    load_module_info,
    table_prefix,
    validate_config,
)
from .db_utils import create_bq_client, execute_sql, validate_dataset_id
from .engine import BuildOptions, IncidenceEngine, load_engine
from .export import write_result_tables, write_results_data_model, write_table
from .job_context import JobContextError, execution_settings, load_job_context, validate
from .reference import build_target_outcome_ref
from .results_model import generate_sql_schema, load_results_data_model, prefix_table_names, render_sql
from .suppression import coerce_incidence_summary, enforce_min_cell_count


@dataclass
class ExecutionResult:
    export_folder: Path
    generated_files: list[str]


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format=CONFIG["log_format"],
    )


def execute(
    job_context: Mapping[str, Any],
    engine: IncidenceEngine,
    client: bigquery.Client | None = None,
) -> ExecutionResult:
    logging.info("Validating inputs")
    design = validate(job_context)
    settings = execution_settings(job_context)
    prefix = table_prefix(load_module_info())
    if not settings.results_sub_folder:
        raise JobContextError("resultsSubFolder not found in execution settings")
    # T-O lookup used downstream to filter 'outcomes for T' or 'targets for O'.
    target_outcome_ref = build_target_outcome_ref(design, settings.ref_id)

    owns_client = client is None
    if owns_client:
        if settings.connection_details is None:
            raise JobContextError("connectionDetails not found in execution settings")
        client = create_bq_client(settings.connection_details)

    try:
        build_options = BuildOptions(
            cohort_table=settings.cohort_table_fqn,
            cdm_database_schema=settings.cdm_database_schema,
            source_name=str(settings.database_id),
            ref_id=settings.ref_id,
        )
        logging.info("Running incidence analysis. source=%s ref_id=%s", build_options.source_name, settings.ref_id)
        results = dict(engine.execute_analysis(client, design.as_json(), build_options))
    finally:
        if owns_client:
            client.close()

    export_folder = ensure_output_dir(settings.results_sub_folder)

    logging.info("Export data")
    if settings.min_cell_count > 0:
        if INCIDENCE_SUMMARY_TABLE not in results:
            raise RuntimeError(
                f"Engine results have no '{INCIDENCE_SUMMARY_TABLE}' table to apply minCellCount to; "
                f"got {sorted(results)}"
            )
        results[INCIDENCE_SUMMARY_TABLE] = enforce_min_cell_count(
            coerce_incidence_summary(results[INCIDENCE_SUMMARY_TABLE]), settings.min_cell_count
        )

    paths = write_result_tables(results, export_folder, prefix, settings.database_id)
    paths.append(write_table(target_outcome_ref, export_folder, f"{prefix}{TARGET_OUTCOME_REF_TABLE}.csv"))

    paths.append(write_results_data_model(load_results_data_model(), export_folder, prefix))

    generated = sorted(p.name for p in paths)
    logging.info("Execution complete. Generated files:")
    for name in generated:
        logging.info("- %s", name)
    return ExecutionResult(export_folder=export_folder, generated_files=generated)


def create_data_model_schema(
    job_context: Mapping[str, Any],
    client: bigquery.Client | None = None,
) -> str:
    """Create the prefixed results tables; returns the executed SQL."""
    settings = execution_settings(job_context)
    if settings.results_connection_details is None:
        raise JobContextError("resultsConnectionDetails not found in execution settings")
    if not isinstance(settings.results_database_schema, str):
        raise JobContextError("resultsDatabaseSchema must be a string")
    try:
        schema = validate_dataset_id(settings.results_database_schema, "resultsDatabaseSchema")
    except ValueError as exc:
        raise JobContextError(str(exc)) from exc

    spec = prefix_table_names(load_results_data_model(), table_prefix(load_module_info()))
    sql = render_sql(generate_sql_schema(spec), database_schema=schema)

    owns_client = client is None
    if owns_client:
        client = create_bq_client(settings.results_connection_details)
    try:
        execute_sql(client, sql, job_name=f"create results schema in {schema}")
    finally:
        if owns_client:
            client.close()
    return sql


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cohort incidence execution module")
    sub = parser.add_subparsers(dest="command", required=True)

    exec_parser = sub.add_parser("execute", help="Run the incidence analysis and export results")
    exec_parser.add_argument("job_context", help="Path to the job context JSON")
    exec_parser.add_argument("--engine", required=True, help="Analysis engine as 'module:attribute'")

    schema_parser = sub.add_parser("create-schema", help="Create the results data model tables")
    schema_parser.add_argument("job_context", help="Path to the job context JSON")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    _configure_logging()
    validate_config()

    job_context = load_job_context(args.job_context)
    if args.command == "execute":
        execute(job_context, load_engine(args.engine))
    else:
        create_data_model_schema(job_context)


if __name__ == "__main__":
    main()
