"""BigQuery helper functions for the module's database work."""

from __future__ import annotations

import logging
import re

from google.api_core.exceptions import BadRequest, Forbidden, GoogleAPICallError, NotFound
from google.cloud import bigquery

from .job_context import ConnectionDetails

DATASET_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def validate_dataset_id(dataset: str | None, label: str = "dataset") -> str:
    if not dataset:
        raise ValueError(f"{label} is empty.")
    if not DATASET_PATTERN.match(dataset):
        raise ValueError(
            f"Invalid {label} {dataset!r}. Allowed characters: letters, numbers, underscore, dot, hyphen."
        )
    return dataset


def create_bq_client(details: ConnectionDetails) -> bigquery.Client:
    logging.info("Connecting to BigQuery project=%s location=%s", details.project or "<default>", details.location)
    return bigquery.Client(project=details.project, location=details.location)


def execute_sql(client: bigquery.Client, sql: str, *, job_name: str) -> None:
    logging.info("Executing SQL: %s", job_name)
    try:
        client.query(sql).result()
        logging.info("Finished SQL: %s", job_name)
    except (BadRequest, Forbidden, NotFound, GoogleAPICallError) as exc:
        logging.exception("BigQuery execution failed: %s", job_name)
        raise RuntimeError(f"BigQuery execution failed ({job_name}): {exc}") from exc
