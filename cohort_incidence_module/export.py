"""CSV export of module results."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .config import INCIDENCE_SUMMARY_TABLE, RESULTS_DATA_MODEL_EXPORT_NAME
from .results_model import prefix_table_names


def write_table(df: pd.DataFrame, export_folder: Path, file_name: str) -> Path:
    out_path = export_folder / file_name
    df.to_csv(out_path, index=False)
    logging.info("Saved %s (%s rows)", file_name, len(df))
    if logging.getLogger().isEnabledFor(logging.DEBUG) and not df.empty:
        logging.debug("%s preview:\n%s", file_name, df.head(20).to_string(index=False))
    return out_path


def _with_database_id(df: pd.DataFrame, database_id: str) -> pd.DataFrame:
    out = df.copy()
    if len(out) > 0:
        out["database_id"] = database_id
    else:
        out["database_id"] = pd.Series(dtype="string")
    return out


def write_result_tables(
    tables: dict[str, pd.DataFrame],
    export_folder: Path,
    table_prefix: str,
    database_id: str,
) -> list[Path]:
    paths: list[Path] = []
    for table_name, df in tables.items():
        if table_name == INCIDENCE_SUMMARY_TABLE:
            df = _with_database_id(df, database_id)
        paths.append(write_table(df, export_folder, f"{table_prefix}{table_name}.csv"))
    return paths


def write_results_data_model(spec: pd.DataFrame, export_folder: Path, table_prefix: str) -> Path:
    return write_table(prefix_table_names(spec, table_prefix), export_folder, RESULTS_DATA_MODEL_EXPORT_NAME)
