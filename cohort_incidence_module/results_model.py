"""Results data model specification and schema DDL generation."""

from __future__ import annotations

import re
from pathlib import Path

import pandas as pd

from .config import RESULTS_DATA_MODEL_FILE

SPEC_COLUMNS = ["table_name", "column_name", "data_type", "is_required", "primary_key"]

_BQ_TYPES = {
    "varchar": "STRING",
    "text": "STRING",
    "char": "STRING",
    "int": "INT64",
    "integer": "INT64",
    "bigint": "INT64",
    "smallint": "INT64",
    "float": "FLOAT64",
    "numeric": "FLOAT64",
    "double": "FLOAT64",
    "date": "DATE",
    "datetime": "TIMESTAMP",
    "timestamp": "TIMESTAMP",
    "boolean": "BOOL",
}

_PLACEHOLDER = re.compile(r"@([A-Za-z_][A-Za-z0-9_]*)")


def load_results_data_model(path: Path = RESULTS_DATA_MODEL_FILE) -> pd.DataFrame:
    spec = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = [c for c in SPEC_COLUMNS if c not in spec.columns]
    if missing:
        raise ValueError(f"Results data model specification {path} missing columns: {missing}")
    return spec


def prefix_table_names(spec: pd.DataFrame, table_prefix: str) -> pd.DataFrame:
    out = spec.copy()
    out["table_name"] = table_prefix + out["table_name"]
    return out


def _bq_type(data_type: str) -> str:
    base = data_type.strip().lower().split("(", 1)[0].strip()
    if base not in _BQ_TYPES:
        raise ValueError(f"Unsupported data type in results data model: {data_type!r}")
    return _BQ_TYPES[base]


def _is_yes(value: str) -> bool:
    return str(value).strip().lower() in {"yes", "y", "true", "1"}


def generate_sql_schema(spec: pd.DataFrame) -> str:
    """Build CREATE TABLE statements with an @database_schema placeholder."""
    statements: list[str] = []
    for table_name, cols in spec.groupby("table_name", sort=False):
        lines = []
        for _, row in cols.iterrows():
            line = f"  {row['column_name']} {_bq_type(row['data_type'])}"
            if _is_yes(row["is_required"]) or _is_yes(row["primary_key"]):
                line += " NOT NULL"
            lines.append(line)
        keys = [row["column_name"] for _, row in cols.iterrows() if _is_yes(row["primary_key"])]
        if keys:
            lines.append(f"  PRIMARY KEY ({', '.join(keys)}) NOT ENFORCED")
        body = ",\n".join(lines)
        statements.append(f"CREATE TABLE IF NOT EXISTS `@database_schema.{table_name}` (\n{body}\n);")
    return "\n\n".join(statements)


def render_sql(sql: str, **params: str) -> str:
    def _sub(match: re.Match) -> str:
        name = match.group(1)
        if name not in params:
            raise ValueError(f"No value supplied for SQL parameter @{name}")
        return str(params[name])

    return _PLACEHOLDER.sub(_sub, sql)
