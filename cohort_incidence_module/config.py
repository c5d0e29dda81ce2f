"""Configuration for the cohort incidence execution module."""

from __future__ import annotations

import json
import os
from pathlib import Path

RESOURCES_DIR = Path(__file__).resolve().parent / "resources"

MODULE_INFO_FILE = RESOURCES_DIR / "MetaData.json"
RESULTS_DATA_MODEL_FILE = RESOURCES_DIR / "resultsDataModelSpecification.csv"

INCIDENCE_SUMMARY_TABLE = "incidence_summary"
TARGET_OUTCOME_REF_TABLE = "target_outcome_ref"
RESULTS_DATA_MODEL_EXPORT_NAME = "resultsDataModelSpecification.csv"

CONFIG = {
    # Overrides the TablePrefix from MetaData.json when set.
    "table_prefix": os.environ.get("CI_TABLE_PREFIX", "").strip(),
    "default_ref_id": os.environ.get("CI_DEFAULT_REF_ID", "1").strip(),
    "bq_location": os.environ.get("GOOGLE_CLOUD_REGION", "US"),
    "log_format": "%(asctime)s | %(levelname)s | %(message)s",
}


def load_module_info(path: Path = MODULE_INFO_FILE) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Module metadata not found: {path}")
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def table_prefix(module_info: dict | None = None) -> str:
    if CONFIG["table_prefix"]:
        return CONFIG["table_prefix"]
    info = module_info if module_info is not None else load_module_info()
    return str(info.get("TablePrefix", ""))


def default_ref_id() -> int:
    return int(CONFIG["default_ref_id"])


def validate_config() -> None:
    try:
        ref_id = default_ref_id()
    except ValueError as exc:
        raise ValueError(f"CI_DEFAULT_REF_ID must be an integer, got {CONFIG['default_ref_id']!r}.") from exc
    if ref_id < 0:
        raise ValueError("CI_DEFAULT_REF_ID must be non-negative.")
    if not RESULTS_DATA_MODEL_FILE.exists():
        raise ValueError(f"Results data model specification missing: {RESULTS_DATA_MODEL_FILE}")


def ensure_output_dir(path: str | Path) -> Path:
    out_dir = Path(path).resolve()
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir
