"""Minimum cell count suppression for incidence summary results."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

COUNT_COLUMNS = (
    "PERSONS_AT_RISK_PE",
    "PERSONS_AT_RISK",
    "PERSON_OUTCOMES_PE",
    "PERSON_OUTCOMES",
    "OUTCOMES_PE",
    "OUTCOMES",
)

# Derived statistic -> count column it is computed from.
DERIVED_STAT_COLUMNS = {
    "INCIDENCE_RATE_P100PY": "OUTCOMES",
    "INCIDENCE_PROPORTION_P100P": "PERSON_OUTCOMES",
}

INCIDENCE_SUMMARY_DTYPES = {
    **{col: "Int64" for col in COUNT_COLUMNS},
    **{col: "Float64" for col in DERIVED_STAT_COLUMNS},
}


def coerce_incidence_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Cast count and derived-stat columns to nullable numeric dtypes."""
    missing = [col for col in INCIDENCE_SUMMARY_DTYPES if col not in df.columns]
    if missing:
        raise ValueError(f"Incidence summary is missing required columns: {missing}")
    return df.astype(INCIDENCE_SUMMARY_DTYPES)


def _negative_mask(values: pd.Series) -> pd.Series:
    return (values < 0).fillna(False).astype(bool)


def suppress_field(
    data: pd.DataFrame,
    field_name: str,
    min_value: int,
    silent: bool = False,
) -> pd.DataFrame:
    """Replace non-zero counts below min_value with -min_value."""
    if field_name not in data.columns:
        raise ValueError(f"Unknown field for suppression: {field_name}")
    if min_value < 0:
        raise ValueError(f"Minimum cell value must be non-negative, got {min_value}")

    values = data[field_name]
    to_censor = (values.notna() & (values < min_value) & (values != 0)).fillna(False).astype(bool)
    n_censored = int(to_censor.sum())

    if not silent:
        percent = round(100 * n_censored / len(data), 1) if len(data) else 0.0
        logging.info(
            "   censoring %s values (%s%%) from %s because value below minimum",
            n_censored,
            percent,
            field_name,
        )

    out = data.copy()
    out.loc[to_censor, field_name] = -min_value
    return out


def suppress_derived_stats(data: pd.DataFrame) -> pd.DataFrame:
    """Null out rates and proportions whose numerator was suppressed."""
    out = data.copy()
    for stat_col, count_col in DERIVED_STAT_COLUMNS.items():
        if count_col not in out.columns or stat_col not in out.columns:
            raise ValueError(f"Cannot suppress {stat_col}: columns {count_col}/{stat_col} required")
        out.loc[_negative_mask(out[count_col]), stat_col] = np.nan
    return out


def enforce_min_cell_count(data: pd.DataFrame, min_cell_count: int | None) -> pd.DataFrame:
    """Censor all count columns, then their derived stats; 0/None passes through."""
    if not min_cell_count or min_cell_count <= 0:
        return data

    out = data
    for field_name in COUNT_COLUMNS:
        out = suppress_field(out, field_name, min_cell_count)
    # Must run after every count column has been censored.
    return suppress_derived_stats(out)
