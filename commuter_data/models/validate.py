"""Validation utilities for GTFS table contracts."""

from __future__ import annotations

import pandas as pd

from commuter_data.models.schemas import TableSchema


def empty_frame(schema: TableSchema) -> pd.DataFrame:
    """An empty frame carrying every column of `schema` (used for absent tables)."""
    return pd.DataFrame({c: pd.Series(dtype="string") for c in schema.columns()})


def validate_df(df: pd.DataFrame, schema: TableSchema) -> pd.DataFrame:
    """Validate a dataframe against a schema. Returns a coerced copy.

    Optional columns missing from `df` are added as empty strings so downstream
    code can index them unconditionally. Extra columns are kept.
    """
    missing = [c for c in schema.required_columns if c not in df.columns]
    if missing:
        raise ValueError(f"{schema.name}: missing required columns: {missing}")

    out = df.copy()
    for col in schema.optional_columns:
        if col not in out.columns:
            out[col] = ""

    for col, dtype in schema.dtypes.items():
        if col not in out.columns:
            continue
        try:
            out[col] = out[col].astype(dtype)
        except Exception as exc:  # noqa: BLE001 - surface as actionable schema error
            raise TypeError(
                f"{schema.name}: failed to coerce column '{col}' to dtype '{dtype}': {exc}"
            ) from exc

    return out
