"""Shared utilities for pandas conversion operations."""

from decimal import Decimal
from typing import Mapping, Sequence

import pandas as pd  # type: ignore


def decimal_to_float(value: Decimal) -> float:
    """Convert Decimal to float for pandas compatibility."""
    return float(value)


def empty_frame(columns: Sequence[str]) -> pd.DataFrame:
    """Return an empty DataFrame with the given columns."""
    return pd.DataFrame(columns=list(columns))


def check_columns(df: pd.DataFrame, required: Mapping[str, str]) -> None:
    """Raise ValueError if any mapped column is missing from ``df``.

    Args:
        df: DataFrame to check
        required: Mapping of canonical field name to DataFrame column name

    Raises:
        ValueError: If DataFrame is missing one of the mapped columns
    """
    missing_cols = set(required.values()) - set(df.columns)
    if missing_cols:
        raise ValueError(f"DataFrame missing required columns: {missing_cols}")
