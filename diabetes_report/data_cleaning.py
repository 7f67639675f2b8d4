"""
Data Cleaning
Complete-case filtering and outcome recoding for the diabetes dataset.

The input frame is never modified; every function returns a new frame.
"""

from __future__ import annotations

from typing import Any

import pandas as pd

from logger import get_logger

from .dataset import FIELDS, OUTCOME, PREDICTORS
from .exceptions import DataValidationError, MalformedLabelError
from .formatting import format_percentage

logger = get_logger(__name__)

LABEL_CODES: dict[str, int] = {"neg": 0, "pos": 1}


def _label_code(value: Any) -> int | None:
    """Numeric code for one outcome label, None when it is not a valid label."""
    if isinstance(value, str):
        return LABEL_CODES.get(value)
    if isinstance(value, bool):
        return None
    try:
        if value in (0, 1):
            return int(value)
    except TypeError:
        return None
    return None


def encode_outcome(series: pd.Series) -> pd.Series:
    """
    Recode outcome labels "pos" -> 1 and "neg" -> 0.

    Values already coded 0/1 pass through, which keeps cleaning idempotent.
    Missing values stay missing.

    Raises:
        MalformedLabelError: If any non-missing value is not a valid label.
    """
    present = series.dropna()
    codes = present.map(_label_code)
    bad = present[codes.isna()]
    if not bad.empty:
        offending = sorted({str(v) for v in bad})
        logger.error(f"Malformed outcome labels: {offending}")
        raise MalformedLabelError(
            f"Outcome must be 'pos' or 'neg'; found {offending} in {len(bad)} rows"
        )
    return codes.reindex(series.index)


def validate_columns(df: pd.DataFrame) -> None:
    """
    Raises:
        DataValidationError: If any canonical field is missing from `df`.
    """
    missing = [col for col in FIELDS if col not in df.columns]
    if missing:
        raise DataValidationError(f"Dataset is missing required columns: {missing}")


def coerce_predictors(df: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy with every predictor converted to a numeric dtype.

    Raises:
        DataValidationError: On non-numeric entries or negative values.
    """
    df_copy = df.copy()
    for col in PREDICTORS:
        try:
            df_copy[col] = pd.to_numeric(df_copy[col], errors="raise")
        except (ValueError, TypeError) as e:
            raise DataValidationError(f"Column '{col}' contains non-numeric values: {e}") from e

        n_negative = int((df_copy[col] < 0).sum())
        if n_negative:
            raise DataValidationError(
                f"Column '{col}' has {n_negative} negative values; measurements must be non-negative"
            )
    return df_copy


def clean(
    dataset: pd.DataFrame, return_counts: bool = False
) -> pd.DataFrame | tuple[pd.DataFrame, dict[str, Any]]:
    """
    Drop incomplete records and recode the outcome to 0/1.

    Parameters:
        dataset (pd.DataFrame): Canonical dataset (see dataset.FIELDS).
        return_counts (bool): Also return a dict with original_rows, final_rows,
            rows_removed and pct_removed.

    Returns:
        pd.DataFrame: Complete rows only, canonical column order, fresh RangeIndex,
        `outcome` as int64 in {0, 1}.

    Raises:
        DataValidationError: Missing columns, non-numeric or negative measurements.
        MalformedLabelError: Outcome values other than "pos"/"neg" (or 0/1).
    """
    validate_columns(dataset)
    df = coerce_predictors(dataset[list(FIELDS)])
    df[OUTCOME] = encode_outcome(df[OUTCOME])

    original_rows = len(df)
    df_clean = df.dropna().reset_index(drop=True)
    df_clean[OUTCOME] = df_clean[OUTCOME].astype("int64")

    rows_removed = original_rows - len(df_clean)
    logger.info(
        f"Missing data handling: {original_rows} -> {len(df_clean)} rows "
        f"({rows_removed} removed, strategy='complete-case')"
    )

    if return_counts:
        counts = {
            "original_rows": original_rows,
            "final_rows": len(df_clean),
            "rows_removed": rows_removed,
            "pct_removed": format_percentage(rows_removed, original_rows) if original_rows else "0",
        }
        return df_clean, counts

    return df_clean


def missing_summary(dataset: pd.DataFrame) -> pd.DataFrame:
    """
    Per-variable missing-data summary.

    Returns:
        pd.DataFrame: Columns Variable, N_Total, N_Valid, N_Missing, Pct_Missing
        (string, one decimal), sorted by N_Missing descending; ties keep the
        canonical field order.
    """
    validate_columns(dataset)
    total = len(dataset)
    rows = []
    for col in FIELDS:
        n_missing = int(dataset[col].isna().sum())
        rows.append(
            {
                "Variable": col,
                "N_Total": total,
                "N_Valid": total - n_missing,
                "N_Missing": n_missing,
                "Pct_Missing": format_percentage(n_missing, total) if total else "0",
            }
        )

    summary_df = pd.DataFrame(rows)
    return summary_df.sort_values("N_Missing", ascending=False, kind="stable").reset_index(drop=True)
