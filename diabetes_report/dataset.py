"""
Dataset loading for the Pima Indians diabetes data.

The same 768 observations circulate in three column layouts (OpenML, the R
mlbench package and the Kaggle CSV). Whatever the source, the loader returns
one frame with the canonical field names below and outcome labels "pos"/"neg".
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd
from sklearn.datasets import fetch_openml

from config import CONFIG
from logger import get_logger

from .exceptions import DataValidationError

logger = get_logger(__name__)

PREDICTORS: tuple[str, ...] = (
    "pregnancies",
    "glucose",
    "blood_pressure",
    "skin_fold",
    "insulin",
    "body_mass_index",
    "pedigree_score",
    "age",
)
OUTCOME = "outcome"
FIELDS: tuple[str, ...] = PREDICTORS + (OUTCOME,)

COLUMN_LAYOUTS: dict[str, dict[str, str]] = {
    "canonical": {name: name for name in FIELDS},
    "openml": {
        "preg": "pregnancies",
        "plas": "glucose",
        "pres": "blood_pressure",
        "skin": "skin_fold",
        "insu": "insulin",
        "mass": "body_mass_index",
        "pedi": "pedigree_score",
        "age": "age",
        "class": "outcome",
    },
    "mlbench": {
        "pregnant": "pregnancies",
        "glucose": "glucose",
        "pressure": "blood_pressure",
        "triceps": "skin_fold",
        "insulin": "insulin",
        "mass": "body_mass_index",
        "pedigree": "pedigree_score",
        "age": "age",
        "diabetes": "outcome",
    },
    "kaggle": {
        "Pregnancies": "pregnancies",
        "Glucose": "glucose",
        "BloodPressure": "blood_pressure",
        "SkinThickness": "skin_fold",
        "Insulin": "insulin",
        "BMI": "body_mass_index",
        "DiabetesPedigreeFunction": "pedigree_score",
        "Age": "age",
        "Outcome": "outcome",
    },
}

OUTCOME_ALIASES: dict[str, str] = {
    "tested_positive": "pos",
    "tested_negative": "neg",
}


def detect_layout(columns: pd.Index) -> str:
    """
    Name of the first known layout whose columns are all present.

    Raises:
        DataValidationError: If no layout matches.
    """
    present = set(columns)
    for name, mapping in COLUMN_LAYOUTS.items():
        if set(mapping).issubset(present):
            return name
    raise DataValidationError(
        f"Unrecognized column layout: {sorted(map(str, present))}. "
        f"Expected one of {sorted(COLUMN_LAYOUTS)}"
    )


def standardize_label(value: Any) -> Any:
    """
    Map source-specific outcome labels onto "pos"/"neg".

    Unknown labels are returned untouched; rejecting them is the cleaner's job.
    """
    if isinstance(value, str):
        return OUTCOME_ALIASES.get(value, value)
    if pd.isna(value):
        return value
    if value == 1:
        return "pos"
    if value == 0:
        return "neg"
    return value


def standardize_dataset(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Return a new frame with canonical columns, labels and missing values.

    Steps:
    1. Rename the detected layout to the canonical field names (extra columns are dropped).
    2. Map outcome labels to "pos"/"neg".
    3. Recode zeros in CONFIG.get('data.zero_as_missing') to NaN; a zero glucose or
       blood pressure is an unrecorded measurement, not a reading.
    """
    layout = detect_layout(raw.columns)
    mapping = COLUMN_LAYOUTS[layout]
    logger.debug(f"Detected '{layout}' column layout")

    df = raw[list(mapping)].rename(columns=mapping)[list(FIELDS)].copy()
    df[OUTCOME] = df[OUTCOME].astype(object).map(standardize_label)

    for col in CONFIG.get("data.zero_as_missing", []):
        if col in df.columns:
            df[col] = df[col].mask(df[col] == 0)

    return df.reset_index(drop=True)


def _fetch_openml() -> pd.DataFrame:
    data_id = CONFIG.get("data.openml_id", 37)
    logger.log_operation("fetch_openml", "started", data_id=data_id)
    bunch = fetch_openml(data_id=data_id, as_frame=True, parser="auto")
    return bunch.frame


def _read_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        logger.error(f"Dataset file not found: {path}")
        raise FileNotFoundError(f"Dataset file not found: {path}")
    logger.log_operation("read_csv", "started", path=path)
    return pd.read_csv(path, na_values=CONFIG.get("data.csv_na_values", ["NA", ""]))


def load_dataset(source: str | Path | None = None) -> pd.DataFrame:
    """
    Load the diabetes observations.

    Parameters:
        source: "openml" to download through scikit-learn, or a path to a CSV in any
            known layout. Defaults to CONFIG.get('data.source').

    Returns:
        pd.DataFrame: Canonical dataset (see FIELDS), possibly with missing values.
    """
    if source is None:
        source = CONFIG.get("data.source", "openml")

    with logger.track_time("load_dataset", log_level="INFO"):
        raw = _fetch_openml() if str(source) == "openml" else _read_csv(Path(source))
        df = standardize_dataset(raw)

    logger.log_data_summary(
        "dataset", df.shape, {col: str(dtype) for col, dtype in df.dtypes.items()}
    )
    return df
