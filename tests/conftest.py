"""
Pytest configuration and shared fixtures for the diabetes report tests.
"""

import copy

import numpy as np
import pandas as pd
import pytest

from config import CONFIG
from diabetes_report.dataset import FIELDS

KAGGLE_COLUMNS = {
    "pregnancies": "Pregnancies",
    "glucose": "Glucose",
    "blood_pressure": "BloodPressure",
    "skin_fold": "SkinThickness",
    "insulin": "Insulin",
    "body_mass_index": "BMI",
    "pedigree_score": "DiabetesPedigreeFunction",
    "age": "Age",
    "outcome": "Outcome",
}


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


@pytest.fixture(autouse=True)
def restore_config():
    """Undo any CONFIG changes a test makes."""
    snapshot = copy.deepcopy(CONFIG._config)
    yield
    CONFIG._config = snapshot


def make_pima_like(n: int = 300, seed: int = 42, missing_rate: float = 0.05) -> pd.DataFrame:
    """
    Canonical-layout dataset with realistic ranges, "pos"/"neg" labels and
    a few missing measurements. Diabetes risk rises with glucose, BMI, age,
    pregnancies and pedigree score.
    """
    rng = np.random.default_rng(seed)
    df = pd.DataFrame(
        {
            "pregnancies": rng.poisson(3.5, n),
            "glucose": rng.normal(122, 30, n).clip(56, 198).round(),
            "blood_pressure": rng.normal(71, 12, n).clip(24, 110).round(),
            "skin_fold": rng.normal(29, 10, n).clip(7, 63).round(),
            "insulin": rng.gamma(2.0, 78, n).clip(14, 846).round(),
            "body_mass_index": rng.normal(33, 7, n).clip(18, 67).round(1),
            "pedigree_score": rng.gamma(2.0, 0.26, n).clip(0.085, 2.42).round(3),
            "age": rng.integers(21, 81, n),
        }
    )
    log_odds = (
        -10
        + 0.038 * df["glucose"]
        + 0.07 * df["body_mass_index"]
        + 0.03 * df["age"]
        + 0.1 * df["pregnancies"]
        + 1.0 * df["pedigree_score"]
    )
    prob = 1 / (1 + np.exp(-log_odds))
    df["outcome"] = np.where(rng.random(n) < prob, "pos", "neg")

    for col in ("skin_fold", "insulin"):
        df.loc[rng.random(n) < missing_rate, col] = np.nan

    return df[list(FIELDS)]


def to_kaggle_layout(df: pd.DataFrame) -> pd.DataFrame:
    """Kaggle CSV layout: CamelCase columns, 0 for unrecorded values, Outcome 1/0."""
    kaggle = df.fillna(0).copy()
    kaggle["outcome"] = (kaggle["outcome"] == "pos").astype(int)
    return kaggle.rename(columns=KAGGLE_COLUMNS)


@pytest.fixture
def ten_records() -> pd.DataFrame:
    """
    10 observations: 2 incomplete, and among the 8 complete ones 3 positive, 5 negative.
    """
    rows = [
        (6, 148, 72, 35, 155, 33.6, 0.627, 50, "pos"),
        (1, 85, 66, 29, 56, 26.6, 0.351, 31, "neg"),
        (8, 183, 64, 23, 200, 23.3, 0.672, 32, "pos"),
        (1, 89, 66, 23, 94, 28.1, 0.167, 21, "neg"),
        (0, 137, 40, 35, 168, 43.1, 2.288, 33, "pos"),
        (5, 116, 74, 20, 60, 25.6, 0.201, 30, "neg"),
        (3, 78, 50, 32, 88, 31.0, 0.248, 26, "neg"),
        (2, 110, 70, 25, 70, 27.0, 0.300, 28, "neg"),
        (10, np.nan, 80, 30, 100, 35.0, 0.500, 45, "pos"),
        (4, 120, 76, np.nan, 120, 30.0, 0.400, 40, "neg"),
    ]
    return pd.DataFrame(rows, columns=list(FIELDS))


@pytest.fixture
def pima_like() -> pd.DataFrame:
    return make_pima_like()


@pytest.fixture
def kaggle_csv(tmp_path, pima_like):
    """Path to a Kaggle-layout CSV of the synthetic dataset."""
    path = tmp_path / "diabetes.csv"
    to_kaggle_layout(pima_like).to_csv(path, index=False)
    return path


@pytest.fixture
def make_dataset():
    """Factory fixture: make_dataset(n=..., seed=..., missing_rate=...)."""
    return make_pima_like


@pytest.fixture
def kaggle_layout():
    """The to_kaggle_layout converter."""
    return to_kaggle_layout
