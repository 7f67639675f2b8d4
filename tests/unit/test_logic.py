"""
Unit tests for the logistic regression fitter.
"""

import numpy as np
import pandas as pd
import pytest

from config import CONFIG
from diabetes_report.data_cleaning import clean
from diabetes_report.dataset import PREDICTORS
from diabetes_report.exceptions import ConvergenceError, UnderdeterminedModelError
from diabetes_report.logic import INTERCEPT, FittedModel, fit

pytestmark = pytest.mark.unit


@pytest.fixture
def clean_pima(pima_like):
    return clean(pima_like)


@pytest.fixture
def separated(make_dataset):
    """Glucose alone splits the classes: every negative is below 120, every positive above 140."""
    df = clean(make_dataset(n=40, seed=7, missing_rate=0.0))
    rng = np.random.default_rng(3)
    df["outcome"] = np.array([0, 1] * 20, dtype="int64")
    df["glucose"] = np.where(
        df["outcome"] == 1, rng.uniform(140, 199, 40).round(), rng.uniform(70, 119, 40).round()
    )
    return df


class TestFit:
    def test_one_entry_per_predictor_plus_intercept(self, clean_pima):
        model = fit(clean_pima)

        assert isinstance(model, FittedModel)
        assert list(model) == [INTERCEPT, *PREDICTORS]
        assert len(model) == len(PREDICTORS) + 1
        assert model.converged
        assert model.n_obs == len(clean_pima)

    def test_odds_ratios_are_exponentiated(self, clean_pima):
        model = fit(clean_pima)

        for term in model:
            est = model[term]
            assert est.odds_ratio == pytest.approx(np.exp(est.coefficient))
            assert est.ci_low < est.odds_ratio < est.ci_high
            assert 0 <= est.p_value <= 1
            assert est.std_error > 0

    def test_detects_glucose_effect(self, clean_pima):
        model = fit(clean_pima)

        assert model["glucose"].odds_ratio > 1
        assert model["glucose"].p_value < 0.05

    def test_fit_statistics(self, clean_pima):
        model = fit(clean_pima)

        assert 0 < model.mcfadden < 1
        assert 0 < model.nagelkerke < 1
        assert model.llr_p_value < 0.05
        assert model.log_likelihood < 0

    def test_ci_level_from_config(self, clean_pima):
        wide = fit(clean_pima)["glucose"]
        CONFIG.update("analysis.ci_level", 0.80)
        narrow = fit(clean_pima)["glucose"]

        assert narrow.ci_high - narrow.ci_low < wide.ci_high - wide.ci_low
        assert narrow.odds_ratio == pytest.approx(wide.odds_ratio)

    def test_result_is_read_only(self, clean_pima):
        model = fit(clean_pima)

        with pytest.raises(TypeError):
            model.estimates["glucose"] = model[INTERCEPT]
        with pytest.raises(AttributeError):
            model.n_obs = 0

    def test_input_not_modified(self, clean_pima):
        original = clean_pima.copy()
        fit(clean_pima)
        pd.testing.assert_frame_equal(clean_pima, original)


class TestCoefficientTables:
    def test_coefficient_table_columns(self, clean_pima):
        table = fit(clean_pima).coefficient_table()

        assert list(table.columns) == [
            "term",
            "coefficient",
            "std_error",
            "exponentiated_coefficient",
            "confidence_interval_low",
            "confidence_interval_high",
            "p_value",
        ]
        assert table["term"].tolist() == [INTERCEPT, *PREDICTORS]

    def test_coefficient_table_without_intercept(self, clean_pima):
        table = fit(clean_pima).coefficient_table(include_intercept=False)
        assert table["term"].tolist() == list(PREDICTORS)

    def test_display_table(self, clean_pima):
        table = fit(clean_pima).display_table()

        assert list(table.columns) == ["Characteristic", "OR", "95% CI", "p-value"]
        assert len(table) == len(PREDICTORS)
        low, high = table.loc[table["Characteristic"] == "glucose", "95% CI"].iloc[0].split(" - ")
        assert float(low) <= float(high)


class TestFitFailures:
    def test_perfect_separation_raises_convergence_error(self, separated):
        with pytest.raises(ConvergenceError):
            fit(separated)

    def test_single_outcome_class(self, clean_pima):
        df = clean_pima.assign(outcome=1)
        with pytest.raises(UnderdeterminedModelError, match="both classes"):
            fit(df)

    def test_too_few_observations(self, clean_pima):
        df = pd.concat(
            [clean_pima[clean_pima["outcome"] == 0].head(5), clean_pima[clean_pima["outcome"] == 1].head(4)]
        )
        with pytest.raises(UnderdeterminedModelError, match="observations"):
            fit(df)

    def test_constant_predictor(self, clean_pima):
        df = clean_pima.assign(pregnancies=2)
        with pytest.raises(UnderdeterminedModelError, match="pregnancies"):
            fit(df)

    def test_iteration_limit(self, clean_pima):
        CONFIG.update("analysis.logit_max_iter", 1)
        with pytest.raises(ConvergenceError):
            fit(clean_pima)
