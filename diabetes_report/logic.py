"""
Logistic Regression Core Logic

Fits the log-odds of diabetes on every clinical measurement at once. There is
no variable screening: all eight predictors enter the model.
"""

from __future__ import annotations

import warnings
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.tools.sm_exceptions import (
    ConvergenceWarning,
    PerfectSeparationError,
    PerfectSeparationWarning,
)

from config import CONFIG
from logger import get_logger

from .dataset import OUTCOME, PREDICTORS
from .exceptions import ConvergenceError, UnderdeterminedModelError
from .formatting import format_estimate, format_p_value

logger = get_logger(__name__)

INTERCEPT = "intercept"


@dataclass(frozen=True)
class CoefficientEstimate:
    coefficient: float
    std_error: float
    odds_ratio: float
    ci_low: float
    ci_high: float
    p_value: float


@dataclass(frozen=True)
class FittedModel(Mapping):
    """
    Result of one logistic regression fit.

    Behaves as a read-only mapping from term name ("intercept" and each predictor)
    to its CoefficientEstimate. `ci_low`/`ci_high` are on the odds-ratio scale.
    """

    estimates: Mapping[str, CoefficientEstimate]
    n_obs: int
    ci_level: float
    converged: bool
    iterations: Optional[int]
    log_likelihood: float
    mcfadden: float = np.nan
    nagelkerke: float = np.nan
    llr_p_value: float = np.nan
    terms: tuple[str, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "estimates", MappingProxyType(dict(self.estimates)))
        if not self.terms:
            object.__setattr__(self, "terms", tuple(self.estimates))

    def __getitem__(self, term: str) -> CoefficientEstimate:
        return self.estimates[term]

    def __iter__(self) -> Iterator[str]:
        return iter(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    def coefficient_table(self, include_intercept: bool = True) -> pd.DataFrame:
        """
        One row per term with raw and exponentiated estimates.

        Columns: term, coefficient, std_error, exponentiated_coefficient,
        confidence_interval_low, confidence_interval_high, p_value.
        """
        rows = []
        for term in self.terms:
            if term == INTERCEPT and not include_intercept:
                continue
            est = self.estimates[term]
            rows.append(
                {
                    "term": term,
                    "coefficient": est.coefficient,
                    "std_error": est.std_error,
                    "exponentiated_coefficient": est.odds_ratio,
                    "confidence_interval_low": est.ci_low,
                    "confidence_interval_high": est.ci_high,
                    "p_value": est.p_value,
                }
            )
        return pd.DataFrame(rows)

    def display_table(self) -> pd.DataFrame:
        """Predictor rows formatted for a regression table: OR, CI and p-value strings."""
        ci_label = f"{self.ci_level * 100:g}% CI"
        rows = []
        for term in self.terms:
            if term == INTERCEPT:
                continue
            est = self.estimates[term]
            rows.append(
                {
                    "Characteristic": term,
                    "OR": format_estimate(est.odds_ratio),
                    ci_label: f"{format_estimate(est.ci_low)} - {format_estimate(est.ci_high)}",
                    "p-value": format_p_value(est.p_value),
                }
            )
        return pd.DataFrame(rows)


def validate_logit_data(y: pd.Series, X: pd.DataFrame) -> None:
    """
    Check that the model is identifiable before fitting.

    Raises:
        UnderdeterminedModelError: Fewer than two outcome classes, no more
            observations than parameters, or a constant predictor.
    """
    n_params = X.shape[1] + 1
    if y.nunique() < 2:
        raise UnderdeterminedModelError(
            f"Outcome has {y.nunique()} distinct value(s); both classes are required"
        )
    if len(y) <= n_params:
        raise UnderdeterminedModelError(
            f"{len(y)} observations cannot identify {n_params} parameters"
        )
    constant = [col for col in X.columns if X[col].nunique() <= 1]
    if constant:
        raise UnderdeterminedModelError(f"Predictors with zero variance: {constant}")


def _fit_statistics(result) -> dict[str, float]:
    llf = result.llf
    llnull = result.llnull
    nobs = result.nobs
    mcfadden = 1 - (llf / llnull) if llnull != 0 else np.nan
    cox_snell = 1 - np.exp((2 / nobs) * (llnull - llf))
    max_r2 = 1 - np.exp((2 / nobs) * llnull)
    return {
        "mcfadden": float(mcfadden),
        "nagelkerke": float(cox_snell / max_r2) if max_r2 > 1e-9 else np.nan,
        "llr_p_value": float(getattr(result, "llr_pvalue", np.nan)),
    }


def run_binary_logit(y: pd.Series, X: pd.DataFrame):
    """
    Fit a statsmodels Logit of `y` on `X` plus a constant.

    Returns the statsmodels results object. Every failure mode that would leave
    estimates undefined (non-convergence, perfect separation, singular Hessian,
    non-finite estimates) is raised as ConvergenceError.
    """
    validate_logit_data(y, X)

    method = CONFIG.get("analysis.logit_method", "newton")
    max_iter = CONFIG.get("analysis.logit_max_iter", 100)
    X_const = sm.add_constant(X, has_constant="add")

    model = sm.Logit(y, X_const)
    model.raise_on_perfect_prediction = True

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            result = model.fit(method=method, maxiter=max_iter, disp=0)
        except PerfectSeparationError as e:
            logger.error(f"Logistic regression failed: {e}")
            raise ConvergenceError(
                "Perfect separation: an outcome class is predicted exactly, "
                "so maximum-likelihood estimates do not exist"
            ) from e
        except np.linalg.LinAlgError as e:
            logger.error(f"Logistic regression failed: {e}")
            raise ConvergenceError(
                "Model fitting failed: singular information matrix "
                "(separation or collinearity)"
            ) from e

    for w in caught:
        if issubclass(w.category, (ConvergenceWarning, PerfectSeparationWarning)):
            logger.error(f"Logistic regression failed: {w.message}")
            raise ConvergenceError(f"Model did not converge: {w.message}")

    if not result.mle_retvals.get("converged", False):
        logger.error(f"Logistic regression did not converge within {max_iter} iterations")
        raise ConvergenceError(f"Model did not converge within {max_iter} iterations")

    params = np.asarray(result.params, dtype=float)
    bse = np.asarray(result.bse, dtype=float)
    if not (np.all(np.isfinite(params)) and np.all(np.isfinite(bse))):
        logger.error("Logistic regression produced non-finite estimates")
        raise ConvergenceError("Model produced non-finite coefficients or standard errors")

    return result


def fit(clean_dataset: pd.DataFrame) -> FittedModel:
    """
    Fit the logistic regression of `outcome` on all predictors.

    Parameters:
        clean_dataset (pd.DataFrame): Output of data_cleaning.clean().

    Returns:
        FittedModel: Intercept plus one entry per predictor, with odds ratios,
        Wald confidence intervals at CONFIG.get('analysis.ci_level') and p-values.

    Raises:
        UnderdeterminedModelError: Not enough data to identify the model.
        ConvergenceError: The fit did not reach finite maximum-likelihood estimates.
    """
    y = clean_dataset[OUTCOME].astype(float)
    X = clean_dataset[list(PREDICTORS)].astype(float)
    ci_level = CONFIG.get("analysis.ci_level", 0.95)

    logger.log_analysis("Logistic Regression", outcome=OUTCOME, n_vars=X.shape[1], n_samples=len(y))

    with logger.track_time("fit_logit"):
        result = run_binary_logit(y, X)

    conf_int = result.conf_int(alpha=1 - ci_level)
    estimates: dict[str, CoefficientEstimate] = {}
    for name in result.params.index:
        term = INTERCEPT if name == "const" else name
        coef = float(result.params[name])
        estimates[term] = CoefficientEstimate(
            coefficient=coef,
            std_error=float(result.bse[name]),
            odds_ratio=float(np.exp(coef)),
            ci_low=float(np.exp(conf_int.loc[name, 0])),
            ci_high=float(np.exp(conf_int.loc[name, 1])),
            p_value=float(result.pvalues[name]),
        )

    iterations = result.mle_retvals.get("iterations")
    model = FittedModel(
        estimates=estimates,
        n_obs=int(result.nobs),
        ci_level=ci_level,
        converged=True,
        iterations=int(iterations) if iterations is not None else None,
        log_likelihood=float(result.llf),
        **_fit_statistics(result),
    )
    logger.log_operation(
        "fit_logit", "completed", n=model.n_obs, iterations=model.iterations,
        mcfadden=f"{model.mcfadden:.3f}",
    )
    return model
