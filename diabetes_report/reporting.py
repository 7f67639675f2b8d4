"""
Report assembly.

Turns the stage outputs into the values a document template interpolates:
narrative counts, a missing-data statement, long-form data for the
distribution plot, and the two presentation tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd

from logger import get_logger

from .data_cleaning import clean, missing_summary
from .dataset import OUTCOME, PREDICTORS, load_dataset
from .exceptions import EmptyGroupError
from .formatting import format_percentage
from .logic import FittedModel, fit
from .summary_table import SummaryTable, summarize

logger = get_logger(__name__)


@dataclass(frozen=True)
class NarrativeCounts:
    n_total: int
    n_clean: int
    n_positive: int
    pct_positive: str
    n_negative: int
    pct_negative: str
    n_excluded: int
    pct_excluded: str

    def sentences(self) -> dict[str, str]:
        """Text fragments for the narrative paragraph."""
        return {
            "total": f"{self.n_total} patients",
            "clean": f"{self.n_clean} patients",
            "positive": f"{self.n_positive} ({self.pct_positive}%) positive",
            "negative": f"{self.n_negative} ({self.pct_negative}%) negative",
        }

    def paragraph(self) -> str:
        s = self.sentences()
        return (
            f"The dataset contains {s['total']}. After removing records with missing "
            f"values, {s['clean']} remain: {s['positive']} and {s['negative']} "
            f"for diabetes."
        )


@dataclass(frozen=True)
class Report:
    narrative: NarrativeCounts
    missing_statement: str
    missing_table: pd.DataFrame
    distribution: pd.DataFrame
    summary: SummaryTable
    model: FittedModel

    @property
    def summary_frame(self) -> pd.DataFrame:
        return self.summary.to_frame()

    @property
    def coefficient_frame(self) -> pd.DataFrame:
        return self.model.coefficient_table(include_intercept=False)


def build_narrative(dataset: pd.DataFrame, clean_dataset: pd.DataFrame) -> NarrativeCounts:
    """
    Counts and percentages for the narrative. Percentages are of the cleaned
    total, one decimal, rounded half-up.

    Raises:
        EmptyGroupError: If no complete records remain.
    """
    n_total = len(dataset)
    n_clean = len(clean_dataset)
    if n_clean == 0:
        logger.error(f"No complete records among {n_total} observations")
        raise EmptyGroupError(f"No complete records among {n_total} observations")

    n_positive = int((clean_dataset[OUTCOME] == 1).sum())
    n_negative = int((clean_dataset[OUTCOME] == 0).sum())
    n_excluded = n_total - n_clean

    return NarrativeCounts(
        n_total=n_total,
        n_clean=n_clean,
        n_positive=n_positive,
        pct_positive=format_percentage(n_positive, n_clean),
        n_negative=n_negative,
        pct_negative=format_percentage(n_negative, n_clean),
        n_excluded=n_excluded,
        pct_excluded=format_percentage(n_excluded, n_total),
    )


def missing_data_statement(narrative: NarrativeCounts, missing_table: pd.DataFrame) -> str:
    """
    Describe how many observations complete-case analysis excluded and where data were missing.
    """
    details = [
        f"{row.Variable} (n={row.N_Missing}, {row.Pct_Missing}%)"
        for row in missing_table.itertuples(index=False)
        if row.N_Missing > 0
    ]
    detail_text = f" Data were missing for: {', '.join(details)}." if details else ""

    return (
        f"Of {narrative.n_total} observations, {narrative.n_excluded} ({narrative.pct_excluded}%) "
        f"were excluded due to missing data.{detail_text} "
        f"Analysis was conducted using complete-case analysis."
    )


def distribution_long_form(clean_dataset: pd.DataFrame) -> pd.DataFrame:
    """
    Long-form (variable, value, outcome) rows for the distribution plot,
    one per cleaned record and predictor, variables in canonical order.
    """
    long_df = clean_dataset.melt(
        id_vars=[OUTCOME],
        value_vars=list(PREDICTORS),
        var_name="variable",
        value_name="value",
    )
    return long_df[["variable", "value", OUTCOME]]


def build_report(
    dataset: pd.DataFrame,
    clean_dataset: pd.DataFrame,
    model: FittedModel,
    summary: SummaryTable,
) -> Report:
    """Assemble everything the rendered document needs."""
    narrative = build_narrative(dataset, clean_dataset)
    missing_table = missing_summary(dataset)
    return Report(
        narrative=narrative,
        missing_statement=missing_data_statement(narrative, missing_table),
        missing_table=missing_table,
        distribution=distribution_long_form(clean_dataset),
        summary=summary,
        model=model,
    )


def generate_report(source: Optional[str | Path] = None) -> Report:
    """
    Run the whole pipeline once: load, clean, fit, summarize, assemble.

    Any stage error propagates unchanged; there is no partial report.
    """
    logger.log_operation("generate_report", "started", source=source or "config")

    try:
        dataset = load_dataset(source)
        with logger.track_time("clean"):
            clean_dataset = clean(dataset)
        model = fit(clean_dataset)
        with logger.track_time("summarize"):
            summary = summarize(clean_dataset)
        report = build_report(dataset, clean_dataset, model, summary)
    except Exception as e:
        logger.log_operation("generate_report", "failed", error=type(e).__name__)
        raise

    logger.log_operation(
        "generate_report", "completed",
        n_total=report.narrative.n_total, n_clean=report.narrative.n_clean,
    )
    return report
