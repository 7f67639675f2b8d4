"""
Summary Statistics Table

Per outcome group (0 = negative, 1 = positive) and per predictor: min, max,
mean, median and the 25th/75th percentiles. Percentiles use linear
interpolation between order statistics (Hyndman & Fan type 7, the numpy and
pandas default), so [1, 2, 3, 4] gives 1.75 and 3.25.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

import pandas as pd

from logger import get_logger

from .dataset import OUTCOME, PREDICTORS
from .exceptions import EmptyGroupError
from .formatting import format_median_iqr, format_number, format_range

logger = get_logger(__name__)

OUTCOME_GROUPS: tuple[int, ...] = (0, 1)
GROUP_LABELS: dict[int, str] = {0: "neg", 1: "pos"}
DISPLAY_COLUMNS: tuple[str, ...] = ("range", "mean", "median_iqr")


@dataclass(frozen=True)
class SummaryCell:
    """Descriptive statistics of one variable within one outcome group."""

    n: int
    min: float
    max: float
    mean: float
    median: float
    pct25: float
    pct75: float

    @property
    def formatted(self) -> dict[str, str]:
        return {
            "min": format_number(self.min),
            "max": format_number(self.max),
            "mean": format_number(self.mean),
            "median": format_number(self.median),
            "pct25": format_number(self.pct25),
            "pct75": format_number(self.pct75),
        }

    @property
    def range(self) -> str:
        f = self.formatted
        return format_range(f["min"], f["max"])

    @property
    def median_iqr(self) -> str:
        f = self.formatted
        return format_median_iqr(f["median"], f["pct25"], f["pct75"])

    def display(self) -> dict[str, str]:
        """The three display fields, in table column order."""
        return {
            "range": self.range,
            "mean": format_number(self.mean),
            "median_iqr": self.median_iqr,
        }


@dataclass(frozen=True)
class SummaryTable(Mapping):
    """
    Read-only mapping from (outcome_group, variable) to SummaryCell.
    """

    cells: Mapping[tuple[int, str], SummaryCell]
    variables: tuple[str, ...] = PREDICTORS
    groups: tuple[int, ...] = OUTCOME_GROUPS

    def __post_init__(self):
        object.__setattr__(self, "cells", MappingProxyType(dict(self.cells)))

    def __getitem__(self, key: tuple[int, str]) -> SummaryCell:
        return self.cells[key]

    def __iter__(self) -> Iterator[tuple[int, str]]:
        for group in self.groups:
            for variable in self.variables:
                yield (group, variable)

    def __len__(self) -> int:
        return len(self.groups) * len(self.variables)

    def records(self) -> list[dict[str, object]]:
        """Long form: one dict per (variable, outcome) with the display fields."""
        rows = []
        for variable in self.variables:
            for group in self.groups:
                rows.append(
                    {"variable": variable, "outcome": group, **self.cells[(group, variable)].display()}
                )
        return rows

    def to_frame(self) -> pd.DataFrame:
        """
        Wide display frame: one row per variable, one column group per outcome
        value, each group ordered range, mean, median_iqr.
        """
        columns = pd.MultiIndex.from_tuples(
            [(group, stat) for group in self.groups for stat in DISPLAY_COLUMNS],
            names=[OUTCOME, "statistic"],
        )
        data = [
            [self.cells[(group, variable)].display()[stat] for group in self.groups for stat in DISPLAY_COLUMNS]
            for variable in self.variables
        ]
        return pd.DataFrame(data, index=pd.Index(self.variables, name="variable"), columns=columns)


def describe(values: pd.Series) -> SummaryCell:
    """
    Descriptive statistics for one group's values of one variable.

    Raises:
        EmptyGroupError: If `values` has no non-missing entries.
    """
    values = values.dropna().astype(float)
    if values.empty:
        raise EmptyGroupError(f"No values to summarize for '{values.name}'")
    q25, q50, q75 = values.quantile([0.25, 0.5, 0.75], interpolation="linear")
    return SummaryCell(
        n=int(values.size),
        min=float(values.min()),
        max=float(values.max()),
        mean=float(values.mean()),
        median=float(q50),
        pct25=float(q25),
        pct75=float(q75),
    )


def summarize(clean_dataset: pd.DataFrame) -> SummaryTable:
    """
    Build the summary table from a cleaned dataset.

    Raises:
        EmptyGroupError: If either outcome group has no records.
    """
    cells: dict[tuple[int, str], SummaryCell] = {}
    for group in OUTCOME_GROUPS:
        members = clean_dataset[clean_dataset[OUTCOME] == group]
        if members.empty:
            logger.error(f"Outcome group {group} ({GROUP_LABELS[group]}) has no records")
            raise EmptyGroupError(
                f"Outcome group {group} ({GROUP_LABELS[group]}) has no records; "
                "percentiles are undefined"
            )
        for variable in PREDICTORS:
            cells[(group, variable)] = describe(members[variable])

    logger.debug(f"Summarized {len(PREDICTORS)} variables across {len(OUTCOME_GROUPS)} outcome groups")
    return SummaryTable(cells=cells)
