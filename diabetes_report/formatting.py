"""
Formatting Utilities
Every number the report shows goes through this module so the same
rounding rule is applied in the narrative and in every table.
Driven by central configuration from config.py
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import numpy as np
import pandas as pd

from config import CONFIG


def round_half_up(value: float, places: int) -> str:
    """
    Round `value` to `places` decimals, halves away from zero, and return the fixed-point text.

    Works on the shortest decimal representation of the float, so 6.25 -> "6.3"
    and 2.675 -> "2.68" (binary rounding would give "6.2" and "2.67").
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    return format(rounded, "f")


def decimal_places_for(value: float) -> int:
    """
    Number of decimals the display rule uses for a single value.

    - non-zero values below 1: 3
    - zero and whole numbers: 0
    - everything else: 1
    """
    if value != 0 and value < 1:
        return 3
    if value == 0 or float(value).is_integer():
        return 0
    return 1


def format_number(value: Any) -> str:
    """
    Format one summary statistic for display.

    >>> format_number(0), format_number(0.5), format_number(2.0), format_number(2.345)
    ('0', '0.500', '2', '2.3')

    Missing or non-finite values render as "-".
    """
    if value is None or pd.isna(value):
        return "-"
    value = float(value)
    if not np.isfinite(value):
        return "-"
    return round_half_up(value, decimal_places_for(value))


def format_range(low: str, high: str) -> str:
    """Join two already formatted values as "low - high"."""
    return f"{low} - {high}"


def format_median_iqr(median: str, pct25: str, pct75: str) -> str:
    """Join already formatted values as "median (p25 - p75)"."""
    return f"{median} ({format_range(pct25, pct75)})"


def format_percentage(count: int, total: int, places: int | None = None) -> str:
    """
    Percentage of `count` in `total`, rounded half-up.

    >>> format_percentage(3, 8)
    '37.5'

    Raises:
        ValueError: If `total` is not positive.
    """
    if total <= 0:
        raise ValueError(f"Cannot compute a percentage of total={total}")
    if places is None:
        places = CONFIG.get("analysis.percent_decimal_places", 1)
    return round_half_up(100 * count / total, places)


def format_p_value(p: Any) -> str:
    """
    Format a p-value using the display bounds from CONFIG (e.g. '<0.001', '0.042').
    """
    if p is None or pd.isna(p):
        return "-"
    try:
        p = float(p)
    except (TypeError, ValueError):
        return "-"
    if not np.isfinite(p):
        return "-"

    precision = CONFIG.get("analysis.pvalue_decimal_places", 3)
    lower_bound = CONFIG.get("analysis.pvalue_bounds_lower", 0.001)
    upper_bound = CONFIG.get("analysis.pvalue_bounds_upper", 0.999)

    p = max(0.0, min(1.0, p))
    if p < lower_bound:
        return CONFIG.get("analysis.pvalue_format_small", "<0.001")
    if p > upper_bound:
        return CONFIG.get("analysis.pvalue_format_large", ">0.999")
    return f"{p:.{precision}f}"


def format_estimate(value: float, decimals: int = 2) -> str:
    """Format an odds ratio or CI bound; "-" when missing."""
    if value is None or pd.isna(value) or not np.isfinite(value):
        return "-"
    return f"{value:.{decimals}f}"
