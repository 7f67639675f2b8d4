"""
HTML rendering of an assembled Report.

Produces one standalone page: narrative, missing-data statement, the
distribution figure, the summary table and the regression table.
All interpolated text is escaped.
"""

from __future__ import annotations

import html as _html

import pandas as pd

from config import CONFIG

from .reporting import Report
from .summary_table import DISPLAY_COLUMNS, GROUP_LABELS
from .visualizations import plot_distributions

STAT_HEADERS = {"range": "Range", "mean": "Mean", "median_iqr": "Median (IQR)"}

PAGE_CSS = """
body { font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; color: #1F2937; max-width: 1100px; margin: 2em auto; }
table { border-collapse: collapse; margin: 1em 0; font-size: 0.92em; }
th, td { border-bottom: 1px solid #E5E7EB; padding: 4px 10px; text-align: left; }
th { background-color: #F9FAFB; }
caption { font-weight: bold; text-align: left; padding-bottom: 4px; }
"""


def _esc(value) -> str:
    return _html.escape(str(value))


def summary_table_html(report: Report) -> str:
    """Summary statistics with one column group per outcome value."""
    frame = report.summary_frame
    groups = list(dict.fromkeys(frame.columns.get_level_values(0)))
    counts = {0: report.narrative.n_negative, 1: report.narrative.n_positive}

    head_top = "<th rowspan='2'>Variable</th>" + "".join(
        f"<th colspan='{len(DISPLAY_COLUMNS)}'>{_esc(GROUP_LABELS[g])} (n={counts[g]})</th>"
        for g in groups
    )
    head_sub = "".join(
        f"<th>{_esc(STAT_HEADERS[stat])}</th>" for _ in groups for stat in DISPLAY_COLUMNS
    )
    body = "".join(
        "<tr><td>{}</td>{}</tr>".format(
            _esc(variable),
            "".join(f"<td>{_esc(frame.loc[variable, (g, stat)])}</td>" for g in groups for stat in DISPLAY_COLUMNS),
        )
        for variable in frame.index
    )
    return (
        "<table class='summary-table'><caption>Summary statistics by outcome</caption>"
        f"<thead><tr>{head_top}</tr><tr>{head_sub}</tr></thead><tbody>{body}</tbody></table>"
    )


def frame_table_html(frame: pd.DataFrame, caption: str, css_class: str) -> str:
    """Plain table for a flat DataFrame of display strings."""
    head = "".join(f"<th>{_esc(col)}</th>" for col in frame.columns)
    body = "".join(
        "<tr>" + "".join(f"<td>{_esc(v)}</td>" for v in row) + "</tr>"
        for row in frame.itertuples(index=False)
    )
    return (
        f"<table class='{_esc(css_class)}'><caption>{_esc(caption)}</caption>"
        f"<thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"
    )


def render_html(report: Report, include_figure: bool = True) -> str:
    """
    Render the report as a standalone HTML document.

    Parameters:
        report (Report): Output of reporting.build_report / generate_report.
        include_figure (bool): Embed the plotly distribution figure.
    """
    title = CONFIG.get("report.title", "Diabetes report")

    figure_html = ""
    if include_figure:
        fig = plot_distributions(report.distribution)
        figure_html = fig.to_html(
            full_html=False, include_plotlyjs=CONFIG.get("report.include_plotlyjs", "cdn")
        )

    model = report.model
    model_note = (
        f"Logistic regression of the outcome on all {len(model) - 1} measurements "
        f"(n={model.n_obs}); odds ratios with {model.ci_level * 100:g}% Wald confidence intervals. "
        f"McFadden R² = {model.mcfadden:.3f}."
    )

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{_esc(title)}</title>
<style>{PAGE_CSS}</style>
</head>
<body>
<h1>{_esc(title)}</h1>
<h2>Data</h2>
<p class="narrative">{_esc(report.narrative.paragraph())}</p>
<p class="missing-statement">{_esc(report.missing_statement)}</p>
<h2>Distributions</h2>
{figure_html}
<h2>Summary statistics</h2>
{summary_table_html(report)}
<h2>Logistic regression</h2>
<p>{_esc(model_note)}</p>
{frame_table_html(model.display_table(), "Odds ratios for diabetes", "regression-table")}
</body>
</html>
"""
