import math

import pandas as pd
import plotly.graph_objects as go
from plotly import subplots

from config import CONFIG

from .dataset import OUTCOME
from .summary_table import GROUP_LABELS

# Outcome group -> trace colour
OUTCOME_COLORS = {0: "#1E3A5F", 1: "#E74856"}


def plot_distributions(long_df: pd.DataFrame) -> go.Figure:
    """
    Build a faceted comparison of each variable's distribution by outcome.

    One panel per variable (in the order they appear in `long_df`), each with two
    overlaid, semi-transparent histograms: negative and positive outcome. Legend
    entries are shown once for the whole figure.

    Parameters:
        long_df (pd.DataFrame): Long-form data with columns variable, value, outcome,
            as produced by reporting.distribution_long_form.

    Returns:
        go.Figure: The figure; nothing is rendered here.
    """
    if long_df is None or long_df.empty:
        return go.Figure()

    variables = list(dict.fromkeys(long_df["variable"]))
    n_cols = min(CONFIG.get("report.plot_columns", 4), len(variables))
    n_rows = math.ceil(len(variables) / n_cols)
    n_bins = CONFIG.get("report.histogram_bins", 30)

    fig = subplots.make_subplots(
        rows=n_rows,
        cols=n_cols,
        subplot_titles=variables,
        horizontal_spacing=0.06,
        vertical_spacing=0.12,
    )

    for i, variable in enumerate(variables):
        row, col = divmod(i, n_cols)
        subset = long_df[long_df["variable"] == variable]
        for group, label in GROUP_LABELS.items():
            values = subset.loc[subset[OUTCOME] == group, "value"]
            fig.add_trace(
                go.Histogram(
                    x=values,
                    name=label,
                    legendgroup=label,
                    showlegend=(i == 0),
                    nbinsx=n_bins,
                    marker_color=OUTCOME_COLORS[group],
                    opacity=0.6,
                    hovertemplate=f"{variable}: %{{x}}<br>n=%{{y}}<extra>{label}</extra>",
                ),
                row=row + 1,
                col=col + 1,
            )

    fig.update_layout(
        barmode="overlay",
        plot_bgcolor="white",
        margin=dict(l=10, r=10, t=50, b=40),
        height=n_rows * CONFIG.get("report.plot_row_height", 260) + 80,
        legend_title_text=OUTCOME,
    )
    return fig
