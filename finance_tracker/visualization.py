"""Plotly visualisation helpers for the Finance Tracker.

This module defines functions that accept the DataFrames returned by
:mod:`finance_tracker.aggregation` and produce interactive Plotly figures.
Each function is focused on a single chart so pages stay thin: compute the
aggregate, hand it to the matching function here, and pass the figure to
``st.plotly_chart``.

Every function returns a `plotly.graph_objects.Figure`; an empty input
produces a figure titled "No data to display" rather than raising.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .aggregation import progress_bar_width

INCOME_COLOR = "#22C55E"
EXPENSE_COLOR = "#EF4444"
BALANCE_COLOR = "#EEB3E7"
WARNING_COLOR = "#FACC15"


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_monthly_bar_chart(monthly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Grouped income vs expense bars per month.

    Parameters
    ----------
    monthly : pandas.DataFrame
        Output of :func:`aggregation.monthly_series` (Period, Income, Expense).
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Grouped bar chart in chronological order.
    """
    if monthly.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(name="Income", x=monthly["Period"], y=monthly["Income"], marker_color=INCOME_COLOR))
    fig.add_trace(go.Bar(name="Expense", x=monthly["Period"], y=monthly["Expense"], marker_color=EXPENSE_COLOR))
    fig.update_layout(
        title=title or "Income vs Expenses",
        barmode="group",
        xaxis_title="Month",
        yaxis_title="Amount",
    )
    # keep chronological order even when labels would sort differently
    fig.update_xaxes(categoryorder="array", categoryarray=list(monthly["Period"]))
    return fig


def create_category_pie_chart(categories: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Pie chart of expenses per category, coloured with each category's colour.

    Parameters
    ----------
    categories : pandas.DataFrame
        Output of :func:`aggregation.category_expenses` (Category, Total, Color).
    title : str, optional
        Title for the chart.
    """
    if categories.empty:
        return _empty_figure()
    fig = px.pie(
        categories,
        names="Category",
        values="Total",
        color="Category",
        color_discrete_map=dict(zip(categories["Category"], categories["Color"])),
    )
    fig.update_traces(textinfo="label+percent")
    fig.update_layout(title=title or "Expenses by category")
    return fig


def create_yearly_comparison_chart(yearly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Income and expense bars per year with the yearly balance as a line."""
    if yearly.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(name="Income", x=yearly["Year"], y=yearly["Income"], marker_color=INCOME_COLOR))
    fig.add_trace(go.Bar(name="Expense", x=yearly["Year"], y=yearly["Expense"], marker_color=EXPENSE_COLOR))
    fig.add_trace(go.Scatter(
        name="Balance",
        x=yearly["Year"],
        y=yearly["Balance"],
        mode="lines+markers",
        line=dict(color=BALANCE_COLOR, width=3),
    ))
    fig.update_layout(
        title=title or "Yearly comparison",
        barmode="group",
        xaxis_title="Year",
        yaxis_title="Amount",
        xaxis_type="category",
    )
    return fig


def budget_bar_labels(overview: pd.DataFrame) -> list[str]:
    """One y-axis label per budget line.

    Lines whose category appears more than once get the period and budget id
    appended so each keeps its own bar.
    """
    duplicated = overview["Category"].duplicated(keep=False)
    labels = []
    for is_duplicate, (_, line) in zip(duplicated, overview.iterrows()):
        if is_duplicate:
            labels.append(f"{line['Category']} · {line.get('Period')} #{line.get('Budget ID')}")
        else:
            labels.append(str(line["Category"]))
    return labels


def create_budget_progress_chart(overview: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Horizontal progress bars per budget.

    Bar length is the percentage clamped to 100; the hover text keeps the
    true percentage so over-budget lines still read e.g. 125%.
    """
    if overview.empty:
        return _empty_figure()
    widths = [progress_bar_width(p) for p in overview["Percentage"]]
    colors = [
        EXPENSE_COLOR if p > 100 else WARNING_COLOR if p > 80 else BALANCE_COLOR
        for p in overview["Percentage"]
    ]
    fig = go.Figure(go.Bar(
        x=widths,
        y=budget_bar_labels(overview),
        orientation="h",
        marker_color=colors,
        text=[f"{p:.1f}%" for p in overview["Percentage"]],
        textposition="auto",
    ))
    fig.update_layout(
        title=title or "Budget usage this month",
        xaxis=dict(range=[0, 100], title="% of budget used"),
        yaxis=dict(type="category", title="Category"),
    )
    return fig
