from __future__ import annotations

import pandas as pd

from finance_tracker import aggregation as agg
from finance_tracker import visualization as viz


def test_empty_inputs_give_placeholder_figures() -> None:
    for builder, columns in [
        (viz.create_monthly_bar_chart, agg.MONTHLY_COLUMNS),
        (viz.create_category_pie_chart, agg.CATEGORY_COLUMNS),
        (viz.create_yearly_comparison_chart, agg.YEARLY_COLUMNS),
        (viz.create_budget_progress_chart, agg.BUDGET_COLUMNS),
    ]:
        fig = builder(pd.DataFrame(columns=columns))
        assert fig.layout.title.text == "No data to display"


def test_monthly_chart_keeps_chronological_order() -> None:
    monthly = pd.DataFrame({"Period": ["Dez/23", "Jan/24"], "Income": [1.0, 2.0], "Expense": [3.0, 4.0]})
    fig = viz.create_monthly_bar_chart(monthly)
    assert [trace.name for trace in fig.data] == ["Income", "Expense"]
    assert list(fig.layout.xaxis.categoryarray) == ["Dez/23", "Jan/24"]


def test_budget_chart_clamps_bar_but_shows_true_percentage() -> None:
    overview = pd.DataFrame([{"Category": "Food", "Percentage": 125.0}])
    fig = viz.create_budget_progress_chart(overview)
    assert list(fig.data[0].x) == [100.0]
    assert list(fig.data[0].text) == ["125.0%"]


def test_yearly_chart_has_balance_line() -> None:
    yearly = pd.DataFrame({"Year": ["2023", "2024"], "Income": [5.0, 6.0], "Expense": [1.0, 2.0], "Balance": [4.0, 4.0]})
    fig = viz.create_yearly_comparison_chart(yearly)
    assert [trace.name for trace in fig.data] == ["Income", "Expense", "Balance"]


def test_budget_chart_keeps_a_bar_per_budget_on_shared_category() -> None:
    budgets = [
        {"id": 1, "category_id": 1, "amount": 100, "category_name": "Food"},
        {"id": 2, "category_id": 1, "amount": 150, "category_name": "Food"},
        {"id": 3, "category_id": 2, "amount": 80, "category_name": "Transport"},
    ]
    overview = agg.budget_overview(budgets, [], merge_by_category=False)
    fig = viz.create_budget_progress_chart(overview)
    labels = list(fig.data[0].y)
    assert len(set(labels)) == 3
    assert labels == ["Food · monthly #1", "Food · monthly #2", "Transport"]
    assert fig.layout.yaxis.type == "category"
