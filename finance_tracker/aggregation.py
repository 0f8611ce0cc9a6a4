"""Financial aggregation and progress calculations.

This module turns already-fetched transaction, budget and goal records into
the summaries shown on the dashboard and report pages: monthly income vs
expense series, spending per category, yearly comparisons, budget vs actual
spend for the current month, and goal progress.

Every function here is pure.  Inputs may be pandas DataFrames or iterables
of the record types from :mod:`finance_tracker.models` (or plain dicts with
the same field names).  Empty or missing input always produces an empty
result with the expected columns so callers can render a "no data" state.
"""

from __future__ import annotations

import math
from dataclasses import asdict, is_dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from . import config
from .formatting import format_currency, month_label
from .models import EXPENSE, INCOME, Goal, parse_date

Records = Union[pd.DataFrame, Iterable[Any], None]

TRANSACTION_COLUMNS = [
    'id', 'Owner', 'Category ID', 'Category', 'Color', 'Amount',
    'Description', 'Kind', 'Date', 'Is Recurring', 'Recurrence',
]
BUDGET_FRAME_COLUMNS = [
    'id', 'Owner', 'Category ID', 'Category', 'Color', 'Amount',
    'Period', 'Start Date', 'Is Recurring',
]
GOAL_FRAME_COLUMNS = [
    'id', 'Owner', 'Name', 'Description', 'Target', 'Current',
    'Start Date', 'Target Date', 'Completed',
]
MONTHLY_COLUMNS = ['Period', 'Income', 'Expense']
CATEGORY_COLUMNS = ['Category', 'Total', 'Color']
YEARLY_COLUMNS = ['Year', 'Income', 'Expense', 'Balance']
BUDGET_COLUMNS = [
    'Budget ID', 'Category ID', 'Category', 'Budgeted', 'Spent', 'Remaining',
    'Percentage', 'Color', 'Period', 'Status',
]
GOAL_COLUMNS = [
    'Goal ID', 'Name', 'Target', 'Current', 'Remaining', 'Progress',
    'Bar Width', 'Completed', 'Days Remaining', 'Deadline', 'Target Date',
]

_TRANSACTION_RENAMES = {
    'owner_id': 'Owner',
    'category_id': 'Category ID',
    'category_name': 'Category',
    'category_color': 'Color',
    'amount': 'Amount',
    'description': 'Description',
    'kind': 'Kind',
    'type': 'Kind',
    'date': 'Date',
    'is_recurring': 'Is Recurring',
    'recurrence': 'Recurrence',
}
_BUDGET_RENAMES = {
    'owner_id': 'Owner',
    'category_id': 'Category ID',
    'category_name': 'Category',
    'category_color': 'Color',
    'amount': 'Amount',
    'period': 'Period',
    'start_date': 'Start Date',
    'is_recurring': 'Is Recurring',
}
_GOAL_RENAMES = {
    'owner_id': 'Owner',
    'name': 'Name',
    'description': 'Description',
    'target_amount': 'Target',
    'current_amount': 'Current',
    'start_date': 'Start Date',
    'target_date': 'Target Date',
    'is_completed': 'Completed',
}


def _records_frame(records: Records, renames: Dict[str, str], columns: List[str]) -> pd.DataFrame:
    if records is None:
        return pd.DataFrame(columns=columns)
    if isinstance(records, pd.DataFrame):
        frame = records.copy()
    else:
        rows = []
        for item in records:
            if is_dataclass(item):
                rows.append(asdict(item))
            elif isinstance(item, Mapping):
                rows.append(dict(item))
            else:
                raise TypeError(f"Unsupported record type: {type(item).__name__}")
        frame = pd.DataFrame(rows)
    frame = frame.rename(columns=renames)
    for column in columns:
        if column not in frame.columns:
            frame[column] = None
    return frame[columns]


def _category_key(value: Any) -> Optional[str]:
    """Normalise a category id so int ids and float-coerced ids compare equal."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def transactions_frame(transactions: Records) -> pd.DataFrame:
    """Normalise transactions into the canonical column layout.

    Amounts become non-negative magnitudes, kinds are lower-cased and dates
    parsed.  Rows whose date cannot be parsed are dropped.
    """
    df = _records_frame(transactions, _TRANSACTION_RENAMES, TRANSACTION_COLUMNS)
    df['Amount'] = pd.to_numeric(df['Amount'], errors='coerce').fillna(0.0).abs().astype(float)
    df['Kind'] = df['Kind'].fillna('').astype(str).str.strip().str.lower()
    df['Date'] = pd.to_datetime(df['Date'], errors='coerce')
    return df[df['Date'].notna()].reset_index(drop=True)


def budgets_frame(budgets: Records) -> pd.DataFrame:
    """Normalise budgets into the canonical column layout."""
    df = _records_frame(budgets, _BUDGET_RENAMES, BUDGET_FRAME_COLUMNS)
    df['Amount'] = pd.to_numeric(df['Amount'], errors='coerce').fillna(0.0).abs().astype(float)
    df['Period'] = df['Period'].fillna('monthly')
    return df


def goals_frame(goals: Records) -> pd.DataFrame:
    """Normalise goals into the canonical column layout."""
    df = _records_frame(goals, _GOAL_RENAMES, GOAL_FRAME_COLUMNS)
    df['Target'] = pd.to_numeric(df['Target'], errors='coerce').fillna(0.0).astype(float)
    df['Current'] = pd.to_numeric(df['Current'], errors='coerce').fillna(0.0).astype(float)
    df['Completed'] = df['Completed'].fillna(False).astype(bool)
    return df


def _with_flows(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df['Income'] = np.where(df['Kind'] == INCOME, df['Amount'], 0.0)
    df['Expense'] = np.where(df['Kind'] == EXPENSE, df['Amount'], 0.0)
    return df


def monthly_series(
    transactions: Records,
    months: Optional[int] = None,
    locale: Optional[str] = None,
) -> pd.DataFrame:
    """Income and expense totals per calendar month, most recent months only.

    Buckets are keyed by ``(year, month)`` and ordered chronologically; only
    the last ``months`` buckets are kept (``config.MONTHLY_WINDOW`` by default).

    Returns:
        DataFrame with columns: Period, Income, Expense
    """
    window = config.MONTHLY_WINDOW if months is None else months
    df = transactions_frame(transactions)
    if df.empty or window <= 0:
        return pd.DataFrame(columns=MONTHLY_COLUMNS)

    df = _with_flows(df)
    df['Year_Col'] = df['Date'].dt.year
    df['Month_Col'] = df['Date'].dt.month

    monthly = (
        df.groupby(['Year_Col', 'Month_Col'])[['Income', 'Expense']]
        .sum()
        .sort_index()
        .tail(window)
        .reset_index()
    )
    monthly['Period'] = [
        month_label(year, month, locale)
        for year, month in zip(monthly['Year_Col'], monthly['Month_Col'])
    ]
    return monthly[MONTHLY_COLUMNS].reset_index(drop=True)


def category_expenses(transactions: Records, by_id: bool = False) -> pd.DataFrame:
    """Total expense amount per category, in order of first appearance.

    Transactions without a resolvable category are reported under
    ``config.UNCATEGORIZED_LABEL`` with the neutral colour.  By default the
    totals are keyed by category *name*, so two categories sharing a name
    merge.  Pass ``by_id=True`` to key by category id and only resolve the
    name for display.

    Returns:
        DataFrame with columns: Category, Total, Color
    """
    df = transactions_frame(transactions)
    expenses = df[df['Kind'] == EXPENSE].copy()
    if expenses.empty:
        return pd.DataFrame(columns=CATEGORY_COLUMNS)

    names = expenses['Category']
    resolved = names.notna() & (names.astype(str).str.strip() != '')
    expenses['Category'] = names.where(resolved, config.UNCATEGORIZED_LABEL)
    expenses['Color'] = expenses['Color'].where(resolved & expenses['Color'].notna(), config.NEUTRAL_COLOR)

    if by_id:
        ids = expenses['Category ID'].map(_category_key)
        expenses['Key'] = np.where(resolved & ids.notna(), 'id:' + ids.astype(str), '__uncategorized__')
    else:
        expenses['Key'] = expenses['Category']

    grouped = expenses.groupby('Key', sort=False).agg(
        Category=('Category', 'first'),
        Total=('Amount', 'sum'),
        Color=('Color', 'first'),
    )
    return grouped.reset_index(drop=True)[CATEGORY_COLUMNS]


def yearly_comparison(transactions: Records) -> pd.DataFrame:
    """Income, expense and balance per year, sorted by the 4-digit year string.

    Returns:
        DataFrame with columns: Year, Income, Expense, Balance
    """
    df = transactions_frame(transactions)
    if df.empty:
        return pd.DataFrame(columns=YEARLY_COLUMNS)

    df = _with_flows(df)
    df['Year'] = df['Date'].dt.year.astype(int).astype(str).str.zfill(4)
    yearly = df.groupby('Year', sort=False)[['Income', 'Expense']].sum().reset_index()
    yearly = yearly.sort_values('Year', kind='stable').reset_index(drop=True)
    yearly['Balance'] = yearly['Income'] - yearly['Expense']
    return yearly[YEARLY_COLUMNS]


def budget_percentage(spent: float, budgeted: float) -> float:
    """Share of the budget used; zero when nothing was budgeted."""
    return (spent / budgeted * 100) if budgeted > 0 else 0.0


def budget_status(percentage: float) -> str:
    if percentage > 100:
        return 'Over Budget'
    if percentage > 80:
        return 'Near Limit'
    return 'On Track'


def current_month_spending(transactions: Records, today: Optional[date] = None) -> pd.Series:
    """Expense totals per category id for the calendar month containing ``today``.

    Transactions without a category id are ignored.
    """
    today = today or date.today()
    df = transactions_frame(transactions)
    if df.empty:
        return pd.Series(dtype=float)
    keys = df['Category ID'].map(_category_key)
    in_month = (df['Date'].dt.year == today.year) & (df['Date'].dt.month == today.month)
    mask = in_month & (df['Kind'] == EXPENSE) & keys.notna()
    return df.loc[mask, 'Amount'].groupby(keys[mask]).sum()


def budget_overview(
    budgets: Records,
    transactions: Records,
    today: Optional[date] = None,
    merge_by_category: Optional[bool] = None,
) -> pd.DataFrame:
    """Compare each budget with this month's spending in its category.

    ``Percentage`` is not clamped; anything above 100 means the budget was
    exceeded and ``Remaining`` goes negative.  By default every budget record
    produces its own row.  With ``merge_by_category`` (or the
    ``FINTRACK_BUDGET_MERGE=category`` setting) budgets sharing a category are
    summed first and reported once.

    Returns:
        DataFrame with columns: Budget ID, Category ID, Category, Budgeted,
        Spent, Remaining, Percentage, Color, Period, Status
    """
    bf = budgets_frame(budgets)
    if bf.empty:
        return pd.DataFrame(columns=BUDGET_COLUMNS)
    if merge_by_category is None:
        merge_by_category = config.merge_budgets_by_category()

    spent_by_category = current_month_spending(transactions, today)
    bf['Key'] = bf['Category ID'].map(_category_key)

    if merge_by_category:
        bf['Key'] = bf['Key'].fillna('__none__')
        bf = bf.groupby('Key', sort=False).agg(
            **{
                'id': ('id', 'first'),
                'Category ID': ('Category ID', 'first'),
                'Category': ('Category', 'first'),
                'Color': ('Color', 'first'),
                'Amount': ('Amount', 'sum'),
                'Period': ('Period', 'first'),
            }
        ).reset_index()

    rows = []
    for _, budget in bf.iterrows():
        key = budget['Key']
        budgeted = float(budget['Amount'])
        has_category = isinstance(key, str) and key != '__none__'
        spent = float(spent_by_category.get(key, 0.0)) if has_category else 0.0
        percentage = budget_percentage(spent, budgeted)
        category = budget['Category']
        color = budget['Color']
        rows.append({
            'Budget ID': budget['id'],
            'Category ID': budget['Category ID'],
            'Category': category if isinstance(category, str) and category else config.UNKNOWN_CATEGORY_LABEL,
            'Budgeted': budgeted,
            'Spent': spent,
            'Remaining': budgeted - spent,
            'Percentage': percentage,
            'Color': color if isinstance(color, str) and color else config.NEUTRAL_COLOR,
            'Period': budget['Period'],
            'Status': budget_status(percentage),
        })
    return pd.DataFrame(rows, columns=BUDGET_COLUMNS)


def progress_bar_width(percentage: float) -> float:
    """Clamp a percentage to [0, 100] for progress-bar rendering only."""
    if percentage is None or pd.isna(percentage):
        return 0.0
    return max(0.0, min(float(percentage), 100.0))


def remaining_label(remaining: float, currency: Optional[str] = None) -> str:
    """Describe what is left of a budget, or by how much it was exceeded."""
    if remaining >= 0:
        return f"Available: {format_currency(remaining, currency)}"
    return f"Exceeded by: {format_currency(abs(remaining), currency)}"


def progress_percentage(current_amount: float, target_amount: float) -> float:
    """Progress toward a goal target, not clamped."""
    if not target_amount or target_amount <= 0:
        return 0.0
    return current_amount / target_amount * 100


def days_remaining(target_date: Any, today: Optional[date] = None) -> int:
    """Whole days until ``target_date``; negative once the date has passed."""
    today = today or date.today()
    return math.ceil((parse_date(target_date) - today) / timedelta(days=1))


def describe_days_remaining(days: int) -> str:
    if days > 0:
        return f"{days} days remaining"
    if days == 0:
        return "due today"
    return f"{abs(days)} days overdue"


def goal_progress(goal: Union[Goal, Mapping[str, Any]], today: Optional[date] = None) -> Dict[str, Any]:
    """Progress figures for a single goal."""
    record = asdict(goal) if is_dataclass(goal) else dict(goal)
    current = float(record.get('current_amount') or 0.0)
    target = float(record.get('target_amount') or 0.0)
    percentage = progress_percentage(current, target)
    result = {
        'progress_percentage': percentage,
        'bar_width': progress_bar_width(percentage),
        'remaining_amount': target - current,
        'is_completed': current >= target,
        'days_remaining': None,
    }
    if parse_date(record.get('target_date')) is not None:
        result['days_remaining'] = days_remaining(record['target_date'], today)
    return result


def goals_overview(goals: Records, today: Optional[date] = None) -> pd.DataFrame:
    """One row of progress figures per goal, in input order."""
    gf = goals_frame(goals)
    if gf.empty:
        return pd.DataFrame(columns=GOAL_COLUMNS)

    rows = []
    for _, goal in gf.iterrows():
        percentage = progress_percentage(goal['Current'], goal['Target'])
        deadline = goal['Target Date']
        days = days_remaining(deadline, today) if deadline is not None and not pd.isna(deadline) else None
        rows.append({
            'Goal ID': goal['id'],
            'Name': goal['Name'],
            'Target': goal['Target'],
            'Current': goal['Current'],
            'Remaining': goal['Target'] - goal['Current'],
            'Progress': percentage,
            'Bar Width': progress_bar_width(percentage),
            'Completed': goal['Current'] >= goal['Target'],
            'Days Remaining': days,
            'Deadline': describe_days_remaining(days) if days is not None else '',
            'Target Date': parse_date(deadline) if days is not None else None,
        })
    return pd.DataFrame(rows, columns=GOAL_COLUMNS)


def summary_totals(transactions: Records) -> Dict[str, float]:
    """Overall income, expense and balance for the given transactions."""
    df = transactions_frame(transactions)
    income = float(df.loc[df['Kind'] == INCOME, 'Amount'].sum())
    expense = float(df.loc[df['Kind'] == EXPENSE, 'Amount'].sum())
    return {'income': income, 'expense': expense, 'balance': income - expense}


def recent_transactions(transactions: Records, limit: int = 5) -> pd.DataFrame:
    """The newest ``limit`` transactions by date."""
    df = transactions_frame(transactions)
    return df.sort_values('Date', ascending=False, kind='stable').head(limit).reset_index(drop=True)


def active_goals(goals: Records, limit: int = 3) -> pd.DataFrame:
    """The first ``limit`` goals not yet marked completed."""
    gf = goals_frame(goals)
    return gf[~gf['Completed']].head(limit).reset_index(drop=True)


def filter_transactions(transactions: Records, search: Optional[str] = None, kind: Optional[str] = None) -> pd.DataFrame:
    """Transactions whose description or category name contains ``search``.

    Matching is case-insensitive.  ``kind`` keeps only income or expense rows.
    """
    df = transactions_frame(transactions)
    if search:
        needle = search.strip()
        matches = df['Description'].astype(str).str.contains(needle, case=False, na=False, regex=False)
        categories = df['Category'].where(df['Category'].notna(), '').astype(str)
        matches |= categories.str.contains(needle, case=False, regex=False)
        df = df[matches]
    if kind:
        df = df[df['Kind'] == kind.lower()]
    return df.reset_index(drop=True)
