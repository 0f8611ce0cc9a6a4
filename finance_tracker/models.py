"""Record types for transactions, categories, budgets and goals."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

import pandas as pd

INCOME = 'income'
EXPENSE = 'expense'
KINDS = {INCOME, EXPENSE}

RECURRENCE_FREQUENCIES = {'daily', 'weekly', 'monthly', 'yearly'}
BUDGET_PERIODS = {'weekly', 'monthly', 'yearly'}


def parse_date(value: Any) -> Optional[date]:
    """Coerce ISO strings, datetimes and pandas timestamps into a ``date``."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        raise ValueError(f"Invalid date: {value!r}")
    return ts.date()


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    ts = pd.to_datetime(value, errors='coerce')
    return None if pd.isna(ts) else ts.to_pydatetime()


def _optional(row: Mapping[str, Any], key: str) -> Any:
    value = row.get(key)
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


@dataclass
class Category:
    """A user-defined label and colour grouping transactions and budgets."""
    name: str
    kind: str
    color: str
    owner_id: str = ''
    is_default: bool = False
    id: Optional[int] = None

    def validate(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Category name cannot be empty")
        if self.kind not in KINDS:
            raise ValueError(f"Unknown category kind '{self.kind}'")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Category':
        return cls(
            id=_optional(row, 'id'),
            owner_id=row.get('owner_id') or '',
            name=row.get('name') or '',
            kind=row.get('kind') or EXPENSE,
            color=row.get('color') or '',
            is_default=bool(row.get('is_default')),
        )


@dataclass
class Transaction:
    """A single dated money movement.

    ``amount`` is always a positive magnitude; ``kind`` decides whether it
    counts toward income or expense.
    """
    amount: float
    kind: str
    date: date
    description: str = ''
    owner_id: str = ''
    category_id: Optional[int] = None
    is_recurring: bool = False
    recurrence: Optional[str] = None
    id: Optional[int] = None
    # Joined from the category when read through the data layer
    category_name: Optional[str] = None
    category_color: Optional[str] = None

    def validate(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"Unknown transaction kind '{self.kind}'")
        if self.amount is None or float(self.amount) <= 0:
            raise ValueError("Transaction amount must be positive")
        if not self.description or not self.description.strip():
            raise ValueError("Transaction description cannot be empty")
        if self.recurrence is not None and self.recurrence not in RECURRENCE_FREQUENCIES:
            raise ValueError(f"Unknown recurrence frequency '{self.recurrence}'")
        if self.date is None:
            raise ValueError("Transaction date is required")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Transaction':
        return cls(
            id=_optional(row, 'id'),
            owner_id=row.get('owner_id') or '',
            category_id=_optional(row, 'category_id'),
            amount=float(row.get('amount') or 0.0),
            description=row.get('description') or '',
            kind=row.get('kind') or EXPENSE,
            date=parse_date(row.get('date')),
            is_recurring=bool(row.get('is_recurring')),
            recurrence=_optional(row, 'recurrence'),
            category_name=_optional(row, 'category_name'),
            category_color=_optional(row, 'category_color'),
        )


@dataclass
class Budget:
    """A spending ceiling for one category over a period."""
    category_id: int
    amount: float
    period: str = 'monthly'
    start_date: Optional[date] = None
    is_recurring: bool = True
    owner_id: str = ''
    id: Optional[int] = None
    category_name: Optional[str] = None
    category_color: Optional[str] = None

    def validate(self) -> None:
        if self.category_id is None:
            raise ValueError("Budget requires a category")
        if self.amount is None or float(self.amount) <= 0:
            raise ValueError("Budget amount must be positive")
        if self.period not in BUDGET_PERIODS:
            raise ValueError(f"Unknown budget period '{self.period}'")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Budget':
        return cls(
            id=_optional(row, 'id'),
            owner_id=row.get('owner_id') or '',
            category_id=_optional(row, 'category_id'),
            amount=float(row.get('amount') or 0.0),
            period=row.get('period') or 'monthly',
            start_date=parse_date(row.get('start_date')),
            is_recurring=bool(row.get('is_recurring')),
            category_name=_optional(row, 'category_name'),
            category_color=_optional(row, 'category_color'),
        )


@dataclass
class Goal:
    """A savings target with a running balance and a deadline."""
    name: str
    target_amount: float
    target_date: date
    current_amount: float = 0.0
    start_date: date = field(default_factory=date.today)
    description: Optional[str] = None
    is_completed: bool = False
    owner_id: str = ''
    id: Optional[int] = None

    def validate(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Goal name cannot be empty")
        if self.target_amount is None or float(self.target_amount) <= 0:
            raise ValueError("Goal target amount must be positive")
        if self.current_amount is not None and float(self.current_amount) < 0:
            raise ValueError("Goal current amount cannot be negative")
        if self.target_date is None:
            raise ValueError("Goal target date is required")
        if self.start_date and self.target_date < self.start_date:
            raise ValueError("Goal target date cannot precede its start date")

    def refresh_completion(self) -> bool:
        self.is_completed = float(self.current_amount) >= float(self.target_amount)
        return self.is_completed

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Goal':
        return cls(
            id=_optional(row, 'id'),
            owner_id=row.get('owner_id') or '',
            name=row.get('name') or '',
            description=_optional(row, 'description'),
            target_amount=float(row.get('target_amount') or 0.0),
            current_amount=float(row.get('current_amount') or 0.0),
            start_date=parse_date(row.get('start_date')),
            target_date=parse_date(row.get('target_date')),
            is_completed=bool(row.get('is_completed')),
        )


@dataclass
class GoalContribution:
    """Append-only ledger entry; positive deposits, negative withdrawals."""
    goal_id: int
    amount: float
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'GoalContribution':
        return cls(
            id=_optional(row, 'id'),
            goal_id=row.get('goal_id'),
            amount=float(row.get('amount') or 0.0),
            description=_optional(row, 'description'),
            created_at=_parse_datetime(row.get('created_at')),
        )
