from __future__ import annotations

from datetime import date, datetime

import pytest

from finance_tracker.models import Goal, GoalContribution, Transaction, parse_date


def test_parse_date() -> None:
    assert parse_date("2024-03-15") == date(2024, 3, 15)
    assert parse_date(datetime(2024, 3, 15, 10, 30)) == date(2024, 3, 15)
    assert parse_date(None) is None
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_transaction_from_row() -> None:
    txn = Transaction.from_row({
        "id": 3, "owner_id": "alice", "amount": 10, "kind": "income",
        "date": "2024-01-02", "description": "Gift", "is_recurring": 1, "recurrence": "monthly",
    })
    assert txn.date == date(2024, 1, 2)
    assert txn.is_recurring is True
    assert txn.category_id is None
    txn.validate()


def test_transaction_rejects_unknown_recurrence() -> None:
    txn = Transaction(amount=1, kind="expense", date=date(2024, 1, 1), description="x", recurrence="hourly")
    with pytest.raises(ValueError):
        txn.validate()


def test_goal_completion_and_dates() -> None:
    goal = Goal(name="Car", target_amount=100, current_amount=100,
                start_date=date(2024, 1, 1), target_date=date(2024, 6, 1))
    assert goal.refresh_completion() is True
    goal.target_date = date(2023, 12, 31)
    with pytest.raises(ValueError):
        goal.validate()


def test_contribution_from_row() -> None:
    entry = GoalContribution.from_row({"id": 1, "goal_id": 2, "amount": -5, "created_at": "2024-01-01T10:00:00+00:00"})
    assert entry.amount == -5.0
    assert entry.created_at.year == 2024
