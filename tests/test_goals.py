"""Tests for goal contributions against a temporary database."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from finance_tracker import db as db_mod
from finance_tracker.goals import (
    ADD,
    WITHDRAW,
    ContributionError,
    apply_contribution,
    contribution_delta,
    contribution_history,
)
from finance_tracker.models import Goal

OWNER = "user-1"


def make_goal(current: float = 300.0, target: float = 1000.0) -> int:
    goal = Goal(
        owner_id=OWNER,
        name="Emergency fund",
        target_amount=target,
        current_amount=current,
        start_date=date.today(),
        target_date=date.today() + timedelta(days=90),
    )
    return db_mod.insert_goal(goal)


def test_contribution_completes_goal(db_path) -> None:
    goal_id = make_goal(current=300.0)

    goal = apply_contribution(goal_id, OWNER, 800.0)

    assert goal.current_amount == 1100.0
    assert goal.is_completed is True
    stored = db_mod.fetch_goal(goal_id, OWNER)
    assert stored.current_amount == 1100.0
    assert stored.is_completed is True
    history = contribution_history(goal_id, OWNER)
    assert list(history["Amount"]) == [800.0]
    assert list(history["Description"]) == ["Contribution added"]


def test_over_withdrawal_clamps_balance_but_keeps_ledger_delta(db_path) -> None:
    goal_id = make_goal(current=300.0)

    goal = apply_contribution(goal_id, OWNER, -500.0)

    assert goal.current_amount == 0.0
    assert goal.is_completed is False
    assert db_mod.fetch_goal(goal_id, OWNER).current_amount == 0.0
    history = contribution_history(goal_id, OWNER)
    assert list(history["Amount"]) == [-500.0]
    assert list(history["Description"]) == ["Contribution withdrawn"]


def test_withdrawal_below_target_clears_completion(db_path) -> None:
    goal_id = make_goal(current=1000.0)
    assert db_mod.fetch_goal(goal_id, OWNER).is_completed is True

    goal = apply_contribution(goal_id, OWNER, -1.0, "Oops")

    assert goal.is_completed is False
    assert list(contribution_history(goal_id, OWNER)["Description"]) == ["Oops"]


def test_missing_goal_raises_and_writes_nothing(db_path) -> None:
    with pytest.raises(ContributionError):
        apply_contribution(999, OWNER, 50.0)
    with db_mod.connect() as conn:
        assert conn.execute("SELECT COUNT(*) FROM goal_contributions").fetchone()[0] == 0


def test_goal_of_another_owner_is_not_found(db_path) -> None:
    goal_id = make_goal()
    with pytest.raises(ContributionError):
        apply_contribution(goal_id, "someone-else", 50.0)
    assert db_mod.fetch_goal(goal_id, OWNER).current_amount == 300.0


def test_failed_balance_update_rolls_back_ledger(db_path) -> None:
    goal_id = make_goal(current=300.0)
    with db_mod.connect() as conn:
        conn.execute(
            "CREATE TRIGGER reject_goal_update BEFORE UPDATE ON goals "
            "BEGIN SELECT RAISE(ABORT, 'goal updates disabled'); END"
        )
        conn.commit()

    with pytest.raises(ContributionError):
        apply_contribution(goal_id, OWNER, 100.0)

    assert db_mod.fetch_goal(goal_id, OWNER).current_amount == 300.0
    assert contribution_history(goal_id, OWNER).empty


def test_deleting_goal_removes_its_contributions(db_path) -> None:
    goal_id = make_goal()
    apply_contribution(goal_id, OWNER, 10.0)
    assert db_mod.delete_goal(goal_id, OWNER) is True
    assert contribution_history(goal_id, OWNER).empty


def test_contribution_delta() -> None:
    assert contribution_delta(ADD, 50) == 50.0
    assert contribution_delta(WITHDRAW, 50) == -50.0


@pytest.mark.parametrize("action, amount", [(ADD, 0), (ADD, -5), (WITHDRAW, None), ("borrow", 10)])
def test_contribution_delta_rejects_invalid_input(action, amount) -> None:
    with pytest.raises(ValueError):
        contribution_delta(action, amount)


def test_history_is_hidden_from_other_owners(db_path) -> None:
    goal_id = make_goal()
    apply_contribution(goal_id, OWNER, 25.0, "secret")

    assert list(contribution_history(goal_id, OWNER)["Description"]) == ["secret"]
    assert contribution_history(goal_id, "someone-else").empty
