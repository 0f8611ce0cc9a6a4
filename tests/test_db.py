"""Tests for the SQLite data layer."""

from __future__ import annotations

from datetime import date

import pandas as pd
import pytest

from finance_tracker import aggregation as agg
from finance_tracker import config
from finance_tracker import db as db_mod
from finance_tracker.models import Budget, Category, Goal, Transaction


def add_txn(owner: str, amount: float, kind: str = "expense", category_id=None, when=date(2024, 3, 1)) -> int:
    return db_mod.insert_transaction(Transaction(
        owner_id=owner,
        amount=amount,
        kind=kind,
        date=when,
        description=f"{kind} {amount}",
        category_id=category_id,
    ))


def test_reads_and_writes_are_scoped_to_owner(db_path) -> None:
    mine = add_txn("alice", 10)
    add_txn("bob", 20)

    alice = db_mod.fetch_transactions("alice")
    assert list(alice["Amount"]) == [10.0]
    assert db_mod.delete_transaction(mine, "bob") is False
    assert db_mod.update_transaction(mine, "bob", amount=99) is False
    assert db_mod.delete_transaction(mine, "alice") is True
    assert db_mod.fetch_transactions("alice").empty


def test_transactions_join_category_until_it_is_deleted(db_path) -> None:
    category_id = db_mod.insert_category(Category(owner_id="alice", name="Pets", kind="expense", color="#123456"))
    add_txn("alice", 40, category_id=category_id)

    joined = db_mod.fetch_transactions("alice")
    assert joined.iloc[0]["Category"] == "Pets"
    assert joined.iloc[0]["Color"] == "#123456"

    assert db_mod.delete_category(category_id, "alice") is True
    orphaned = db_mod.fetch_transactions("alice")
    assert orphaned.iloc[0]["Category ID"] == category_id
    breakdown = agg.category_expenses(orphaned)
    assert list(breakdown["Category"]) == [config.UNCATEGORIZED_LABEL]
    assert list(breakdown["Color"]) == [config.NEUTRAL_COLOR]


def test_transactions_newest_first(db_path) -> None:
    add_txn("alice", 1, when=date(2024, 1, 1))
    add_txn("alice", 2, when=date(2024, 2, 1))
    assert list(db_mod.fetch_transactions("alice")["Amount"]) == [2.0, 1.0]


def test_invalid_transaction_is_rejected(db_path) -> None:
    with pytest.raises(ValueError):
        add_txn("alice", 0)
    with pytest.raises(ValueError):
        add_txn("alice", 10, kind="transfer")


def test_update_transaction_clears_category(db_path) -> None:
    category_id = db_mod.insert_category(Category(owner_id="alice", name="Pets", kind="expense", color="#123456"))
    txn_id = add_txn("alice", 40, category_id=category_id)

    assert db_mod.update_transaction(txn_id, "alice", clear_category=True, description="Vet") is True
    row = db_mod.fetch_transactions("alice").iloc[0]
    assert row["Description"] == "Vet"
    assert pd.isna(row["Category"])


def test_seed_default_categories_once(db_path) -> None:
    assert db_mod.seed_default_categories("alice") == len(db_mod.DEFAULT_CATEGORIES)
    assert db_mod.seed_default_categories("alice") == 0
    assert len(db_mod.fetch_categories("alice")) == len(db_mod.DEFAULT_CATEGORIES)
    assert all(c.kind == "income" for c in db_mod.fetch_categories("alice", kind="income"))
    assert db_mod.fetch_categories("bob") == []


def test_default_category_cannot_be_deleted(db_path) -> None:
    db_mod.seed_default_categories("alice")
    default = db_mod.fetch_categories("alice")[0]
    with pytest.raises(ValueError):
        db_mod.delete_category(default.id, "alice")
    assert db_mod.delete_category(12345, "alice") is False


def test_budgets_join_category(db_path) -> None:
    category_id = db_mod.insert_category(Category(owner_id="alice", name="Food", kind="expense", color="#FF6B6B"))
    db_mod.insert_budget(Budget(owner_id="alice", category_id=category_id, amount=300))

    budgets = db_mod.fetch_budgets("alice")
    assert budgets.iloc[0]["Category"] == "Food"
    assert budgets.iloc[0]["Amount"] == 300.0
    assert db_mod.update_budget(int(budgets.iloc[0]["id"]), "alice", amount=350) is True
    assert db_mod.fetch_budgets("alice").iloc[0]["Amount"] == 350.0

    with pytest.raises(ValueError):
        db_mod.insert_budget(Budget(owner_id="alice", category_id=category_id, amount=0))


def test_update_goal_target_recomputes_completion(db_path) -> None:
    goal_id = db_mod.insert_goal(Goal(
        owner_id="alice",
        name="Bike",
        target_amount=1000,
        current_amount=500,
        start_date=date(2024, 1, 1),
        target_date=date(2024, 12, 31),
    ))
    assert db_mod.fetch_goal(goal_id, "alice").is_completed is False

    assert db_mod.update_goal(goal_id, "alice", target_amount=400) is True
    goal = db_mod.fetch_goal(goal_id, "alice")
    assert goal.target_amount == 400.0
    assert goal.is_completed is True


def test_goal_validation(db_path) -> None:
    with pytest.raises(ValueError):
        db_mod.insert_goal(Goal(owner_id="alice", name="", target_amount=10, target_date=date(2030, 1, 1)))
    with pytest.raises(ValueError):
        db_mod.insert_goal(Goal(owner_id="alice", name="Trip", target_amount=0, target_date=date(2030, 1, 1)))


def test_update_category_is_reflected_in_joins(db_path) -> None:
    category_id = db_mod.insert_category(Category(owner_id="alice", name="Pets", kind="expense", color="#123456"))
    add_txn("alice", 5, category_id=category_id)

    assert db_mod.update_category(category_id, "alice", name="Animals", color="#654321") is True
    assert db_mod.update_category(category_id, "bob", name="Stolen") is False
    row = db_mod.fetch_transactions("alice").iloc[0]
    assert row["Category"] == "Animals"
    assert row["Color"] == "#654321"
    with pytest.raises(ValueError):
        db_mod.update_category(category_id, "alice", name="  ")


def test_update_transaction_edits_every_field(db_path) -> None:
    food = db_mod.insert_category(Category(owner_id="alice", name="Food", kind="expense", color="#FF6B6B"))
    gigs = db_mod.insert_category(Category(owner_id="alice", name="Gigs", kind="income", color="#4ECDC4"))
    txn_id = add_txn("alice", 40, category_id=food)

    assert db_mod.update_transaction(
        txn_id, "alice",
        category_id=gigs, amount=75.5, description="Concert", kind="income",
        txn_date=date(2024, 4, 2), is_recurring=True, recurrence="monthly",
    ) is True
    row = db_mod.fetch_transactions("alice").iloc[0]
    assert row["Category"] == "Gigs"
    assert row["Amount"] == 75.5
    assert row["Description"] == "Concert"
    assert row["Kind"] == "income"
    assert row["Date"] == pd.Timestamp("2024-04-02")
    assert bool(row["Is Recurring"]) is True
    assert row["Recurrence"] == "monthly"

    assert db_mod.update_transaction(txn_id, "alice", is_recurring=False) is True
    assert pd.isna(db_mod.fetch_transactions("alice").iloc[0]["Recurrence"])
    with pytest.raises(ValueError):
        db_mod.update_transaction(txn_id, "alice", is_recurring=True, recurrence="hourly")


def test_update_budget_changes_category_and_period(db_path) -> None:
    food = db_mod.insert_category(Category(owner_id="alice", name="Food", kind="expense", color="#FF6B6B"))
    fun = db_mod.insert_category(Category(owner_id="alice", name="Fun", kind="expense", color="#F7DC6F"))
    budget_id = db_mod.insert_budget(Budget(owner_id="alice", category_id=food, amount=300))

    assert db_mod.update_budget(budget_id, "alice", category_id=fun, amount=120, period="weekly") is True
    assert db_mod.update_budget(budget_id, "bob", amount=1) is False
    budget = db_mod.fetch_budgets("alice").iloc[0]
    assert budget["Category"] == "Fun"
    assert budget["Amount"] == 120.0
    assert budget["Period"] == "weekly"
    with pytest.raises(ValueError):
        db_mod.update_budget(budget_id, "alice", period="daily")
