"""Goal contributions: ledger entries plus the goal's running balance.

A contribution appends a signed row to ``goal_contributions`` and moves the
goal's ``current_amount`` by the same delta, never below zero.  Both writes
happen inside one SQLite transaction so the ledger and the balance cannot
drift apart when a write fails.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pandas as pd

from . import db
from .models import Goal

logger = logging.getLogger(__name__)

ADD = 'add'
WITHDRAW = 'withdraw'

DEFAULT_DESCRIPTIONS = {
    ADD: 'Contribution added',
    WITHDRAW: 'Contribution withdrawn',
}


class ContributionError(RuntimeError):
    """Raised when a contribution could not be recorded; nothing was written."""


def contribution_delta(action: str, amount: float) -> float:
    """Turn an add/withdraw action and a positive amount into a signed delta."""
    if amount is None or float(amount) <= 0:
        raise ValueError("Invalid value: enter an amount greater than zero")
    if action == ADD:
        return float(amount)
    if action == WITHDRAW:
        return -float(amount)
    raise ValueError(f"Unknown contribution action '{action}'")


def apply_contribution(
    goal_id: int,
    owner_id: str,
    delta: float,
    description: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> Goal:
    """Record a contribution and update the goal balance atomically.

    The ledger keeps ``delta`` as given.  The balance becomes
    ``max(0, current_amount + delta)`` and ``is_completed`` is recomputed.

    Returns:
        The goal as stored after the contribution.

    Raises:
        ContributionError: if the goal does not exist for this owner or the
            database rejected either write.  No change is persisted.
    """
    delta = float(delta)
    if description is None:
        description = DEFAULT_DESCRIPTIONS[ADD if delta >= 0 else WITHDRAW]

    try:
        with db.connect(db_path) as conn:
            with conn:
                row = conn.execute(
                    "SELECT * FROM goals WHERE id = ? AND owner_id = ?", (goal_id, owner_id)
                ).fetchone()
                if row is None:
                    raise ContributionError(f"Goal {goal_id} not found")
                goal = Goal.from_row(dict(row))

                conn.execute(
                    "INSERT INTO goal_contributions (goal_id, amount, description, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (goal_id, delta, description, datetime.now(timezone.utc).isoformat()),
                )

                new_amount = goal.current_amount + delta
                if new_amount < 0:
                    logger.info(
                        "Withdrawal of %.2f exceeds balance %.2f of goal %s; clamping to zero",
                        -delta, goal.current_amount, goal_id,
                    )
                    new_amount = 0.0
                goal.current_amount = new_amount
                goal.refresh_completion()

                conn.execute(
                    "UPDATE goals SET current_amount = ?, is_completed = ? "
                    "WHERE id = ? AND owner_id = ?",
                    (goal.current_amount, int(goal.is_completed), goal_id, owner_id),
                )
    except sqlite3.Error as e:
        logger.error("Contribution to goal %s failed: %s", goal_id, e)
        raise ContributionError(f"Failed to record contribution for goal {goal_id}: {e}") from e

    logger.info("Goal %s balance now %.2f (completed=%s)", goal_id, goal.current_amount, goal.is_completed)
    return goal


def contribution_history(goal_id: int, owner_id: str, db_path: Optional[Path] = None) -> pd.DataFrame:
    """Contribution ledger of a goal, newest first; empty for another owner's goal."""
    return db.fetch_contributions(goal_id, owner_id, db_path)
