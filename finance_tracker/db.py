"""SQLite data layer for transactions, categories, budgets and goals.

Every read and write is scoped to an ``owner_id``.  Reads return pandas
DataFrames with the column layout the aggregation functions expect; joined
category names/colours are ``NULL`` when a transaction or budget has no
category or its category was deleted.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterator, List, Optional

import pandas as pd

from . import config
from .models import BUDGET_PERIODS, EXPENSE, INCOME, RECURRENCE_FREQUENCIES, Budget, Category, Goal, Transaction

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    name TEXT NOT NULL,
    kind TEXT NOT NULL CHECK (kind IN ('income', 'expense')),
    color TEXT NOT NULL,
    is_default INTEGER NOT NULL DEFAULT 0,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    category_id INTEGER,
    amount REAL NOT NULL CHECK (amount > 0),
    description TEXT NOT NULL,
    kind TEXT NOT NULL CHECK (kind IN ('income', 'expense')),
    date TEXT NOT NULL,
    is_recurring INTEGER NOT NULL DEFAULT 0,
    recurrence TEXT,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    category_id INTEGER NOT NULL,
    amount REAL NOT NULL CHECK (amount > 0),
    period TEXT NOT NULL DEFAULT 'monthly',
    start_date TEXT,
    is_recurring INTEGER NOT NULL DEFAULT 1,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS goals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    target_amount REAL NOT NULL CHECK (target_amount > 0),
    current_amount REAL NOT NULL DEFAULT 0 CHECK (current_amount >= 0),
    start_date TEXT,
    target_date TEXT NOT NULL,
    is_completed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS goal_contributions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    goal_id INTEGER NOT NULL REFERENCES goals (id) ON DELETE CASCADE,
    amount REAL NOT NULL,
    description TEXT,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_txn_owner_date ON transactions (owner_id, date);
CREATE INDEX IF NOT EXISTS ix_budget_owner ON budgets (owner_id);
CREATE INDEX IF NOT EXISTS ix_goal_owner ON goals (owner_id);
CREATE INDEX IF NOT EXISTS ix_contribution_goal ON goal_contributions (goal_id);
"""

DEFAULT_CATEGORIES = [
    ('Salary', INCOME, '#22C55E'),
    ('Freelance', INCOME, '#4ECDC4'),
    ('Investments', INCOME, '#45B7D1'),
    ('Food', EXPENSE, '#FF6B6B'),
    ('Transport', EXPENSE, '#FFEAA7'),
    ('Housing', EXPENSE, '#DDA0DD'),
    ('Health', EXPENSE, '#98D8C8'),
    ('Leisure', EXPENSE, '#F7DC6F'),
    ('Education', EXPENSE, '#BB8FCE'),
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _iso(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


@contextmanager
def connect(db_path: Optional[Path] = None) -> Iterator[sqlite3.Connection]:
    target = Path(db_path) if db_path else config.DB_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(target))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[Path] = None) -> None:
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()


# Readers


def fetch_transactions(owner_id: str, db_path: Optional[Path] = None) -> pd.DataFrame:
    """All transactions of an owner joined with their category, newest first."""
    sql = (
        "SELECT t.id, t.owner_id AS 'Owner', t.category_id AS 'Category ID', "
        "c.name AS 'Category', c.color AS 'Color', t.amount AS 'Amount', "
        "t.description AS 'Description', t.kind AS 'Kind', t.date AS 'Date', "
        "t.is_recurring AS 'Is Recurring', t.recurrence AS 'Recurrence' "
        "FROM transactions t "
        "LEFT JOIN categories c ON c.id = t.category_id AND c.owner_id = t.owner_id "
        "WHERE t.owner_id = ? ORDER BY t.date DESC, t.id DESC"
    )
    with connect(db_path) as conn:
        df = pd.read_sql_query(sql, conn, params=[owner_id])
    if not df.empty:
        df['Date'] = pd.to_datetime(df['Date'])
        df['Is Recurring'] = df['Is Recurring'].astype(bool)
    return df


def fetch_budgets(owner_id: str, db_path: Optional[Path] = None) -> pd.DataFrame:
    """All budgets of an owner joined with their category, newest first."""
    sql = (
        "SELECT b.id, b.owner_id AS 'Owner', b.category_id AS 'Category ID', "
        "c.name AS 'Category', c.color AS 'Color', b.amount AS 'Amount', "
        "b.period AS 'Period', b.start_date AS 'Start Date', "
        "b.is_recurring AS 'Is Recurring' "
        "FROM budgets b "
        "LEFT JOIN categories c ON c.id = b.category_id AND c.owner_id = b.owner_id "
        "WHERE b.owner_id = ? ORDER BY b.created_at DESC, b.id DESC"
    )
    with connect(db_path) as conn:
        df = pd.read_sql_query(sql, conn, params=[owner_id])
    if not df.empty:
        df['Is Recurring'] = df['Is Recurring'].astype(bool)
    return df


def fetch_goals(owner_id: str, db_path: Optional[Path] = None) -> pd.DataFrame:
    sql = (
        "SELECT id, owner_id AS 'Owner', name AS 'Name', description AS 'Description', "
        "target_amount AS 'Target', current_amount AS 'Current', "
        "start_date AS 'Start Date', target_date AS 'Target Date', "
        "is_completed AS 'Completed' "
        "FROM goals WHERE owner_id = ? ORDER BY created_at DESC, id DESC"
    )
    with connect(db_path) as conn:
        df = pd.read_sql_query(sql, conn, params=[owner_id])
    if not df.empty:
        df['Completed'] = df['Completed'].astype(bool)
    return df


def fetch_goal(goal_id: int, owner_id: str, db_path: Optional[Path] = None) -> Optional[Goal]:
    with connect(db_path) as conn:
        row = conn.execute(
            "SELECT * FROM goals WHERE id = ? AND owner_id = ?", (goal_id, owner_id)
        ).fetchone()
    return Goal.from_row(dict(row)) if row else None


def fetch_categories(
    owner_id: str,
    kind: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> List[Category]:
    sql = "SELECT * FROM categories WHERE owner_id = ?"
    params: List[Any] = [owner_id]
    if kind:
        sql += " AND kind = ?"
        params.append(kind)
    sql += " ORDER BY kind, name"
    with connect(db_path) as conn:
        rows = conn.execute(sql, params).fetchall()
    return [Category.from_row(dict(row)) for row in rows]


def fetch_contributions(goal_id: int, owner_id: str, db_path: Optional[Path] = None) -> pd.DataFrame:
    """Contribution ledger of a goal owned by ``owner_id``, newest first."""
    sql = (
        "SELECT c.id, c.goal_id AS 'Goal ID', c.amount AS 'Amount', "
        "c.description AS 'Description', c.created_at AS 'Created At' "
        "FROM goal_contributions c JOIN goals g ON g.id = c.goal_id "
        "WHERE c.goal_id = ? AND g.owner_id = ? ORDER BY c.created_at DESC, c.id DESC"
    )
    with connect(db_path) as conn:
        df = pd.read_sql_query(sql, conn, params=[goal_id, owner_id])
    if not df.empty:
        df['Created At'] = pd.to_datetime(df['Created At'], utc=True)
    return df


# Writers


def _category_kind(conn: sqlite3.Connection, category_id: Any, owner_id: str) -> Optional[str]:
    row = conn.execute(
        "SELECT kind FROM categories WHERE id = ? AND owner_id = ?", (category_id, owner_id)
    ).fetchone()
    return row['kind'] if row else None


def insert_transaction(txn: Transaction, db_path: Optional[Path] = None) -> int:
    """Insert a transaction and return its id.

    A kind that differs from the category's kind is logged but stored anyway.
    """
    txn.validate()
    now = _now()
    with connect(db_path) as conn:
        if txn.category_id is not None:
            category_kind = _category_kind(conn, txn.category_id, txn.owner_id)
            if category_kind and category_kind != txn.kind:
                logger.warning(
                    "Transaction kind %s does not match category %s kind %s",
                    txn.kind, txn.category_id, category_kind,
                )
        cursor = conn.execute(
            "INSERT INTO transactions (owner_id, category_id, amount, description, kind, date, "
            "is_recurring, recurrence, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                txn.owner_id,
                txn.category_id,
                float(txn.amount),
                txn.description.strip(),
                txn.kind,
                _iso(txn.date),
                int(bool(txn.is_recurring)),
                txn.recurrence if txn.is_recurring else None,
                now,
                now,
            ),
        )
        conn.commit()
        txn.id = cursor.lastrowid
    return txn.id


def update_transaction(
    transaction_id: int,
    owner_id: str,
    category_id: Optional[int] = None,
    amount: Optional[float] = None,
    description: Optional[str] = None,
    kind: Optional[str] = None,
    txn_date: Optional[date] = None,
    is_recurring: Optional[bool] = None,
    recurrence: Optional[str] = None,
    clear_category: bool = False,
    db_path: Optional[Path] = None,
) -> bool:
    """Update a transaction in the database.

    Returns True if a row owned by ``owner_id`` was updated, False otherwise.
    """
    updates = []
    params: List[Any] = []

    if clear_category:
        updates.append("category_id = NULL")
    elif category_id is not None:
        updates.append("category_id = ?")
        params.append(category_id)

    if amount is not None:
        if float(amount) <= 0:
            raise ValueError("Transaction amount must be positive")
        updates.append("amount = ?")
        params.append(float(amount))

    if description is not None:
        if not description.strip():
            raise ValueError("Transaction description cannot be empty")
        updates.append("description = ?")
        params.append(description.strip())

    if kind is not None:
        if kind not in (INCOME, EXPENSE):
            raise ValueError(f"Unknown transaction kind '{kind}'")
        updates.append("kind = ?")
        params.append(kind)

    if txn_date is not None:
        updates.append("date = ?")
        params.append(_iso(txn_date))

    if is_recurring is not None:
        updates.append("is_recurring = ?")
        params.append(int(is_recurring))
        if not is_recurring:
            updates.append("recurrence = NULL")

    if recurrence is not None and is_recurring is not False:
        if recurrence not in RECURRENCE_FREQUENCIES:
            raise ValueError(f"Unknown recurrence frequency '{recurrence}'")
        updates.append("recurrence = ?")
        params.append(recurrence)

    if not updates:
        return False

    updates.append("updated_at = ?")
    params.append(_now())
    params.extend([transaction_id, owner_id])
    sql = f"UPDATE transactions SET {', '.join(updates)} WHERE id = ? AND owner_id = ?"

    with connect(db_path) as conn:
        cursor = conn.execute(sql, params)
        conn.commit()
        return cursor.rowcount > 0


def delete_transaction(transaction_id: int, owner_id: str, db_path: Optional[Path] = None) -> bool:
    with connect(db_path) as conn:
        cursor = conn.execute(
            "DELETE FROM transactions WHERE id = ? AND owner_id = ?", (transaction_id, owner_id)
        )
        conn.commit()
        return cursor.rowcount > 0


def insert_category(category: Category, db_path: Optional[Path] = None) -> int:
    category.validate()
    with connect(db_path) as conn:
        cursor = conn.execute(
            "INSERT INTO categories (owner_id, name, kind, color, is_default, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                category.owner_id,
                category.name.strip(),
                category.kind,
                category.color or config.NEUTRAL_COLOR,
                int(category.is_default),
                _now(),
            ),
        )
        conn.commit()
        category.id = cursor.lastrowid
    return category.id


def update_category(
    category_id: int,
    owner_id: str,
    name: Optional[str] = None,
    kind: Optional[str] = None,
    color: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> bool:
    updates = []
    params: List[Any] = []
    if name is not None:
        if not name.strip():
            raise ValueError("Category name cannot be empty")
        updates.append("name = ?")
        params.append(name.strip())
    if kind is not None:
        if kind not in (INCOME, EXPENSE):
            raise ValueError(f"Unknown category kind '{kind}'")
        updates.append("kind = ?")
        params.append(kind)
    if color is not None:
        updates.append("color = ?")
        params.append(color)
    if not updates:
        return False

    params.extend([category_id, owner_id])
    with connect(db_path) as conn:
        cursor = conn.execute(
            f"UPDATE categories SET {', '.join(updates)} WHERE id = ? AND owner_id = ?", params
        )
        conn.commit()
        return cursor.rowcount > 0


def delete_category(category_id: int, owner_id: str, db_path: Optional[Path] = None) -> bool:
    """Delete a user category.

    Default categories cannot be deleted.  Transactions that referenced the
    category keep its id and are reported as uncategorized.
    """
    with connect(db_path) as conn:
        row = conn.execute(
            "SELECT is_default FROM categories WHERE id = ? AND owner_id = ?",
            (category_id, owner_id),
        ).fetchone()
        if row is None:
            return False
        if row['is_default']:
            raise ValueError("Default categories cannot be deleted")
        cursor = conn.execute(
            "DELETE FROM categories WHERE id = ? AND owner_id = ?", (category_id, owner_id)
        )
        conn.commit()
        return cursor.rowcount > 0


def seed_default_categories(owner_id: str, db_path: Optional[Path] = None) -> int:
    """Create the default categories for an owner that has none yet.

    Returns the number of categories inserted.
    """
    with connect(db_path) as conn:
        existing = conn.execute(
            "SELECT COUNT(*) FROM categories WHERE owner_id = ? AND is_default = 1", (owner_id,)
        ).fetchone()[0]
        if existing:
            return 0
        now = _now()
        conn.executemany(
            "INSERT INTO categories (owner_id, name, kind, color, is_default, created_at) "
            "VALUES (?, ?, ?, ?, 1, ?)",
            [(owner_id, name, kind, color, now) for name, kind, color in DEFAULT_CATEGORIES],
        )
        conn.commit()
    logger.info("Seeded %d default categories for %s", len(DEFAULT_CATEGORIES), owner_id)
    return len(DEFAULT_CATEGORIES)


def insert_budget(budget: Budget, db_path: Optional[Path] = None) -> int:
    budget.validate()
    with connect(db_path) as conn:
        cursor = conn.execute(
            "INSERT INTO budgets (owner_id, category_id, amount, period, start_date, "
            "is_recurring, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                budget.owner_id,
                budget.category_id,
                float(budget.amount),
                budget.period,
                _iso(budget.start_date or date.today()),
                int(bool(budget.is_recurring)),
                _now(),
            ),
        )
        conn.commit()
        budget.id = cursor.lastrowid
    return budget.id


def update_budget(
    budget_id: int,
    owner_id: str,
    category_id: Optional[int] = None,
    amount: Optional[float] = None,
    period: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> bool:
    updates = []
    params: List[Any] = []
    if category_id is not None:
        updates.append("category_id = ?")
        params.append(category_id)
    if amount is not None:
        if float(amount) <= 0:
            raise ValueError("Budget amount must be positive")
        updates.append("amount = ?")
        params.append(float(amount))
    if period is not None:
        if period not in BUDGET_PERIODS:
            raise ValueError(f"Unknown budget period '{period}'")
        updates.append("period = ?")
        params.append(period)
    if not updates:
        return False

    params.extend([budget_id, owner_id])
    with connect(db_path) as conn:
        cursor = conn.execute(
            f"UPDATE budgets SET {', '.join(updates)} WHERE id = ? AND owner_id = ?", params
        )
        conn.commit()
        return cursor.rowcount > 0


def delete_budget(budget_id: int, owner_id: str, db_path: Optional[Path] = None) -> bool:
    with connect(db_path) as conn:
        cursor = conn.execute(
            "DELETE FROM budgets WHERE id = ? AND owner_id = ?", (budget_id, owner_id)
        )
        conn.commit()
        return cursor.rowcount > 0


def insert_goal(goal: Goal, db_path: Optional[Path] = None) -> int:
    goal.validate()
    goal.refresh_completion()
    with connect(db_path) as conn:
        cursor = conn.execute(
            "INSERT INTO goals (owner_id, name, description, target_amount, current_amount, "
            "start_date, target_date, is_completed, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                goal.owner_id,
                goal.name.strip(),
                goal.description,
                float(goal.target_amount),
                float(goal.current_amount or 0.0),
                _iso(goal.start_date),
                _iso(goal.target_date),
                int(goal.is_completed),
                _now(),
            ),
        )
        conn.commit()
        goal.id = cursor.lastrowid
    return goal.id


def update_goal(
    goal_id: int,
    owner_id: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    target_amount: Optional[float] = None,
    target_date: Optional[date] = None,
    db_path: Optional[Path] = None,
) -> bool:
    """Edit goal details; completion is recomputed when the target changes.

    The running balance is only changed through contributions.
    """
    updates = []
    params: List[Any] = []
    if name is not None:
        if not name.strip():
            raise ValueError("Goal name cannot be empty")
        updates.append("name = ?")
        params.append(name.strip())
    if description is not None:
        updates.append("description = ?")
        params.append(description or None)
    if target_amount is not None:
        if float(target_amount) <= 0:
            raise ValueError("Goal target amount must be positive")
        updates.append("target_amount = ?")
        params.append(float(target_amount))
        updates.append("is_completed = (current_amount >= ?)")
        params.append(float(target_amount))
    if target_date is not None:
        updates.append("target_date = ?")
        params.append(_iso(target_date))
    if not updates:
        return False

    params.extend([goal_id, owner_id])
    with connect(db_path) as conn:
        cursor = conn.execute(
            f"UPDATE goals SET {', '.join(updates)} WHERE id = ? AND owner_id = ?", params
        )
        conn.commit()
        return cursor.rowcount > 0


def delete_goal(goal_id: int, owner_id: str, db_path: Optional[Path] = None) -> bool:
    """Delete a goal together with its contribution ledger."""
    with connect(db_path) as conn:
        cursor = conn.execute(
            "DELETE FROM goals WHERE id = ? AND owner_id = ?", (goal_id, owner_id)
        )
        conn.commit()
        return cursor.rowcount > 0
