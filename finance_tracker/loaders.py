"""Concurrent loading of the data the dashboard pages aggregate."""

from __future__ import annotations

import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional

import pandas as pd

from . import db
from .aggregation import BUDGET_FRAME_COLUMNS, GOAL_FRAME_COLUMNS, TRANSACTION_COLUMNS

logger = logging.getLogger(__name__)


@dataclass
class DashboardData:
    transactions: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=TRANSACTION_COLUMNS))
    budgets: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=BUDGET_FRAME_COLUMNS))
    goals: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=GOAL_FRAME_COLUMNS))
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.transactions.empty and self.budgets.empty and self.goals.empty


def _safe_read(name: str, reader: Callable[[], pd.DataFrame], errors: Dict[str, str]) -> Optional[pd.DataFrame]:
    try:
        return reader()
    except (sqlite3.Error, OSError) as e:
        logger.warning("Could not load %s: %s", name, e)
        errors[name] = str(e)
        return None


def load_dashboard_data(owner_id: str, db_path: Optional[Path] = None) -> DashboardData:
    """Read transactions, budgets and goals for an owner concurrently.

    The three reads are independent and run on a small thread pool; the
    bundle is returned once all of them have finished.  A failed read is
    logged and replaced by an empty frame so the pages show "no data".
    """
    readers = {
        'transactions': lambda: db.fetch_transactions(owner_id, db_path),
        'budgets': lambda: db.fetch_budgets(owner_id, db_path),
        'goals': lambda: db.fetch_goals(owner_id, db_path),
    }
    errors: Dict[str, str] = {}
    with ThreadPoolExecutor(max_workers=len(readers), thread_name_prefix='fintrack-load') as pool:
        futures = {name: pool.submit(_safe_read, name, reader, errors) for name, reader in readers.items()}
        results = {name: future.result() for name, future in futures.items()}

    data = DashboardData(errors=errors)
    for name, frame in results.items():
        if frame is not None:
            setattr(data, name, frame)
    return data
