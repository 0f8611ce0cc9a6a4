from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from finance_tracker import config
from finance_tracker import db as db_mod


@pytest.fixture
def db_path(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Fresh tracker database in a temporary directory."""
    path = tmp_path / "tracker.db"
    monkeypatch.setattr(config, "DB_PATH", path)
    db_mod.init_db()
    return path
