"""Configuration management for the finance tracker.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

# Base project root - assumes this file is in finance_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("FINTRACK_DB_PATH", DATA_DIR / "finance_tracker.db")
).resolve()

# User preferences (currency, language, notifications)
PREFERENCES_PATH = Path(
    os.getenv("FINTRACK_PREFERENCES_PATH", DATA_DIR / "preferences.json")
).resolve()

# Identity used when no session supplies an owner
DEFAULT_OWNER_ID = os.getenv("FINTRACK_OWNER_ID", "local-user")

# Display defaults
DEFAULT_LOCALE = os.getenv("FINTRACK_LOCALE", "pt_BR")
DEFAULT_CURRENCY = os.getenv("FINTRACK_CURRENCY", "BRL")

# Aggregation defaults
MONTHLY_WINDOW = int(os.getenv("FINTRACK_MONTHLY_WINDOW", "6"))
BUDGET_MERGE_POLICY = os.getenv("FINTRACK_BUDGET_MERGE", "budget").strip().lower()
UNCATEGORIZED_LABEL = os.getenv("FINTRACK_UNCATEGORIZED_LABEL", "Uncategorized")
UNKNOWN_CATEGORY_LABEL = "Unknown Category"
NEUTRAL_COLOR = "#7C7C7C"

# Palette offered when creating categories
CATEGORY_COLORS = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
]

LOG_LEVEL = os.getenv("FINTRACK_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, DB_PATH.parent, PREFERENCES_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)


def merge_budgets_by_category() -> bool:
    """Whether budgets sharing a category are summed before computing spend."""
    return BUDGET_MERGE_POLICY == "category"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the Streamlit process."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
