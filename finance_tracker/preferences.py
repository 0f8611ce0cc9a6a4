"""Lightweight persistent store for user display preferences."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from . import config

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES: Dict[str, Any] = {
    'full_name': '',
    'currency': config.DEFAULT_CURRENCY,
    'language': config.DEFAULT_LOCALE,
    'email_notifications': True,
    'push_notifications': False,
}
SUPPORTED_CURRENCIES = ['BRL', 'USD', 'EUR']
SUPPORTED_LANGUAGES = ['pt_BR', 'en_US']


def load_preferences(path: Path | None = None) -> Dict[str, Any]:
    target = path or config.PREFERENCES_PATH
    if not target.exists():
        return DEFAULT_PREFERENCES.copy()
    try:
        with target.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable preferences file %s: %s", target, e)
        return DEFAULT_PREFERENCES.copy()
    if not isinstance(data, dict):
        return DEFAULT_PREFERENCES.copy()
    merged = DEFAULT_PREFERENCES.copy()
    merged.update({k: v for k, v in data.items() if k in DEFAULT_PREFERENCES})
    return merged


def save_preferences(preferences: Dict[str, Any], path: Path | None = None) -> None:
    if preferences.get('currency') not in SUPPORTED_CURRENCIES:
        raise ValueError(f"Unsupported currency '{preferences.get('currency')}'")
    if preferences.get('language') not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language '{preferences.get('language')}'")
    target = path or config.PREFERENCES_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = {k: v for k, v in preferences.items() if k in DEFAULT_PREFERENCES}
    with target.open('w', encoding='utf-8') as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)
