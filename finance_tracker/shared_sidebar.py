"""Shared sidebar components for the multi-page tracker.

Every page calls :func:`render_shared_sidebar` first; it resolves the
current owner, makes sure the database exists, loads the owner's records
and returns them together with a configured :class:`FinanceTrackerUI`.
"""

from __future__ import annotations

from typing import Any, Dict

import streamlit as st

from . import config, db
from .loaders import load_dashboard_data
from .preferences import load_preferences
from .session import claim_seeding, current_owner_id
from .ui import FinanceTrackerUI


def render_shared_sidebar() -> Dict[str, Any]:
    """Render shared sidebar elements available on all pages.

    Returns:
        Dict with keys: 'owner_id', 'data', 'preferences', 'ui'
    """
    preferences = load_preferences()
    ui = FinanceTrackerUI(currency=preferences['currency'], locale=preferences['language'])

    if not st.session_state.get('db_ready'):
        config.ensure_data_directories()
        db.init_db()
        st.session_state.db_ready = True

    owner_id = current_owner_id(st.session_state)
    if claim_seeding(st.session_state, owner_id):
        db.seed_default_categories(owner_id)

    data = load_dashboard_data(owner_id)

    st.sidebar.title("💰 Finance Tracker")
    if preferences.get('full_name'):
        st.sidebar.caption(f"Signed in as {preferences['full_name']}")
    st.sidebar.metric("Transactions", len(data.transactions))
    st.sidebar.metric("Budgets", len(data.budgets))
    st.sidebar.metric("Goals", len(data.goals))
    if st.sidebar.button("🔄 Refresh data"):
        st.rerun()

    if data.errors:
        ui.show_errors(data.errors)

    return {
        'owner_id': owner_id,
        'data': data,
        'preferences': preferences,
        'ui': ui,
    }
