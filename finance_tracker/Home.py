"""Main entry point for the Streamlit multi-page app.

This page is the dashboard: balance cards, recent transactions, this
month's budgets and the goals still in progress.  Pages in the pages/
directory will automatically appear in the sidebar.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from finance_tracker import aggregation as agg
from finance_tracker.config import configure_logging
from finance_tracker.shared_sidebar import render_shared_sidebar


def main():
    """Render the dashboard."""
    configure_logging()
    st.set_page_config(page_title="Dashboard", page_icon="🏠", layout="wide")

    sidebar_data = render_shared_sidebar()
    ui = sidebar_data['ui']
    data = sidebar_data['data']

    st.header("🏠 Dashboard")
    st.caption("Overview of your finances")

    ui.render_summary_cards(data.transactions)
    ui.render_recent_transactions(data.transactions)
    ui.render_budget_overview(data.budgets, data.transactions)

    st.subheader("🎯 Goals in Progress")
    ui.render_goal_cards(agg.active_goals(data.goals, 3))


main()
