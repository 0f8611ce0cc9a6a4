"""Reusable Streamlit components for the finance tracker pages.

The components here only render: they receive frames that were already
aggregated (or raw frames they aggregate through
:mod:`finance_tracker.aggregation`) and never write to the database.  Forms
return plain records for the page to persist.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from . import aggregation as agg
from . import visualization as viz
from .formatting import escape_dollar_for_markdown, format_currency, format_percentage
from .models import BUDGET_PERIODS, EXPENSE, INCOME, RECURRENCE_FREQUENCIES, Budget, Category, Goal, Transaction


class FinanceTrackerUI:
    """UI components for the personal finance tracker."""

    def __init__(self, currency: Optional[str] = None, locale: Optional[str] = None):
        self.currency = currency
        self.locale = locale

    def money(self, amount: float) -> str:
        return format_currency(amount, self.currency)

    def money_md(self, amount: float) -> str:
        """Currency text safe to embed in Streamlit markdown."""
        return escape_dollar_for_markdown(self.money(amount))

    def render_summary_cards(self, transactions: pd.DataFrame) -> None:
        """Balance, income and expense totals."""
        totals = agg.summary_totals(transactions)
        col1, col2, col3 = st.columns(3)
        col1.metric("Balance", self.money(totals['balance']))
        col2.metric("Income", self.money(totals['income']))
        col3.metric("Expenses", self.money(totals['expense']))

    def render_recent_transactions(self, transactions: pd.DataFrame, limit: int = 5) -> None:
        st.subheader("🧾 Recent Transactions")
        recent = agg.recent_transactions(transactions, limit)
        if recent.empty:
            st.info("No transactions yet. Add your first one on the Transactions page.")
            return
        for _, row in recent.iterrows():
            sign = '+' if row['Kind'] == INCOME else '-'
            col1, col2 = st.columns([3, 1])
            col1.markdown(f"**{row['Description']}**  \n{row['Date']:%d/%m/%Y}")
            col2.markdown(f"{sign} {self.money_md(row['Amount'])}")

    def render_monthly_chart(self, transactions: pd.DataFrame) -> None:
        st.subheader("📊 Income vs Expenses")
        monthly = agg.monthly_series(transactions, locale=self.locale)
        if monthly.empty:
            st.info("No data available for the monthly chart.")
            return
        st.plotly_chart(viz.create_monthly_bar_chart(monthly), use_container_width=True)

    def render_category_breakdown(self, transactions: pd.DataFrame) -> None:
        st.subheader("🥧 Expenses by Category")
        categories = agg.category_expenses(transactions)
        if categories.empty:
            st.info("No expenses recorded yet.")
            return
        st.plotly_chart(viz.create_category_pie_chart(categories), use_container_width=True)
        ranked = categories.sort_values('Total', ascending=False)
        st.dataframe(
            ranked[['Category', 'Total']].style.format({'Total': self.money}),
            use_container_width=True,
        )

    def render_yearly_comparison(self, transactions: pd.DataFrame) -> None:
        st.subheader("📅 Yearly Comparison")
        yearly = agg.yearly_comparison(transactions)
        if yearly.empty:
            st.info("No data available for the yearly comparison.")
            return
        st.plotly_chart(viz.create_yearly_comparison_chart(yearly), use_container_width=True)

    def render_budget_overview(self, budgets: pd.DataFrame, transactions: pd.DataFrame) -> None:
        """Budget vs this month's spending, one card per budget line."""
        st.subheader("📋 Budgets This Month")
        overview = agg.budget_overview(budgets, transactions)
        if overview.empty:
            st.info("No budgets set. Create one on the Budgets page.")
            return
        for _, line in overview.iterrows():
            with st.container(border=True):
                header, status = st.columns([3, 1])
                header.markdown(
                    f"<span style='color:{line['Color']}'>●</span> **{line['Category']}**",
                    unsafe_allow_html=True,
                )
                icon = '⚠️' if line['Status'] == 'Over Budget' else '📈' if line['Status'] == 'Near Limit' else '📉'
                status.markdown(f"{icon} {format_percentage(line['Percentage'])}")
                st.progress(agg.progress_bar_width(line['Percentage']) / 100)
                spent, budgeted = st.columns(2)
                spent.caption(f"Spent: {self.money_md(line['Spent'])}")
                budgeted.caption(f"Budget: {self.money_md(line['Budgeted'])}")
                label = escape_dollar_for_markdown(agg.remaining_label(line['Remaining'], self.currency))
                if line['Remaining'] >= 0:
                    st.success(label)
                else:
                    st.error(label)

    def render_goal_cards(self, goals: pd.DataFrame) -> None:
        overview = agg.goals_overview(goals)
        if overview.empty:
            st.info("No goals yet. Create your first savings goal.")
            return
        for _, goal in overview.iterrows():
            col1, col2 = st.columns([3, 1])
            with col1:
                st.progress(goal['Bar Width'] / 100)
                st.markdown(
                    f"**{goal['Name']}**: {self.money_md(goal['Current'])} / {self.money_md(goal['Target'])}"
                )
                st.caption(goal['Deadline'])
            with col2:
                st.metric("Progress", format_percentage(goal['Progress']))

    def render_transaction_form(self, categories: List[Category], owner_id: str) -> Optional[Transaction]:
        """Form for a new transaction; returns the unsaved record on submit."""
        with st.form("transaction_form", clear_on_submit=True):
            col1, col2 = st.columns(2)
            with col1:
                kind = st.radio("Type", options=[EXPENSE, INCOME], format_func=str.title, horizontal=True)
                amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
                txn_date = st.date_input("Date", value=date.today())
            with col2:
                description = st.text_input("Description")
                options: List[Optional[Category]] = [None, *categories]
                category = st.selectbox(
                    "Category",
                    options=options,
                    format_func=lambda c: "No category" if c is None else f"{c.name} ({c.kind})",
                )
                is_recurring = st.checkbox("Recurring")
                recurrence = st.selectbox("Repeats", options=sorted(RECURRENCE_FREQUENCIES))

            if st.form_submit_button("Save Transaction"):
                return Transaction(
                    owner_id=owner_id,
                    amount=float(amount),
                    kind=kind,
                    date=txn_date,
                    description=description.strip(),
                    category_id=category.id if category else None,
                    is_recurring=is_recurring,
                    recurrence=recurrence if is_recurring else None,
                )
        return None

    def render_budget_form(self, categories: List[Category], owner_id: str) -> Optional[Budget]:
        expense_categories = [c for c in categories if c.kind == EXPENSE]
        if not expense_categories:
            st.info("Create an expense category first.")
            return None
        with st.form("budget_form", clear_on_submit=True):
            category = st.selectbox("Category", options=expense_categories, format_func=lambda c: c.name)
            amount = st.number_input("Amount", min_value=0.0, step=10.0, format="%.2f")
            period = st.selectbox("Period", options=['monthly', 'weekly', 'yearly'], format_func=str.title)
            start_date = st.date_input("Start date", value=date.today())
            is_recurring = st.checkbox("Renews every period", value=True)
            if st.form_submit_button("Save Budget"):
                return Budget(
                    owner_id=owner_id,
                    category_id=category.id,
                    amount=float(amount),
                    period=period if period in BUDGET_PERIODS else 'monthly',
                    start_date=start_date,
                    is_recurring=is_recurring,
                )
        return None

    def render_transaction_edit_form(self, row: pd.Series, categories: List[Category]) -> Optional[Dict]:
        """Edit every field of a stored transaction.

        Returns the keyword arguments for ``db.update_transaction`` on submit.
        """
        txn_id = int(row['id'])
        options: List[Optional[Category]] = [None, *categories]
        current = next((i for i, c in enumerate(options) if c and row['Category ID'] == c.id), 0)
        frequencies = sorted(RECURRENCE_FREQUENCIES)
        recurrence = row['Recurrence'] if row['Recurrence'] in frequencies else 'monthly'
        with st.form(f"edit_transaction_{txn_id}"):
            col1, col2 = st.columns(2)
            with col1:
                kind = st.radio("Type", options=[EXPENSE, INCOME], format_func=str.title, horizontal=True,
                                index=1 if row['Kind'] == INCOME else 0, key=f"edit_kind_{txn_id}")
                amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f",
                                         value=float(row['Amount']), key=f"edit_amount_{txn_id}")
                txn_date = st.date_input("Date", value=row['Date'].date(), key=f"edit_date_{txn_id}")
            with col2:
                description = st.text_input("Description", value=row['Description'], key=f"edit_desc_{txn_id}")
                category = st.selectbox(
                    "Category",
                    options=options,
                    index=current,
                    format_func=lambda c: "No category" if c is None else f"{c.name} ({c.kind})",
                    key=f"edit_category_{txn_id}",
                )
                is_recurring = st.checkbox("Recurring", value=bool(row['Is Recurring']), key=f"edit_rec_{txn_id}")
                frequency = st.selectbox("Repeats", options=frequencies, index=frequencies.index(recurrence),
                                         key=f"edit_freq_{txn_id}")

            if st.form_submit_button("Save Changes"):
                return {
                    'category_id': category.id if category else None,
                    'clear_category': category is None,
                    'amount': float(amount),
                    'description': description,
                    'kind': kind,
                    'txn_date': txn_date,
                    'is_recurring': is_recurring,
                    'recurrence': frequency if is_recurring else None,
                }
        return None

    def render_budget_edit_form(self, line: pd.Series, categories: List[Category]) -> Optional[Dict]:
        """Edit a budget's category, amount and period; returns ``db.update_budget`` kwargs."""
        budget_id = int(line['Budget ID'])
        expense_categories = [c for c in categories if c.kind == EXPENSE]
        current = next((i for i, c in enumerate(expense_categories) if line['Category ID'] == c.id), 0)
        periods = ['monthly', 'weekly', 'yearly']
        with st.form(f"edit_budget_{budget_id}"):
            category = st.selectbox("Category", options=expense_categories, index=current,
                                    format_func=lambda c: c.name, key=f"budget_category_{budget_id}")
            amount = st.number_input("Amount", min_value=0.0, step=10.0, format="%.2f",
                                     value=float(line['Budgeted']), key=f"budget_amount_{budget_id}")
            period = st.selectbox("Period", options=periods, format_func=str.title,
                                  index=periods.index(line['Period']) if line['Period'] in periods else 0,
                                  key=f"budget_period_{budget_id}")
            if st.form_submit_button("Save Changes"):
                return {
                    'category_id': category.id if category else None,
                    'amount': float(amount),
                    'period': period,
                }
        return None

    def render_goal_form(self, owner_id: str) -> Optional[Goal]:
        with st.form("goal_form", clear_on_submit=True):
            name = st.text_input("Goal name")
            description = st.text_area("Description (optional)")
            target_amount = st.number_input("Target amount", min_value=0.0, step=100.0, format="%.2f")
            current_amount = st.number_input("Starting amount", min_value=0.0, step=100.0, format="%.2f")
            col1, col2 = st.columns(2)
            start_date = col1.date_input("Start date", value=date.today())
            target_date = col2.date_input("Target date", value=date.today())
            if st.form_submit_button("Save Goal"):
                return Goal(
                    owner_id=owner_id,
                    name=name.strip(),
                    description=description.strip() or None,
                    target_amount=float(target_amount),
                    current_amount=float(current_amount),
                    start_date=start_date,
                    target_date=target_date,
                )
        return None

    def render_category_form(self, owner_id: str, palette: List[str]) -> Optional[Category]:
        with st.form("category_form", clear_on_submit=True):
            name = st.text_input("Category name")
            kind = st.radio("Type", options=[EXPENSE, INCOME], format_func=str.title, horizontal=True)
            color = st.selectbox("Color", options=palette)
            if st.form_submit_button("Add Category"):
                return Category(owner_id=owner_id, name=name.strip(), kind=kind, color=color)
        return None

    @staticmethod
    def show_errors(errors: Dict[str, str]) -> None:
        for name, message in errors.items():
            st.warning(f"Could not load {name}: {message}")
