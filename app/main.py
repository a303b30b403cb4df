import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd
import numpy as np
import plotly.graph_objects as go
import plotly.express as px
from datetime import date
from uuid import uuid4

from tracker.config import load_settings
from tracker.domain import TYPE_ALL, TRANSACTION_CATEGORIES, TransactionRecord, TransactionType
from tracker.errors import NothingToExportError, ValidationError
from tracker.logging_setup import configure_logging
from tracker.services import InMemorySource, TransactionService
from tracker.windows import FREQUENCY_LABELS, Frequency, TransactionQuery

settings = load_settings()
configure_logging()

st.set_page_config(page_title="Expense Tracker", layout="wide")

if "tx_source" not in st.session_state:
    st.session_state.tx_source = InMemorySource.from_seed(settings.seed_path)

service = TransactionService(st.session_state.tx_source)
cur = settings.currency


def money(value) -> str:
    return f"{cur}{float(value):,.2f}"


def records_to_df(records):
    rows = [
        {
            "Date": t.date.strftime("%b %d, %Y"),
            "Amount": f"{'+' if t.type is TransactionType.INCOME else '-'}{money(t.amount)}",
            "Type": t.type.value,
            "Category": t.category,
            "Reference": t.reference,
            "Description": t.description or "-",
        }
        for t in records
    ]
    df = pd.DataFrame(rows)
    df.index = np.arange(1, len(df) + 1)
    return df


st.sidebar.markdown("### 🗓 Period")
frequency = st.sidebar.selectbox(
    "Frequency",
    options=list(Frequency),
    index=list(Frequency).index(settings.default_frequency),
    format_func=lambda f: FREQUENCY_LABELS[f],
)
date_range = None
if frequency is Frequency.CUSTOM:
    picked = st.sidebar.date_input("Date Range", value=(date.today().replace(day=1), date.today()))
    date_range = tuple(picked) if isinstance(picked, (list, tuple)) else None

menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "🧾 Transactions"])

if menu == "🏠 Dashboard":
    st.title("🏠 Financial Dashboard")
    st.caption("Track your income, expenses, and financial health")

    query = TransactionQuery(frequency=frequency, date_range=date_range, type=TYPE_ALL)
    try:
        stats = service.dashboard(query)
    except ValidationError as exc:
        st.error(f"Cannot compute statistics: {exc}")
        st.stop()

    if stats.is_empty:
        st.info("No transactions found. Start adding transactions to see your dashboard.")
        st.stop()

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Total Income", money(stats.income))
        st.caption(f"Avg: {money(stats.average_income)}")
    with k2:
        st.metric("Total Expense", money(stats.expense))
        st.caption(f"Avg: {money(stats.average_expense)}")
    with k3:
        st.metric("Net Balance", money(stats.balance))
        st.caption(f"{stats.total_transactions} transactions")
    with k4:
        st.metric("Savings Rate", f"{stats.savings_rate}%")
        st.progress(min(100, max(0, int(stats.savings_rate))) / 100)

    if stats.monthly_trend:
        labels = [b.label for b in stats.monthly_trend]
        inc_m = np.array([float(b.income) for b in stats.monthly_trend])
        exp_m = np.array([float(b.expense) for b in stats.monthly_trend])
        fig_ts = go.Figure()
        fig_ts.add_trace(go.Bar(x=labels, y=inc_m, name="Income"))
        fig_ts.add_trace(go.Bar(x=labels, y=exp_m, name="Expense"))
        fig_ts.add_trace(go.Scatter(x=labels, y=np.cumsum(inc_m - exp_m), mode="lines+markers", name="Cumulative balance"))
        fig_ts.update_layout(template="plotly_dark", barmode="group", title="Monthly Trend", margin=dict(t=40, b=10, l=10, r=10))
        st.plotly_chart(fig_ts, use_container_width=True)

    col_exp, col_inc = st.columns(2)
    for col, title, groups in (
        (col_exp, "Top Expense Categories", stats.top_expense_categories),
        (col_inc, "Top Income Categories", stats.top_income_categories),
    ):
        with col:
            st.subheader(title)
            if not groups:
                st.info("No data")
                continue
            df_cat = pd.DataFrame(
                [
                    {
                        "Category": g.category,
                        "Total": float(g.amount),
                        "Count": g.count,
                        "Share": stats.percentage_label(g),
                    }
                    for g in groups
                ]
            )
            fig_cat = px.pie(df_cat, values="Total", names="Category")
            fig_cat.update_layout(height=300, margin=dict(t=10, b=10, l=10, r=10))
            st.plotly_chart(fig_cat, use_container_width=True)
            st.table(df_cat.set_index("Category"))

    st.subheader("🕑 Recent Transactions")
    st.table(records_to_df(stats.recent_transactions))

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions Manager")
    st.caption("Track and manage all your financial transactions")

    col1, col2 = st.columns(2)
    with col1:
        type_choice = st.selectbox("Type", [TYPE_ALL, TransactionType.INCOME.value, TransactionType.EXPENSE.value])
    with col2:
        search_text = st.text_input("Search", placeholder="Search transactions...")

    query = TransactionQuery(frequency=frequency, date_range=date_range, type=type_choice)
    snapshot = service.fetch(query)
    visible = service.visible(snapshot, query, search_text)

    income = sum((t.amount for t in visible if t.type is TransactionType.INCOME), 0)
    expense = sum((t.amount for t in visible if t.type is TransactionType.EXPENSE), 0)
    q1, q2, q3, q4 = st.columns(4)
    q1.metric("Total Transactions", len(visible), help=f"{len(snapshot)} total records")
    q2.metric("Total Income", money(income))
    q3.metric("Total Expense", money(expense))
    q4.metric("Net Balance", money(income - expense))

    if visible:
        st.dataframe(records_to_df(visible), use_container_width=True)
    elif search_text:
        st.info("No transactions match your search criteria")
    else:
        st.info("No Transactions Found. Start by adding your first transaction.")

    try:
        filename, data = service.export(visible, fmt=settings.export_format)
    except NothingToExportError:
        st.caption("No transactions to export")
    else:
        st.download_button("⬇ Export", data, file_name=filename)

    st.divider()

    st.subheader("➕ Add New Transaction")
    with st.form("input_form", clear_on_submit=True):
        c1, c2 = st.columns(2)
        with c1:
            tx_date = st.date_input("Date")
            amount = st.number_input("Amount", min_value=0.0, step=100.0, format="%.2f")
            tx_type = st.selectbox("Type", [t.value for t in TransactionType])
        with c2:
            category = st.selectbox("Category", TRANSACTION_CATEGORIES)
            reference = st.text_input("Reference")
            description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Save")

        if submitted:
            try:
                record = TransactionRecord.from_dict({
                    "transactionId": str(uuid4()),
                    "date": tx_date,
                    "amount": f"{amount:.2f}",
                    "type": tx_type,
                    "category": category,
                    "refrence": reference,
                    "description": description,
                })
                service.add(record, query)
            except ValidationError as exc:
                st.error(f"Please fill all fields correctly: {exc}")
            else:
                st.success("Transaction added successfully")
                st.rerun()

    if visible:
        by_id = {t.transaction_id: t for t in visible}

        def describe(tid):
            t = by_id[tid]
            return f"{t.date} {t.reference} ({money(t.amount)})"

        st.subheader("✏️ Edit Transaction")
        editing = by_id[st.selectbox("Transaction to edit", options=list(by_id), format_func=describe)]
        types = [t.value for t in TransactionType]
        with st.form(f"edit_form_{editing.transaction_id}"):
            c1, c2 = st.columns(2)
            with c1:
                tx_date = st.date_input("Date", value=editing.date)
                amount = st.number_input("Amount", min_value=0.0, value=float(editing.amount), step=100.0, format="%.2f")
                tx_type = st.selectbox("Type", types, index=types.index(editing.type.value))
            with c2:
                categories = list(TRANSACTION_CATEGORIES)
                if editing.category not in categories:
                    categories.append(editing.category)
                category = st.selectbox("Category", categories, index=categories.index(editing.category))
                reference = st.text_input("Reference", value=editing.reference)
                description = st.text_input("Description (optional)", value=editing.description or "")
            updated = st.form_submit_button("Update")

            if updated:
                try:
                    record = TransactionRecord.from_dict({
                        "transactionId": editing.transaction_id,
                        "date": tx_date,
                        "amount": f"{amount:.2f}",
                        "type": tx_type,
                        "category": category,
                        "refrence": reference,
                        "description": description,
                    })
                    service.update(record, query)
                except ValidationError as exc:
                    st.error(f"Please fill all fields correctly: {exc}")
                else:
                    st.success("Transaction updated successfully")
                    st.rerun()

        st.subheader("🗑 Delete Transaction")
        to_delete = st.selectbox("Transaction to delete", options=list(by_id), format_func=describe)
        confirmed = st.checkbox("Are you sure you want to delete this transaction?", key=f"confirm_{to_delete}")
        if st.button("Delete", type="primary", disabled=not confirmed):
            service.delete(to_delete, query)
            st.success("Transaction deleted successfully")
            st.rerun()
