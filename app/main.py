import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from datetime import date

import streamlit as st
import streamlit.components.v1 as components
import plotly.graph_objects as go

from restobooks.config import Settings, ConfigError
from restobooks.domain import NewExpense, NewIncome, NewPurchase
from restobooks.reports import DashboardService, ReportService
from restobooks.store import open_store
from restobooks.transforms import (
    expenses_frame, income_frame, purchases_frame, report_csv, report_filename,
)
from restobooks.views import Creating, expenses_view, income_view, purchases_view

st.set_page_config(page_title="Restaurant Manager", layout="wide")

try:
    settings = Settings.from_env()
except ConfigError as e:
    st.error(f"⚠️ Configuration error: {e}")
    st.stop()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("restobooks.app")

if "store" not in st.session_state:
    st.session_state.store = open_store(settings)
    logger.info("Opened %s store", settings.backend)
store = st.session_state.store

if "income_view" not in st.session_state:
    st.session_state.income_view = income_view(store)
    st.session_state.expenses_view = expenses_view(store)
    st.session_state.purchases_view = purchases_view(store)


def money(value: float) -> str:
    return f"{settings.currency}{value:,.2f}"


def show_notice(view) -> None:
    notice = view.pop_notice()
    if notice is None:
        return
    if notice.kind == "success":
        st.toast(notice.message, icon="✅")
    elif notice.kind == "invalid":
        st.error(notice.message)
    else:
        st.toast(f"{notice.message}. Please try again", icon="❌")


def money_columns(frame, columns):
    shown = frame.copy()
    for col in columns:
        shown[col] = shown[col].map(money)
    return shown


def row_actions(view, label, prefix: str) -> None:
    """Edit and delete buttons for each listed row, in list order."""
    with st.expander("Edit or delete"):
        for record in view.rows:
            c0, c1, c2 = st.columns([6, 1, 1])
            c0.write(label(record))
            with c1:
                if st.button("✏️", key=f"edit_{prefix}_{record.id}", help="Edit"):
                    view.start_edit(record)
                    st.rerun()
            with c2:
                if st.button("🗑️", key=f"delete_{prefix}_{record.id}", help="Delete"):
                    view.delete(record.id)
                    st.rerun()


st.sidebar.markdown("### 🏪 Restaurant Manager")
menu = st.sidebar.radio(
    "Menu",
    ["📊 Dashboard", "💵 Income", "🧾 Expenses", "🛒 Purchases", "📑 Reports"]
)

# a page fetches its data when it is (re)entered
mounted = st.session_state.get("page") != menu
st.session_state.page = menu

if menu == "📊 Dashboard":
    st.title("📊 Dashboard")
    st.caption("Overview of this month's financial data")

    with st.spinner("Loading..."):
        result = DashboardService(store).load_sync(date.today())

    if result.is_left():
        st.error("Error fetching dashboard stats")
    else:
        dash = result.get_or_else(None)
        stats = dash.stats
        k1, k2, k3, k4 = st.columns(4)
        with k1:
            st.metric("💵 Total Income", money(stats.total_income))
        with k2:
            st.metric("🧾 Total Expenses", money(stats.total_expenses))
        with k3:
            st.metric("🛒 Total Purchases", money(stats.total_purchases))
        with k4:
            st.metric(
                "📈 Net Profit",
                money(stats.net_profit),
                delta="surplus" if stats.net_profit >= 0 else "deficit",
                delta_color="normal" if stats.net_profit >= 0 else "inverse",
            )

        daily = dash.daily
        fig = go.Figure()
        fig.add_trace(go.Scatter(x=daily.index, y=daily["income"], mode="lines+markers", name="Income"))
        fig.add_trace(go.Scatter(x=daily.index, y=daily["expenses"], mode="lines+markers", name="Expenses"))
        fig.update_layout(
            title=f"Daily totals {dash.start} to {dash.end}",
            template="plotly_dark",
            margin=dict(t=40, b=10, l=10, r=10),
        )
        st.plotly_chart(fig, width="stretch")

elif menu == "💵 Income":
    view = st.session_state.income_view
    if mounted:
        view.refresh()

    col_title, col_add = st.columns([4, 1])
    with col_title:
        st.title("💵 Income Management")
        st.caption("Record daily income and cash reconciliation")
    with col_add:
        if st.button("➕ Add Income", disabled=isinstance(view.mode, Creating)):
            view.start_create()
            st.rerun()

    show_notice(view)

    if view.form_open:
        values = view.form_values(date.today())
        form_key = f"income_{view.editing.id if view.editing else 'new'}"
        st.subheader("Edit Income" if view.editing else "Add Income")
        with st.form(form_key):
            col1, col2 = st.columns(2)
            with col1:
                day = st.date_input("Date", value=date.fromisoformat(values.date))
                cash = st.number_input("Cash Amount", value=float(values.cash_amount), step=0.01, format="%.2f")
                other = st.number_input("Other Amount", value=float(values.other_amount), step=0.01, format="%.2f")
            with col2:
                total = st.number_input("Total Income", value=float(values.total_income), step=0.01, format="%.2f")
                credit = st.number_input("Credit Amount", value=float(values.credit_amount), step=0.01, format="%.2f")
                actual = st.number_input(
                    "Actual Cash Received",
                    value=float(values.actual_cash_received),
                    step=0.01,
                    format="%.2f",
                    help="Cash counted in the till, compared against the cash amount",
                )
            save = st.form_submit_button("Save")
            cancel = st.form_submit_button("Cancel")

        if save:
            outcome = view.submit(NewIncome(
                date=day.isoformat(),
                total_income=total,
                cash_amount=cash,
                credit_amount=credit,
                other_amount=other,
                actual_cash_received=actual,
            ))
            if outcome.is_right():
                st.rerun()
            show_notice(view)
        if cancel:
            view.cancel()
            st.rerun()

    st.divider()
    if not view.rows:
        st.info("No income recorded yet")
    else:
        st.table(money_columns(income_frame(view.rows), ["Total Income", "Cash", "Credit", "Other", "Actual Cash"]))
        row_actions(view, lambda i: f"{i.date} · {money(i.total_income)}", "income")

elif menu == "🧾 Expenses":
    view = st.session_state.expenses_view
    if mounted:
        view.refresh()

    col_title, col_add = st.columns([4, 1])
    with col_title:
        st.title("🧾 Expense Management")
        st.caption("Track your restaurant's expenses")
    with col_add:
        if st.button("➕ Add Expense", disabled=isinstance(view.mode, Creating)):
            view.start_create()
            st.rerun()

    show_notice(view)

    if view.form_open:
        values = view.form_values(date.today())
        form_key = f"expense_{view.editing.id if view.editing else 'new'}"
        st.subheader("Edit Expense" if view.editing else "Add Expense")
        with st.form(form_key):
            col1, col2 = st.columns(2)
            with col1:
                day = st.date_input("Date", value=date.fromisoformat(values.date))
            with col2:
                amount = st.number_input("Amount", value=float(values.amount), step=0.01, format="%.2f")
            category = st.text_input("Category", value=values.category, placeholder="e.g., Utilities, Rent, Supplies")
            description = st.text_area("Description", value=values.description, placeholder="Optional description...")
            save = st.form_submit_button("Save")
            cancel = st.form_submit_button("Cancel")

        if save:
            outcome = view.submit(NewExpense(
                date=day.isoformat(),
                category=category,
                description=description,
                amount=amount,
            ))
            if outcome.is_right():
                st.rerun()
            show_notice(view)
        if cancel:
            view.cancel()
            st.rerun()

    st.divider()
    if not view.rows:
        st.info("No expenses recorded yet")
    else:
        st.table(money_columns(expenses_frame(view.rows), ["Amount"]))
        row_actions(view, lambda e: e.label, "expense")

elif menu == "🛒 Purchases":
    view = st.session_state.purchases_view
    if mounted:
        view.load_expenses()
        view.refresh()

    col_title, col_add = st.columns([4, 1])
    with col_title:
        st.title("🛒 Purchase Management")
        st.caption("Track items purchased for expenses")
    with col_add:
        if st.button("➕ Add Purchase", disabled=isinstance(view.mode, Creating)):
            view.start_create()
            st.rerun()

    show_notice(view)

    if view.form_open:
        values = view.form_values(date.today())
        key = f"purchase_{view.editing.id if view.editing else 'new'}"
        st.subheader("Edit Purchase" if view.editing else "Add Purchase")
        with st.container(border=True):
            options = [0] + [e.id for e in view.expenses]
            expense_id = st.selectbox(
                "Related Expense",
                options,
                index=options.index(values.expense_id) if values.expense_id in options else 0,
                format_func=view.expense_label,
                key=f"{key}_expense",
            )
            item_name = st.text_input(
                "Item Name", value=values.item_name, placeholder="e.g., Tomatoes, Chicken, Oil", key=f"{key}_item"
            )
            col1, col2 = st.columns(2)
            with col1:
                quantity = st.number_input("Quantity", min_value=1, value=max(1, values.quantity), step=1, key=f"{key}_qty")
            with col2:
                price = st.number_input(
                    "Price per Unit", value=float(values.price_per_unit), step=0.01, format="%.2f", key=f"{key}_price"
                )
            payload = NewPurchase(
                expense_id=int(expense_id),
                item_name=item_name,
                quantity=int(quantity),
                price_per_unit=price,
            )
            st.info(f"**Total:** {money(payload.line_total)}")

            b1, b2, _ = st.columns([1, 1, 6])
            with b1:
                save = st.button("Save", key=f"{key}_save")
            with b2:
                cancel = st.button("Cancel", key=f"{key}_cancel")

        if save:
            if view.submit(payload).is_right():
                st.rerun()
            show_notice(view)
        if cancel:
            view.cancel()
            st.rerun()

    st.divider()
    if not view.rows:
        st.info("No purchases recorded yet")
    else:
        st.table(money_columns(purchases_frame(view.rows), ["Price/Unit", "Total"]))
        row_actions(view, lambda p: f"{p.item_name} × {p.quantity}", "purchase")

elif menu == "📑 Reports":
    st.title("📑 Financial Reports")
    st.caption("Generate and export financial reports for any date range")

    with st.container(border=True):
        st.subheader("Generate Report")
        col1, col2 = st.columns(2)
        with col1:
            date_from = st.date_input("From Date", value=date.today(), key="report_from")
        with col2:
            date_to = st.date_input("To Date", value=date.today(), key="report_to")

        if st.button("Generate Report", key="btn_generate_report"):
            start, end = date_from.isoformat(), date_to.isoformat()
            with st.spinner("Generating..."):
                result = ReportService(store).generate_sync(start, end)
            if result.is_left():
                st.toast("Error generating report. Please try again", icon="❌")
            else:
                st.session_state.report = (start, end, result.get_or_else(None))
                st.toast("Report generated successfully", icon="✅")

    if st.session_state.get("report"):
        start, end, report = st.session_state.report

        col_title, col_print, col_export = st.columns([4, 1, 1])
        with col_title:
            st.header(f"Report: {start} to {end}")
        with col_print:
            if st.button("🖨️ Print", key="btn_print_report"):
                components.html("<script>window.parent.print();</script>", height=0)
                st.toast("Print dialog opened")
        with col_export:
            st.download_button(
                "⬇ Export CSV",
                report_csv(report, start, end),
                file_name=report_filename(start, end),
                mime="text/csv",
            )

        r1, r2, r3 = st.columns(3)
        with r1:
            st.metric("Total Income", money(report.total_income))
            st.metric("Cash After Expenses", money(report.cash_after_expenses))
        with r2:
            st.metric("Total Expenses", money(report.total_expenses))
            st.metric("Surplus/Deficit", money(report.surplus_deficit))
        with r3:
            st.metric("Total Purchases", money(report.total_purchases))

        st.subheader("Income Breakdown")
        b = report.income_breakdown
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Cash Amount", money(b.cash))
        c2.metric("Credit Amount", money(b.credit))
        c3.metric("Other Amount", money(b.other))
        c4.metric("Actual Cash Received", money(b.actual_cash))
