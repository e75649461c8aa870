import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, timedelta

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from envelopes.config import configure_logging, load_settings
from envelopes.pivot import pivot_frame
from envelopes.schemas import (
    allocation_from_input,
    validate_allocation_input,
    validate_transaction_input,
)
from envelopes.services import EnvelopeService
from envelopes.storage import StorageUnavailableError, open_store
from envelopes.weeks import format_week_label, get_remaining_days_percent, get_week_start

st.set_page_config(page_title="Weekly Envelopes", layout="wide")

settings = load_settings()
configure_logging(settings.log_level)

try:
    store = open_store(settings)
except StorageUnavailableError as e:
    st.error(f"Storage is not available: {e}")
    st.stop()

service = EnvelopeService(store)
user_id = settings.user_id


def fmt_cents(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    dollars, rest = divmod(abs(cents), 100)
    return f"{sign}${dollars:,}.{rest:02d}"


STATUS_ICONS = {"On Track": "🟢", "Watch": "🟡", "Over": "🔴"}

st.sidebar.markdown("### 📅 Week")
today = st.sidebar.date_input("Today", value=date.today())
st.sidebar.caption(format_week_label(today))
st.sidebar.caption(f"{int(get_remaining_days_percent(today) * 7)} day(s) left this week")

menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "💰 Savings", "📜 History", "🔁 Cover Overage", "✅ Validation"]
)

if menu == "🏠 Overview":
    overview = service.weekly_overview(user_id, today)
    st.title("🏠 This Week")
    st.caption(overview["week_label"])

    rows = overview["envelopes"]
    if not rows:
        st.info("No envelopes yet.")
    else:
        k1, k2, k3 = st.columns(3)
        with k1:
            st.metric("Budgeted", fmt_cents(sum(r["envelope"].weekly_budget_cents for r in rows)))
        with k2:
            st.metric("Spent", fmt_cents(sum(r["spent_cents"] for r in rows)))
        with k3:
            st.metric("Over", sum(1 for r in rows if r["status"] == "Over"))

        cols = st.columns(min(4, len(rows)))
        for idx, r in enumerate(rows):
            e = r["envelope"]
            with cols[idx % len(cols)]:
                st.metric(
                    f"{STATUS_ICONS[r['status']]} {e.title}",
                    fmt_cents(r["remaining_cents"]),
                    f"{r['status']}" + (" · rollover" if e.rollover else ""),
                    delta_color="off",
                )
                used = r["spent_cents"] / e.weekly_budget_cents if e.weekly_budget_cents else 1
                st.progress(min(1.0, max(0.0, used)))

        df = pd.DataFrame([
            {
                "Envelope": r["envelope"].title,
                "Spent": r["spent_cents"] / 100,
                "Remaining": max(0, r["remaining_cents"]) / 100,
            }
            for r in rows
        ])
        fig = px.bar(
            df,
            x="Envelope",
            y=["Spent", "Remaining"],
            title="Spent vs Remaining",
            labels={"value": "USD", "variable": ""},
            template="plotly_dark",
        )
        st.plotly_chart(fig, use_container_width=True)

elif menu == "💰 Savings":
    st.title("💰 Savings")
    summary = service.savings_summary(user_id, today)
    st.metric("Saved in completed weeks", fmt_cents(summary["total_cents"]))

    weeks = summary["weeks"]
    if weeks:
        fig = go.Figure()
        fig.add_trace(go.Bar(
            x=[w.week_label for w in weeks],
            y=[w.savings_cents / 100 for w in weeks],
            name="Week",
        ))
        fig.add_trace(go.Scatter(
            x=[w.week_label for w in weeks],
            y=[w.cumulative_cents / 100 for w in weeks],
            name="Cumulative",
            mode="lines+markers",
        ))
        fig.update_layout(title="Weekly Savings", template="plotly_dark", yaxis_title="USD")
        st.plotly_chart(fig, use_container_width=True)

        table = pd.DataFrame([
            {
                "Week": w.week_label,
                "Dates": format_week_label(w.week_start),
                "Saved": fmt_cents(w.savings_cents),
                "Cumulative": fmt_cents(w.cumulative_cents),
            }
            for w in weeks
        ])
        st.table(table)
    else:
        st.info("No completed weeks yet.")

elif menu == "📜 History":
    st.title("📜 Spending History")
    default_start = get_week_start(today) - timedelta(weeks=7)
    date_range = st.date_input("Range", value=(default_start, today), key="history_range")

    if len(date_range) == 2:
        rows = service.history(user_id, date_range[0], date_range[1])
        envelopes = store.list_envelopes_for_user(user_id)
        df = pivot_frame(rows, envelopes)
        if df.empty:
            st.info("No transactions in this range.")
        else:
            money_cols = [c for c in df.columns if c != "Week"]
            st.dataframe(df.assign(**{c: df[c].map(fmt_cents) for c in money_cols}))
            csv = df.to_csv()
            st.download_button("⬇ Download CSV", csv, file_name="envelope_history.csv")

elif menu == "🔁 Cover Overage":
    st.title("🔁 Cover Overage")
    overview = service.weekly_overview(user_id, today)
    rows = overview["envelopes"]
    over = [r for r in rows if r["remaining_cents"] < 0]

    if not over:
        st.success("No envelope is over budget this week.")
    else:
        titles = {r["envelope"].title: r for r in over}
        choice = st.selectbox("Overspent envelope", list(titles))
        recipient = titles[choice]
        st.write(f"Overage: **{fmt_cents(-recipient['remaining_cents'])}**")

        donors = [r for r in rows if r["envelope"].id != recipient["envelope"].id]
        with st.form("cover_overage"):
            amounts = {}
            for r in donors:
                amounts[r["envelope"].id] = st.number_input(
                    f"{r['envelope'].title} (available {fmt_cents(r['remaining_cents'])})",
                    min_value=0,
                    value=0,
                    step=100,
                    key=f"donor_{r['envelope'].id}",
                    help="Amount in cents",
                )
            submitted = st.form_submit_button("Apply")

        if submitted:
            allocations = []
            field_errors = []
            for donor_id, amount in amounts.items():
                if not amount:
                    continue
                result = validate_allocation_input({"donorEnvelopeId": donor_id, "amountCents": int(amount)})
                if result.is_right():
                    allocations.append(allocation_from_input(result.get_or_else({})))
                else:
                    field_errors.extend(result.get_error())

            if field_errors:
                for err in field_errors:
                    st.error(f"{err.field}: {err.message}")
            else:
                check = service.cover_overage(user_id, recipient["envelope"].id, allocations, today)
                if check.valid:
                    st.success("Overage covered.")
                else:
                    for message in check.errors:
                        st.error(message)

elif menu == "✅ Validation":
    st.title("✅ Transaction Check")
    envelopes = store.list_envelopes_for_user(user_id)
    with st.form("transaction_check"):
        col1, col2 = st.columns(2)
        with col1:
            env_title = st.selectbox("Envelope", [e.title for e in envelopes])
            amount = st.number_input("Amount (cents)", value=1000, step=100)
        with col2:
            tx_date = st.text_input("Date (YYYY-MM-DD)", value=today.isoformat())
            merchant = st.text_input("Merchant (optional)")
        run = st.form_submit_button("Validate")

    if run:
        payload = {
            "envelopeId": next((e.id for e in envelopes if e.title == env_title), ""),
            "amountCents": int(amount),
            "date": tx_date,
        }
        if merchant:
            payload["merchant"] = merchant
        result = validate_transaction_input(payload)
        if result.is_right():
            st.success("✅ Transaction is valid")
        else:
            for err in result.get_error():
                st.error(f"❌ {err.field}: {err.message}")
