"""
Weighbridge Analytics — Interactive Dashboard

Run with:  streamlit run app.py
"""

import json
import sys
from pathlib import Path

import streamlit as st
import plotly.graph_objects as go
import plotly.express as px
import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parent))

from weighbridge_analytics.analytics import compute_report
from weighbridge_analytics.assignments import AssignmentStore
from weighbridge_analytics.config import ASSIGNMENTS_FILE, UNASSIGNED
from weighbridge_analytics.dashboard import (
    get_alerts_frame,
    get_entity_table,
    get_people_table,
    get_revenue_breakdown,
    get_summary_cards,
    get_trend_frame,
)
from weighbridge_analytics.loaders import load_weighbridge_export
from weighbridge_analytics.revenue import compute_revenue_summary
from weighbridge_analytics.simulator import generate_assignments, generate_records

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Weighbridge Analytics",
    page_icon="🚛",
    layout="wide",
    initial_sidebar_state="expanded",
)

SEVERITY_COLORS = {
    "danger": "#e74c3c",
    "warning": "#f39c12",
    "info": "#3498db",
}


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------
def _demo_store() -> AssignmentStore:
    store = AssignmentStore()
    person_to_group, person_to_shift = generate_assignments()
    for name in set(person_to_group) | set(person_to_shift):
        store.add_person(name, person_to_group.get(name, ""), person_to_shift.get(name, ""))
    return store


if "records" not in st.session_state:
    st.session_state["records"] = generate_records()
    st.session_state["store"] = (
        AssignmentStore.load(ASSIGNMENTS_FILE) if ASSIGNMENTS_FILE.exists() else _demo_store()
    )
    st.session_state["source"] = "Simulated data"

store: AssignmentStore = st.session_state["store"]

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("Weighbridge Analytics")
st.sidebar.markdown("Operator & Revenue Dashboard")
st.sidebar.divider()

uploaded = st.sidebar.file_uploader("Upload weighbridge export", type=["xlsx"])
if uploaded is not None and st.session_state.get("uploaded_name") != uploaded.name:
    try:
        st.session_state["records"] = load_weighbridge_export(uploaded)
        st.session_state["source"] = uploaded.name
        st.session_state["uploaded_name"] = uploaded.name
        added = store.register_people(st.session_state["records"])
        st.sidebar.success(f"Loaded {len(st.session_state['records'])} rows, {added} new people")
    except Exception as exc:
        st.sidebar.error(f"Could not read {uploaded.name}: {exc}")

page = st.sidebar.radio(
    "Navigate",
    ["Analytics Overview", "Revenue", "Daily Trend", "Assignments"],
)

st.sidebar.divider()
st.sidebar.caption(f"Data: {st.session_state['source']}")

records = st.session_state["records"]
person_to_group, person_to_shift = store.to_mappings()
report = compute_report(records, person_to_group, person_to_shift)


# ---------------------------------------------------------------------------
# Helper: metric card
# ---------------------------------------------------------------------------
def metric_card(label: str, value: str, caption: str = "", color: str = "#3498db"):
    st.markdown(
        f"""
        <div style="background: linear-gradient(135deg, {color}22, {color}11);
                    border-left: 4px solid {color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;">
            <div style="font-size: 13px; color: #888; font-weight: 600; text-transform: uppercase;">{label}</div>
            <div style="font-size: 28px; font-weight: 700; color: #222; margin: 4px 0;">{value}</div>
            <div style="font-size: 13px; color: #666;">{caption}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def bar_chart(df: pd.DataFrame, x: str, color: str):
    fig = go.Figure(go.Bar(
        x=df[x],
        y=df["count"],
        marker_color=color,
        text=df["count"],
        textposition="outside",
    ))
    fig.update_layout(
        height=360,
        yaxis_title="Trucks",
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=10, r=10, t=10, b=40),
    )
    st.plotly_chart(fig, use_container_width=True)


# ===========================================================================
# PAGE: Analytics Overview
# ===========================================================================
if page == "Analytics Overview":
    st.title("Analytics Overview")

    if report["total_records"] == 0:
        st.warning("No data to analyze. Upload a weighbridge export to begin.")
        st.stop()

    cards = get_summary_cards(report)
    cols = st.columns(4)
    with cols[0]:
        metric_card("Total trucks weighed", f"{cards['total_trucks']:,}")
    with cols[1]:
        color = "#e74c3c" if cards["impounded_rate"] > 15 else "#f39c12" if cards["impounded_rate"] > 10 else "#2ecc71"
        metric_card("Impounded trucks", f"{cards['total_impounded']:,}", f"{cards['impounded_rate']:.1f}% of trucks", color)
    with cols[2]:
        metric_card("Top performer", cards["top_performer"] or "—", f"{cards['top_performer_count'] or 0} trucks")
    with cols[3]:
        metric_card("Top group", cards["top_group"] or "—", f"{cards['top_group_pct'] or 0:.1f}% of trucks")

    alerts = get_alerts_frame(report)
    for _, alert in alerts.iterrows():
        color = SEVERITY_COLORS.get(alert["severity"], "#95a5a6")
        st.markdown(
            f"<div style='border-left: 3px solid {color}; padding: 4px 8px; margin: 4px 0;'>"
            f"<b>{alert['severity'].upper()}</b>: {alert['message']}</div>",
            unsafe_allow_html=True,
        )

    st.divider()

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Trucks per person")
        bar_chart(get_entity_table(report, "person"), "person", "#3b82f6")
    with col2:
        st.subheader("Trucks per group")
        bar_chart(get_entity_table(report, "group"), "group", "#10b981")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Trucks per shift")
        shifts = get_entity_table(report, "shift")
        fig = px.pie(shifts, names="shift", values="count", hole=0.5)
        fig.update_layout(height=360, margin=dict(l=10, r=10, t=10, b=10))
        st.plotly_chart(fig, use_container_width=True)
    with col2:
        st.subheader("Summary table")
        st.dataframe(get_people_table(report), use_container_width=True, hide_index=True)


# ===========================================================================
# PAGE: Revenue
# ===========================================================================
elif page == "Revenue":
    st.title("Revenue Analytics")

    revenue = compute_revenue_summary(records, person_to_group, person_to_shift)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Total Revenue", f"ZMW {revenue['total_revenue']:,.2f}")
    with col2:
        st.metric("Total Fines", f"ZMW {revenue['total_fines']:,.2f}")
    with col3:
        st.metric("Average per Truck", f"ZMW {revenue['average_revenue']:,.2f}")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Top 10 earners")
        top = pd.DataFrame(revenue["revenue_by_person"][:10], columns=["name", "revenue"])
        fig = px.bar(top, x="name", y="revenue", color_discrete_sequence=["#3498db"])
        fig.update_layout(height=380, plot_bgcolor="rgba(0,0,0,0)", yaxis_title="ZMW")
        st.plotly_chart(fig, use_container_width=True)
    with col2:
        st.subheader("Revenue breakdown by fine type")
        breakdown = get_revenue_breakdown(revenue)
        if breakdown.empty:
            st.info("No fines or amounts due recorded.")
        else:
            fig = px.pie(breakdown, names="type", values="amount")
            fig.update_layout(height=380)
            st.plotly_chart(fig, use_container_width=True)

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Revenue by group")
        st.dataframe(pd.DataFrame(revenue["revenue_by_group"]), use_container_width=True, hide_index=True)
    with col2:
        st.subheader("Revenue by shift")
        st.dataframe(pd.DataFrame(revenue["revenue_by_shift"]), use_container_width=True, hide_index=True)

    if revenue["monthly_revenue"]:
        st.subheader("Monthly revenue")
        monthly = pd.DataFrame(revenue["monthly_revenue"])
        fig = px.line(monthly, x="month", y="revenue", markers=True)
        fig.update_layout(height=320, plot_bgcolor="rgba(0,0,0,0)", yaxis_title="ZMW")
        st.plotly_chart(fig, use_container_width=True)


# ===========================================================================
# PAGE: Daily Trend
# ===========================================================================
elif page == "Daily Trend":
    st.title("Daily Trend")

    trend = get_trend_frame(report)
    if trend.empty:
        st.warning("No records with a parseable date.")
    else:
        fig = go.Figure()
        fig.add_trace(go.Bar(
            x=trend["date"],
            y=trend["count"],
            name="Trucks",
            marker_color="#3498db",
        ))
        fig.add_trace(go.Scatter(
            x=trend["date"],
            y=trend["impounded"],
            name="Impounded",
            mode="lines+markers",
            line=dict(color="#e74c3c", width=2),
        ))
        fig.update_layout(
            height=420,
            yaxis_title="Trucks",
            plot_bgcolor="rgba(0,0,0,0)",
        )
        st.plotly_chart(fig, use_container_width=True)

        undated = report["per_day"].get("Unknown Date", {}).get("count", 0)
        if undated:
            st.info(f"{undated} records without a parseable date are excluded from this chart.")


# ===========================================================================
# PAGE: Assignments
# ===========================================================================
elif page == "Assignments":
    st.title("Groups & Shifts")

    col1, col2 = st.columns(2)
    with col1:
        new_group = st.text_input("New group")
        if st.button("Add group") and new_group.strip():
            store.add_group(new_group)
    with col2:
        new_shift = st.text_input("New shift")
        if st.button("Add shift") and new_shift.strip():
            store.add_shift(new_shift)

    st.divider()

    group_options = [""] + store.groups
    shift_options = [""] + store.shifts
    for person in store.people:
        c1, c2, c3 = st.columns([2, 2, 2])
        c1.markdown(f"**{person['name']}**")
        group = c2.selectbox(
            "Group", group_options,
            index=group_options.index(person["group"]) if person["group"] in group_options else 0,
            key=f"group_{person['name']}", label_visibility="collapsed",
            format_func=lambda g: g or UNASSIGNED,
        )
        shift = c3.selectbox(
            "Shift", shift_options,
            index=shift_options.index(person["shift"]) if person["shift"] in shift_options else 0,
            key=f"shift_{person['name']}", label_visibility="collapsed",
            format_func=lambda s: s or UNASSIGNED,
        )
        if group != person["group"]:
            store.assign_group(person["name"], group)
        if shift != person["shift"]:
            store.assign_shift(person["name"], shift)

    st.divider()
    if st.button("Save assignments"):
        store.save(ASSIGNMENTS_FILE)
        st.success(f"Saved to {ASSIGNMENTS_FILE.name}")

    st.subheader("Import / Export")
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "Export assignments (JSON)",
            data=json.dumps(store.export_data(), indent=2),
            file_name="weighbridge-assignments.json",
            mime="application/json",
        )
    with col2:
        imported = st.file_uploader("Import assignments", type=["json"])
        if imported is not None and st.session_state.get("imported_name") != imported.name:
            try:
                store.import_data(json.loads(imported.getvalue().decode("utf-8")))
                st.session_state["imported_name"] = imported.name
                st.success(f"Imported {imported.name}: {len(store.people)} people on register")
            except (ValueError, UnicodeDecodeError) as exc:
                st.error(f"Could not import {imported.name}: {exc}")
