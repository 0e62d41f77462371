"""Manufacturing S&OP capacity planner Streamlit app."""

from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from capacity import UTILIZATION_ALERT_PCT, chart_frame, utilization_alert
from charts import capacity_chart
from demand import DEVICE_FIELD_LIMITS, FORECAST_FIELDS, device_frame, forecast_frame, forecast_totals, modified_rows
from logging_conf import configure_logging
from models import KPI, ProductLine, ViewMode
from narration import analyze_capacity_risks
from session import DASHBOARD_TAB, DEMAND_TAB, PlannerSession
from settings import load_settings


TAB_LABELS = {DASHBOARD_TAB: "Capacity Dashboard", DEMAND_TAB: "Demand Forecast"}
VIEW_LABELS = {ViewMode.STACKED: "Stacked (orders + backlog)", ViewMode.SPLIT: "Split (orders vs backlog)"}


@st.cache_resource
def init_logging(level: str) -> None:
    configure_logging(level)


def get_session() -> PlannerSession:
    """One planner session (and its scenario caches) per browser session."""
    if "planner" not in st.session_state:
        st.session_state.planner = PlannerSession()
    return st.session_state.planner


def month_options(center: str, span: int = 12) -> list[str]:
    current = pd.Period(center, freq="M")
    return [str(current + offset) for offset in range(-span, span + 1)]


def context_bar(planner: PlannerSession):
    c1, c2, c3 = st.columns([2, 2, 3])
    lines = list(ProductLine)
    product = c1.selectbox(
        "Line",
        options=lines,
        index=lines.index(planner.product_line),
        format_func=lambda line: line.value,
    )
    months = month_options(date.today().strftime("%Y-%m"))
    if planner.planning_month not in months:
        months = sorted({*months, planner.planning_month})
    planning_month = c2.selectbox(
        "Planning month",
        options=months,
        index=months.index(planner.planning_month),
        format_func=lambda m: pd.Period(m, freq="M").strftime("%b %Y"),
    )
    tab = c3.radio(
        "View",
        options=list(TAB_LABELS),
        index=list(TAB_LABELS).index(planner.active_tab),
        format_func=TAB_LABELS.get,
        horizontal=True,
    )
    planner.select_product(product)
    planner.select_planning_month(planning_month)
    planner.select_tab(tab)


def kpi_row(kpi: KPI, gap_label: str):
    st.subheader("Production overview")
    st.caption("Capacity utilization and gap analysis for the N+3 rolling window.")
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Annual target (proj.)", f"{kpi.annual_target:,}")
    c2.metric("Order volume", f"{kpi.current_order_volume:,}")
    c3.metric("Backlog", f"{kpi.total_backlog:,}")
    c4.metric(gap_label, f"{kpi.capacity_gap:+,}", delta="Surplus" if kpi.capacity_gap >= 0 else "Shortfall",
              delta_color="normal" if kpi.capacity_gap >= 0 else "inverse")
    overloaded = utilization_alert(kpi)
    c5.metric("Avg utilization", f"{kpi.utilization_rate:.1f}%",
              delta=f"Above {UTILIZATION_ALERT_PCT}%" if overloaded else None, delta_color="inverse")
    if overloaded:
        st.warning(
            f"Average utilization is above {UTILIZATION_ALERT_PCT}%. "
            "Add shifts or overtime before committing further orders."
        )


def dashboard_section(planner: PlannerSession):
    chart_series, kpi = planner.derive()
    kpi_row(kpi, planner.gap_label)
    st.divider()

    modes = list(ViewMode)
    view_mode = st.radio(
        "Chart mode",
        options=modes,
        index=modes.index(planner.view_mode),
        format_func=VIEW_LABELS.get,
        horizontal=True,
    )
    if view_mode is not planner.view_mode:
        planner.set_view_mode(view_mode)
        st.rerun()

    st.altair_chart(capacity_chart(chart_series, planner.view_mode), use_container_width=True)

    table = chart_frame(chart_series, planner.view_mode)
    st.dataframe(table.set_index("month"), use_container_width=True)
    st.download_button(
        "Download capacity plan (CSV)",
        table.to_csv(index=False),
        file_name=f"capacity_plan_{planner.planning_month}.csv",
    )


def simulation_panel(planner: PlannerSession):
    st.sidebar.header("Capacity simulation")
    months = list(planner.configs)
    if not months:
        st.sidebar.info("No planning periods available.")
        return

    sim_month = st.sidebar.selectbox(
        "Target planning period",
        options=months,
        index=months.index(planner.sim_month) if planner.sim_month in months else 0,
        key=f"sim_month_{planner.key}",
    )
    planner.select_sim_month(sim_month)
    st.sidebar.caption(f"Parameters below apply ONLY to {planner.sim_month}.")

    before = device_frame(planner.sim_devices)
    edited = st.sidebar.data_editor(
        before,
        hide_index=True,
        use_container_width=True,
        key=f"devices_{planner.key}_{planner.sim_month}",
        column_config={
            "id": None,
            "name": st.column_config.Column("Device", disabled=True),
            "base_capacity": st.column_config.NumberColumn("Cap/shift", min_value=0, step=10),
            "shifts": st.column_config.NumberColumn("Shifts", min_value=0, max_value=3, step=1),
            "maintenance_days": st.column_config.NumberColumn("Maint.", min_value=0, max_value=30, step=1),
            "overtime_days": st.column_config.NumberColumn("OT", min_value=0, max_value=8, step=1),
        },
    )
    devices = planner.sim_devices
    for row_idx, row in edited.iterrows():
        for field in DEVICE_FIELD_LIMITS:
            if row[field] != before.at[row_idx, field]:
                planner.edit_device(int(row["id"]), field, row[field])
    if planner.sim_devices != devices:
        st.rerun()

    if st.sidebar.button("Save all periods", type="primary", use_container_width=True):
        planner.save_simulation()
        st.sidebar.success(f"Saved device plans for {planner.key}.")

    st.sidebar.markdown("#### AI assistant")
    settings = load_settings()
    label = "Refresh analysis" if planner.narration else "Analyze capacity risks"
    if st.sidebar.button(label, disabled=planner.is_analyzing, use_container_width=True):
        with st.spinner("Analyzing scenario..."):
            planner.analyze(
                lambda series, product: analyze_capacity_risks(
                    series,
                    product,
                    api_key=settings.gemini_api_key,
                    model_name=settings.gemini_model,
                    temperature=settings.gemini_temperature,
                )
            )
    if planner.narration:
        st.sidebar.info(planner.narration)


def demand_section(planner: PlannerSession):
    st.subheader("Demand forecast")
    st.caption(f"{planner.product_line.value} / planning month {planner.planning_month}. Total = Orders + Backlog.")

    totals = forecast_totals(planner.demand_draft)
    c1, c2, c3 = st.columns(3)
    c1.metric("New orders", f"{totals['new_orders']:,}")
    c2.metric("Backlog / carry over", f"{totals['backlog']:,}")
    c3.metric("Total demand", f"{totals['total_demand']:,}")

    before = forecast_frame(planner.demand_draft)
    modified = set(modified_rows(planner.demand_draft, planner.demand))
    before["status"] = ["Modified" if i in modified else "Saved" for i in range(len(before))]
    edited = st.data_editor(
        before,
        hide_index=True,
        use_container_width=True,
        key=f"demand_{planner.key}_{len(modified)}",
        column_config={
            "month": st.column_config.Column("Planning period", disabled=True),
            "value": st.column_config.NumberColumn("New orders", min_value=0, step=100),
            "back_order": st.column_config.NumberColumn("Backlog / carry over", min_value=0, step=100),
            "total_requirement": st.column_config.NumberColumn("Total required", disabled=True),
            "status": st.column_config.Column("Status", disabled=True),
        },
    )
    draft = planner.demand_draft
    for row_idx, row in edited.iterrows():
        for field in FORECAST_FIELDS:
            if row[field] != before.at[row_idx, field]:
                planner.edit_demand(int(row_idx), field, row[field])
    if planner.demand_draft != draft:
        st.rerun()

    c1, c2, _ = st.columns([1, 1, 4])
    if c1.button("Reset", disabled=not planner.has_demand_changes, use_container_width=True):
        planner.reset_demand_draft()
        st.rerun()
    if c2.button(
        "Save changes" if planner.has_demand_changes else "No changes",
        type="primary",
        disabled=not planner.has_demand_changes,
        use_container_width=True,
    ):
        planner.save_demand()
        st.success("Saved demand plan. Recalculating capacity...")
        st.rerun()

    st.download_button(
        "Download demand plan (CSV)",
        forecast_frame(planner.demand).to_csv(index=False),
        file_name=f"demand_plan_{planner.planning_month}.csv",
    )


def main():
    st.set_page_config(
        page_title="Manufacturing S&OP",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    init_logging(load_settings().log_level)
    st.title("Manufacturing S&OP")
    st.caption("Discrete manufacturing planner: capacity vs demand across a 4-month rolling window.")

    planner = get_session()
    context_bar(planner)
    st.divider()

    if planner.active_tab == DASHBOARD_TAB:
        dashboard_section(planner)
        simulation_panel(planner)
    else:
        demand_section(planner)


if __name__ == "__main__":
    main()
