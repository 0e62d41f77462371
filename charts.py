"""Altair charts for the capacity dashboard."""

from __future__ import annotations

from typing import List, Sequence

import altair as alt
import pandas as pd

from capacity import chart_frame
from models import ChartDataPoint, ViewMode

SERIES_COLORS = {
    "theoretical_max": "#94a3b8",
    "actual_capacity": "#2563eb",
    "unused_capacity": "#cbd5e1",
    "capacity_ot0": "#a3a3a3",
    "capacity_ot2": "#f59e0b",
    "capacity_ot4": "#16a34a",
    "demand": "#6366f1",
    "backlog": "#f43f5e",
}

REQUIREMENT_LABELS = {"demand": "New orders", "backlog": "Backlog"}
CAPACITY_LABELS = {"actual_capacity": "Effective Output", "unused_capacity": "Unused Potential"}
BENCHMARK_LABELS = {
    "capacity_ot0": "OT+0",
    "capacity_ot2": "OT+2",
    "capacity_ot4": "OT+4",
}

REQUIREMENT_GROUP = "Requirement"
CAPACITY_GROUP = "Capacity"

_CONTEXT_COLUMNS = ["month", "demand", "backlog", "total_requirement", "actual_capacity", "theoretical_max", "gap"]


def _tooltip():
    return [
        alt.Tooltip("month:N", title="Month"),
        alt.Tooltip("component:N", title="Series"),
        alt.Tooltip("units:Q", title="Units", format=","),
        alt.Tooltip("total_requirement:Q", title="Total required", format=","),
        alt.Tooltip("actual_capacity:Q", title="Actual capacity", format=","),
        alt.Tooltip("theoretical_max:Q", title="Theoretical max", format=","),
        alt.Tooltip("gap:Q", title="Gap", format=","),
    ]


def bar_groups(view_mode: ViewMode) -> List[str]:
    """Side-by-side bar slots per month; capacity always sits apart from the requirement bars."""
    if ViewMode(view_mode) is ViewMode.SPLIT:
        return list(REQUIREMENT_LABELS.values()) + [CAPACITY_GROUP]
    return [REQUIREMENT_GROUP, CAPACITY_GROUP]


def _long(df: pd.DataFrame, labels) -> pd.DataFrame:
    long_df = df.melt(
        id_vars=["month"],
        value_vars=list(labels),
        var_name="component",
        value_name="units",
    )
    long_df = long_df.merge(df[_CONTEXT_COLUMNS], on="month", how="left")
    long_df["component"] = long_df["component"].map(labels)
    return long_df


def requirement_frame(series: Sequence[ChartDataPoint], view_mode: ViewMode) -> pd.DataFrame:
    """Long-form demand/backlog rows; split mode gives each component its own bar slot."""
    mode = ViewMode(view_mode)
    long_df = _long(chart_frame(series, mode), REQUIREMENT_LABELS)
    long_df["group"] = long_df["component"] if mode is ViewMode.SPLIT else REQUIREMENT_GROUP
    return long_df


def capacity_frame(series: Sequence[ChartDataPoint], view_mode: ViewMode) -> pd.DataFrame:
    """Long-form effective output and unused potential rows, stacked to the theoretical max."""
    long_df = _long(chart_frame(series, ViewMode(view_mode)), CAPACITY_LABELS)
    long_df["group"] = CAPACITY_GROUP
    return long_df


def capacity_chart(series: Sequence[ChartDataPoint], view_mode: ViewMode) -> alt.LayerChart:
    """Requirement bars beside stacked capacity bars, with theoretical and benchmark lines."""
    mode = ViewMode(view_mode)
    df = chart_frame(series, mode)
    months = df["month"].tolist()
    x = alt.X("month:N", title="Planning period", sort=months)
    x_offset = alt.XOffset("group:N", sort=bar_groups(mode), scale=alt.Scale(domain=bar_groups(mode)))
    y = alt.Y("units:Q", title="Units", stack="zero")

    bars = alt.Chart(requirement_frame(series, mode)).mark_bar(opacity=0.85).encode(
        x=x,
        xOffset=x_offset,
        y=y,
        color=alt.Color(
            "component:N",
            title="Requirement",
            scale=alt.Scale(
                domain=list(REQUIREMENT_LABELS.values()),
                range=[SERIES_COLORS[k] for k in REQUIREMENT_LABELS],
            ),
        ),
        order=alt.Order("component:N", sort="descending"),
        tooltip=_tooltip(),
    )

    capacity_bars = alt.Chart(capacity_frame(series, mode)).mark_bar(opacity=0.85).encode(
        x=x,
        xOffset=x_offset,
        y=y,
        color=alt.Color(
            "component:N",
            title="Capacity",
            scale=alt.Scale(
                domain=list(CAPACITY_LABELS.values()),
                range=[SERIES_COLORS[k] for k in CAPACITY_LABELS],
            ),
        ),
        order=alt.Order("component:N"),
        tooltip=_tooltip(),
    )

    theoretical_line = alt.Chart(df).mark_line(
        color=SERIES_COLORS["theoretical_max"], strokeDash=[6, 4], strokeWidth=2
    ).encode(x=x, y="theoretical_max:Q")

    benchmark_df = df.melt(id_vars=["month"], value_vars=list(BENCHMARK_LABELS), var_name="benchmark", value_name="units")
    benchmark_df["benchmark"] = benchmark_df["benchmark"].map(BENCHMARK_LABELS)
    benchmarks = alt.Chart(benchmark_df).mark_line(strokeDash=[2, 2], strokeWidth=1.5).encode(
        x=x,
        y="units:Q",
        color=alt.Color(
            "benchmark:N",
            title="Benchmark",
            scale=alt.Scale(
                domain=list(BENCHMARK_LABELS.values()),
                range=[SERIES_COLORS[k] for k in BENCHMARK_LABELS],
            ),
        ),
        tooltip=[alt.Tooltip("benchmark:N"), alt.Tooltip("units:Q", format=",")],
    )

    return alt.layer(bars, capacity_bars, benchmarks, theoretical_line).resolve_scale(color="independent")
