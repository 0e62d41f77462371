"""Tests for the capacity chart builders."""

import altair as alt

from capacity import derive
from charts import bar_groups, capacity_chart, capacity_frame, requirement_frame
from data import generate_demand, generate_device_configs
from models import ProductLine, ViewMode


def chart_series():
    demand = generate_demand(ProductLine.STANDARD, 1)
    series, _ = derive(demand, generate_device_configs(ProductLine.STANDARD, demand), ViewMode.STACKED)
    return series


def test_requirement_frame_has_orders_and_backlog_rows():
    series = chart_series()

    df = requirement_frame(series, ViewMode.STACKED)

    assert len(df) == 2 * len(series)
    assert set(df["component"]) == {"New orders", "Backlog"}
    assert set(df["group"]) == {"Requirement"}
    jan = df[df["month"] == "Jan N"].set_index("component")["units"]
    assert jan["New orders"] == 45000
    assert jan["Backlog"] == 5000


def test_split_requirement_bars_get_their_own_slots():
    df = requirement_frame(chart_series(), ViewMode.SPLIT)

    assert (df["group"] == df["component"]).all()
    assert bar_groups(ViewMode.SPLIT) == ["New orders", "Backlog", "Capacity"]
    assert bar_groups(ViewMode.STACKED) == ["Requirement", "Capacity"]


def test_capacity_frame_stacks_output_and_unused_potential():
    series = chart_series()

    df = capacity_frame(series, ViewMode.STACKED)

    assert set(df["group"]) == {"Capacity"}
    for point in series:
        month = df[df["month"] == point.month].set_index("component")["units"]
        assert month["Effective Output"] == point.actual_capacity
        assert month["Unused Potential"] == point.unused_capacity
        assert month.sum() == point.theoretical_max


def test_capacity_chart_layers():
    series = chart_series()
    for mode in ViewMode:
        chart = capacity_chart(series, mode)
        assert isinstance(chart, alt.LayerChart)
        assert len(chart.layer) == 4

        requirement_bars, capacity_bars = chart.layer[0], chart.layer[1]
        assert set(requirement_bars.data["group"]) <= set(bar_groups(mode))
        assert set(capacity_bars.data["group"]) == {"Capacity"}
        unused = capacity_bars.data[capacity_bars.data["component"] == "Unused Potential"]
        assert unused["units"].tolist() == [p.unused_capacity for p in series]


def test_capacity_chart_empty_series():
    chart = capacity_chart([], ViewMode.SPLIT)

    assert isinstance(chart, alt.LayerChart)
