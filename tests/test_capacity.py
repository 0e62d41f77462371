"""Tests for the capacity engine."""

import pytest

from capacity import (
    CHART_COLUMNS,
    UTILIZATION_ALERT_PCT,
    chart_frame,
    derive,
    derive_chart_point,
    derive_kpis,
    effective_days,
    monthly_gaps,
    utilization_alert,
)
from data import default_devices, generate_demand, generate_device_configs
from models import KPI, DemandForecast, DeviceConfig, ProductLine, ViewMode


def device(shifts=2, maintenance=1, overtime=0, base=250, device_id=1):
    return DeviceConfig(
        id=device_id,
        name=f"Device {device_id}",
        shifts=shifts,
        maintenance_days=maintenance,
        overtime_days=overtime,
        base_capacity=base,
    )


def test_single_device_example():
    point = derive_chart_point(DemandForecast("Jan N", 45000, 5000), [device()])

    assert point.actual_capacity == 10500
    assert point.theoretical_max == 22500
    assert point.unused_capacity == 12000
    assert point.total_requirement == 50000


def test_benchmarks_ignore_configured_overtime():
    point = derive_chart_point(DemandForecast("Jan N", 0, 0), [device(overtime=8)])

    assert point.capacity_ot0 == 21 * 2 * 250
    assert point.capacity_ot2 == 23 * 2 * 250
    assert point.capacity_ot4 == 25 * 2 * 250
    assert point.actual_capacity == 29 * 2 * 250


def test_theoretical_max_assumes_three_shifts():
    point = derive_chart_point(DemandForecast("Jan N", 0, 0), [device(shifts=0)])

    assert point.theoretical_max == 3 * 30 * 250
    assert point.actual_capacity == 0
    assert point.unused_capacity == 22500


def test_empty_device_list_yields_zero_capacity():
    point = derive_chart_point(DemandForecast("Feb N+1", 1000, 200), [])

    assert point.theoretical_max == 0
    assert point.actual_capacity == 0
    assert point.capacity_ot0 == point.capacity_ot2 == point.capacity_ot4 == 0
    assert point.unused_capacity == 0
    assert point.demand == 1000
    assert point.backlog == 200
    assert point.total_requirement == 1200


def test_heavy_maintenance_floors_working_days():
    point = derive_chart_point(DemandForecast("Jan N", 0, 0), [device(maintenance=30, overtime=0)])

    assert point.actual_capacity == 0
    assert point.capacity_ot4 == 0
    assert point.unused_capacity == point.theoretical_max


def test_effective_days_never_negative():
    for overtime in range(0, 9):
        for maintenance in range(0, 31):
            days = effective_days(overtime, maintenance)
            assert days >= 0
            if maintenance > 22 + overtime:
                assert days == 0
            else:
                assert days == 22 + overtime - maintenance


def test_derive_chart_point_is_deterministic():
    devices = [device(), device(3, 0, 2, 280, 2), device(2, 1, 2, 220, 3)]
    forecast = DemandForecast("Mar N+2", 48614, 12000)

    first = derive_chart_point(forecast, devices)
    for _ in range(5):
        assert derive_chart_point(forecast, devices) == first


def test_aggregation_is_order_independent():
    devices = [device(), device(3, 0, 2, 280, 2), device(2, 1, 2, 220, 3)]
    forecast = DemandForecast("Mar N+2", 1, 1)

    assert derive_chart_point(forecast, devices) == derive_chart_point(forecast, list(reversed(devices)))


def test_view_mode_only_changes_gap():
    series = generate_demand(ProductLine.STANDARD, 1)
    configs = generate_device_configs(ProductLine.STANDARD, series)

    stacked_points, stacked = derive(series, configs, ViewMode.STACKED)
    split_points, split = derive(series, configs, ViewMode.SPLIT)

    assert stacked_points == split_points
    for stacked_gap, split_gap, point in zip(
        monthly_gaps(stacked_points, ViewMode.STACKED), monthly_gaps(split_points, ViewMode.SPLIT), stacked_points
    ):
        assert stacked_gap == point.actual_capacity - (point.demand + point.backlog)
        assert split_gap == point.actual_capacity - point.demand
        assert split_gap - stacked_gap == point.backlog
    assert split.capacity_gap - stacked.capacity_gap == sum(p.backlog for p in stacked_points)
    assert split.utilization_rate == stacked.utilization_rate


def test_standard_january_high_utilization_plan():
    series = generate_demand(ProductLine.STANDARD, 1)
    configs = generate_device_configs(ProductLine.STANDARD, series)

    chart_series, _ = derive(series, configs, ViewMode.STACKED)

    january = chart_series[0]
    assert january.month == "Jan N"
    assert january.actual_capacity == 24 * 3 * (280 + 250 + 250)
    assert january.theoretical_max == 90 * (280 + 250 + 250)


def test_kpis_for_single_month():
    point = derive_chart_point(DemandForecast("Jan N", 8000, 1000), [device()])

    kpi = derive_kpis([point], ViewMode.STACKED)

    assert kpi.annual_target == 16875 * 3
    assert kpi.current_order_volume == 8000
    assert kpi.total_backlog == 1000
    assert kpi.capacity_gap == 10500 - 9000
    assert kpi.utilization_rate == pytest.approx(10500 / 22500 * 100)


def test_annual_target_floors_before_annualizing():
    # 3 * 30 * 251 = 22590; 22590 * 0.75 = 16942.5
    point = derive_chart_point(DemandForecast("Jan N", 0, 0), [device(base=251)])

    assert derive_kpis([point], ViewMode.STACKED).annual_target == 16942 * 3


def test_utilization_guards_zero_theoretical_capacity():
    zero = derive_chart_point(DemandForecast("Jan N", 100, 0), [])
    busy = derive_chart_point(DemandForecast("Feb N+1", 100, 0), [device()])

    kpi = derive_kpis([zero, busy], ViewMode.SPLIT)

    assert kpi.utilization_rate == pytest.approx((0 + 10500 / 22500) / 2 * 100)


def test_kpis_for_empty_series():
    assert derive_kpis([], ViewMode.STACKED) == KPI()
    assert derive_kpis([], ViewMode.SPLIT).utilization_rate == 0.0


def test_unknown_view_mode_is_rejected():
    with pytest.raises(ValueError):
        derive_kpis([], "sideways")


def test_derive_uses_month_specific_configs():
    series = [DemandForecast("Jan N", 100, 0), DemandForecast("Feb N+1", 100, 0)]
    configs = {"Jan N": [device()], "Feb N+1": [device(shifts=3)]}

    chart_series, _ = derive(series, configs, ViewMode.STACKED)

    assert chart_series[0].actual_capacity == 21 * 2 * 250
    assert chart_series[1].actual_capacity == 21 * 3 * 250


def test_chart_frame_columns():
    point = derive_chart_point(DemandForecast("Jan N", 8000, 1000), [device()])

    df = chart_frame([point], ViewMode.SPLIT)

    assert list(df.columns) == CHART_COLUMNS + ["gap"]
    assert df.loc[0, "gap"] == 10500 - 8000


def test_chart_frame_empty():
    df = chart_frame([])

    assert df.empty
    assert list(df.columns) == CHART_COLUMNS


def test_derive_fills_missing_months_with_default_devices():
    series = generate_demand(ProductLine.PREMIUM, "2024-05")
    configs = {series[0].month: default_devices(ProductLine.PREMIUM)}

    chart_series, _ = derive(series, configs, ViewMode.STACKED, ProductLine.PREMIUM)

    full = derive(series, generate_device_configs(ProductLine.PREMIUM, series), ViewMode.STACKED)[0]
    assert [p.actual_capacity for p in chart_series] == [p.actual_capacity for p in full]
    assert all(p.actual_capacity > 0 for p in chart_series)


def test_derive_keeps_explicit_empty_month():
    series = [DemandForecast("Jan N", 100, 0)]

    chart_series, _ = derive(series, {"Jan N": []}, ViewMode.STACKED, ProductLine.INDUSTRIAL)

    assert chart_series[0].actual_capacity == 0


@pytest.mark.parametrize(
    "rate,alert",
    [(0.0, False), (80.0, False), (UTILIZATION_ALERT_PCT, False), (95.1, True), (100.0, True)],
)
def test_utilization_alert_above_threshold(rate, alert):
    assert utilization_alert(KPI(utilization_rate=rate)) is alert


def test_saturated_plan_raises_utilization_alert():
    # 22 + 8 overtime days on three shifts fills the theoretical month
    saturated = derive_chart_point(DemandForecast("Jan N", 0, 0), [device(shifts=3, maintenance=0, overtime=8)])
    nominal = derive_chart_point(DemandForecast("Jan N", 0, 0), [device()])

    assert utilization_alert(derive_kpis([saturated], ViewMode.STACKED)) is True
    assert utilization_alert(derive_kpis([nominal], ViewMode.STACKED)) is False
