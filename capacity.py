"""Capacity vs demand computation for the rolling planning window."""

from __future__ import annotations

import math
from dataclasses import asdict, fields
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from data import default_devices
from models import KPI, ChartDataPoint, DemandForecast, DeviceConfig, ProductLine, ViewMode

STANDARD_WORKING_DAYS = 22
MAX_THEORETICAL_DAYS = 30
THEORETICAL_SHIFTS = 3
BENCHMARK_OVERTIME_DAYS = (0, 2, 4)
# Heuristic: 75% planned utilization of the window, x3 to annualize 4 months.
PLANNED_UTILIZATION = 0.75
ANNUALIZATION_FACTOR = 3
# Average utilization above this is flagged as overload risk on the dashboard.
UTILIZATION_ALERT_PCT = 95

CHART_COLUMNS = [f.name for f in fields(ChartDataPoint)]


def effective_days(overtime_days, maintenance_days):
    """Working days in the month after overtime and maintenance, floored at zero."""
    return np.maximum(0, STANDARD_WORKING_DAYS + np.asarray(overtime_days) - np.asarray(maintenance_days))


def _capacity(days, shifts, base_capacity) -> int:
    return int(np.sum(days * shifts * base_capacity))


def derive_chart_point(forecast: DemandForecast, device_configs: Sequence[DeviceConfig]) -> ChartDataPoint:
    """Capacity lines, requirement and unused headroom for one month."""
    shifts = np.array([d.shifts for d in device_configs], dtype=np.int64)
    maintenance = np.array([d.maintenance_days for d in device_configs], dtype=np.int64)
    overtime = np.array([d.overtime_days for d in device_configs], dtype=np.int64)
    base = np.array([d.base_capacity for d in device_configs], dtype=np.int64)

    theoretical_max = int(np.sum(THEORETICAL_SHIFTS * MAX_THEORETICAL_DAYS * base))
    actual = _capacity(effective_days(overtime, maintenance), shifts, base)
    benchmarks = [
        _capacity(effective_days(np.full_like(maintenance, ot), maintenance), shifts, base)
        for ot in BENCHMARK_OVERTIME_DAYS
    ]

    return ChartDataPoint(
        month=forecast.month,
        theoretical_max=theoretical_max,
        actual_capacity=actual,
        capacity_ot0=benchmarks[0],
        capacity_ot2=benchmarks[1],
        capacity_ot4=benchmarks[2],
        demand=forecast.value,
        backlog=forecast.back_order,
        total_requirement=forecast.value + forecast.back_order,
        unused_capacity=max(0, theoretical_max - actual),
    )


def monthly_gaps(series: Sequence[ChartDataPoint], view_mode: ViewMode) -> List[int]:
    """Per-month capacity minus pressure; stacked counts backlog, split ignores it."""
    mode = ViewMode(view_mode)
    if mode is ViewMode.STACKED:
        return [p.actual_capacity - p.total_requirement for p in series]
    return [p.actual_capacity - p.demand for p in series]


def derive_kpis(series: Sequence[ChartDataPoint], view_mode: ViewMode) -> KPI:
    gaps = monthly_gaps(series, view_mode)
    if not series:
        return KPI()

    total_theoretical = sum(p.theoretical_max for p in series)
    utilization = np.mean([p.actual_capacity / (p.theoretical_max or 1) for p in series])
    return KPI(
        annual_target=math.floor(total_theoretical * PLANNED_UTILIZATION) * ANNUALIZATION_FACTOR,
        current_order_volume=sum(p.demand for p in series),
        total_backlog=sum(p.backlog for p in series),
        capacity_gap=sum(gaps),
        utilization_rate=float(utilization * 100),
    )


def utilization_alert(kpi: KPI) -> bool:
    return kpi.utilization_rate > UTILIZATION_ALERT_PCT


def derive(
    series: Sequence[DemandForecast],
    configs: Dict[str, List[DeviceConfig]],
    view_mode: ViewMode,
    product_line: ProductLine = ProductLine.STANDARD,
) -> Tuple[List[ChartDataPoint], KPI]:
    """Recompute the whole chart series and its KPIs from demand and device plans.

    Months missing from ``configs`` use the product line's default devices.
    """
    chart_series = []
    for forecast in series:
        devices = configs.get(forecast.month)
        if devices is None:
            devices = default_devices(product_line)
        chart_series.append(derive_chart_point(forecast, devices))
    return chart_series, derive_kpis(chart_series, view_mode)


def chart_frame(series: Sequence[ChartDataPoint], view_mode: Optional[ViewMode] = None) -> pd.DataFrame:
    """Tabular view of a derived series, optionally with the per-month gap."""
    df = pd.DataFrame([asdict(p) for p in series], columns=CHART_COLUMNS)
    if view_mode is not None:
        df["gap"] = pd.Series(monthly_gaps(series, view_mode), index=df.index, dtype="int64")
    return df
