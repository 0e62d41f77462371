"""Baseline demand and device plans used when a scenario has no saved override."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union

import pandas as pd

from models import DemandForecast, DeviceConfig, ProductLine

MONTHS: List[str] = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
WINDOW_MONTHS = 4
PEAK_MONTHS = {8, 9, 10}  # Sep, Oct, Nov
PEAK_FACTOR = 1.25
OFF_PEAK_FACTOR = 0.95
NOISE_AMPLITUDE = 0.1
NOISE_FREQUENCY = 132.1
BACKLOG_SHARE = 0.1

# Hand-authored history for the standard line, keyed by 0-based calendar month.
STANDARD_DEMAND: Dict[int, Tuple[int, int]] = {
    0: (45000, 5000),
    1: (47579, 1000),
    2: (48614, 12000),
    3: (39684, 4000),
    4: (42500, 2000),
    5: (46100, 1500),
    6: (44000, 3000),
    7: (41500, 2500),
    8: (49000, 5000),
    9: (51200, 1200),
    10: (45800, 3200),
    11: (39000, 4500),
}

# (id, name, shifts, maintenance_days, overtime_days, base_capacity)
DEVICE_TEMPLATES: List[Tuple[int, str, int, int, int, int]] = [
    (1, "Stamping Press 01", 2, 1, 0, 250),
    (2, "Heat Treatment Unit", 3, 0, 0, 280),
    (3, "Assembly Line 01", 2, 1, 2, 220),
]


def _plan(*rows: Tuple[int, int, int, int]) -> List[DeviceConfig]:
    """Build a 3-device plan from (shifts, maintenance, overtime, base) rows."""
    return [
        DeviceConfig(
            id=template[0],
            name=template[1],
            shifts=shifts,
            maintenance_days=maintenance,
            overtime_days=overtime,
            base_capacity=base,
        )
        for template, (shifts, maintenance, overtime, base) in zip(DEVICE_TEMPLATES, rows)
    ]


STANDARD_CONFIG_OVERRIDES: Dict[int, List[DeviceConfig]] = {
    # Jan: high utilization
    0: _plan((3, 0, 2, 280), (3, 0, 2, 250), (3, 0, 2, 250)),
    # Feb: maintenance heavy
    1: _plan((3, 2, 0, 250), (3, 2, 0, 280), (3, 2, 0, 220)),
    # Mar: peak capacity push
    2: _plan((3, 1, 2, 300), (3, 1, 2, 300), (3, 1, 2, 250)),
    # Apr: scaling down
    3: _plan((2, 1, 0, 250), (3, 0, 0, 280), (2, 1, 2, 220)),
}


@dataclass(frozen=True)
class LineProfile:
    difficulty_factor: float
    base_load: int
    demand_table: Dict[int, Tuple[int, int]] = field(default_factory=dict)
    config_overrides: Dict[int, List[DeviceConfig]] = field(default_factory=dict)


LINE_PROFILES: Dict[ProductLine, LineProfile] = {
    ProductLine.STANDARD: LineProfile(1.0, 40000, STANDARD_DEMAND, STANDARD_CONFIG_OVERRIDES),
    ProductLine.PERFORMANCE: LineProfile(0.7, 32000),
    ProductLine.PREMIUM: LineProfile(1.0, 40000),
    ProductLine.INDUSTRIAL: LineProfile(0.5, 25000),
}


def line_profile(product_line: ProductLine) -> LineProfile:
    return LINE_PROFILES[ProductLine(product_line)]


def start_month_index(start_month: Union[int, str]) -> int:
    """0-based calendar month for a month number (1-12) or a 'YYYY-MM' planning date."""
    if isinstance(start_month, str):
        return pd.Period(start_month, freq="M").month - 1
    month = int(start_month)
    if not 1 <= month <= 12:
        raise ValueError(f"Month number must be within 1-12, got {start_month!r}")
    return month - 1


def month_label(month_index: int, offset: int) -> str:
    suffix = f"+{offset}" if offset > 0 else ""
    return f"{MONTHS[month_index % 12]} N{suffix}"


def month_index_of(label: str) -> int:
    """Calendar month (0-based) encoded in a window label such as 'Feb N+1'."""
    return MONTHS.index(label.split(" ")[0])


def seasonal_factor(month_index: int) -> float:
    return PEAK_FACTOR if month_index in PEAK_MONTHS else OFF_PEAK_FACTOR


def noise_factor(month_index: int) -> float:
    # Deterministic pseudo-noise keyed on the calendar month.
    return 1 + math.sin(month_index * NOISE_FREQUENCY) * NOISE_AMPLITUDE


def generate_demand(product_line: ProductLine, start_month: Union[int, str]) -> List[DemandForecast]:
    """Build the 4-month baseline demand window starting at ``start_month``."""
    profile = line_profile(product_line)
    start = start_month_index(start_month)

    series = []
    for offset in range(WINDOW_MONTHS):
        month_index = (start + offset) % 12
        if profile.demand_table:
            value, back_order = profile.demand_table[month_index]
        else:
            value = math.floor(profile.base_load * seasonal_factor(month_index) * noise_factor(month_index))
            back_order = math.floor(profile.base_load * BACKLOG_SHARE) if offset == 0 else 0
        series.append(DemandForecast(month=month_label(month_index, offset), value=value, back_order=back_order))
    return series


def default_devices(product_line: ProductLine) -> List[DeviceConfig]:
    """Press, heat-treatment and assembly plan scaled by the line's difficulty."""
    factor = line_profile(product_line).difficulty_factor
    return [
        DeviceConfig(
            id=device_id,
            name=name,
            shifts=shifts,
            maintenance_days=maintenance,
            overtime_days=overtime,
            base_capacity=math.floor(base * factor),
        )
        for device_id, name, shifts, maintenance, overtime, base in DEVICE_TEMPLATES
    ]


def generate_device_configs(
    product_line: ProductLine, demand_series: List[DemandForecast]
) -> Dict[str, List[DeviceConfig]]:
    profile = line_profile(product_line)
    configs: Dict[str, List[DeviceConfig]] = {}
    for forecast in demand_series:
        override = profile.config_overrides.get(month_index_of(forecast.month))
        configs[forecast.month] = list(override) if override is not None else default_devices(product_line)
    return configs
