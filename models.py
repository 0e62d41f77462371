"""Value types shared by the capacity planner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProductLine(str, Enum):
    STANDARD = "Standard Series"
    PERFORMANCE = "Performance Series"
    PREMIUM = "Premium Series"
    INDUSTRIAL = "Industrial Heavy-Duty"


class ViewMode(str, Enum):
    """How backlog counts toward the capacity gap."""

    STACKED = "stacked"
    SPLIT = "split"


@dataclass(frozen=True)
class DemandForecast:
    month: str
    value: int
    back_order: int = 0

    @property
    def total_requirement(self) -> int:
        return self.value + self.back_order


@dataclass(frozen=True)
class DeviceConfig:
    """Operating plan of one production resource for a single month."""

    id: int
    name: str
    shifts: int
    maintenance_days: int
    overtime_days: int
    base_capacity: int


@dataclass(frozen=True)
class ChartDataPoint:
    month: str
    theoretical_max: int
    actual_capacity: int
    capacity_ot0: int
    capacity_ot2: int
    capacity_ot4: int
    demand: int
    backlog: int
    total_requirement: int
    unused_capacity: int


@dataclass(frozen=True)
class KPI:
    annual_target: int = 0
    current_order_volume: int = 0
    total_backlog: int = 0
    capacity_gap: int = 0
    utilization_rate: float = 0.0


def scenario_key(product_line: ProductLine, planning_month: str) -> str:
    """Cache key for one (product line, planning month) context, e.g. 'Standard Series-2024-01'."""
    return f"{ProductLine(product_line).value}-{planning_month}"
