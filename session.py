"""Planner session state: active scenario, working data and derived views."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from capacity import derive
from demand import apply_device_edit, apply_forecast_edit, modified_rows
from models import KPI, ChartDataPoint, DemandForecast, DeviceConfig, ProductLine, ViewMode, scenario_key
from store import ScenarioStore

logger = logging.getLogger(__name__)

DASHBOARD_TAB = "dashboard"
DEMAND_TAB = "demand"

Narrator = Callable[[List[ChartDataPoint], str], str]


class PlannerSession:
    """Owns the planner's inputs; every mutation goes through the scenario store."""

    def __init__(
        self,
        store: Optional[ScenarioStore] = None,
        product_line: ProductLine = ProductLine.STANDARD,
        planning_month: Optional[str] = None,
    ):
        self.store = store if store is not None else ScenarioStore()
        self.product_line = ProductLine(product_line)
        self.planning_month = planning_month or date.today().strftime("%Y-%m")
        self.view_mode = ViewMode.STACKED
        self.active_tab = DASHBOARD_TAB
        self.demand: List[DemandForecast] = []
        self.configs: Dict[str, List[DeviceConfig]] = {}
        self.demand_draft: List[DemandForecast] = []
        self.sim_month = ""
        self.narration: Optional[str] = None
        self.is_analyzing = False
        self._load()

    @property
    def key(self) -> str:
        return scenario_key(self.product_line, self.planning_month)

    def _load(self) -> None:
        self.demand = self.store.resolve_demand(self.key, self.product_line, self.planning_month)
        self.configs = self.store.resolve_configs(self.key, self.product_line, self.demand)
        self.demand_draft = list(self.demand)
        self.sim_month = self.demand[0].month if self.demand else ""
        self.narration = None
        logger.info("Loaded scenario %s", self.key)

    def select_product(self, product_line: ProductLine) -> None:
        product_line = ProductLine(product_line)
        if product_line != self.product_line:
            self.product_line = product_line
            self._load()

    def select_planning_month(self, planning_month: str) -> None:
        if planning_month != self.planning_month:
            self.planning_month = planning_month
            self._load()

    def set_view_mode(self, view_mode: ViewMode) -> None:
        self.view_mode = ViewMode(view_mode)

    def select_tab(self, tab: str) -> None:
        if tab not in (DASHBOARD_TAB, DEMAND_TAB):
            raise ValueError(f"Unknown tab {tab!r}")
        if self.active_tab == DEMAND_TAB and tab != DEMAND_TAB:
            self.reset_demand_draft()
        self.active_tab = tab

    def select_sim_month(self, month: str) -> None:
        if month not in self.configs:
            raise KeyError(f"{month!r} is not in the planning window")
        self.sim_month = month

    @property
    def gap_label(self) -> str:
        return "Capacity Gap (Total)" if self.view_mode is ViewMode.STACKED else "Capacity Gap (Orders Only)"

    def edit_demand(self, index: int, field: str, raw) -> None:
        self.demand_draft = apply_forecast_edit(self.demand_draft, index, field, raw)

    def reset_demand_draft(self) -> None:
        self.demand_draft = list(self.demand)

    @property
    def has_demand_changes(self) -> bool:
        return bool(modified_rows(self.demand_draft, self.demand))

    def save_demand(self) -> None:
        self.demand = list(self.demand_draft)
        self.store.save_demand(self.key, self.demand)
        self.configs = self.store.backfill_configs(self.key, self.product_line, self.demand)

    @property
    def sim_devices(self) -> List[DeviceConfig]:
        return list(self.configs.get(self.sim_month, []))

    def set_month_devices(self, devices: Sequence[DeviceConfig]) -> None:
        self.configs = self.store.set_month_config(self.key, self.sim_month, devices)
        self.narration = None

    def edit_device(self, device_id: int, field: str, raw) -> None:
        self.set_month_devices(apply_device_edit(self.sim_devices, device_id, field, raw))

    def save_simulation(self) -> None:
        self.store.save_configs(self.key, self.configs)

    def derive(self) -> Tuple[List[ChartDataPoint], KPI]:
        return derive(self.demand, self.configs, self.view_mode, self.product_line)

    @contextmanager
    def _busy(self) -> Iterator[None]:
        self.is_analyzing = True
        try:
            yield
        finally:
            self.is_analyzing = False

    def analyze(self, narrator: Narrator) -> Optional[str]:
        """Run one narration request; returns None without calling out while another is in flight."""
        if self.is_analyzing:
            logger.warning("Capacity narration already running for %s", self.key)
            return None
        chart_series, _ = self.derive()
        with self._busy():
            self.narration = narrator(chart_series, self.product_line.value)
        return self.narration
