"""In-memory scenario caches for demand series and monthly device plans."""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict
from typing import Dict, List, Optional, Sequence, Union

from data import default_devices, generate_demand, generate_device_configs
from models import DemandForecast, DeviceConfig, ProductLine

logger = logging.getLogger(__name__)

ConfigMap = Dict[str, List[DeviceConfig]]


def _copy_map(config_map: ConfigMap) -> ConfigMap:
    return {month: list(devices) for month, devices in config_map.items()}


class ScenarioStore:
    """Saved overrides per scenario key plus the working copy of the active key's device plans.

    Cache entries are written only by ``save_demand``/``save_configs`` and are never evicted.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._demand: Dict[str, List[DemandForecast]] = {}
        self._configs: Dict[str, ConfigMap] = {}
        self._working_key: Optional[str] = None
        self._working: ConfigMap = {}

    def has_saved_demand(self, key: str) -> bool:
        with self._lock:
            return key in self._demand

    def resolve_demand(
        self, key: str, product_line: ProductLine, planning_month: Union[int, str]
    ) -> List[DemandForecast]:
        """Saved series for ``key`` or a fresh baseline, which is not cached."""
        with self._lock:
            if key in self._demand:
                return list(self._demand[key])
        return generate_demand(product_line, planning_month)

    def save_demand(self, key: str, series: Sequence[DemandForecast]) -> None:
        with self._lock:
            self._demand[key] = list(series)
        logger.info("Saved demand series for %s (%d months)", key, len(series))

    def has_saved_configs(self, key: str) -> bool:
        with self._lock:
            return key in self._configs

    def resolve_configs(
        self, key: str, product_line: ProductLine, series: Sequence[DemandForecast]
    ) -> ConfigMap:
        """Saved or generated plans for every month in ``series``; becomes the working copy."""
        with self._lock:
            if key in self._configs:
                config_map = _copy_map(self._configs[key])
            else:
                config_map = generate_device_configs(product_line, list(series))
            self._backfill(config_map, product_line, series)
            self._working_key = key
            self._working = config_map
            return _copy_map(config_map)

    def backfill_configs(self, key: str, product_line: ProductLine, series: Sequence[DemandForecast]) -> ConfigMap:
        """Add default plans to the working copy for months it does not cover yet."""
        with self._lock:
            self._require_working(key)
            self._backfill(self._working, product_line, series)
            return _copy_map(self._working)

    def working_configs(self, key: str) -> ConfigMap:
        with self._lock:
            self._require_working(key)
            return _copy_map(self._working)

    def set_month_config(self, key: str, month: str, devices: Sequence[DeviceConfig]) -> ConfigMap:
        """Replace one month's plan in the working copy; the saved cache is untouched."""
        with self._lock:
            self._require_working(key)
            self._working[month] = list(devices)
            return _copy_map(self._working)

    def save_configs(self, key: str, config_map: ConfigMap) -> None:
        with self._lock:
            self._configs[key] = _copy_map(config_map)
        logger.info("Saved device plans for %s (%d months)", key, len(config_map))

    def to_records(self) -> Dict[str, Dict[str, object]]:
        """Saved scenarios as plain key-value records."""
        with self._lock:
            return {
                "demand": {key: [asdict(f) for f in series] for key, series in self._demand.items()},
                "configs": {
                    key: {month: [asdict(d) for d in devices] for month, devices in config_map.items()}
                    for key, config_map in self._configs.items()
                },
            }

    def _require_working(self, key: str) -> None:
        if key != self._working_key:
            raise KeyError(f"No working device plans for {key!r}; resolve_configs first")

    @staticmethod
    def _backfill(config_map: ConfigMap, product_line: ProductLine, series: Sequence[DemandForecast]) -> None:
        for forecast in series:
            if forecast.month not in config_map:
                logger.debug("Backfilling default devices for %s", forecast.month)
                config_map[forecast.month] = default_devices(product_line)
