"""Planner edits to the demand window and to device plans."""

from __future__ import annotations

import math
import re
from dataclasses import asdict, replace
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from models import DemandForecast, DeviceConfig

FORECAST_FIELDS = ("value", "back_order")

# field -> (min, max); None means unbounded
DEVICE_FIELD_LIMITS: Dict[str, Tuple[int, Optional[int]]] = {
    "shifts": (0, 3),
    "maintenance_days": (0, 30),
    "overtime_days": (0, 8),
    "base_capacity": (0, None),
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(raw) -> Optional[int]:
    """Leading-integer parse of an edited cell; None when nothing numeric leads."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else None
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else None


def apply_forecast_edit(series: Sequence[DemandForecast], index: int, field: str, raw) -> List[DemandForecast]:
    """Return a copy of ``series`` with one cell changed; unparsable input is dropped."""
    if field not in FORECAST_FIELDS:
        raise ValueError(f"Forecast field must be one of {FORECAST_FIELDS}, got {field!r}")
    updated = list(series)
    value = parse_int(raw)
    if value is None:
        return updated
    updated[index] = replace(updated[index], **{field: max(0, value)})
    return updated


def clamp_device_value(field: str, value: int) -> int:
    low, high = DEVICE_FIELD_LIMITS[field]
    value = max(low, value)
    return value if high is None else min(high, value)


def apply_device_edit(devices: Sequence[DeviceConfig], device_id: int, field: str, raw) -> List[DeviceConfig]:
    """Return a copy of ``devices`` with one field changed; unparsable input becomes 0."""
    if field not in DEVICE_FIELD_LIMITS:
        raise ValueError(f"Device field must be one of {tuple(DEVICE_FIELD_LIMITS)}, got {field!r}")
    value = clamp_device_value(field, parse_int(raw) or 0)
    return [replace(d, **{field: value}) if d.id == device_id else d for d in devices]


def forecast_totals(series: Sequence[DemandForecast]) -> Dict[str, int]:
    new_orders = sum(f.value for f in series)
    backlog = sum(f.back_order for f in series)
    return {"new_orders": new_orders, "backlog": backlog, "total_demand": new_orders + backlog}


def modified_rows(draft: Sequence[DemandForecast], baseline: Sequence[DemandForecast]) -> List[int]:
    """Indices of draft rows that differ from the last resolved series."""
    return [
        i
        for i, (edited, original) in enumerate(zip(draft, baseline))
        if edited.value != original.value or edited.back_order != original.back_order
    ]


def forecast_frame(series: Sequence[DemandForecast]) -> pd.DataFrame:
    df = pd.DataFrame([asdict(f) for f in series], columns=["month", "value", "back_order"])
    df["total_requirement"] = df["value"] + df["back_order"]
    return df


def device_frame(devices: Sequence[DeviceConfig]) -> pd.DataFrame:
    columns = ["id", "name", "base_capacity", "shifts", "maintenance_days", "overtime_days"]
    return pd.DataFrame([asdict(d) for d in devices], columns=columns)
