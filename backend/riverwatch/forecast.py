from __future__ import annotations

import math
import random
from datetime import datetime, timedelta
from typing import List, Optional

from .domain import FloodForecast, ForecastPoint
from .settings import (
    FLOOD_STATUS_BANDS,
    FORECAST_POINTS,
    FORECAST_STEP_HOURS,
    WATER_LEVEL_BANDS,
)


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def flood_status(risk: float) -> str:
    for band in FLOOD_STATUS_BANDS:
        if risk >= band["min"]:
            return band["label"]
    return FLOOD_STATUS_BANDS[-1]["label"]


def water_level_status(level: float, capacity: float) -> str:
    if capacity <= 0:
        return "critical"
    pct = level / capacity * 100.0
    for band in WATER_LEVEL_BANDS:
        if pct >= band["min"]:
            return band["label"]
    return WATER_LEVEL_BANDS[-1]["label"]


def _label(i: int, t: datetime) -> str:
    if i == 0:
        return "Now"
    if i < 6:
        return f"+{i * FORECAST_STEP_HOURS}h"
    return t.strftime("%b %d")


def build_flood_forecast(
    rng: random.Random,
    now: datetime,
    current_risk: Optional[float] = None,
) -> FloodForecast:
    """
    48h flood outlook, one point every 4 hours.
    - baseline risk follows a slow sine swell with +/-7.5 noise
    - water level tracks risk (2.0 m at 0% up to 4.5 m at 100%)
    - rainfall is independent, 0-20 mm per step
    current_risk overrides the "Now" point's risk when the caller drifts it
    separately; status is driven by the worst risk in the window.
    """
    points: List[ForecastPoint] = []

    for i in range(FORECAST_POINTS):
        t = now + timedelta(hours=i * FORECAST_STEP_HOURS)

        base = 25.0 + math.sin(i * 0.5) * 20.0
        risk = _clamp(base + (rng.random() - 0.5) * 15.0, 0.0, 100.0)
        water_level = 2.0 + (risk / 100.0) * 2.5
        rainfall = rng.random() * 20.0

        points.append(
            ForecastPoint(
                timestamp=t,
                label=_label(i, t),
                risk_level=float(round(risk)),
                water_level=round(water_level, 1),
                rainfall=round(rainfall, 1),
            )
        )

    current = points[0].risk_level if current_risk is None else current_risk
    max_risk = max([p.risk_level for p in points] + [current])

    return FloodForecast(
        current_risk=current,
        max_risk=max_risk,
        points=points,
        status=flood_status(max_risk),
        last_updated=now,
    )
