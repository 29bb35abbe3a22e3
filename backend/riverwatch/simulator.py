import copy
import itertools
import logging
import math
import random
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from .domain import (
    CitizenReport,
    FloodAlert,
    FloodForecast,
    Location,
    RiverState,
    SafetyAlert,
    SensorReading,
    WasteDetection,
)
from .forecast import build_flood_forecast
from .health_engine import sensor_health
from .settings import (
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    DRIFT_TICKS,
    EVENT_PROBABILITIES,
    FIELD_BOUNDS,
    ISSUE_TYPES,
    LOCATIONS,
    QUEUE_CAPS,
    SAFETY_CATEGORIES,
    WASTE_TYPES,
)

logger = logging.getLogger(__name__)

WATER_FIELDS = ("ph", "dissolved_oxygen", "bod", "cod", "tds", "turbidity", "temperature")


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def _numeric(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"non-finite value {value!r}")
    return float(value)


def push_capped(queue: list, item, cap: int) -> list:
    """Prepend item (most recent first) and evict the oldest beyond cap."""
    queue.insert(0, item)
    del queue[cap:]
    return queue


class SimulationEngine:
    """
    Advances a RiverState by one tick:
    - every numeric field takes a bounded random step (clamped walk)
    - each event feed may gain one synthetic entry, then is capped
    - derived fields (sensor status, flood status) are recomputed last
    The input state is never touched; callers publish the returned copy.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        drift_ticks: int = DRIFT_TICKS,
        bounds: Optional[Dict[str, Tuple[float, float]]] = None,
        caps: Optional[Dict[str, int]] = None,
        probabilities: Optional[Dict[str, float]] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.rng = rng or random.Random()
        self.drift_ticks = max(1, int(drift_ticks))
        self.bounds = dict(FIELD_BOUNDS, **(bounds or {}))
        self.caps = dict(QUEUE_CAPS, **(caps or {}))
        self.probabilities = dict(EVENT_PROBABILITIES, **(probabilities or {}))
        self.clock = clock
        self._seq = itertools.count(1)

    # -------------------------- Field drift -------------------------- #
    def step_size(self, lo: float, hi: float) -> float:
        return (hi - lo) / self.drift_ticks

    def walk(self, value: float, lo: float, hi: float, integer: bool = False) -> float:
        delta = self.step_size(lo, hi)
        nxt = _clamp(value + self.rng.uniform(-delta, delta), lo, hi)
        if integer:
            nxt = int(_clamp(round(nxt), math.ceil(lo), math.floor(hi)))
        return nxt

    def _drift(self, obj, attr: str, key: Optional[str] = None, integer: bool = False,
               bounds: Optional[Tuple[float, float]] = None) -> None:
        lo, hi = bounds or self.bounds[key or attr]
        try:
            current = _numeric(getattr(obj, attr))
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(
                "Keeping previous %s on %s: %s",
                attr, getattr(obj, "id", type(obj).__name__), e,
            )
            return
        setattr(obj, attr, self.walk(current, lo, hi, integer=integer))

    # -------------------------- Tick -------------------------- #
    def tick(self, state: RiverState, now: Optional[datetime] = None) -> RiverState:
        now = now or self.clock()
        nxt = copy.deepcopy(state)

        self._advance_sensors(nxt, now)
        self._advance_biodiversity(nxt, now)
        self._advance_flood(nxt, now)
        self._advance_water_level(nxt, now)

        nxt.waste_detections = self._advance_waste(nxt.waste_detections, now)
        nxt.flood_alerts = self._advance_flood_alerts(nxt.flood_alerts, now)
        nxt.safety_alerts = self._advance_safety(nxt.safety_alerts, now)
        nxt.citizen_reports = self._advance_reports(nxt.citizen_reports, now)

        nxt.last_update = now
        return nxt

    def _advance_sensors(self, state: RiverState, now: datetime) -> None:
        for sensor in state.sensors:
            try:
                self._advance_sensor(sensor, now)
            except AttributeError as e:
                logger.warning("Skipping sensor %s this tick: %s", getattr(sensor, "id", sensor), e)

    def _advance_sensor(self, sensor: SensorReading, now: datetime) -> None:
        if sensor.water is None:
            logger.warning("Keeping previous water chemistry on %s: missing", sensor.id)
        else:
            for name in WATER_FIELDS:
                self._drift(sensor.water, name)
        self._drift(sensor, "waste_level")
        self._drift(sensor, "flood_risk")
        self._drift(sensor, "species_count", integer=True)
        self._drift(sensor, "diversity_index")
        sensor.last_updated = now

        # status always follows the numbers, never drifts on its own
        try:
            sensor.status = sensor_health(sensor).rating
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Keeping previous status on %s: %s", sensor.id, e)

    def _advance_biodiversity(self, state: RiverState, now: datetime) -> None:
        for site in state.biodiversity:
            try:
                self._drift(site, "species_count", integer=True)
                self._drift(site, "diversity_index")
                site.last_updated = now
            except AttributeError as e:
                logger.warning("Skipping biodiversity site this tick: %s", e)

    def _advance_flood(self, state: RiverState, now: datetime) -> None:
        previous: FloodForecast = state.flood
        try:
            current = _numeric(previous.current_risk)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Keeping previous flood forecast: %s", e)
            return
        lo, hi = self.bounds["current_risk"]
        state.flood = build_flood_forecast(
            self.rng, now, current_risk=self.walk(current, lo, hi)
        )

    def _advance_water_level(self, state: RiverState, now: datetime) -> None:
        level = state.water_level
        try:
            capacity = _numeric(level.capacity)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Keeping previous water level: %s", e)
            return
        self._drift(level, "current_level", bounds=(0.0, capacity))
        level.last_updated = now

    # -------------------------- Event feeds -------------------------- #
    def _chance(self, feed: str) -> bool:
        return self.rng.random() < self.probabilities[feed]

    def _new_id(self, prefix: str, now: datetime) -> str:
        return f"{prefix}-{int(now.timestamp() * 1000)}-{next(self._seq)}"

    def _advance_waste(self, queue: List[WasteDetection], now: datetime) -> List[WasteDetection]:
        for d in queue:
            if d.confidence is not None:
                self._drift(d, "confidence")

        if self._chance("waste_detections"):
            lo, hi = self.bounds["confidence"]
            push_capped(
                queue,
                WasteDetection(
                    id=self._new_id("waste", now),
                    severity=self.rng.choice(["low", "medium", "high"]),
                    waste_type=self.rng.choice(WASTE_TYPES),
                    location=self.rng.choice(LOCATIONS),
                    timestamp=now,
                    confidence=_clamp(75 + self.rng.random() * 20, lo, hi),
                ),
                self.caps["waste_detections"],
            )
        del queue[self.caps["waste_detections"]:]
        return queue

    def _advance_flood_alerts(self, queue: List[FloodAlert], now: datetime) -> List[FloodAlert]:
        for a in queue:
            self._drift(a, "risk_level")

        if self._chance("flood_alerts"):
            place = self.rng.choice(LOCATIONS)
            push_capped(
                queue,
                FloodAlert(
                    id=self._new_id("alert", now),
                    title=f"Flood Risk - {place}",
                    description="Water level rising. Monitor conditions closely.",
                    severity=self.rng.choice(["high", "moderate"]),
                    location=place,
                    risk_level=40 + self.rng.random() * 50,
                    water_level=2.5 + self.rng.random() * 2.5,
                    rainfall=15 + self.rng.random() * 40,
                    timestamp=now,
                ),
                self.caps["flood_alerts"],
            )
        del queue[self.caps["flood_alerts"]:]
        return queue

    def _advance_safety(self, queue: List[SafetyAlert], now: datetime) -> List[SafetyAlert]:
        if self._chance("safety_alerts"):
            push_capped(
                queue,
                SafetyAlert(
                    id=self._new_id("safety", now),
                    title="New Safety Alert",
                    description="A new safety concern has been detected in the area.",
                    severity=self.rng.choice(["critical", "high", "moderate", "low"]),
                    category=self.rng.choice(SAFETY_CATEGORIES),
                    location=self.rng.choice(LOCATIONS),
                    timestamp=now,
                ),
                self.caps["safety_alerts"],
            )
        del queue[self.caps["safety_alerts"]:]
        return queue

    def _advance_reports(self, queue: List[CitizenReport], now: datetime) -> List[CitizenReport]:
        for r in queue:
            if r.status == "pending" and self._chance("report_status"):
                r.status = "reviewed" if self.rng.random() < 0.5 else "resolved"

        if self._chance("citizen_reports"):
            push_capped(
                queue,
                CitizenReport(
                    id=self._new_id("report", now),
                    user_id=f"user-{self.rng.randrange(100)}",
                    user_email=f"user{self.rng.randrange(1000)}@example.com",
                    issue_type=self.rng.choice(ISSUE_TYPES),
                    description="New citizen report submitted",
                    location=Location(
                        DEFAULT_LATITUDE + (self.rng.random() - 0.5) * 0.02,
                        DEFAULT_LONGITUDE + (self.rng.random() - 0.5) * 0.02,
                    ),
                    timestamp=now,
                ),
                self.caps["citizen_reports"],
            )
        del queue[self.caps["citizen_reports"]:]
        return queue
