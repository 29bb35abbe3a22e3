"""
Threshold alerting with edge-triggered dedup.

Each (entity, alert class) pair is either Clear or Alerted. Membership of the
entity id in the class's set of AlertState means Alerted.

    Clear    -> Alerted   condition crosses threshold: notify once, add id
    Alerted  -> Alerted   condition still holds: nothing
    Alerted  -> Clear     condition gone: remove id silently (re-arms)

Fire and clear share one threshold per class, so a value sitting exactly on
the boundary can flap between the two states on consecutive passes.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from .domain import FloodForecast, RiverState, SafetyAlert, SensorReading
from .notifier import Notification, NotificationContent, Notifier
from .settings import ALERT_THRESHOLDS

logger = logging.getLogger(__name__)

PH = "ph"
WASTE = "waste"
FLOOD = "flood"
SAFETY = "safety"

# flood is modelled as one river-wide forecast, not per sensor
FLOOD_KEY = "river"


@dataclass
class AlertState:
    ph: Set[str] = field(default_factory=set)
    waste: Set[str] = field(default_factory=set)
    flood: Set[str] = field(default_factory=set)
    safety: Set[str] = field(default_factory=set)

    def for_class(self, alert_class: str) -> Set[str]:
        return getattr(self, alert_class)

    def is_alerted(self, alert_class: str, entity_id: str) -> bool:
        return entity_id in self.for_class(alert_class)


def ph_severity(ph: float) -> str:
    return "critical" if ph < ALERT_THRESHOLDS["ph_critical"] else "high"


def waste_severity(level: float) -> str:
    if level > ALERT_THRESHOLDS["waste_critical"]:
        return "critical"
    if level > ALERT_THRESHOLDS["waste_high"]:
        return "high"
    return "medium"


def flood_severity(risk: float) -> str:
    if risk >= ALERT_THRESHOLDS["flood_critical"]:
        return "critical"
    if risk >= ALERT_THRESHOLDS["flood_high"]:
        return "high"
    return "medium"


class ThresholdEvaluator:
    """
    Runs the four threshold checks against one snapshot.
    The caller owns the AlertState and passes it in on every pass; the
    evaluator itself holds no alert memory.
    """

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    def evaluate(self, state: RiverState, alert_state: AlertState) -> List[Notification]:
        emitted: List[Notification] = []
        checks: List[Callable[[], None]] = [
            lambda: self.check_ph(state.sensors, alert_state, emitted),
            lambda: self.check_waste(state.sensors, alert_state, emitted),
            lambda: self.check_flood(state.flood, alert_state, emitted),
            lambda: self.check_safety(state.safety_alerts, alert_state, emitted),
        ]
        for name, check in zip((PH, WASTE, FLOOD, SAFETY), checks):
            try:
                check()
            except Exception:
                logger.exception("%s threshold check failed; skipped this pass", name)
        return emitted

    # -------------------------- Edge trigger -------------------------- #
    def _fire(self, alert_class: str, entity_id: str, alert_state: AlertState,
              context: dict, content: NotificationContent, emitted: List[Notification]) -> None:
        # state moves first: a failed delivery still counts as fired
        alert_state.for_class(alert_class).add(entity_id)
        note = Notification(alert_class=alert_class, context=context, content=content)
        emitted.append(note)
        logger.info("%s alert fired for %s (%s)", alert_class, entity_id, context.get("severity"))
        try:
            self.notifier.notify(alert_class, context, content)
        except Exception:
            logger.exception("Notifier failed for %s alert on %s", alert_class, entity_id)

    def _rearm(self, alert_class: str, entity_id: str, alert_state: AlertState) -> None:
        ids = alert_state.for_class(alert_class)
        if entity_id in ids:
            ids.discard(entity_id)
            logger.info("%s condition cleared for %s", alert_class, entity_id)

    # -------------------------- Checks -------------------------- #
    def check_ph(self, sensors: List[SensorReading], alert_state: AlertState,
                 emitted: List[Notification]) -> None:
        for sensor in sensors:
            ph = float(sensor.water.ph)
            if ph >= ALERT_THRESHOLDS["ph_min"]:
                self._rearm(PH, sensor.id, alert_state)
                continue
            if alert_state.is_alerted(PH, sensor.id):
                continue

            severity = ph_severity(ph)
            self._fire(
                PH, sensor.id, alert_state,
                {
                    "type": "water_quality",
                    "severity": severity,
                    "entity_id": sensor.id,
                    "sensor_name": sensor.name,
                    "location": sensor.location,
                    "parameter": "pH",
                    "value": ph,
                },
                NotificationContent(
                    title="Low pH Alert",
                    body=(
                        f"pH level is critically low ({ph:.2f}) at {sensor.name}. "
                        "Water quality may be unsafe."
                    ),
                    severity_hint="max" if severity == "critical" else "high",
                ),
                emitted,
            )

    def check_waste(self, sensors: List[SensorReading], alert_state: AlertState,
                    emitted: List[Notification]) -> None:
        for sensor in sensors:
            level = float(sensor.waste_level)
            if level <= ALERT_THRESHOLDS["waste_max"]:
                self._rearm(WASTE, sensor.id, alert_state)
                continue
            if alert_state.is_alerted(WASTE, sensor.id):
                continue

            severity = waste_severity(level)
            self._fire(
                WASTE, sensor.id, alert_state,
                {
                    "type": "waste",
                    "severity": severity,
                    "entity_id": sensor.id,
                    "sensor_name": sensor.name,
                    "location": sensor.location,
                    "waste_level": level,
                },
                NotificationContent(
                    title="High Waste Detection",
                    body=(
                        f"Waste level is high ({level:.0f}%) at {sensor.name}. "
                        "Immediate cleanup may be required."
                    ),
                    severity_hint="max" if severity == "critical" else "high",
                ),
                emitted,
            )

    def check_flood(self, flood: Optional[FloodForecast], alert_state: AlertState,
                    emitted: List[Notification]) -> None:
        if flood is None:
            return
        risk = float(flood.current_risk)
        if risk < ALERT_THRESHOLDS["flood_risk_high"]:
            self._rearm(FLOOD, FLOOD_KEY, alert_state)
            return
        if alert_state.is_alerted(FLOOD, FLOOD_KEY):
            return

        severity = flood_severity(risk)
        advice = (
            "Take immediate action."
            if risk >= ALERT_THRESHOLDS["flood_critical"]
            else "Monitor conditions closely."
        )
        self._fire(
            FLOOD, FLOOD_KEY, alert_state,
            {
                "type": "flood",
                "severity": severity,
                "entity_id": FLOOD_KEY,
                "risk_level": risk,
                "max_risk": flood.max_risk,
                "status": flood.status,
            },
            NotificationContent(
                title="High Flood Risk Alert",
                body=f"Flood risk level is {risk:.0f}%. {advice}",
                severity_hint="max",
            ),
            emitted,
        )

    def check_safety(self, alerts: List[SafetyAlert], alert_state: AlertState,
                     emitted: List[Notification]) -> None:
        for alert in alerts:
            if alert.severity not in ALERT_THRESHOLDS["safety_severities"]:
                continue
            if alert_state.is_alerted(SAFETY, alert.id):
                continue

            label = "Critical" if alert.severity == "critical" else "High"
            where = f" - {alert.location}" if alert.location else ""
            self._fire(
                SAFETY, alert.id, alert_state,
                {
                    "type": "safety",
                    "severity": alert.severity,
                    "entity_id": alert.id,
                    "category": alert.category,
                    "location_name": alert.location,
                },
                NotificationContent(
                    title=f"{label} Safety Alert",
                    body=f"{alert.title}{where}",
                    severity_hint="max" if alert.severity == "critical" else "high",
                ),
                emitted,
            )

        # drop ids that have rotated out of the feed
        current = {a.id for a in alerts}
        alert_state.safety.intersection_update(current)
