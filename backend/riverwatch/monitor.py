import logging
import random
import threading
from datetime import datetime
from typing import List, Optional

from .alerts import AlertState, ThresholdEvaluator
from .domain import RiverState
from .health_engine import HealthScore, river_health, sensor_health
from .notifier import LoggingNotifier, Notification, Notifier
from .seed import seed_state
from .simulator import SimulationEngine

logger = logging.getLogger(__name__)


class RiverMonitor:
    """
    Single writer for the river snapshot and the alert dedup sets.

    tick() = simulate -> publish -> evaluate, all under one lock. Scheduled
    ticks skip when another tick is in flight; refresh() waits for it.
    Readers get the published snapshot, which is never mutated afterwards.
    """

    def __init__(
        self,
        engine: Optional[SimulationEngine] = None,
        evaluator: Optional[ThresholdEvaluator] = None,
        state: Optional[RiverState] = None,
        alert_state: Optional[AlertState] = None,
        notifier: Optional[Notifier] = None,
        seed: Optional[int] = None,
    ):
        self.engine = engine or SimulationEngine(rng=random.Random(seed))
        self.evaluator = evaluator or ThresholdEvaluator(notifier or LoggingNotifier())
        self._state = state if state is not None else seed_state(self.engine.rng)
        self.alert_state = alert_state if alert_state is not None else AlertState()
        self._lock = threading.Lock()
        self.tick_count = 0
        self.skipped_ticks = 0
        self.last_notifications: List[Notification] = []

    # -------------------------- Writes -------------------------- #
    def tick(self, blocking: bool = False, now: Optional[datetime] = None) -> bool:
        if not self._lock.acquire(blocking=blocking):
            self.skipped_ticks += 1
            logger.debug("Tick skipped: previous tick still running")
            return False
        try:
            self._state = self.engine.tick(self._state, now=now)
            self.tick_count += 1
            self.last_notifications = self.evaluator.evaluate(self._state, self.alert_state)
            return True
        finally:
            self._lock.release()

    def refresh(self, now: Optional[datetime] = None) -> bool:
        """Manual tick; serialized behind any tick already in flight."""
        return self.tick(blocking=True, now=now)

    def evaluate(self) -> List[Notification]:
        """Re-run the threshold checks on the current snapshot without advancing it."""
        with self._lock:
            self.last_notifications = self.evaluator.evaluate(self._state, self.alert_state)
            return self.last_notifications

    # -------------------------- Reads -------------------------- #
    def snapshot(self) -> RiverState:
        return self._state

    def health(self) -> HealthScore:
        return river_health(self._state)

    def sensor_health(self, sensor_id: str) -> Optional[HealthScore]:
        sensor = self._state.sensor(sensor_id)
        if sensor is None:
            return None
        return sensor_health(sensor)
