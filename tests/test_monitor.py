import random
import threading
import time

from riverwatch.alerts import AlertState, ThresholdEvaluator
from riverwatch.monitor import RiverMonitor
from riverwatch.notifier import BackgroundNotifier
from riverwatch.scheduler import TickScheduler
from riverwatch.simulator import SimulationEngine


class HoldPhEngine(SimulationEngine):
    """Normal simulation, but sensor-001's pH is pinned after every step."""

    def __init__(self, ph, **kwargs):
        super().__init__(rng=random.Random(5), **kwargs)
        self.ph = ph

    def tick(self, state, now=None):
        nxt = super().tick(state, now=now)
        nxt.sensor("sensor-001").water.ph = self.ph
        return nxt


def _monitor(quiet_state, notifier, engine):
    quiet_probs = {"waste_detections": 0.0, "safety_alerts": 0.0,
                   "flood_alerts": 0.0, "citizen_reports": 0.0}
    engine.probabilities.update(quiet_probs)
    return RiverMonitor(engine=engine, evaluator=ThresholdEvaluator(notifier), state=quiet_state)


def test_tick_publishes_new_snapshot_and_evaluates(quiet_state, notifier):
    engine = HoldPhEngine(5.8)
    monitor = _monitor(quiet_state, notifier, engine)

    before = monitor.snapshot()
    assert monitor.tick() is True
    after = monitor.snapshot()

    assert after is not before
    assert after.sensor("sensor-001").water.ph == 5.8
    assert before.sensor("sensor-001").water.ph == 7.2
    assert monitor.tick_count == 1
    assert [n.alert_class for n in monitor.last_notifications] == ["ph"]


def test_held_condition_over_many_ticks_notifies_once(quiet_state, notifier):
    monitor = _monitor(quiet_state, notifier, HoldPhEngine(5.8))
    for _ in range(10):
        monitor.tick()
    assert notifier.classes().count("ph") == 1
    assert "sensor-001" in monitor.alert_state.ph


def test_rearm_across_ticks(quiet_state, notifier):
    engine = HoldPhEngine(6.2)
    monitor = _monitor(quiet_state, notifier, engine)
    monitor.tick()
    engine.ph = 7.4
    monitor.tick()
    assert monitor.alert_state.ph == set()
    engine.ph = 6.1
    monitor.tick()
    assert notifier.classes().count("ph") == 2


def test_scheduled_tick_skips_while_another_runs(quiet_state, notifier):
    monitor = _monitor(quiet_state, notifier, HoldPhEngine(7.0))
    before = monitor.snapshot()

    monitor._lock.acquire()
    try:
        assert monitor.tick() is False
    finally:
        monitor._lock.release()

    assert monitor.skipped_ticks == 1
    assert monitor.tick_count == 0
    assert monitor.snapshot() is before


def test_refresh_waits_for_running_tick(quiet_state, notifier):
    monitor = _monitor(quiet_state, notifier, HoldPhEngine(7.0))
    monitor._lock.acquire()
    done = []
    worker = threading.Thread(target=lambda: done.append(monitor.refresh()))
    worker.start()
    time.sleep(0.05)
    assert done == []
    monitor._lock.release()
    worker.join(2)

    assert done == [True]
    assert monitor.tick_count == 1
    assert monitor.skipped_ticks == 0


def test_evaluate_without_advancing(state, notifier):
    monitor = RiverMonitor(evaluator=ThresholdEvaluator(notifier), state=state)
    snap = monitor.snapshot()
    emitted = monitor.evaluate()
    assert monitor.snapshot() is snap
    assert emitted and all(n.alert_class == "safety" for n in emitted)
    assert monitor.evaluate() == []


class SlowNotifier:
    def __init__(self, delay):
        self.delay = delay
        self.delivered = []

    def notify(self, alert_class, context, content):
        time.sleep(self.delay)
        self.delivered.append(context["entity_id"])


def test_slow_delivery_does_not_hold_up_the_tick(state):
    slow = SlowNotifier(0.3)
    dispatcher = BackgroundNotifier(slow)
    monitor = RiverMonitor(engine=SimulationEngine(rng=random.Random(5)),
                           evaluator=ThresholdEvaluator(dispatcher), state=state)
    try:
        started = time.monotonic()
        assert monitor.tick() is True
        elapsed = time.monotonic() - started

        fired = [n.context["entity_id"] for n in monitor.last_notifications]
        # the seeded feed alone carries several severe safety alerts
        assert len(fired) >= 2
        assert elapsed < 0.3
        assert slow.delivered == []

        # the lock is free again, so a scheduled tick runs rather than skips
        assert monitor.tick() is True
        assert monitor.skipped_ticks == 0

        assert dispatcher.drain(timeout=10)
        assert slow.delivered[:len(fired)] == fired
    finally:
        dispatcher.shutdown()


def test_health_reads(quiet_state, notifier):
    monitor = RiverMonitor(evaluator=ThresholdEvaluator(notifier), state=quiet_state)
    assert monitor.sensor_health("missing") is None
    assert monitor.sensor_health("sensor-001").overall == 70
    assert 0 <= monitor.health().overall <= 100


def test_default_construction_is_seeded():
    a = RiverMonitor(seed=3)
    b = RiverMonitor(seed=3)
    assert [s.water for s in a.snapshot().sensors] == [s.water for s in b.snapshot().sensors]
    assert [p.risk_level for p in a.snapshot().flood.points] == [p.risk_level for p in b.snapshot().flood.points]
    assert isinstance(a.alert_state, AlertState)


# ---------------- scheduler ----------------

def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_scheduler_runs_and_stops_cleanly():
    calls = []
    sched = TickScheduler(lambda: calls.append(1), interval=0.01, name="test")

    assert sched.start() is True
    assert sched.start() is False
    assert _wait_for(lambda: len(calls) >= 3)

    assert sched.stop() is True
    assert not sched.is_running()
    settled = len(calls)
    time.sleep(0.05)
    assert len(calls) == settled
    assert sched.stop() is False


def test_scheduler_survives_callback_errors(caplog):
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")

    sched = TickScheduler(flaky, interval=0.01, name="flaky")
    sched.start()
    try:
        assert _wait_for(lambda: len(calls) >= 3)
    finally:
        sched.stop()
    assert "flaky callback failed" in caplog.text
    assert sched.ticks >= 2


def test_scheduler_can_restart():
    calls = []
    sched = TickScheduler(lambda: calls.append(1), interval=0.01)
    sched.start()
    sched.stop()
    n = len(calls)
    assert sched.start() is True
    assert _wait_for(lambda: len(calls) > n)
    sched.stop()


def test_scheduler_drives_monitor(quiet_state, notifier):
    monitor = _monitor(quiet_state, notifier, HoldPhEngine(7.0))
    sched = TickScheduler(monitor.tick, interval=0.01)
    sched.start()
    try:
        assert _wait_for(lambda: monitor.tick_count >= 3)
    finally:
        sched.stop()
    assert monitor.snapshot().last_update is not None


def test_scheduler_counts_only_runs_that_went_ahead():
    calls = []

    def busy():
        calls.append(1)
        return False

    sched = TickScheduler(busy, interval=0.01)
    sched.start()
    try:
        assert _wait_for(lambda: len(calls) >= 3)
    finally:
        sched.stop()
    assert sched.ticks == 0
