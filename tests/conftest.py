import os
import random
import sys
import tempfile

import pytest

# must be set before riverwatch.config is imported
_tmp = tempfile.mkdtemp(prefix="riverwatch-test-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_tmp, "test.db")
os.environ["AUTOSTART_SIM"] = "0"
os.environ["TICK_INTERVAL_SEC"] = "0.05"
os.environ["SIM_SEED"] = "7"

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend")))

from riverwatch.seed import seed_state  # noqa: E402


class RecordingNotifier:
    def __init__(self):
        self.calls = []

    def notify(self, alert_class, context, content):
        self.calls.append((alert_class, context, content))

    def classes(self):
        return [c[0] for c in self.calls]


class FailingNotifier:
    def __init__(self):
        self.attempts = 0

    def notify(self, alert_class, context, content):
        self.attempts += 1
        raise ConnectionError("push gateway unreachable")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def state(rng):
    return seed_state(rng)


@pytest.fixture
def quiet_state(state):
    """Seeded state with no safety feed, so only sensor/flood checks can fire."""
    state.safety_alerts = []
    return state
