import logging
import threading

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conftest import FailingNotifier, RecordingNotifier

from riverwatch.database import Base
from riverwatch.domain import Location
from riverwatch.models import AlertRecord
from riverwatch.notifier import (
    BackgroundNotifier,
    CompositeNotifier,
    DatabaseNotifier,
    LoggingNotifier,
    NotificationContent,
    WebhookNotifier,
    build_notifier,
)

CONTENT = NotificationContent(title="Low pH Alert", body="pH level is critically low", severity_hint="max")
CONTEXT = {"severity": "critical", "entity_id": "sensor-001", "location": Location(23.0, 72.5), "value": 5.9}


def _memory_sessions():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)


def test_database_notifier_appends_record():
    Session = _memory_sessions()
    DatabaseNotifier(Session).notify("ph", CONTEXT, CONTENT)

    db = Session()
    rows = db.query(AlertRecord).all()
    assert len(rows) == 1
    assert rows[0].alert_class == "ph"
    assert rows[0].severity == "critical"
    assert rows[0].entity_id == "sensor-001"
    assert rows[0].read is False
    assert rows[0].created_at is not None
    db.close()


def test_logging_notifier_logs_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="riverwatch.notifier"):
        LoggingNotifier().notify("ph", CONTEXT, CONTENT)
    assert "[ph] Low pH Alert" in caplog.text


class _Response:
    def __init__(self, status):
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_webhook_posts_json_safe_payload(monkeypatch):
    sent = {}

    def fake_post(url, json=None, timeout=None):
        sent.update(url=url, json=json, timeout=timeout)
        return _Response(200)

    monkeypatch.setattr(requests, "post", fake_post)
    WebhookNotifier("http://hooks.local/river", timeout=3).notify("ph", CONTEXT, CONTENT)

    assert sent["url"] == "http://hooks.local/river"
    assert sent["timeout"] == 3
    payload = sent["json"]
    assert payload["alert_class"] == "ph"
    assert payload["notification"]["title"] == "Low pH Alert"
    assert "location" not in payload["context"]
    assert payload["context"]["value"] == 5.9


def test_webhook_raises_on_error_status(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **k: _Response(502))
    with pytest.raises(requests.HTTPError):
        WebhookNotifier("http://hooks.local/river").notify("ph", CONTEXT, CONTENT)


def test_composite_isolates_failing_channel(caplog):
    failing, recording = FailingNotifier(), RecordingNotifier()
    with caplog.at_level(logging.ERROR, logger="riverwatch.notifier"):
        CompositeNotifier([failing, recording]).notify("flood", CONTEXT, CONTENT)
    assert failing.attempts == 1
    assert recording.classes() == ["flood"]
    assert "FailingNotifier failed" in caplog.text


def test_build_notifier_channels():
    bare = build_notifier()
    assert [type(n) for n in bare.notifiers] == [LoggingNotifier]

    full = build_notifier(session_factory=_memory_sessions(), webhook_url="http://hooks.local")
    assert [type(n) for n in full.notifiers] == [LoggingNotifier, DatabaseNotifier, WebhookNotifier]


def test_background_notifier_returns_before_delivery():
    gate = threading.Event()
    recording = RecordingNotifier()

    class Gated:
        def notify(self, alert_class, context, content):
            gate.wait(5)
            recording.notify(alert_class, context, content)

    dispatcher = BackgroundNotifier(Gated())
    try:
        for cls in ("ph", "waste", "flood"):
            dispatcher.notify(cls, CONTEXT, CONTENT)
        assert recording.calls == []
        assert dispatcher.drain(timeout=0.05) is False

        gate.set()
        assert dispatcher.drain(timeout=5) is True
        assert recording.classes() == ["ph", "waste", "flood"]
    finally:
        dispatcher.shutdown()


def test_background_notifier_logs_failed_delivery(caplog):
    failing = FailingNotifier()
    dispatcher = BackgroundNotifier(failing)
    try:
        with caplog.at_level(logging.ERROR, logger="riverwatch.notifier"):
            dispatcher.notify("ph", CONTEXT, CONTENT)
            dispatcher.notify("waste", CONTEXT, CONTENT)
            assert dispatcher.drain(timeout=5)
    finally:
        dispatcher.shutdown()

    # the worker outlives a failed delivery
    assert failing.attempts == 2
    assert "Background delivery failed for ph alert" in caplog.text
    assert "Background delivery failed for waste alert" in caplog.text
