import logging
import threading
from concurrent import futures
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Set

import requests
from sqlalchemy.orm import Session

from .models import AlertRecord

logger = logging.getLogger(__name__)


@dataclass
class NotificationContent:
    title: str
    body: str
    severity_hint: str  # high | max


@dataclass
class Notification:
    alert_class: str  # ph | waste | flood | safety
    context: Dict[str, Any]
    content: NotificationContent
    created_at: datetime = field(default_factory=datetime.utcnow)


class Notifier(Protocol):
    def notify(self, alert_class: str, context: Dict[str, Any], content: NotificationContent) -> None:
        ...


class LoggingNotifier:
    def notify(self, alert_class, context, content):
        logger.warning("[%s] %s: %s", alert_class, content.title, content.body)


class DatabaseNotifier:
    """Appends every notification to the alert log table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def notify(self, alert_class, context, content):
        db = self.session_factory()
        try:
            db.add(
                AlertRecord(
                    alert_class=alert_class,
                    severity=str(context.get("severity", "")),
                    entity_id=context.get("entity_id"),
                    title=content.title,
                    body=content.body,
                )
            )
            db.commit()
        finally:
            db.close()


class WebhookNotifier:
    def __init__(self, url: str, timeout: float = 10):
        self.url = url
        self.timeout = timeout

    def notify(self, alert_class, context, content):
        payload = {
            "alert_class": alert_class,
            "context": {k: v for k, v in context.items() if _json_safe(v)},
            "notification": asdict(content),
        }
        r = requests.post(self.url, json=payload, timeout=self.timeout)
        r.raise_for_status()


def _json_safe(v) -> bool:
    return v is None or isinstance(v, (str, int, float, bool, list, dict))


class CompositeNotifier:
    """Fans out to every delivery channel; one failing channel doesn't stop the rest."""

    def __init__(self, notifiers: Iterable[Notifier]):
        self.notifiers: List[Notifier] = list(notifiers)

    def notify(self, alert_class, context, content):
        for n in self.notifiers:
            try:
                n.notify(alert_class, context, content)
            except Exception:
                logger.exception("Notifier %s failed for %s alert", type(n).__name__, alert_class)


class BackgroundNotifier:
    """
    Queues deliveries onto one worker thread so notify() returns at once.
    Deliveries keep their submission order; failures are logged on the worker.
    """

    def __init__(self, notifier: Notifier, name: str = "notify"):
        self.notifier = notifier
        self._executor = futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._pending: Set[futures.Future] = set()

    def notify(self, alert_class, context, content):
        future = self._executor.submit(self._deliver, alert_class, context, content)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _deliver(self, alert_class, context, content):
        try:
            self.notifier.notify(alert_class, context, content)
        except Exception:
            logger.exception("Background delivery failed for %s alert", alert_class)

    def _forget(self, future: futures.Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for queued deliveries; True when nothing is left pending."""
        with self._lock:
            pending = list(self._pending)
        _, not_done = futures.wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def build_notifier(session_factory: Optional[Callable[[], Session]] = None,
                   webhook_url: Optional[str] = None) -> Notifier:
    channels: List[Notifier] = [LoggingNotifier()]
    if session_factory is not None:
        channels.append(DatabaseNotifier(session_factory))
    if webhook_url:
        channels.append(WebhookNotifier(webhook_url))
    return CompositeNotifier(channels)
