import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TickScheduler:
    """
    Calls `callback` every `interval` seconds on a daemon thread.
    A callback returning False reports a skipped run; `ticks` counts only
    the runs that went ahead.

    stop() returns only after the worker has exited, so no callback starts
    after it returns and one already running is allowed to finish.
    """

    def __init__(self, callback: Callable[[], object], interval: float = 5.0, name: str = "tick"):
        self.callback = callback
        self.interval = max(0.0, float(interval))
        self.name = name
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.ticks = 0

    def _loop(self, stop: threading.Event):
        while not stop.is_set():
            try:
                if self.callback() is not False:
                    self.ticks += 1
            except Exception:
                logger.exception("%s callback failed; scheduler keeps running", self.name)

            if stop.wait(self.interval):
                break

    def start(self) -> bool:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return False

            self._stop = threading.Event()
            th = threading.Thread(target=self._loop, args=(self._stop,), name=self.name, daemon=True)
            self._thread = th
            th.start()
            logger.info("%s scheduler started (every %.1fs)", self.name, self.interval)
            return True

    def stop(self, timeout: Optional[float] = None) -> bool:
        with self._lock:
            th = self._thread
            if th is None or not th.is_alive():
                self._thread = None
                return False
            self._stop.set()

        if th is not threading.current_thread():
            th.join(timeout)
        with self._lock:
            if self._thread is th:
                self._thread = None
        logger.info("%s scheduler stopped", self.name)
        return True

    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()
