from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class DecayScheduler:
    """Fire ``on_tick`` once per ``interval`` seconds on a daemon thread.

    Waiting on an event rather than sleeping against a deadline means a stalled
    process applies at most one tick when it resumes.
    """

    def __init__(self, interval: float, on_tick: Callable[[], None]) -> None:
        self.interval = max(float(interval), 0.001)
        self.on_tick = on_tick
        self.ticks = 0
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def active(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> bool:
        with self._lock:
            if self._thread is not None or self._stop_event.is_set():
                return False
            self._thread = threading.Thread(
                target=self._loop, daemon=True, name="vaultterm-decay"
            )
            self._thread.start()
        logger.debug("decay scheduler started (interval=%.3fs)", self.interval)
        return True

    def stop(self) -> bool:
        with self._lock:
            if self._stop_event.is_set():
                return False
            self._stop_event.set()
        logger.debug("decay scheduler stopped after %d ticks", self.ticks)
        return True

    def join(self, timeout: float = 2.0) -> None:
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.on_tick()
                self.ticks += 1
            except Exception:
                logger.exception("decay tick failed")
