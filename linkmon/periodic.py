"""Cancellable repeating task on the Qt event loop."""

import logging
import threading
from typing import Callable

from PySide6.QtCore import QObject, QThread, QTimer

logger = logging.getLogger(__name__)


class RepeatingTask(QObject):
    """Runs a body every interval_ms until stopped.

    Key features:
    - Single-shot timer re-armed only after the body returns, so a body
      never overlaps its own next tick
    - Cancellation token checked at tick entry and before re-arming
    - Generation ID invalidates ticks queued before a stop/start cycle
    - Body exceptions are logged and swallowed; the task keeps ticking

    stop() may be called from any thread. It takes the tick lock, so once it
    returns no body is running and none will run again.
    """

    def __init__(self, name: str, interval_ms: int, body: Callable[[], None], parent=None):
        """Initialize repeating task.

        Args:
            name: Task name used in log messages
            interval_ms: Period between the end of one tick and the next
            body: Callable run on each tick
            parent: Qt parent object
        """
        super().__init__(parent)
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

        self.name = name
        self.interval_ms = interval_ms
        self._body = body

        self._cancelled = threading.Event()
        self._cancelled.set()
        self._tick_lock = threading.RLock()
        self._generation_id = 0
        self._armed_generation = 0
        self.tick_count = 0

        self.timer = QTimer(self)
        self.timer.setSingleShot(True)
        self.timer.timeout.connect(self._on_timeout)

    @property
    def is_active(self) -> bool:
        return not self._cancelled.is_set()

    def start(self):
        """Start ticking. No-op if already active."""
        with self._tick_lock:
            if self.is_active:
                return
            self._generation_id += 1
            self._cancelled.clear()
        self._arm(self._generation_id)
        logger.debug("Task started: %s, interval=%dms", self.name, self.interval_ms)

    def stop(self):
        """Stop ticking. Idempotent; waits for an in-flight tick to finish."""
        with self._tick_lock:
            if not self.is_active:
                return
            self._cancelled.set()
            self._generation_id += 1  # Invalidate queued ticks
        if QThread.currentThread() is self.thread():
            self.timer.stop()
        logger.debug("Task stopped: %s (ticks=%d)", self.name, self.tick_count)

    def run_once(self) -> bool:
        """Run the body now, outside the timer. Returns False if cancelled."""
        return self._tick(self._generation_id)

    def _arm(self, generation_id: int):
        with self._tick_lock:
            if self._cancelled.is_set() or generation_id != self._generation_id:
                return
            self._armed_generation = generation_id
        self.timer.start(self.interval_ms)

    def _on_timeout(self):
        # Generation the timer was armed under, not the current one
        generation_id = self._armed_generation
        if self._tick(generation_id):
            self._arm(generation_id)

    def _tick(self, generation_id: int) -> bool:
        with self._tick_lock:
            if self._cancelled.is_set() or generation_id != self._generation_id:
                return False

            self.tick_count += 1
            try:
                self._body()
            except Exception as e:
                logger.exception("Tick failed: task=%s, error=%s", self.name, e)
            return True
