"""Connectivity monitor: current link state, metrics and transition history."""

import dataclasses
import logging
import threading
import time
from datetime import datetime
from typing import Callable

from PySide6.QtCore import QObject, QThreadPool, Signal

from linkmon.config import MonitorConfig
from linkmon.estimator import cellular_generation, read_quality
from linkmon.history import HistoryBuffer
from linkmon.metrics import MetricsEngine
from linkmon.models import ConnectionSample, Medium, NetworkMetrics
from linkmon.periodic import RepeatingTask
from linkmon.source import PlatformSource
from linkmon.workers import StatusWorker

logger = logging.getLogger(__name__)


class ConnectivityMonitor(QObject):
    """Owns the current sample, current metrics, history and session clock.

    Two independent repeating tasks drive it:
    - status task: hands a platform read to the thread pool; the finished
      sample replaces the current one on this object's thread and is
      recorded in history on a connected/disconnected transition
    - metrics task: recomputes metrics from the current sample and session

    Network change notifications (see linkmon.network_events) request an
    extra status read between ticks.

    The current sample and metrics are frozen objects replaced wholesale, so
    readers on any thread always see a complete value. Each cell has a
    single writer. Nothing here raises to callers: platform failures fall
    back to estimator defaults and the last known medium.
    """

    # Signals (convenience only; readers may also poll)
    sample_changed = Signal(object)  # ConnectionSample
    metrics_changed = Signal(object)  # NetworkMetrics
    transition = Signal(object)  # ConnectionSample appended to history

    def __init__(
        self,
        source: PlatformSource,
        config: MonitorConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.now,
        engine: MetricsEngine | None = None,
        parent=None,
    ):
        """Initialize connectivity monitor.

        Args:
            source: Platform connectivity queries
            config: Intervals and retention; defaults to MonitorConfig()
            clock: Monotonic seconds, used for uptime
            wall_clock: Wall time, used for sample timestamps
            engine: Metrics engine; defaults to one seeded from config
            parent: Qt parent object
        """
        super().__init__(parent)

        self.source = source
        self.config = config if config is not None else MonitorConfig()
        self._clock = clock
        self._wall_clock = wall_clock
        self.engine = engine if engine is not None else MetricsEngine(self.config.seed)

        self._history = HistoryBuffer(self.config.history_capacity)
        self._last_connected: bool | None = None
        self._session_start = self._clock()

        self._current_sample = ConnectionSample.disconnected(self._wall_clock())
        self._current_metrics = NetworkMetrics()

        # Background reads: one in flight at a time, stale results dropped
        self.thread_pool = QThreadPool.globalInstance()
        self._read_lock = threading.Lock()
        self._state_lock = threading.RLock()
        self._generation_id = 0
        self._read_in_flight = False

        self.status_task = RepeatingTask(
            "status", self.config.status_interval_ms, self.request_poll, parent=self
        )
        self.metrics_task = RepeatingTask(
            "metrics", self.config.metrics_interval_ms, self.refresh_metrics, parent=self
        )

    @property
    def is_monitoring(self) -> bool:
        return self.status_task.is_active or self.metrics_task.is_active

    @property
    def is_reading(self) -> bool:
        """True while a background status read is in flight."""
        return self._read_in_flight

    @property
    def last_connected(self) -> bool | None:
        """Connectivity recorded at the last transition; None until first poll."""
        return self._last_connected

    @property
    def session_start(self) -> float:
        return self._session_start

    def start(self):
        """Poll once, then start both periodic tasks. No-op if running."""
        if self.is_monitoring:
            return

        self.poll_status()
        self.refresh_metrics()
        self.status_task.start()
        self.metrics_task.start()
        logger.info(
            "Monitoring started: status=%dms, metrics=%dms",
            self.config.status_interval_ms,
            self.config.metrics_interval_ms,
        )

    def stop(self):
        """Cancel both tasks and drop in-flight reads; values stay frozen. Idempotent."""
        if not self.is_monitoring:
            return

        self.status_task.stop()
        self.metrics_task.stop()
        with self._state_lock:
            self._generation_id += 1  # Invalidate in-flight reads
        logger.info("Monitoring stopped (generation_id=%d)", self._generation_id)

    def get_current_sample(self) -> ConnectionSample:
        return self._current_sample

    def get_current_metrics(self) -> NetworkMetrics:
        return self._current_metrics

    def get_history(self) -> tuple[ConnectionSample, ...]:
        """Newest-first snapshot of recorded transitions."""
        return self._history.snapshot()

    current_sample = property(get_current_sample)
    current_metrics = property(get_current_metrics)

    def reset_session(self):
        """Restart the uptime basis. History is kept."""
        self._session_start = self._clock()
        logger.info("Session reset")

    def clear_history(self):
        """Drop all recorded transitions.

        The transition baseline is kept, so the next entry is recorded only
        when connectivity actually changes again.
        """
        self._history.clear()
        logger.info("History cleared")

    def poll_status(self):
        """Read the platform on the calling thread and apply the sample."""
        sample = self._read_sample(self._current_sample)
        with self._state_lock:
            self._apply_sample(sample)

    def request_poll(self) -> bool:
        """Status tick: start a platform read on the thread pool.

        The sample is applied on this object's thread when the read finishes.
        Returns False if a read is already in flight.
        """
        if self._read_in_flight:
            logger.debug("Status read skipped: previous read still in flight")
            return False

        self._read_in_flight = True
        worker = StatusWorker(self._read_sample, self._current_sample, self._generation_id)
        worker.signals.sample_ready.connect(self._on_sample_ready)
        worker.signals.finished.connect(self._on_read_finished)
        self.thread_pool.start(worker)
        return True

    def on_network_changed(self, *args):
        """Slot for platform change notifications; reads now if monitoring."""
        if not self.is_monitoring:
            return
        logger.debug("Network change reported: %s", args)
        self.request_poll()

    def refresh_metrics(self):
        """Metrics tick: recompute metrics from the current sample and session."""
        metrics = self.engine.compute(
            self._current_sample.signal_quality, self._session_start, self._clock()
        )
        self._current_metrics = metrics
        logger.debug(
            "Metrics refreshed: latency=%dms, loss=%d%%, uptime=%dm",
            metrics.latency_ms,
            metrics.packet_loss_percent,
            metrics.uptime_minutes,
        )
        self.metrics_changed.emit(metrics)

    def get_stats(self):
        """Get monitor statistics.

        Returns:
            Dict with monitor state info
        """
        return {
            "monitoring": self.is_monitoring,
            "history": len(self._history),
            "history_capacity": self._history.capacity,
            "status_ticks": self.status_task.tick_count,
            "metrics_ticks": self.metrics_task.tick_count,
            "last_connected": self._last_connected,
        }

    def _on_sample_ready(self, sample: ConnectionSample, generation_id: int):
        with self._state_lock:
            if generation_id != self._generation_id:
                logger.debug(
                    "Ignoring stale read: generation_id=%d (current=%d)",
                    generation_id,
                    self._generation_id,
                )
                return
            self._apply_sample(sample)

    def _on_read_finished(self):
        self._read_in_flight = False

    def _apply_sample(self, sample: ConnectionSample):
        previous = self._current_sample

        # Timestamps never run backwards within one monitor
        if sample.captured_at < previous.captured_at:
            sample = dataclasses.replace(sample, captured_at=previous.captured_at)
        self._current_sample = sample

        if self._is_transition(previous, sample):
            self._last_connected = sample.connected
            self._history.append(sample)
            logger.info(
                "Connectivity transition: connected=%s, medium=%s, quality=%d",
                sample.connected,
                sample.medium.value,
                sample.signal_quality,
            )
            self.transition.emit(sample)

        logger.debug(
            "Status polled: medium=%s, quality=%d", sample.medium.value, sample.signal_quality
        )
        self.sample_changed.emit(sample)

    def _is_transition(self, previous: ConnectionSample, sample: ConnectionSample) -> bool:
        if self._last_connected is None or sample.connected != self._last_connected:
            return True
        if self.config.history_on_medium_change:
            return sample.connected and sample.medium is not previous.medium
        return False

    def _read_sample(self, previous: ConnectionSample) -> ConnectionSample:
        # Runs on a pool thread or the caller's; sources are not thread-safe
        with self._read_lock:
            try:
                medium = self.source.current_medium()
            except Exception as e:
                medium = previous.medium
                logger.warning(
                    "Medium query failed, keeping %s: error=%s", medium.value, e, exc_info=True
                )

            quality = read_quality(self.source, medium)

            address = provider = technology = None
            if medium is not Medium.NONE:
                address = self._query("address", self.source.address)
                provider = self._query("provider", self.source.provider)
                if medium is Medium.CELLULAR:
                    technology = cellular_generation(
                        self._query("network_type", self.source.network_type)
                    )

            captured_at = self._wall_clock()

        return ConnectionSample(
            signal_quality=quality,
            medium=medium,
            connected=medium is not Medium.NONE,
            captured_at=captured_at,
            address=address,
            provider=provider,
            technology=technology,
        )

    def _query(self, name: str, query: Callable):
        try:
            return query()
        except Exception as e:
            logger.debug("Query failed: %s, error=%s", name, e)
            return None
