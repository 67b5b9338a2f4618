"""Synthetic network metrics derived from signal quality."""

import math
import random

from linkmon.models import NetworkMetrics


class MetricsEngine:
    """Computes latency, packet loss and uptime for a quality reading.

    Latency and loss are randomized within bounds fixed by the quality tier.
    """

    def __init__(self, seed: int | None = None):
        """Initialize with optional random seed for deterministic behavior."""
        # Isolated random instance, safe to share with other engines
        self._random = random.Random(seed)

    def latency_ms(self, quality: int) -> int:
        """Return a latency in the range for the quality tier."""
        if quality >= 80:
            return self._random.randrange(10, 30)
        if quality >= 60:
            return self._random.randrange(30, 60)
        if quality >= 40:
            return self._random.randrange(60, 110)
        return self._random.randrange(100, 200)

    def packet_loss_percent(self, quality: int) -> int:
        """Return a packet loss percentage for the quality tier."""
        if quality >= 80:
            return 0
        if quality >= 60:
            return 0 if self._random.random() < 0.8 else 1
        if quality >= 40:
            return self._random.randrange(0, 3)
        return self._random.randrange(2, 10)

    def compute(self, quality: int, session_start: float, now: float) -> NetworkMetrics:
        """Compute a metrics snapshot.

        Args:
            quality: Signal quality (0-100)
            session_start: Session start on a monotonic clock, in seconds
            now: Current time on the same clock, in seconds
        """
        return NetworkMetrics(
            latency_ms=self.latency_ms(quality),
            packet_loss_percent=self.packet_loss_percent(quality),
            uptime_minutes=uptime_minutes(session_start, now),
        )


def uptime_minutes(session_start: float, now: float) -> int:
    """Whole minutes elapsed since session start (never negative)."""
    return max(0, math.floor((now - session_start) / 60))

