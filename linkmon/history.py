"""Bounded history of connectivity transitions."""

import threading
from collections import deque

from linkmon.models import ConnectionSample

DEFAULT_CAPACITY = 15


class HistoryBuffer:
    """Newest-first event log with fixed capacity and drop-oldest eviction.

    Thread-safe: appends and snapshots are serialized by a lock, and
    snapshots are tuples, so readers never see the live deque.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        # appendleft + maxlen drops from the right (oldest) end
        self._samples: deque[ConnectionSample] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)

    @property
    def capacity(self) -> int:
        """Return maximum number of samples the buffer can hold."""
        return self._samples.maxlen or 0

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def latest(self) -> ConnectionSample | None:
        """Most recently appended sample, if any."""
        with self._lock:
            return self._samples[0] if self._samples else None

    def append(self, sample: ConnectionSample) -> None:
        """Insert a sample at the head, evicting the oldest beyond capacity."""
        with self._lock:
            self._samples.appendleft(sample)

    def snapshot(self) -> tuple[ConnectionSample, ...]:
        """Return an immutable newest-first copy."""
        with self._lock:
            return tuple(self._samples)

    def clear(self) -> None:
        """Empty the buffer."""
        with self._lock:
            self._samples.clear()
