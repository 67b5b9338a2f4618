"""Data models for link quality monitoring."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Medium(Enum):
    """Transport class of a connection."""

    WIFI = "wifi"
    CELLULAR = "cellular"
    ETHERNET = "ethernet"
    BLUETOOTH = "bluetooth"
    VPN = "vpn"
    NONE = "none"


@dataclass(frozen=True)
class ConnectionSample:
    """Immutable snapshot of the link at one point in time."""

    signal_quality: int
    medium: Medium
    connected: bool
    captured_at: datetime
    address: str | None = None
    provider: str | None = None
    technology: str | None = None  # cellular generation, e.g. "LTE"

    def __post_init__(self):
        """Enforce quality range and the connected <-> medium invariant."""
        connected = self.medium is not Medium.NONE
        quality = max(0, min(100, int(self.signal_quality))) if connected else 0

        # Frozen dataclass: bypass __setattr__ to normalize fields
        object.__setattr__(self, "connected", connected)
        object.__setattr__(self, "signal_quality", quality)

    @classmethod
    def disconnected(cls, captured_at: datetime) -> "ConnectionSample":
        """Placeholder sample used before the first status poll."""
        return cls(signal_quality=0, medium=Medium.NONE, connected=False, captured_at=captured_at)


@dataclass(frozen=True)
class NetworkMetrics:
    """Synthetic quality metrics derived from signal quality and session time."""

    latency_ms: int = 0
    packet_loss_percent: int = 0
    uptime_minutes: int = 0
