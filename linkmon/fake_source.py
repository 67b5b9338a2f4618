"""Fake platform sources for simulation and testing."""

import random
from dataclasses import dataclass

from linkmon.models import Medium


class FakeSource:
    """Simulates a mostly-connected WiFi link with drifting RSSI and dropouts."""

    def __init__(self, seed: int | None = None):
        """Initialize with optional random seed for deterministic behavior."""
        # Create isolated random instance for thread safety
        self._random = random.Random(seed)

        # Simulation parameters
        self.base_rssi = -62.0  # Typical indoor RSSI in dBm
        self.rssi_drift = 4.0  # Per-read standard deviation
        self.dropout_probability = 0.03  # Chance a poll finds no link
        self.recovery_probability = 0.5  # Chance a dropped link returns per poll

        self._rssi = self.base_rssi
        self._connected = True

    def current_medium(self) -> Medium:
        if self._connected:
            self._connected = self._random.random() >= self.dropout_probability
        else:
            self._connected = self._random.random() < self.recovery_probability
        return Medium.WIFI if self._connected else Medium.NONE

    def raw_indicator(self, medium: Medium) -> float | None:
        if medium is not Medium.WIFI:
            return None

        # Random walk pulled back toward the base level
        self._rssi += self._random.gauss(0, self.rssi_drift) + (self.base_rssi - self._rssi) * 0.2
        self._rssi = max(-100.0, min(-30.0, self._rssi))
        return round(self._rssi)

    def underlying_medium(self) -> Medium | None:
        return None

    def address(self) -> str | None:
        return "192.168.1.23"

    def provider(self) -> str | None:
        return "Simulated WiFi"

    def network_type(self) -> int | None:
        return None


@dataclass
class Reading:
    """One scripted platform reading.

    Any field may hold an exception instance; the matching query raises it.
    """

    medium: Medium | Exception
    raw: float | None | Exception = None
    carrier: Medium | None | Exception = None
    address: str | None | Exception = None
    provider: str | None | Exception = None
    network_type: int | None | Exception = None


class ScriptedSource:
    """Replays readings in order, one per current_medium() call.

    The last reading repeats once the script is exhausted.
    """

    def __init__(self, readings: list[Reading]):
        if not readings:
            raise ValueError("ScriptedSource needs at least one reading")
        self._readings = list(readings)
        self._index = -1
        self.medium_queries = 0

    @property
    def reading(self) -> Reading:
        return self._readings[max(0, self._index)]

    def _value(self, value):
        if isinstance(value, Exception):
            raise value
        return value

    def current_medium(self) -> Medium:
        self.medium_queries += 1
        self._index = min(self._index + 1, len(self._readings) - 1)
        return self._value(self.reading.medium)

    def raw_indicator(self, medium: Medium) -> float | None:
        return self._value(self.reading.raw)

    def underlying_medium(self) -> Medium | None:
        return self._value(self.reading.carrier)

    def address(self) -> str | None:
        return self._value(self.reading.address)

    def provider(self) -> str | None:
        return self._value(self.reading.provider)

    def network_type(self) -> int | None:
        return self._value(self.reading.network_type)
