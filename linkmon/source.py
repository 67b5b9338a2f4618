"""Platform source abstraction for connectivity queries."""

from typing import Protocol

from linkmon.models import Medium


class PlatformQueryError(Exception):
    """Raised by a platform source when a connectivity query fails."""


class PlatformSource(Protocol):
    """Protocol defining the best-effort connectivity queries of a platform.

    Every method may raise; callers treat failures as "unavailable".
    """

    def current_medium(self) -> Medium:
        """Return the transport class of the active connection."""
        ...

    def raw_indicator(self, medium: Medium) -> float | None:
        """Return the raw signal indicator for a medium (RSSI dBm, bars)."""
        ...

    def underlying_medium(self) -> Medium | None:
        """Return the physical medium carrying a bluetooth/vpn link."""
        ...

    def address(self) -> str | None:
        """Return the local address of the active connection."""
        ...

    def provider(self) -> str | None:
        """Return the network provider or carrier name."""
        ...

    def network_type(self) -> int | None:
        """Return the cellular network type code (Android numbering)."""
        ...
