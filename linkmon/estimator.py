"""Signal quality estimation across connection media.

Normalizes medium-specific raw indicators onto one 0-100 scale:

- WiFi: RSSI in dBm, linear between -100 dBm (0) and -50 dBm (100)
- Cellular: device-reported signal bars 0-4
- Ethernet: always full quality
- Bluetooth/VPN: estimated from the carrying medium when known

Missing or failed readings fall back to fixed "assumed good" values, so
estimation never raises.
"""

import logging
import math

from linkmon.models import Medium
from linkmon.source import PlatformSource

logger = logging.getLogger(__name__)

MIN_RSSI = -100
MAX_RSSI = -50
MAX_CELLULAR_LEVEL = 4

WIFI_FALLBACK = 75
CELLULAR_FALLBACK = 70
OTHER_FALLBACK = 70

_CARRIER_MEDIA = (Medium.WIFI, Medium.CELLULAR, Medium.ETHERNET)


def _as_number(raw) -> float | None:
    """Coerce a raw indicator to a finite float, or None if unusable."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def wifi_quality(rssi: float | None) -> int:
    """Convert WiFi RSSI (dBm) to quality.

    Examples:
        >>> wifi_quality(-75)
        50
        >>> wifi_quality(-40)
        100
    """
    rssi = _as_number(rssi)
    if rssi is None:
        return WIFI_FALLBACK

    if rssi <= MIN_RSSI:
        return 0
    if rssi >= MAX_RSSI:
        return 100

    quality = math.floor((rssi - MIN_RSSI) * 100 / (MAX_RSSI - MIN_RSSI))
    return max(0, min(100, quality))


def cellular_quality(level: float | None) -> int:
    """Convert cellular signal bars (0-4) to quality."""
    level = _as_number(level)
    if level is None:
        return CELLULAR_FALLBACK

    level = max(0.0, min(float(MAX_CELLULAR_LEVEL), level))
    return int(round(level / MAX_CELLULAR_LEVEL * 100))


def estimate_quality(medium: Medium, raw_indicator=None, carrier: Medium | None = None) -> int:
    """Estimate normalized signal quality (0-100) for a medium.

    Args:
        medium: Transport class of the connection
        raw_indicator: Medium-specific raw reading, or None if unavailable
        carrier: Physical medium under a bluetooth/vpn link, if known

    Returns:
        Quality in [0, 100]
    """
    if medium is Medium.NONE:
        return 0
    if medium is Medium.ETHERNET:
        return 100
    if medium is Medium.WIFI:
        return wifi_quality(raw_indicator)
    if medium is Medium.CELLULAR:
        return cellular_quality(raw_indicator)

    # Bluetooth and VPN ride over another medium
    if carrier in _CARRIER_MEDIA:
        return estimate_quality(carrier, raw_indicator)
    return OTHER_FALLBACK


def read_quality(source: PlatformSource, medium: Medium) -> int:
    """Query a platform source for the raw indicator and estimate quality.

    Query failures are logged and treated as "indicator unavailable".
    """
    if medium in (Medium.NONE, Medium.ETHERNET):
        return estimate_quality(medium)

    carrier = None
    if medium not in (Medium.WIFI, Medium.CELLULAR):
        try:
            carrier = source.underlying_medium()
        except Exception as e:
            logger.debug("Carrier query failed: medium=%s, error=%s", medium.value, e)

    try:
        raw = source.raw_indicator(carrier if carrier in _CARRIER_MEDIA else medium)
    except Exception as e:
        logger.warning(
            "Signal indicator unavailable: medium=%s, error=%s", medium.value, e, exc_info=True
        )
        raw = None

    return estimate_quality(medium, raw, carrier)


def cellular_generation(network_type: int | None) -> str | None:
    """Map an Android TelephonyManager network type code to a generation label."""
    if network_type is None:
        return None
    if network_type == 20:  # NETWORK_TYPE_NR
        return "5G"
    if network_type == 13:  # NETWORK_TYPE_LTE
        return "LTE"
    if network_type == 15:  # NETWORK_TYPE_HSPAP
        return "4G"
    if 8 <= network_type <= 10:
        return "3G"
    if 1 <= network_type <= 2:
        return "2G"
    return None
