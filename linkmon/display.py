"""Formatting helpers for presenting link quality in the UI."""

from linkmon.models import ConnectionSample, Medium

GREEN = "#4CAF50"
LIGHT_GREEN = "#8BC34A"
AMBER = "#FFC107"
ORANGE = "#FF9800"
RED = "#F44336"

_MEDIUM_LABELS = {
    Medium.WIFI: "WiFi",
    Medium.CELLULAR: "Mobile",
    Medium.ETHERNET: "Ethernet",
    Medium.BLUETOOTH: "Bluetooth",
    Medium.VPN: "VPN",
    Medium.NONE: "Disconnected",
}


def quality_label(quality: int) -> str:
    if quality >= 80:
        return "Excellent"
    if quality >= 60:
        return "Good"
    if quality >= 40:
        return "Fair"
    if quality >= 20:
        return "Poor"
    return "Very Poor"


def quality_color(quality: int) -> str:
    if quality >= 80:
        return GREEN
    if quality >= 60:
        return LIGHT_GREEN
    if quality >= 40:
        return AMBER
    if quality >= 20:
        return ORANGE
    return RED


def latency_label(latency_ms: int) -> str:
    if latency_ms < 20:
        return "Excellent"
    if latency_ms < 50:
        return "Good"
    if latency_ms < 100:
        return "Fair"
    return "Poor"


def latency_color(latency_ms: int) -> str:
    if latency_ms < 20:
        return GREEN
    if latency_ms < 50:
        return LIGHT_GREEN
    if latency_ms < 100:
        return AMBER
    return RED


def packet_loss_label(loss_percent: int) -> str:
    if loss_percent == 0:
        return "Stable"
    if loss_percent < 2:
        return "Minor Loss"
    if loss_percent < 5:
        return "Moderate Loss"
    return "Critical"


def packet_loss_color(loss_percent: int) -> str:
    if loss_percent == 0:
        return GREEN
    if loss_percent < 2:
        return LIGHT_GREEN
    if loss_percent < 5:
        return AMBER
    return RED


def format_uptime(minutes: int) -> str:
    """Format uptime as "45m" or "2h 5m"."""
    if minutes < 60:
        return f"{minutes}m"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m"


def medium_label(sample: ConnectionSample) -> str:
    """Readable medium name; cellular shows its generation when known."""
    if sample.medium is Medium.CELLULAR and sample.technology:
        return sample.technology
    return _MEDIUM_LABELS[sample.medium]


def connection_status_label(connected: bool) -> str:
    return "Connected" if connected else "Disconnected"
