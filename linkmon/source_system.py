"""Linux platform source using NetworkManager, ModemManager and /proc."""

import logging
import re
import shutil
import socket
import subprocess
from pathlib import Path

from linkmon.models import Medium
from linkmon.source import PlatformQueryError

logger = logging.getLogger(__name__)

PROC_NET_WIRELESS = Path("/proc/net/wireless")

# nmcli device types mapped onto media
_NMCLI_TYPES = {
    "wifi": Medium.WIFI,
    "ethernet": Medium.ETHERNET,
    "gsm": Medium.CELLULAR,
    "cdma": Medium.CELLULAR,
    "bt": Medium.BLUETOOTH,
    "tun": Medium.VPN,
    "wireguard": Medium.VPN,
    "vpn": Medium.VPN,
}

# ModemManager access technologies mapped to Android network type codes
_ACCESS_TECHNOLOGY_CODES = {
    "5gnr": 20,
    "lte": 13,
    "hspa-plus": 15,
    "hsdpa": 8,
    "hsupa": 9,
    "hspa": 10,
    "gprs": 1,
    "edge": 2,
}


def parse_nmcli_devices(output: str) -> list[tuple[str, str]]:
    """Parse `nmcli -t -f TYPE,STATE device` output (pure function).

    Returns:
        List of (device_type, state) pairs in nmcli order

    Examples:
        >>> parse_nmcli_devices("wifi:connected\\nloopback:unmanaged")
        [('wifi', 'connected'), ('loopback', 'unmanaged')]
    """
    devices = []
    for line in output.splitlines():
        line = line.strip()
        if not line or ":" not in line:
            continue
        device_type, _, state = line.partition(":")
        devices.append((device_type.strip().lower(), state.strip().lower()))
    return devices


def medium_from_devices(devices: list[tuple[str, str]]) -> tuple[Medium, Medium | None]:
    """Pick the active medium and, for bluetooth/vpn, the carrying medium.

    A connected VPN takes precedence since traffic rides over it; the first
    connected physical device then becomes its carrier.
    """
    connected = [
        _NMCLI_TYPES[device_type]
        for device_type, state in devices
        if state.startswith("connected") and device_type in _NMCLI_TYPES
    ]
    if not connected:
        return Medium.NONE, None

    physical = [m for m in connected if m in (Medium.WIFI, Medium.ETHERNET, Medium.CELLULAR)]
    carrier = physical[0] if physical else None

    if Medium.VPN in connected:
        return Medium.VPN, carrier
    if connected[0] is Medium.BLUETOOTH:
        return Medium.BLUETOOTH, carrier
    return connected[0], None


def parse_proc_net_wireless(text: str) -> float | None:
    """Parse the signal level (dBm) of the first interface in /proc/net/wireless.

    Examples:
        >>> parse_proc_net_wireless(" wlan0: 0000   54.  -56.  -256  0 0 0 0 0 0")
        -56.0
    """
    for line in text.splitlines():
        if ":" not in line or "|" in line:
            continue
        _, _, fields = line.partition(":")
        parts = fields.split()
        if len(parts) < 3:
            continue
        try:
            return float(parts[2].rstrip("."))
        except ValueError:
            return None
    return None


def signal_percent_to_rssi(percent: float) -> float:
    """Convert NetworkManager's 0-100 signal percent to approximate dBm."""
    percent = max(0.0, min(100.0, percent))
    return percent / 2 - 100


def parse_mmcli_keyvalue(output: str) -> dict[str, str]:
    """Parse `mmcli --output-keyvalue` output into a flat dict (pure function)."""
    values = {}
    for line in output.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        value = value.strip()
        if value and value != "--":
            values[key.strip()] = value
    return values


def signal_percent_to_bars(percent: float) -> int:
    """Convert a 0-100 signal percent to 0-4 signal bars."""
    return max(0, min(4, round(percent / 25)))


def access_technology_code(technologies: str) -> int | None:
    """Map ModemManager access technologies to an Android network type code.

    ModemManager reports a comma-separated list; the first known entry wins.
    """
    for technology in re.split(r"[,\s]+", technologies.lower()):
        if technology in _ACCESS_TECHNOLOGY_CODES:
            return _ACCESS_TECHNOLOGY_CODES[technology]
    return None


class SystemSource:
    """Platform source for Linux desktops and SBCs.

    Every query runs its command with a timeout, and each command runs at most
    once per status read: the ModemManager snapshot is taken together with
    the medium query. Failures raise PlatformQueryError, which the monitor
    treats as "unavailable".
    """

    def __init__(self, timeout_ms: int = 1000):
        """Initialize system source.

        Args:
            timeout_ms: Maximum time per platform command in milliseconds

        Raises:
            ValueError: If timeout_ms is not positive
            OSError: If NetworkManager's nmcli is not installed
        """
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        if shutil.which("nmcli") is None:
            raise OSError("nmcli not found")

        self.timeout_ms = timeout_ms
        self.timeout_seconds = timeout_ms / 1000.0
        self._carrier: Medium | None = None
        self._modem: dict[str, str] = {}

        logger.debug("SystemSource initialized: timeout_ms=%d", timeout_ms)

    def current_medium(self) -> Medium:
        """Query the active medium.

        Also refreshes the carrier and, when a modem link is involved, the
        ModemManager snapshot that the other queries of this poll read from.
        """
        output = self._run(["nmcli", "-t", "-f", "TYPE,STATE", "device"])
        medium, self._carrier = medium_from_devices(parse_nmcli_devices(output))
        if Medium.CELLULAR in (medium, self._carrier):
            self._modem = self._read_modem()
        else:
            self._modem = {}
        return medium

    def underlying_medium(self) -> Medium | None:
        return self._carrier

    def raw_indicator(self, medium: Medium) -> float | None:
        if medium is Medium.WIFI:
            return self._wifi_rssi()
        if medium is Medium.CELLULAR:
            percent = self._modem.get("modem.generic.signal-quality.value")
            return signal_percent_to_bars(float(percent)) if percent else None
        return None

    def address(self) -> str | None:
        # Connecting a UDP socket selects a route without sending packets
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.settimeout(self.timeout_seconds)
            sock.connect(("192.0.2.1", 9))
            return sock.getsockname()[0]

    def provider(self) -> str | None:
        operator = self._modem.get("modem.3gpp.operator-name")
        if operator:
            return operator
        output = self._run(["nmcli", "-t", "-f", "NAME", "connection", "show", "--active"])
        names = [line for line in output.splitlines() if line.strip()]
        return names[0] if names else None

    def network_type(self) -> int | None:
        technologies = self._modem.get("modem.generic.access-technologies.value[1]")
        if technologies is None:
            technologies = self._modem.get("modem.generic.access-technologies", "")
        return access_technology_code(technologies)

    def _wifi_rssi(self) -> float | None:
        try:
            rssi = parse_proc_net_wireless(PROC_NET_WIRELESS.read_text())
        except OSError as e:
            logger.debug("Cannot read %s: %s", PROC_NET_WIRELESS, e)
            rssi = None
        if rssi is not None:
            return rssi

        output = self._run(["nmcli", "-t", "-f", "ACTIVE,SIGNAL", "device", "wifi"])
        for line in output.splitlines():
            active, _, signal = line.partition(":")
            if active == "yes" and signal.strip().isdigit():
                return signal_percent_to_rssi(float(signal))
        return None

    def _read_modem(self) -> dict[str, str]:
        if shutil.which("mmcli") is None:
            return {}
        try:
            return parse_mmcli_keyvalue(self._run(["mmcli", "-m", "any", "--output-keyvalue"]))
        except PlatformQueryError as e:
            logger.debug("Modem query failed: %s", e)
            return {}

    def _run(self, cmd: list[str]) -> str:
        """Run a platform command with timeout and return stdout.

        Raises:
            PlatformQueryError: On timeout, launch failure or non-zero exit
        """
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                shell=False,
            )
        except subprocess.TimeoutExpired:
            raise PlatformQueryError(f"{cmd[0]} timed out after {self.timeout_ms}ms") from None
        except OSError as e:
            raise PlatformQueryError(f"{cmd[0]} failed: {e}") from e

        if result.returncode != 0:
            logger.debug("Command failed: cmd=%s, returncode=%d", cmd[0], result.returncode)
            raise PlatformQueryError(f"{cmd[0]} exited with {result.returncode}")
        return result.stdout
