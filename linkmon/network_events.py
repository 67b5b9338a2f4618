"""Platform network change notifications via Qt's network information API."""

import logging

from PySide6.QtNetwork import QNetworkInformation

from linkmon.monitor import ConnectivityMonitor

logger = logging.getLogger(__name__)


def watch_network_changes(monitor: ConnectivityMonitor) -> bool:
    """Request a status read from the monitor whenever Qt reports a change.

    Reachability and transport medium changes both count, so a switch from
    wifi to cellular is sampled right away instead of at the next poll.

    Returns:
        False if the platform has no network information backend; the
        monitor then relies on its periodic status task alone
    """
    if not QNetworkInformation.loadDefaultBackend():
        logger.warning("No network information backend; using periodic polls only")
        return False

    info = QNetworkInformation.instance()
    info.reachabilityChanged.connect(monitor.on_network_changed)
    info.transportMediumChanged.connect(monitor.on_network_changed)
    logger.info("Watching network changes: backend=%s", info.backendName())
    return True
