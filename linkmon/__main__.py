"""Entry point for the linkmon application."""

import logging
import os
import sys

from PySide6.QtWidgets import QApplication

from linkmon.config import MonitorConfig
from linkmon.fake_source import FakeSource
from linkmon.logging_config import configure_logging
from linkmon.monitor import ConnectivityMonitor
from linkmon.network_events import watch_network_changes
from linkmon.source_system import SystemSource
from linkmon.ui.main_window import SignalWindow

logger = logging.getLogger(__name__)


def create_source(config: MonitorConfig, environ=None):
    """Pick the platform source, falling back to simulated data.

    LINKMON_SOURCE=fake forces the simulation. Otherwise SystemSource is
    used unless NetworkManager is missing.

    Returns:
        (source, fallback_reason); the reason is None for SystemSource
    """
    if environ is None:
        environ = os.environ

    if environ.get("LINKMON_SOURCE", "").strip().lower() == "fake":
        logger.info("Fake source requested via LINKMON_SOURCE")
        return FakeSource(seed=config.seed), "LINKMON_SOURCE=fake"

    try:
        source = SystemSource(timeout_ms=config.query_timeout_ms)
    except OSError as e:
        logger.warning("Platform queries unavailable, using FakeSource: %s", e)
        return FakeSource(seed=config.seed), str(e)

    logger.info("Using SystemSource: timeout=%dms", config.query_timeout_ms)
    return source, None


def main():
    """Main entry point for the linkmon application."""
    try:
        configure_logging()
        config = MonitorConfig.from_env()
    except ValueError as e:
        sys.exit(f"linkmon: invalid configuration: {e}")

    app = QApplication(sys.argv)

    source, fallback_reason = create_source(config)
    monitor = ConnectivityMonitor(source, config)
    watch_network_changes(monitor)

    window = SignalWindow(monitor)
    window.show()
    window.start_monitoring()

    if fallback_reason:
        window.status_label.setText("Status: Monitoring (simulated data)")
        window.status_label.setStyleSheet("font-weight: bold; color: orange;")
        window.status_label.setToolTip(f"Fallback to simulated data: {fallback_reason}")

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
