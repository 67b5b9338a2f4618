"""Signal detection window for linkmon."""

from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QHBoxLayout,
    QVBoxLayout,
    QPushButton,
    QLabel,
    QFrame,
    QGroupBox,
    QHeaderView,
    QTableView,
)
from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent

from linkmon.display import (
    connection_status_label,
    format_uptime,
    latency_color,
    latency_label,
    medium_label,
    packet_loss_color,
    packet_loss_label,
    quality_color,
    quality_label,
)
from linkmon.monitor import ConnectivityMonitor
from linkmon.ui.history_model import HistoryModel


class SignalWindow(QMainWindow):
    """Main application window.

    Pulls the monitor's current sample, metrics and history on its own
    refresh timer; the monitor never pushes to the view.
    """

    def __init__(self, monitor: ConnectivityMonitor, refresh_ms: int | None = None):
        super().__init__()
        self.setWindowTitle("Signal Detection")
        self.setGeometry(100, 100, 900, 600)

        self.monitor = monitor
        self.refresh_ms = refresh_ms if refresh_ms is not None else monitor.config.ui_refresh_ms

        # Timer for pulling monitor state into the view
        self.refresh_timer = QTimer(self)
        self.refresh_timer.timeout.connect(self.refresh_view)

        self.history_model = HistoryModel(self)

        self.setup_ui()

    def closeEvent(self, event: QCloseEvent) -> None:
        """Handle application close event - stop timers and monitoring."""
        self.refresh_timer.stop()
        self.monitor.stop()
        super().closeEvent(event)

    def setup_ui(self):
        """Set up the main user interface."""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        main_layout = QHBoxLayout(central_widget)
        main_layout.addWidget(self.create_status_panel(), 0)
        main_layout.addWidget(self.create_history_area(), 1)

    def create_status_panel(self):
        """Create the left panel with current link state and metrics."""
        panel = QFrame()
        panel.setFrameStyle(QFrame.Box)
        panel.setFixedWidth(260)

        layout = QVBoxLayout(panel)

        title = QLabel("Network Status")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet("font-weight: bold; font-size: 14px; margin: 10px;")
        layout.addWidget(title)

        link_group = QGroupBox("Connection")
        link_layout = QVBoxLayout(link_group)
        self.connection_label = QLabel("Status: --")
        self.medium_label = QLabel("Type: --")
        self.quality_label = QLabel("Signal: --")
        self.address_label = QLabel("Address: --")
        self.provider_label = QLabel("Provider: --")
        for label in [
            self.connection_label,
            self.medium_label,
            self.quality_label,
            self.address_label,
            self.provider_label,
        ]:
            label.setStyleSheet("padding: 3px;")
            link_layout.addWidget(label)
        layout.addWidget(link_group)

        metrics_group = QGroupBox("Metrics")
        metrics_layout = QVBoxLayout(metrics_group)
        self.latency_label = QLabel("Ping: --")
        self.loss_label = QLabel("Packet Loss: --")
        self.uptime_label = QLabel("Uptime: --")
        for label in [self.latency_label, self.loss_label, self.uptime_label]:
            label.setStyleSheet("padding: 3px; font-family: monospace;")
            metrics_layout.addWidget(label)
        layout.addWidget(metrics_group)

        controls_group = QGroupBox("Controls")
        controls_layout = QVBoxLayout(controls_group)

        self.start_button = QPushButton("Start Monitoring")
        self.start_button.clicked.connect(self.start_monitoring)
        controls_layout.addWidget(self.start_button)

        self.stop_button = QPushButton("Stop Monitoring")
        self.stop_button.clicked.connect(self.stop_monitoring)
        self.stop_button.setEnabled(False)
        controls_layout.addWidget(self.stop_button)

        self.refresh_button = QPushButton("Refresh")
        self.refresh_button.clicked.connect(self.refresh_view)
        controls_layout.addWidget(self.refresh_button)

        self.reset_button = QPushButton("Reset Session")
        self.reset_button.clicked.connect(self.reset_session)
        controls_layout.addWidget(self.reset_button)

        self.clear_button = QPushButton("Clear History")
        self.clear_button.clicked.connect(self.clear_history)
        controls_layout.addWidget(self.clear_button)

        layout.addWidget(controls_group)
        layout.addStretch()

        self.status_label = QLabel("Status: Ready")
        self.status_label.setAlignment(Qt.AlignCenter)
        self.status_label.setStyleSheet("font-weight: bold;")
        layout.addWidget(self.status_label)

        return panel

    def create_history_area(self):
        """Create the right area with the transition history table."""
        area = QFrame()
        area.setFrameStyle(QFrame.Box)

        layout = QVBoxLayout(area)

        title = QLabel("Connection History")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet("font-weight: bold; font-size: 14px; margin: 10px;")
        layout.addWidget(title)

        self.table = QTableView()
        self.table.setModel(self.history_model)
        self.table.setAlternatingRowColors(True)
        self.table.setSelectionBehavior(QTableView.SelectRows)
        header = self.table.horizontalHeader()
        header.setSectionResizeMode(QHeaderView.ResizeToContents)
        header.setStretchLastSection(True)
        layout.addWidget(self.table)

        return area

    def start_monitoring(self):
        """Handle start button click."""
        self.monitor.start()
        self.refresh_timer.start(self.refresh_ms)
        self.start_button.setEnabled(False)
        self.stop_button.setEnabled(True)
        self.status_label.setText("Status: Monitoring")
        self.refresh_view()

    def stop_monitoring(self):
        """Handle stop button click. Last values stay on screen."""
        self.monitor.stop()
        self.refresh_timer.stop()
        self.start_button.setEnabled(True)
        self.stop_button.setEnabled(False)
        self.status_label.setText("Status: Stopped")

    def reset_session(self):
        """Restart the uptime basis; history is kept."""
        self.monitor.reset_session()
        self.status_label.setText("Status: Session reset")
        self.refresh_view()

    def clear_history(self):
        """Drop recorded transitions from the monitor and the table."""
        self.monitor.clear_history()
        self.status_label.setText("Status: History cleared")
        self.refresh_view()

    def refresh_view(self):
        """Pull current state from the monitor into the labels and table."""
        sample = self.monitor.get_current_sample()
        metrics = self.monitor.get_current_metrics()

        status_color = "#4CAF50" if sample.connected else "#F44336"
        self.connection_label.setText(f"Status: {connection_status_label(sample.connected)}")
        self.connection_label.setStyleSheet(f"padding: 3px; color: {status_color};")
        self.medium_label.setText(f"Type: {medium_label(sample)}")

        quality = sample.signal_quality
        self.quality_label.setText(f"Signal: {quality}% ({quality_label(quality)})")
        self.quality_label.setStyleSheet(f"padding: 3px; color: {quality_color(quality)};")

        self.address_label.setText(f"Address: {sample.address or 'N/A'}")
        self.provider_label.setText(f"Provider: {sample.provider or 'Unknown Provider'}")

        latency = metrics.latency_ms
        self.latency_label.setText(f"Ping: {latency} ms ({latency_label(latency)})")
        self.latency_label.setStyleSheet(
            f"padding: 3px; font-family: monospace; color: {latency_color(latency)};"
        )

        loss = metrics.packet_loss_percent
        self.loss_label.setText(f"Packet Loss: {loss}% ({packet_loss_label(loss)})")
        self.loss_label.setStyleSheet(
            f"padding: 3px; font-family: monospace; color: {packet_loss_color(loss)};"
        )

        self.uptime_label.setText(f"Uptime: {format_uptime(metrics.uptime_minutes)}")

        self.history_model.set_history(self.monitor.get_history())
