"""Qt table model over the monitor's transition history."""

from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QColor

from linkmon.display import connection_status_label, medium_label, quality_color
from linkmon.models import ConnectionSample


class HistoryModel(QAbstractTableModel):
    """Table model for connectivity transitions, newest first.

    Holds an immutable history snapshot; set_history() swaps in a new one
    with a model reset, so views never see a half-updated list.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._samples: tuple[ConnectionSample, ...] = ()
        self._columns = ["Time", "Status", "Medium", "Quality", "Address", "Provider"]
        self._dash = "--"

    def rowCount(self, parent=QModelIndex()):
        if parent.isValid():
            return 0
        return len(self._samples)

    def columnCount(self, parent=QModelIndex()):
        if parent.isValid():
            return 0
        return len(self._columns)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None

        if index.row() >= len(self._samples) or index.row() < 0:
            return None

        sample = self._samples[index.row()]
        col = index.column()

        if role == Qt.DisplayRole:
            if col == 0:
                return sample.captured_at.strftime("%H:%M:%S")
            elif col == 1:
                return connection_status_label(sample.connected)
            elif col == 2:
                return medium_label(sample)
            elif col == 3:
                return f"{sample.signal_quality}%"
            elif col == 4:
                return sample.address or self._dash
            elif col == 5:
                return sample.provider or self._dash

        elif role == Qt.ForegroundRole:
            if col == 3:
                return QColor(quality_color(sample.signal_quality))

        elif role == Qt.TextAlignmentRole:
            if col == 3:
                return Qt.AlignRight | Qt.AlignVCenter
            return Qt.AlignLeft | Qt.AlignVCenter

        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if role == Qt.DisplayRole and orientation == Qt.Horizontal:
            if 0 <= section < len(self._columns):
                return self._columns[section]
        return None

    def flags(self, index):
        if not index.isValid():
            return Qt.NoItemFlags
        return Qt.ItemIsEnabled | Qt.ItemIsSelectable

    def set_history(self, samples):
        """Replace the displayed history. Skips the reset if nothing changed."""
        samples = tuple(samples)
        if samples == self._samples:
            return
        self.beginResetModel()
        self._samples = samples
        self.endResetModel()
