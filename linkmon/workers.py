"""Worker classes for background platform reads."""

import logging
from typing import Callable

from PySide6.QtCore import QObject, QRunnable, Signal

from linkmon.models import ConnectionSample

logger = logging.getLogger(__name__)


class WorkerSignals(QObject):
    """Signals carrying a worker's result back to the monitor's thread."""

    sample_ready = Signal(object, int)  # (ConnectionSample, generation_id)
    error = Signal(str)
    finished = Signal()


class StatusWorker(QRunnable):
    """Runs one blocking status read on a pool thread.

    The worker only builds a sample; applying it to the monitor's cells
    happens in the slot connected to sample_ready, on the monitor's thread.
    """

    def __init__(
        self,
        read: Callable[[ConnectionSample], ConnectionSample],
        previous: ConnectionSample,
        generation_id: int,
    ):
        super().__init__()
        self.read = read
        self.previous = previous
        self.generation_id = generation_id
        self.signals = WorkerSignals()

    def run(self):
        try:
            logger.debug("Status read starting: generation_id=%d", self.generation_id)
            sample = self.read(self.previous)
            self.signals.sample_ready.emit(sample, self.generation_id)
        except Exception as e:
            logger.exception(
                "Status read failed: generation_id=%d, error=%s", self.generation_id, e
            )
            self.signals.error.emit(str(e))
        finally:
            self.signals.finished.emit()
