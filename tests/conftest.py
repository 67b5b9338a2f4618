"""Shared fixtures for linkmon tests."""

import os
import time
from datetime import datetime, timedelta

import pytest

# Widgets and timers need a platform plugin; tests run headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtTest import QTest
from PySide6.QtWidgets import QApplication


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeWallClock:
    """Wall clock returning scripted datetimes, stepping one second per call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start if start is not None else datetime(2024, 5, 1, 12, 0, 0)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_clock():
    return FakeWallClock()


@pytest.fixture
def wait_until():
    """Process Qt events until predicate() holds; returns False on timeout."""

    def wait(predicate, timeout_ms: int = 2000) -> bool:
        deadline = time.monotonic() + timeout_ms / 1000.0
        while not predicate():
            if time.monotonic() > deadline:
                return False
            QTest.qWait(10)
        return True

    return wait
