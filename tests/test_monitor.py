"""Unit tests for ConnectivityMonitor."""

import threading
from datetime import datetime, timedelta

import pytest
from PySide6.QtTest import QTest

from linkmon.config import MonitorConfig
from linkmon.fake_source import FakeSource, Reading, ScriptedSource
from linkmon.metrics import MetricsEngine
from linkmon.models import ConnectionSample, Medium, NetworkMetrics
from linkmon.monitor import ConnectivityMonitor
from linkmon.source import PlatformQueryError


def scripted(*readings):
    return ScriptedSource(list(readings))


class TestInitialState:
    """Verify monitor starts in correct initial state."""

    def test_initial_state(self, clock, wall_clock):
        monitor = ConnectivityMonitor(
            scripted(Reading(Medium.WIFI, raw=-60)), clock=clock, wall_clock=wall_clock
        )

        assert not monitor.is_monitoring
        assert monitor.last_connected is None
        assert monitor.get_history() == ()
        assert monitor.get_current_metrics() == NetworkMetrics()

        sample = monitor.get_current_sample()
        assert sample.medium is Medium.NONE
        assert sample.connected is False

    def test_default_config(self):
        monitor = ConnectivityMonitor(FakeSource(seed=1))

        assert monitor.status_task.interval_ms == 10000
        assert monitor.metrics_task.interval_ms == 5000
        assert monitor.get_stats()["history_capacity"] == 15

    def test_reads_never_poll(self, clock, wall_clock):
        source = scripted(Reading(Medium.WIFI, raw=-60))
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)

        monitor.get_current_sample()
        monitor.get_current_metrics()
        monitor.get_history()

        assert source.medium_queries == 0


class TestStatusPolling:
    """Test sample construction and transition-triggered history."""

    def test_poll_builds_sample(self, clock, wall_clock):
        source = scripted(
            Reading(Medium.CELLULAR, raw=3, address="100.64.0.9", provider="Acme Mobile", network_type=13)
        )
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)

        monitor.poll_status()
        sample = monitor.current_sample

        assert sample.medium is Medium.CELLULAR
        assert sample.connected is True
        assert sample.signal_quality == 75
        assert sample.address == "100.64.0.9"
        assert sample.provider == "Acme Mobile"
        assert sample.technology == "LTE"

    def test_alternating_connectivity_records_each_transition(self, clock, wall_clock):
        """connected -> disconnected -> connected gives three entries; steady state adds none."""
        source = scripted(
            Reading(Medium.WIFI, raw=-60),
            Reading(Medium.NONE),
            Reading(Medium.WIFI, raw=-60),
            Reading(Medium.WIFI, raw=-55),
        )
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)

        for _ in range(3):
            monitor.poll_status()

        history = monitor.get_history()
        assert len(history) == 3
        assert [s.connected for s in history] == [True, False, True]

        monitor.poll_status()

        assert len(monitor.get_history()) == 3
        assert monitor.current_sample.signal_quality == 90

    def test_current_sample_replaced_without_transition(self, clock, wall_clock):
        source = scripted(Reading(Medium.WIFI, raw=-90), Reading(Medium.WIFI, raw=-50))
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)

        monitor.poll_status()
        first = monitor.current_sample
        monitor.poll_status()

        assert monitor.current_sample is not first
        assert monitor.current_sample.signal_quality == 100
        assert monitor.get_history() == (first,)

    def test_first_poll_disconnected_is_a_transition(self, clock, wall_clock):
        monitor = ConnectivityMonitor(scripted(Reading(Medium.NONE)), clock=clock, wall_clock=wall_clock)

        monitor.poll_status()

        assert monitor.last_connected is False
        assert len(monitor.get_history()) == 1

    def test_medium_change_while_connected_not_recorded_by_default(self, clock, wall_clock):
        source = scripted(Reading(Medium.WIFI, raw=-60), Reading(Medium.CELLULAR, raw=2))
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)

        monitor.poll_status()
        monitor.poll_status()

        assert len(monitor.get_history()) == 1
        assert monitor.current_sample.medium is Medium.CELLULAR

    def test_medium_change_recorded_when_enabled(self, clock, wall_clock):
        source = scripted(
            Reading(Medium.WIFI, raw=-60),
            Reading(Medium.CELLULAR, raw=2),
            Reading(Medium.CELLULAR, raw=4),
        )
        config = MonitorConfig(history_on_medium_change=True)
        monitor = ConnectivityMonitor(source, config, clock=clock, wall_clock=wall_clock)

        for _ in range(3):
            monitor.poll_status()

        assert [s.medium for s in monitor.get_history()] == [Medium.CELLULAR, Medium.WIFI]

    def test_history_capacity_from_config(self, clock, wall_clock):
        readings = [Reading(Medium.WIFI if i % 2 == 0 else Medium.NONE, raw=-60) for i in range(10)]
        config = MonitorConfig(history_capacity=4)
        monitor = ConnectivityMonitor(ScriptedSource(readings), config, clock=clock, wall_clock=wall_clock)

        for _ in range(10):
            monitor.poll_status()

        assert len(monitor.get_history()) == 4

    def test_captured_at_never_decreases(self, clock):
        times = iter(
            [
                datetime(2024, 5, 1, 12, 0, 0),  # placeholder sample
                datetime(2024, 5, 1, 12, 0, 10),
                datetime(2024, 5, 1, 11, 59, 0),  # wall clock stepped back
                datetime(2024, 5, 1, 12, 0, 20),
            ]
        )
        source = scripted(Reading(Medium.WIFI, raw=-60))
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=lambda: next(times))

        stamps = []
        for _ in range(3):
            monitor.poll_status()
            stamps.append(monitor.current_sample.captured_at)

        assert stamps == sorted(stamps)
        assert stamps[1] == datetime(2024, 5, 1, 12, 0, 10)


class TestFailureAbsorption:
    """Platform failures never surface from the monitor."""

    def test_medium_query_failure_keeps_previous_medium(self, clock, wall_clock):
        source = scripted(
            Reading(Medium.WIFI, raw=-60),
            Reading(PlatformQueryError("nmcli timed out"), raw=-60),
        )
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)

        monitor.poll_status()
        monitor.poll_status()

        assert monitor.current_sample.medium is Medium.WIFI
        assert monitor.current_sample.connected is True
        assert len(monitor.get_history()) == 1

    def test_first_medium_query_failure_reads_as_disconnected(self, clock, wall_clock):
        source = scripted(Reading(PermissionError("denied")))
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)

        monitor.poll_status()

        assert monitor.current_sample.medium is Medium.NONE

    def test_indicator_and_detail_failures_use_fallbacks(self, clock, wall_clock):
        source = scripted(
            Reading(
                Medium.WIFI,
                raw=PlatformQueryError("no permission"),
                address=OSError("no route"),
                provider=RuntimeError("api missing"),
            )
        )
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)

        monitor.poll_status()
        sample = monitor.current_sample

        assert sample.signal_quality == 75
        assert sample.address is None
        assert sample.provider is None

    def test_disconnected_sample_skips_detail_queries(self, clock, wall_clock):
        calls = []

        class CountingSource(ScriptedSource):
            def address(self):
                calls.append("address")
                return super().address()

        source = CountingSource([Reading(Medium.NONE, address="10.0.0.1")])
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)

        monitor.poll_status()

        assert calls == []
        assert monitor.current_sample.address is None


class TestMetricsAndSession:
    """Test metrics refresh and session reset."""

    def test_metrics_follow_current_sample(self, clock, wall_clock):
        monitor = ConnectivityMonitor(
            scripted(Reading(Medium.ETHERNET)),
            clock=clock,
            wall_clock=wall_clock,
            engine=MetricsEngine(seed=5),
        )

        monitor.poll_status()
        clock.advance(185)
        monitor.refresh_metrics()
        metrics = monitor.current_metrics

        assert metrics.packet_loss_percent == 0
        assert 10 <= metrics.latency_ms < 30
        assert metrics.uptime_minutes == 3

    def test_uptime_non_decreasing(self, clock, wall_clock):
        monitor = ConnectivityMonitor(scripted(Reading(Medium.ETHERNET)), clock=clock, wall_clock=wall_clock)

        uptimes = []
        for _ in range(6):
            clock.advance(45)
            monitor.refresh_metrics()
            uptimes.append(monitor.current_metrics.uptime_minutes)

        assert uptimes == sorted(uptimes)
        assert uptimes[-1] == 4

    def test_reset_session_zeroes_uptime_and_keeps_history(self, clock, wall_clock):
        source = scripted(Reading(Medium.WIFI, raw=-60), Reading(Medium.NONE))
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)
        monitor.poll_status()
        monitor.poll_status()
        clock.advance(600)
        monitor.refresh_metrics()
        assert monitor.current_metrics.uptime_minutes == 10
        history = monitor.get_history()

        monitor.reset_session()
        monitor.refresh_metrics()

        assert monitor.current_metrics.uptime_minutes == 0
        assert monitor.session_start == clock.now
        assert monitor.get_history() == history


class TestSignals:
    """Test change-notification signals."""

    def test_signals_emitted(self, clock, wall_clock):
        source = scripted(Reading(Medium.WIFI, raw=-60), Reading(Medium.WIFI, raw=-70))
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)
        samples, metrics, transitions = [], [], []
        monitor.sample_changed.connect(samples.append)
        monitor.metrics_changed.connect(metrics.append)
        monitor.transition.connect(transitions.append)

        monitor.poll_status()
        monitor.poll_status()
        monitor.refresh_metrics()

        assert len(samples) == 2
        assert all(isinstance(s, ConnectionSample) for s in samples)
        assert len(transitions) == 1
        assert transitions[0] == samples[0]
        assert metrics == [monitor.current_metrics]


class TestLifecycle:
    """Test start/stop with real timers."""

    @pytest.fixture
    def fast_config(self):
        return MonitorConfig(status_interval_ms=20, metrics_interval_ms=10)

    def test_start_polls_immediately(self, qapp, fast_config):
        monitor = ConnectivityMonitor(scripted(Reading(Medium.WIFI, raw=-75)), fast_config)

        monitor.start()
        try:
            assert monitor.is_monitoring
            assert monitor.current_sample.signal_quality == 50
            assert len(monitor.get_history()) == 1
        finally:
            monitor.stop()

    def test_tasks_tick_independently(self, qapp, fast_config):
        source = FakeSource(seed=3)
        monitor = ConnectivityMonitor(source, fast_config)

        monitor.start()
        QTest.qWait(200)
        monitor.stop()

        stats = monitor.get_stats()
        assert stats["status_ticks"] >= 2
        assert stats["metrics_ticks"] >= 2
        assert stats["metrics_ticks"] > stats["status_ticks"]
        assert stats["history"] <= 15

    def test_stop_freezes_values(self, qapp, fast_config):
        monitor = ConnectivityMonitor(FakeSource(seed=9), fast_config)
        monitor.start()
        QTest.qWait(100)

        monitor.stop()
        sample = monitor.get_current_sample()
        metrics = monitor.get_current_metrics()
        stats = monitor.get_stats()
        QTest.qWait(150)

        assert not monitor.is_monitoring
        assert monitor.get_current_sample() is sample
        assert monitor.get_current_metrics() is metrics
        assert monitor.get_stats() == stats

    def test_stop_is_idempotent(self, qapp, fast_config):
        monitor = ConnectivityMonitor(FakeSource(seed=1), fast_config)

        monitor.stop()
        monitor.start()
        monitor.stop()
        monitor.stop()

        assert not monitor.is_monitoring

    def test_start_is_idempotent(self, qapp, fast_config):
        source = scripted(Reading(Medium.WIFI, raw=-60))
        monitor = ConnectivityMonitor(source, fast_config)

        monitor.start()
        monitor.start()
        monitor.stop()

        assert source.medium_queries == 1

    def test_restart_after_stop(self, qapp, fast_config):
        monitor = ConnectivityMonitor(FakeSource(seed=2), fast_config)

        monitor.start()
        monitor.stop()
        ticks = monitor.get_stats()["status_ticks"]
        monitor.start()
        QTest.qWait(100)
        monitor.stop()

        assert monitor.get_stats()["status_ticks"] > ticks

    def test_independent_instances(self, clock, wall_clock):
        first = ConnectivityMonitor(scripted(Reading(Medium.WIFI, raw=-60)), clock=clock, wall_clock=wall_clock)
        second = ConnectivityMonitor(scripted(Reading(Medium.NONE)), clock=clock, wall_clock=wall_clock)

        first.poll_status()

        assert len(first.get_history()) == 1
        assert second.get_history() == ()
        assert second.last_connected is None


class GatedSource(ScriptedSource):
    """Scripted source whose medium query blocks until the gate opens."""

    def __init__(self, readings):
        super().__init__(readings)
        self.gate = threading.Event()
        self.gate.set()

    def current_medium(self):
        assert self.gate.wait(2.0)
        return super().current_medium()


class TestBackgroundReads:
    """Status ticks read the platform off the Qt thread."""

    @pytest.fixture
    def slow_config(self):
        return MonitorConfig(status_interval_ms=5000, metrics_interval_ms=5000)

    def test_request_poll_does_not_block(self, slow_config, wait_until):
        source = GatedSource([Reading(Medium.WIFI, raw=-60)])
        source.gate.clear()
        monitor = ConnectivityMonitor(source, slow_config)

        assert monitor.request_poll() is True
        assert monitor.is_reading
        assert monitor.request_poll() is False  # one read at a time
        assert monitor.current_sample.connected is False

        source.gate.set()
        assert wait_until(lambda: not monitor.is_reading)
        assert monitor.current_sample.medium is Medium.WIFI
        assert len(monitor.get_history()) == 1
        assert source.medium_queries == 1

    def test_read_after_stop_is_dropped(self, slow_config, wait_until):
        source = GatedSource([Reading(Medium.WIFI, raw=-60), Reading(Medium.NONE)])
        monitor = ConnectivityMonitor(source, slow_config)
        monitor.start()
        sample = monitor.current_sample

        source.gate.clear()
        monitor.request_poll()
        monitor.stop()
        source.gate.set()
        assert wait_until(lambda: not monitor.is_reading)
        QTest.qWait(20)

        assert source.medium_queries == 2
        assert monitor.current_sample is sample
        assert len(monitor.get_history()) == 1

    def test_network_change_reads_immediately(self, slow_config, wait_until):
        source = scripted(Reading(Medium.WIFI, raw=-60), Reading(Medium.NONE))
        monitor = ConnectivityMonitor(source, slow_config)
        monitor.start()
        try:
            monitor.on_network_changed()
            assert wait_until(lambda: not monitor.current_sample.connected)
        finally:
            monitor.stop()

        assert [s.connected for s in monitor.get_history()] == [False, True]

    def test_network_change_ignored_when_stopped(self, slow_config):
        source = scripted(Reading(Medium.WIFI, raw=-60))
        monitor = ConnectivityMonitor(source, slow_config)

        monitor.on_network_changed()

        assert not monitor.is_reading
        assert source.medium_queries == 0


class TestClearHistory:
    """Test clearing recorded transitions."""

    def test_clear_history_keeps_baseline(self, clock, wall_clock):
        source = scripted(Reading(Medium.WIFI, raw=-60), Reading(Medium.NONE))
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)
        monitor.poll_status()
        monitor.poll_status()

        monitor.clear_history()
        monitor.poll_status()

        assert monitor.get_history() == ()
        assert monitor.last_connected is False
        assert monitor.current_sample.connected is False

    def test_transition_after_clear_is_recorded(self, clock, wall_clock):
        source = scripted(Reading(Medium.WIFI, raw=-60), Reading(Medium.NONE), Reading(Medium.ETHERNET))
        monitor = ConnectivityMonitor(source, clock=clock, wall_clock=wall_clock)
        monitor.poll_status()
        monitor.poll_status()
        monitor.clear_history()

        monitor.poll_status()

        assert [s.medium for s in monitor.get_history()] == [Medium.ETHERNET]


def test_wall_clock_fixture_steps(wall_clock):
    """Sanity check for the scripted wall clock used above."""
    first = wall_clock()
    assert wall_clock() - first == timedelta(seconds=1)
