"""
Test suite for the period timer.
"""

import pytest
from keplerlab import PeriodTracker, TrackingState, temp_config


class TestPeriodTracker:
    """Test PeriodTracker state transitions."""

    def test_starts_idle(self):
        tracker = PeriodTracker()
        assert tracker.state == TrackingState.IDLE
        assert tracker.measured_time == 0.0
        assert tracker.started_at is None

    def test_idle_ignores_steps(self):
        tracker = PeriodTracker()
        tracker.advance(1.0, period=10.0)
        assert tracker.measured_time == 0.0

    def test_running_accumulates(self):
        tracker = PeriodTracker()
        tracker.start(time=5.0, period=10.0)
        tracker.advance(1.5, period=10.0)
        tracker.advance(2.0, period=10.0)

        assert tracker.is_running
        assert tracker.started_at == 5.0
        assert tracker.measured_time == pytest.approx(3.5)

    def test_completes_after_one_period(self):
        """Measured time is clamped to the period on completion."""
        tracker = PeriodTracker()
        tracker.start(period=10.0)
        for _ in range(11):
            tracker.advance(1.0, period=10.0)

        assert tracker.state == TrackingState.COMPLETE
        assert tracker.measured_time == 10.0

    def test_unbound_never_completes(self):
        tracker = PeriodTracker()
        tracker.start()
        tracker.advance(1e6, period=None)

        assert tracker.is_running
        assert not tracker.after_period_threshold

    def test_threshold(self):
        """after_period_threshold flips past 80% of the period by default."""
        tracker = PeriodTracker()
        tracker.start(period=10.0)
        tracker.advance(7.0, period=10.0)
        assert not tracker.after_period_threshold

        tracker.advance(1.5, period=10.0)
        assert tracker.after_period_threshold

    def test_threshold_configurable(self):
        tracker = PeriodTracker()
        tracker.start(period=10.0)
        tracker.advance(3.0, period=10.0)
        with temp_config(PERIOD_THRESHOLD_FRACTION=0.25):
            assert tracker.after_period_threshold

    def test_stop_keeps_reading(self):
        tracker = PeriodTracker()
        tracker.start(period=10.0)
        tracker.advance(4.0, period=10.0)
        tracker.stop()
        tracker.advance(4.0, period=10.0)

        assert tracker.state == TrackingState.IDLE
        assert tracker.measured_time == pytest.approx(4.0)

    def test_restart_clears_reading(self):
        tracker = PeriodTracker()
        tracker.start(period=10.0)
        tracker.advance(4.0, period=10.0)
        tracker.start(time=4.0, period=10.0)

        assert tracker.measured_time == 0.0

    def test_reset(self):
        tracker = PeriodTracker()
        tracker.start(period=10.0)
        tracker.advance(4.0, period=10.0)
        tracker.reset()

        assert tracker.state == TrackingState.IDLE
        assert tracker.measured_time == 0.0
        assert tracker.started_at is None
