"""
Period timer: measures how long the body takes to complete one orbit.
"""

import logging
from enum import Enum
from typing import Optional

from .config import config

logger = logging.getLogger(__name__)


class TrackingState(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    COMPLETE = 'complete'


class PeriodTracker:
    """
    Stopwatch in simulated time that stops itself after one period.

    The engine feeds it every step through ``advance``. While RUNNING, the
    measured time grows by dt until it reaches the period, at which point it
    is clamped to the period and the tracker becomes COMPLETE. Unbound orbits
    have no period, so the timer just keeps running.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        """Back to IDLE with zero measured time."""
        self._state = TrackingState.IDLE
        self._measured = 0.0
        self._started_at: Optional[float] = None
        self._period: Optional[float] = None

    def start(self, time: float = 0.0, period: Optional[float] = None):
        """Start measuring from simulated time ``time``."""
        self._state = TrackingState.RUNNING
        self._measured = 0.0
        self._started_at = float(time)
        self._period = period
        logger.debug("Period timer started at t=%g", self._started_at)

    def stop(self):
        """Stop measuring, keeping the measured time for display."""
        if self._state == TrackingState.RUNNING:
            logger.debug("Period timer stopped after %g", self._measured)
        self._state = TrackingState.IDLE

    def advance(self, dt: float, period: Optional[float] = None):
        """
        Add a step of simulated time.

        Parameters
        ----------
        dt : float
            Simulated time covered by the step
        period : float or None
            Current orbital period, None if undefined
        """
        self._period = period
        if self._state != TrackingState.RUNNING:
            return
        self._measured += dt
        if period is not None and self._measured >= period:
            self._measured = period
            self._state = TrackingState.COMPLETE
            logger.info("Period timer complete: measured %.9g", period)

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == TrackingState.RUNNING

    @property
    def measured_time(self) -> float:
        return self._measured

    @property
    def started_at(self) -> Optional[float]:
        """Simulated time at which the timer was last started"""
        return self._started_at

    @property
    def after_period_threshold(self) -> bool:
        """True once the measured time passes the configured fraction of the period"""
        if self._period is None:
            return False
        return self._measured > self._period * config.PERIOD_THRESHOLD_FRACTION

    def __repr__(self):
        return (f"PeriodTracker(state='{self._state.value}', "
                f"measured={self._measured:.6g})")
