"""
Period divisions for the second law.

One orbital period is split into N contiguous time intervals. The area swept
during each integrator step is credited to the interval the body is in; a
step that crosses a boundary is split between the two intervals in
proportion to time, which is exact because the areal velocity |L|/2 is
constant along a Keplerian orbit.
"""

import logging
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import numpy as np
import pandas as pd

from .classifier import OrbitalElements, OrbitType
from .config import config
from .errors import InvalidArgumentError
from .kepler import mean_to_true, orbit_radius, time_between
from .utils import TWO_PI, polar

logger = logging.getLogger(__name__)


# define an enumerated list of division layouts
class DivisionMode(Enum):
    EQUAL_TIME = 'time'     # k*T/n, equal areas (second law)
    EQUAL_ANGLE = 'angle'   # equal true-anomaly sectors, unequal areas


@dataclass(frozen=True)
class Division:
    """
    One interval of the divided period.

    Attributes
    ----------
    index : int
        Position in the sequence, 0 is the interval starting at the reset
    start, end : float
        Interval bounds as time offsets within a lap
    area : float
        Area accumulated since the body last entered this interval
    last_crossing : float or None
        Simulated time at which the body last entered this interval, None if
        it has not entered since the reset
    """
    index: int
    start: float
    end: float
    area: float
    last_crossing: Optional[float]

    @property
    def duration(self) -> float:
        return self.end - self.start


class DivisionPlanner:
    """
    Accumulates swept area per period division.

    Parameters
    ----------
    count : int, optional
        Number of divisions, defaults to config.DEFAULT_DIVISIONS
    mode : DivisionMode or str, optional
        'time' (default) or 'angle'

    Notes
    -----
    Markers are only defined for bound orbits. For escape or crash orbits the
    planner holds N empty accumulators, ``marker_times()`` returns None and
    ``on_step`` does nothing.

    Entering an interval on a later lap restarts its accumulator at zero. The
    discarded value moves to ``completed_area`` so that
    ``completed_area + sum(division_areas()) == total_area`` always holds.
    """

    # ========== CONSTRUCTION ==========
    def __init__(self, count: Optional[int] = None, mode="time"):
        self._count = self._validate_count(config.DEFAULT_DIVISIONS if count is None
                                           else count)
        self._mode = self._parse_mode(mode)
        self._elements: Optional[OrbitalElements] = None
        self._orbit_type: Optional[OrbitType] = None
        self._reset_time = 0.0
        self.reset()

    def reset(self, elements: Optional[OrbitalElements] = None,
              time: Optional[float] = None,
              orbit_type: Optional[OrbitType] = None):
        """
        Clear all accumulators and recompute marker times.

        Parameters
        ----------
        elements : OrbitalElements, optional
            Elements at the reset instant. If omitted, the elements of the
            previous reset are reused.
        time : float, optional
            Simulated time of the reset instant; marker times are relative
            to it. Defaults to the previous reset time.
        orbit_type : OrbitType, optional
            Type at the reset instant. Markers are only defined when it is
            STABLE_ORBIT (or omitted) and the elements have a period.
        """
        if elements is not None:
            self._elements = elements
        if orbit_type is not None:
            self._orbit_type = orbit_type
        if time is not None:
            self._reset_time = float(time)
        self._elapsed = 0.0
        self._active = 0
        self._laps = 0
        self._areas = np.zeros(self._count)
        self._crossings: List[Optional[float]] = [None] * self._count
        self._completed = 0.0
        self._total = 0.0

        self._period = None
        self._bounds = None
        el = self._elements
        stable = self._orbit_type in (None, OrbitType.STABLE_ORBIT)
        if el is not None and el.period is not None and stable:
            self._period = el.period
            self._bounds = self._compute_bounds(el)
            self._crossings[0] = self._reset_time
        logger.debug("Division planner reset: n=%d mode=%s period=%s",
                     self._count, self._mode.value, self._period)

    def _compute_bounds(self, el: OrbitalElements) -> np.ndarray:
        """Lap-relative start times of each interval plus the period."""
        n = self._count
        T = el.period
        if self._mode == DivisionMode.EQUAL_TIME:
            bounds = np.arange(n + 1) * (T / n)
        else:
            step = TWO_PI / n
            bounds = np.empty(n + 1)
            bounds[0] = 0.0
            for k in range(1, n):
                bounds[k] = time_between(el.true_anomaly,
                                         el.true_anomaly + k * step, el.e, T)
        bounds[n] = T
        return bounds

    # ========== COMMANDS ==========
    def set_division_count(self, n: int, elements: Optional[OrbitalElements] = None,
                           time: Optional[float] = None,
                           orbit_type: Optional[OrbitType] = None):
        """
        Change the number of divisions and recreate them.

        Remaining arguments are passed to ``reset``.

        Raises
        ------
        InvalidArgumentError
            If n is not an integer in [MIN_DIVISIONS, MAX_DIVISIONS]. The
            planner is left unchanged.
        """
        n = self._validate_count(n)
        self._count = n
        self.reset(elements, time, orbit_type)

    def set_mode(self, mode, elements: Optional[OrbitalElements] = None,
                 time: Optional[float] = None,
                 orbit_type: Optional[OrbitType] = None):
        """Switch between equal-time and equal-angle divisions and recreate them."""
        mode = self._parse_mode(mode)
        self._mode = mode
        self.reset(elements, time, orbit_type)

    def on_step(self, dt: float, swept_area: float, orbit_type: OrbitType):
        """
        Credit the area swept during one integrator step.

        Parameters
        ----------
        dt : float
            Simulated time the step covered, >= 0
        swept_area : float
            Area swept during the step
        orbit_type : OrbitType
            Type after the step; anything but STABLE_ORBIT makes this a no-op
        """
        if orbit_type != OrbitType.STABLE_ORBIT or self._period is None:
            return
        if dt <= 0.0:
            return

        T = self._period
        t = self._elapsed
        t_end = t + dt
        tol = config.BOUNDARY_RTOL * T
        rate = swept_area / dt
        remaining = swept_area

        # boundaries that land within tol of the step end wait for the next step
        boundary = self._next_boundary()
        while boundary < t_end - tol:
            part = rate * max(0.0, boundary - t)
            self._areas[self._active] += part
            remaining -= part
            t = boundary
            self._enter_next(boundary)
            boundary = self._next_boundary()

        self._areas[self._active] += remaining
        self._elapsed = t_end
        self._total += swept_area

    def _next_boundary(self) -> float:
        """Elapsed time at which the active interval ends."""
        return self._laps * self._period + self._bounds[self._active + 1]

    def _enter_next(self, boundary: float):
        self._active += 1
        if self._active == self._count:
            self._active = 0
            self._laps += 1
            logger.debug("Division lap %d complete", self._laps)
        # revisit on a later lap starts from zero
        self._completed += self._areas[self._active]
        self._areas[self._active] = 0.0
        self._crossings[self._active] = self._reset_time + boundary

    # ========== QUERIES ==========
    def division_areas(self) -> np.ndarray:
        """Accumulated area per interval, length = count [read-only]"""
        out = self._areas.copy()
        out.flags.writeable = False
        return out

    def divisions(self) -> List[Division]:
        """Snapshot of every interval. Empty if markers are undefined."""
        if self._bounds is None:
            return []
        return [
            Division(index=k,
                     start=float(self._bounds[k]),
                     end=float(self._bounds[k + 1]),
                     area=float(self._areas[k]),
                     last_crossing=self._crossings[k])
            for k in range(self._count)
        ]

    def marker_times(self) -> Optional[np.ndarray]:
        """Start time of each interval relative to the reset, or None if undefined."""
        if self._bounds is None:
            return None
        out = self._bounds[:-1].copy()
        out.flags.writeable = False
        return out

    def marker_positions(self) -> Optional[np.ndarray]:
        """
        Positions on the orbit where each interval starts.

        Returns
        -------
        np.ndarray or None
            Array of shape (count, 2), None if markers are undefined
        """
        if self._bounds is None:
            return None
        el = self._elements
        direction = -1.0 if el.retrograde else 1.0
        points = np.empty((self._count, 2))
        for k, t_k in enumerate(self._bounds[:-1]):
            nu = mean_to_true(el.mean_anomaly + TWO_PI * t_k / el.period, el.e)
            r = orbit_radius(el.a, el.e, nu)
            points[k] = polar(r, el.argument_of_periapsis + direction * nu)
        return points

    def to_dataframe(self) -> pd.DataFrame:
        """
        Division table as a DataFrame.

        Columns are index, start, end, area, last_crossing and active. Empty
        when markers are undefined.
        """
        columns = ["index", "start", "end", "area", "last_crossing", "active"]
        rows = [
            {
                "index": d.index,
                "start": d.start,
                "end": d.end,
                "area": d.area,
                "last_crossing": d.last_crossing,
                "active": d.index == self._active,
            }
            for d in self.divisions()
        ]
        return pd.DataFrame(rows, columns=columns).set_index("index")

    # ========== PROPERTY ACCESS ==========
    @property
    def count(self) -> int:
        return self._count

    @property
    def mode(self) -> DivisionMode:
        return self._mode

    @property
    def period(self) -> Optional[float]:
        return self._period

    @property
    def is_defined(self) -> bool:
        """True if the orbit at the last reset was bound"""
        return self._bounds is not None

    @property
    def active_index(self) -> int:
        return self._active

    @property
    def laps(self) -> int:
        """Number of full periods completed since the reset"""
        return self._laps

    @property
    def elapsed(self) -> float:
        """Simulated time credited since the reset"""
        return self._elapsed

    @property
    def total_area(self) -> float:
        """Area credited since the reset"""
        return self._total

    @property
    def completed_area(self) -> float:
        """Area from intervals restarted on a later lap"""
        return self._completed

    def __repr__(self):
        return (f"DivisionPlanner(count={self._count}, mode='{self._mode.value}', "
                f"defined={self.is_defined}, active={self._active}, laps={self._laps})")

    # ========== STATIC METHODS ==========
    @staticmethod
    def _validate_count(n):
        if isinstance(n, bool) or not isinstance(n, numbers.Integral):
            raise InvalidArgumentError(
                f"Division count must be an integer, got {n!r}")
        if not (config.MIN_DIVISIONS <= n <= config.MAX_DIVISIONS):
            raise InvalidArgumentError(
                f"Division count must be in [{config.MIN_DIVISIONS}, "
                f"{config.MAX_DIVISIONS}], got {n}")
        return int(n)

    @staticmethod
    def _parse_mode(mode):
        """Convert string or enum to DivisionMode enum"""
        if isinstance(mode, DivisionMode):
            return mode
        elif isinstance(mode, str):
            type_map = {
                'time': DivisionMode.EQUAL_TIME,
                'equal_time': DivisionMode.EQUAL_TIME,
                'angle': DivisionMode.EQUAL_ANGLE,
                'equal_angle': DivisionMode.EQUAL_ANGLE,
            }
            if mode.lower() in type_map:
                return type_map[mode.lower()]
            raise InvalidArgumentError(f"Unknown division mode '{mode}'. "
                                       f"Use: {list(type_map.keys())}")
        else:
            raise InvalidArgumentError(f"mode must be DivisionMode or str, got {type(mode)}")
