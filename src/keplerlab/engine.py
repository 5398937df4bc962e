"""
OrbitEngine: the command/query surface for the presentation layer.

One engine owns one OrbitalState and the components that read it. Every
command either completes or raises without changing anything; observers are
called only after a command has finished updating all derived data.
"""

import logging
import numbers
from enum import Enum
from typing import Callable, List, Optional

import numpy as np

from .classifier import OrbitalData, OrbitalElements, OrbitClassifier, OrbitType
from .config import config
from .defaults import circular_velocity
from .divisions import Division, DivisionPlanner
from .errors import InvalidArgumentError, InvalidStateError
from .integrator import Integrator, StepResult
from .kepler import orbit_radius
from .state import OrbitalState, StateVector
from .tracker import PeriodTracker
from .utils import cross_2d

logger = logging.getLogger(__name__)

# exponents offered for the Law 3 relation T^q vs a^p
THIRD_LAW_POWERS = (1, 2, 3)


# define an enumerated list of law views
class LawMode(Enum):
    FIRST_LAW = 'first'     # orbit shape
    SECOND_LAW = 'second'   # equal areas
    THIRD_LAW = 'third'     # period vs semi-major axis


class OrbitEngine:
    """
    Two-body orbit simulation with derived Kepler's-law quantities.

    Parameters
    ----------
    position, velocity : array-like, optional
        Initial conditions; if given, ``initialize`` is called immediately
    mu : float, optional
        Gravitational parameter of the central body (default 1)
    collision_radius : float, optional
        Radius of the central body (default 0, no collisions)
    scheme : IntegratorType or str, optional
        'taylor' (default) or 'verlet'
    divisions : int, optional
        Number of period divisions, defaults to config.DEFAULT_DIVISIONS
    division_mode : DivisionMode or str, optional
        'time' (default) or 'angle'
    law_mode : LawMode or str, optional
        Which law the presentation layer is showing (default first)
    always_circular : bool, optional
        Replace the initial velocity with the circular one on every
        initialize and reset (default False)
    compile : bool, optional
        Compile the heyoka integrator immediately (default True)

    Examples
    --------
    >>> engine = OrbitEngine([1.0, 0.0], [0.0, 1.0], mu=1.0)
    >>> result = engine.step(np.pi)
    >>> engine.current_state().position   # ~ [-1, 0]
    """

    # ========== CONSTRUCTION ==========
    def __init__(self, position=None, velocity=None, mu: float = 1.0,
                 collision_radius: float = 0.0, scheme="taylor",
                 divisions: Optional[int] = None, division_mode="time",
                 law_mode="first", always_circular: bool = False,
                 compile: bool = True):
        self._state = OrbitalState()
        self._integrator = Integrator(self._state, scheme, compile=compile)
        self._classifier = OrbitClassifier(self._state)
        self._planner = DivisionPlanner(divisions, division_mode)
        self._tracker = PeriodTracker()
        self._law_mode = self._parse_law_mode(law_mode)
        self._always_circular = bool(always_circular)
        self._axis_power = 1
        self._period_power = 1
        self._observers: List[Callable] = []

        self._initial = None
        self._elements: Optional[OrbitalElements] = None
        self._orbit_type: Optional[OrbitType] = None
        self._generation = 0

        # display hint only, orbital_data() is always available
        self.more_orbital_data = config.MORE_ORBITAL_DATA

        if position is not None or velocity is not None:
            self.initialize(position, velocity, mu, collision_radius)

    # ========== COMMANDS ==========
    def initialize(self, position, velocity, mu: float = 1.0,
                   collision_radius: float = 0.0):
        """
        Start a new session from absolute initial conditions.

        Raises
        ------
        InvalidStateError
            Degenerate position/velocity pair
        InvalidArgumentError
            mu <= 0 or negative collision radius

        The engine is unchanged if an exception is raised. With
        ``always_circular`` the velocity is replaced by the circular one in
        the same sense of rotation.
        """
        pos, vel, mu, collision_radius = OrbitalState._validate(
            position, velocity, mu, collision_radius)
        self._state.initialize(pos, self._launch_velocity(pos, vel, mu),
                               mu, collision_radius)
        # velocity as given, so reset follows later always_circular changes
        self._initial = (pos.copy(), vel.copy(), mu, collision_radius)
        self._rebuild()
        logger.info("Initialized orbit: %s (generation %d)",
                    self._orbit_type.name, self._generation)

    def reset(self):
        """
        Return to the initial conditions of the last ``initialize``.

        Divisions, period timer and swept area are cleared and the
        generation is incremented.
        """
        self._require_initialized()
        position, velocity, mu, collision_radius = self._initial
        self._state.initialize(position, self._launch_velocity(position, velocity, mu),
                               mu, collision_radius)
        self._rebuild()
        logger.debug("Reset to generation %d", self._generation)

    def _launch_velocity(self, position, velocity, mu):
        if not self._always_circular:
            return velocity
        retrograde = cross_2d(position, velocity) < 0.0
        return circular_velocity(position, mu, retrograde=retrograde)

    def _rebuild(self):
        """Recompute every derived component from the current state."""
        elements, orbit_type = self._classifier.classify()
        self._elements = elements
        self._orbit_type = orbit_type
        self._planner.reset(elements, self._state.time, orbit_type)
        self._tracker.reset()
        self._generation = self._state.generation
        self._publish()

    def step(self, dt: float) -> StepResult:
        """
        Advance the simulation by dt.

        Parameters
        ----------
        dt : float
            Simulated time increment, finite and >= 0

        Returns
        -------
        StepResult
            Time actually advanced, area swept and whether the body collided

        Raises
        ------
        InvalidArgumentError
            If dt is negative, non-finite or not a number
        InvalidStateError
            If the engine has not been initialized
        NumericDegeneracyError
            If integration broke down; the engine is unchanged
        """
        if isinstance(dt, bool) or not isinstance(dt, numbers.Real):
            raise InvalidArgumentError(f"dt must be a real number, got {dt!r}")
        dt = float(dt)
        if not np.isfinite(dt) or dt < 0.0:
            raise InvalidArgumentError(f"dt must be finite and >= 0, got {dt}")
        self._require_initialized()

        result = self._integrator.advance(dt)
        if result.dt == 0.0:
            return result

        previous = self._orbit_type
        elements, orbit_type = self._classifier.classify()
        if orbit_type != previous:
            logger.info("Orbit type changed: %s -> %s at t=%.9g",
                        previous.name, orbit_type.name, self._state.time)
        self._elements = elements
        self._orbit_type = orbit_type

        self._planner.on_step(result.dt, result.swept_area, orbit_type)
        self._tracker.advance(result.dt, elements.period)
        logger.debug("Step dt=%g t=%.9g area=%.9g", result.dt,
                     self._state.time, result.swept_area)
        self._publish()
        return result

    def set_division_count(self, n: int):
        """
        Change the number of period divisions (2 to 6) and recreate them.

        Raises
        ------
        InvalidArgumentError
            If n is out of range; nothing changes
        """
        self._planner.set_division_count(n, *self._planner_context())
        self._publish()

    def set_division_mode(self, mode):
        """Switch between 'time' and 'angle' divisions and recreate them."""
        self._planner.set_mode(mode, *self._planner_context())
        self._publish()

    def _planner_context(self):
        if self._state.is_initialized:
            return self._elements, self._state.time, self._orbit_type
        return None, None, None

    def set_law_mode(self, mode):
        """Select the law being displayed. Has no effect on the physics."""
        self._law_mode = self._parse_law_mode(mode)
        self._publish()

    def set_always_circular(self, flag: bool):
        """
        Force circular orbits from the next ``initialize`` or ``reset`` on.

        The orbit in progress is not touched.
        """
        self._always_circular = bool(flag)
        self._publish()

    def set_axis_power(self, p: int):
        """Select the exponent p in a^p for the Law 3 relation (1, 2 or 3)."""
        self._axis_power = self._validate_power(p, "Semi-major axis")
        self._publish()

    def set_period_power(self, q: int):
        """Select the exponent q in T^q for the Law 3 relation (1, 2 or 3)."""
        self._period_power = self._validate_power(q, "Period")
        self._publish()

    def start_period_timer(self):
        """Start measuring one orbital period from the current time."""
        self._require_initialized()
        self._tracker.start(self._state.time, self._elements.period)
        self._publish()

    def stop_period_timer(self):
        self._tracker.stop()
        self._publish()

    # ========== OBSERVERS ==========
    def add_observer(self, callback: Callable[["OrbitEngine"], None]):
        """
        Register a callable invoked with the engine after every command.

        Callbacks see a fully updated engine, never one mid-step.
        """
        if not callable(callback):
            raise InvalidArgumentError(f"Observer must be callable, got {type(callback)}")
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback):
        """Unregister a callback; unknown callbacks are ignored."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _publish(self):
        for callback in list(self._observers):
            callback(self)

    # ========== QUERIES ==========
    def _require_initialized(self):
        if not self._state.is_initialized:
            raise InvalidStateError(
                "OrbitEngine has not been initialized. Call initialize() first."
            )

    def current_state(self) -> StateVector:
        """Position, velocity and simulated time."""
        self._require_initialized()
        return self._state.snapshot()

    def current_elements(self) -> OrbitalElements:
        self._require_initialized()
        return self._elements

    def current_type(self) -> OrbitType:
        self._require_initialized()
        return self._orbit_type

    def division_areas(self) -> np.ndarray:
        """Area accumulated in each period division, length = division count"""
        return self._planner.division_areas()

    def divisions(self) -> List[Division]:
        return self._planner.divisions()

    def marker_times(self) -> Optional[np.ndarray]:
        """Division start times relative to the last reset, None for unbound orbits"""
        return self._planner.marker_times()

    def marker_positions(self) -> Optional[np.ndarray]:
        return self._planner.marker_positions()

    def total_area_swept(self) -> float:
        """Area swept by the radius vector since the last initialize or reset."""
        self._require_initialized()
        return abs(self._state.swept_area)

    def orbital_data(self) -> OrbitalData:
        """Extended metrics, available whatever ``more_orbital_data`` says."""
        self._require_initialized()
        return self._classifier.orbital_data(self._elements)

    def powered_semi_major_axis(self) -> Optional[float]:
        """a^p for the selected axis power, None if the orbit is not bound"""
        self._require_initialized()
        a = self._elements.a
        return None if a is None else a ** self._axis_power

    def powered_period(self) -> Optional[float]:
        """T^q for the selected period power, None if the orbit is not bound"""
        self._require_initialized()
        T = self._elements.period
        return None if T is None else T ** self._period_power

    def third_law_ratio(self) -> Optional[float]:
        """
        T^q / a^p for the selected powers.

        With q = 2 and p = 3 this is 4*pi^2/mu for every bound orbit around
        the same central body, which is Kepler's third law.
        """
        a_p = self.powered_semi_major_axis()
        if a_p is None:
            return None
        return self.powered_period() / a_p

    def orbit_path(self, n: Optional[int] = None) -> Optional[np.ndarray]:
        """
        Sample the current ellipse.

        Parameters
        ----------
        n : int, optional
            Number of points, defaults to config.DEFAULT_PATH_POINTS

        Returns
        -------
        np.ndarray or None
            Array of shape (n, 2) evenly spaced in true anomaly starting at
            periapsis, None if the orbit is not bound
        """
        self._require_initialized()
        if n is None:
            n = config.DEFAULT_PATH_POINTS
        if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n < 2:
            raise InvalidArgumentError(f"Path needs an integer number of points >= 2, got {n!r}")
        el = self._elements
        if el.a is None:
            return None

        nu = np.linspace(0.0, 2.0 * np.pi, int(n), endpoint=False)
        direction = -1.0 if el.retrograde else 1.0
        r = orbit_radius(el.a, el.e, nu)
        angle = el.argument_of_periapsis + direction * nu
        return np.column_stack((r * np.cos(angle), r * np.sin(angle)))

    # ========== PROPERTY ACCESS ==========
    @property
    def state(self) -> OrbitalState:
        """The engine's OrbitalState (read through its properties only)"""
        return self._state

    @property
    def integrator(self) -> Integrator:
        return self._integrator

    @property
    def planner(self) -> DivisionPlanner:
        return self._planner

    @property
    def period_tracker(self) -> PeriodTracker:
        return self._tracker

    @property
    def law_mode(self) -> LawMode:
        return self._law_mode

    @property
    def always_circular(self) -> bool:
        return self._always_circular

    @property
    def axis_power(self) -> int:
        return self._axis_power

    @property
    def period_power(self) -> int:
        return self._period_power

    @property
    def generation(self) -> int:
        """Incremented by every initialize and reset"""
        return self._generation

    @property
    def division_count(self) -> int:
        return self._planner.count

    @property
    def is_initialized(self) -> bool:
        return self._state.is_initialized

    def __repr__(self):
        if not self._state.is_initialized:
            return "OrbitEngine(uninitialized)"
        return (f"OrbitEngine(type={self._orbit_type.name}, t={self._state.time:.6g}, "
                f"e={self._elements.e:.6g}, law={self._law_mode.name}, "
                f"generation={self._generation})")

    # ========== STATIC METHODS ==========
    @staticmethod
    def _validate_power(power, name):
        if (isinstance(power, bool) or not isinstance(power, numbers.Integral)
                or power not in THIRD_LAW_POWERS):
            raise InvalidArgumentError(
                f"{name} power must be one of {THIRD_LAW_POWERS}, got {power!r}")
        return int(power)

    @staticmethod
    def _parse_law_mode(mode):
        """Convert string or enum to LawMode enum"""
        if isinstance(mode, LawMode):
            return mode
        elif isinstance(mode, str):
            type_map = {
                'first': LawMode.FIRST_LAW,
                'first_law': LawMode.FIRST_LAW,
                '1': LawMode.FIRST_LAW,
                'second': LawMode.SECOND_LAW,
                'second_law': LawMode.SECOND_LAW,
                '2': LawMode.SECOND_LAW,
                'third': LawMode.THIRD_LAW,
                'third_law': LawMode.THIRD_LAW,
                '3': LawMode.THIRD_LAW,
            }
            if mode.lower() in type_map:
                return type_map[mode.lower()]
            raise InvalidArgumentError(f"Unknown law mode '{mode}'. "
                                       f"Use: {list(type_map.keys())}")
        else:
            raise InvalidArgumentError(f"mode must be LawMode or str, got {type(mode)}")
