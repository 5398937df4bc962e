"""
Physical state of a body orbiting a fixed central mass.

OrbitalState has exactly two writers: ``initialize`` (absolute state from the
caller) and the Integrator, through ``_commit``. Everything else reads.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import config
from .errors import InvalidArgumentError, InvalidStateError
from .utils import as_vector2, readonly

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateVector:
    """
    Immutable snapshot of position and velocity at a simulated time.

    Attributes
    ----------
    position : np.ndarray
        Position (x, y) relative to the central body, read-only
    velocity : np.ndarray
        Velocity (vx, vy), read-only
    time : float
        Simulated time since the last initialize
    """
    position: np.ndarray
    velocity: np.ndarray
    time: float

    def __eq__(self, other):
        if not isinstance(other, StateVector):
            return NotImplemented
        return (np.allclose(self.position, other.position,
                            rtol=config.EQUALITY_RTOL, atol=config.EQUALITY_ATOL)
                and np.allclose(self.velocity, other.velocity,
                                rtol=config.EQUALITY_RTOL, atol=config.EQUALITY_ATOL)
                and np.isclose(self.time, other.time,
                               rtol=config.EQUALITY_RTOL, atol=config.EQUALITY_ATOL))

    __hash__ = None


class OrbitalState:
    """
    Position and velocity of the orbiting body plus the per-session constants.

    Parameters
    ----------
    position, velocity : array-like, optional
        Initial conditions. If given, ``initialize`` is called immediately.
    mu : float, optional
        Standard gravitational parameter of the central body
    collision_radius : float, optional
        Radius of the central body; reaching it is a crash

    Notes
    -----
    Arrays returned by the readers are read-only copies, so callers cannot
    mutate the state behind the integrator's back.
    """

    # ========== CONSTRUCTION ==========
    def __init__(self, position=None, velocity=None, mu: float = 1.0,
                 collision_radius: float = 0.0):
        self._position: Optional[np.ndarray] = None
        self._velocity: Optional[np.ndarray] = None
        self._mu = None
        self._collision_radius = None
        self._initial_radius = None
        self._time = 0.0
        self._area = 0.0
        self._crashed = False
        self._generation = 0

        if position is not None or velocity is not None:
            self.initialize(position, velocity, mu, collision_radius)

    def initialize(self, position, velocity, mu: float,
                   collision_radius: float = 0.0):
        """
        Set absolute state and clear all history.

        Parameters
        ----------
        position : array-like
            Position (x, y); must be finite, non-zero and outside the
            collision radius
        velocity : array-like
            Velocity (vx, vy); must be finite
        mu : float
            Standard gravitational parameter, > 0
        collision_radius : float, optional
            Central body radius, >= 0 (default 0, no collision)

        Raises
        ------
        InvalidArgumentError
            If mu or collision_radius is out of range, or a vector does not
            have two components
        InvalidStateError
            If the position/velocity pair is degenerate
        """
        # validate everything before touching stored state
        pos, vel, mu, collision_radius = self._validate(
            position, velocity, mu, collision_radius)

        self._position = readonly(pos)
        self._velocity = readonly(vel)
        self._mu = mu
        self._collision_radius = collision_radius
        self._initial_radius = float(np.linalg.norm(pos))
        self._time = 0.0
        self._area = 0.0
        self._crashed = False
        self._generation += 1
        logger.debug("Initialized state generation %d: r=%s v=%s mu=%g R=%g",
                     self._generation, pos, vel, mu, collision_radius)

    # ========== VALIDATION ==========
    @staticmethod
    def _validate(position, velocity, mu, collision_radius):
        try:
            mu = float(mu)
            collision_radius = float(collision_radius)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(
                f"mu and collision_radius must be numbers, got {mu!r}, "
                f"{collision_radius!r}") from exc
        if not np.isfinite(mu) or mu <= 0:
            raise InvalidArgumentError(
                f"Gravitational parameter must be positive, got {mu}")
        if not np.isfinite(collision_radius) or collision_radius < 0:
            raise InvalidArgumentError(
                f"Collision radius must be finite and >= 0, got {collision_radius}")

        if position is None or velocity is None:
            raise InvalidStateError("Both position and velocity are required")
        try:
            pos = as_vector2(position, "position")
            vel = as_vector2(velocity, "velocity")
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(str(exc)) from exc

        if not np.all(np.isfinite(pos)):
            raise InvalidStateError(f"Position contains NaN or Inf: {pos}")
        if not np.all(np.isfinite(vel)):
            raise InvalidStateError(f"Velocity contains NaN or Inf: {vel}")

        r = float(np.linalg.norm(pos))
        if r <= config.SNAP_TO_ZERO_THRESHOLD:
            raise InvalidStateError(
                "Zero position vector: the orbit is undefined at the central body")
        if r <= collision_radius:
            raise InvalidStateError(
                f"Position magnitude ({r:.6g}) must exceed the collision "
                f"radius ({collision_radius:.6g})")
        return pos, vel, mu, collision_radius

    # ========== INTEGRATOR ACCESS ==========
    def _commit(self, position, velocity, time: float, area: float,
                crashed: bool = False):
        """Replace the dynamic state. Only the Integrator calls this."""
        self._position = readonly(position)
        self._velocity = readonly(velocity)
        self._time = float(time)
        self._area = float(area)
        self._crashed = self._crashed or bool(crashed)

    # ========== PROPERTY ACCESS ==========
    def _require_initialized(self):
        if self._position is None:
            raise InvalidStateError("OrbitalState has not been initialized")

    @property
    def is_initialized(self) -> bool:
        return self._position is not None

    @property
    def position(self) -> np.ndarray:
        """Position (x, y) [read-only]"""
        self._require_initialized()
        return self._position

    @property
    def velocity(self) -> np.ndarray:
        """Velocity (vx, vy) [read-only]"""
        self._require_initialized()
        return self._velocity

    @property
    def mu(self) -> float:
        """Standard gravitational parameter of the central body"""
        self._require_initialized()
        return self._mu

    @property
    def collision_radius(self) -> float:
        self._require_initialized()
        return self._collision_radius

    @property
    def effective_collision_radius(self) -> float:
        """
        Radius at which integration stops with a crash.

        The central body radius, or config.COLLISION_RADIUS_FLOOR times the
        initial radius if that is larger. The floor keeps a point-mass
        central body from producing a singular step.
        """
        self._require_initialized()
        return max(self._collision_radius,
                   config.COLLISION_RADIUS_FLOOR * self._initial_radius)

    @property
    def time(self) -> float:
        """Simulated time since the last initialize"""
        return self._time

    @property
    def swept_area(self) -> float:
        """Signed area swept by the radius vector since the last initialize"""
        return self._area

    @property
    def crashed(self) -> bool:
        """True once the body has reached the collision radius"""
        return self._crashed

    @property
    def generation(self) -> int:
        """Incremented on every initialize"""
        return self._generation

    @property
    def radius(self) -> float:
        return float(np.linalg.norm(self.position))

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    def snapshot(self) -> StateVector:
        """Immutable copy of position, velocity and time."""
        self._require_initialized()
        return StateVector(self._position, self._velocity, self._time)

    # ========== SPECIAL METHODS ==========
    def __repr__(self):
        if self._position is None:
            return "OrbitalState(uninitialized)"
        return (f"OrbitalState(r={self._position.tolist()}, "
                f"v={self._velocity.tolist()}, t={self._time}, "
                f"mu={self._mu}, crashed={self._crashed})")
