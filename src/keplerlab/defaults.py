"""
Default Bodies, Orbits and Initial Conditions
=============================================

Preset central bodies, the target orbits offered for comparison, and helpers
that turn orbit shapes into initial position/velocity pairs.

Model units follow the classroom simulation: G = 1e4 and a Sun of mass 200,
so the Sun's gravitational parameter is 2e6 and the default body starts 200
units away moving at 100 units per time unit.

Examples
--------
>>> from keplerlab import sun_engine, TargetOrbit
>>> engine = sun_engine()  # default body around the Sun
>>> r, v = TargetOrbit.MARS.initial_state(mu=1.0)
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .errors import InvalidArgumentError
from .utils import TWO_PI, as_vector2, polar, readonly


@dataclass(frozen=True)
class CentralBody:
    """
    Immutable parameters for the fixed central mass.

    Attributes
    ----------
    mu : float
        Standard gravitational parameter G*M
    radius : float
        Collision radius; 0 disables collisions
    name : str, optional
    """
    mu: float
    radius: float = 0.0
    name: Optional[str] = None

    def __post_init__(self):
        #Validate parameters
        if not np.isfinite(self.mu) or self.mu <= 0:
            raise InvalidArgumentError(f"Gravitational parameter must be positive, got {self.mu}")
        if not np.isfinite(self.radius) or self.radius < 0:
            raise InvalidArgumentError(f"Radius must be non-negative, got {self.radius}")


# Pre-defined central bodies
SUN = CentralBody(
    mu=2e6,
    radius=10.0,    # model value, well inside the default orbit at r = 200
    name='Sun'
)

UNIT_BODY = CentralBody(
    mu=1.0,
    radius=0.0,
    name='Unit'
)

# Default orbiting body, in model units around SUN
DEFAULT_POSITION = readonly([200.0, 0.0])
DEFAULT_VELOCITY = readonly([0.0, 100.0])


class TargetOrbit(Enum):
    """
    Real orbits offered for comparison, as (eccentricity, semi-major axis [AU]).
    """
    MERCURY = (0.2056, 0.4)
    VENUS = (0.0068, 0.7)
    EARTH = (0.0167, 1.0)
    MARS = (0.0934, 1.5)
    JUPITER = (0.0484, 5.2)
    ERIS = (0.44, 67.6)
    NEREID = (0.75, 30.11)
    HALLEY = (0.967, 18.5)

    def __init__(self, eccentricity, semi_major_axis):
        self.eccentricity = eccentricity
        self.semi_major_axis = semi_major_axis

    def initial_state(self, mu: float, scale: float = 1.0, retrograde: bool = False):
        """
        Position and velocity at periapsis for this orbit.

        Parameters
        ----------
        mu : float
            Gravitational parameter of the central body
        scale : float, optional
            Model length units per AU (default 1)
        retrograde : bool, optional
            Clockwise motion if True
        """
        return periapsis_state(self.semi_major_axis * scale, self.eccentricity, mu,
                               retrograde=retrograde)


# ========== INITIAL CONDITIONS ==========
def periapsis_state(a: float, e: float, mu: float, retrograde: bool = False,
                    argument_of_periapsis: float = 0.0):
    """
    Initial state at periapsis of an ellipse.

    Parameters
    ----------
    a : float
        Semi-major axis, > 0
    e : float
        Eccentricity, 0 <= e < 1
    mu : float
        Gravitational parameter, > 0
    retrograde : bool, optional
        Clockwise motion if True (default False)
    argument_of_periapsis : float, optional
        Direction of periapsis from +x [rad] (default 0)

    Returns
    -------
    position, velocity : np.ndarray
        2-vectors

    Raises
    ------
    InvalidArgumentError
        If a, e or mu is out of range
    """
    if not a > 0:
        raise InvalidArgumentError(f"Semi-major axis must be positive, got {a}")
    if not 0.0 <= e < 1.0:
        raise InvalidArgumentError(f"Eccentricity must be in [0, 1), got {e}")
    if not mu > 0:
        raise InvalidArgumentError(f"Gravitational parameter must be positive, got {mu}")

    rp = a * (1.0 - e)
    # vis-viva at periapsis
    vp = np.sqrt(mu * (1.0 + e) / rp)
    direction = -1.0 if retrograde else 1.0
    position = polar(rp, argument_of_periapsis)
    velocity = polar(vp, argument_of_periapsis + direction * np.pi / 2)
    return position, velocity


def circular_velocity(position, mu: float, retrograde: bool = False) -> np.ndarray:
    """Velocity that puts a body at ``position`` on a circular orbit."""
    r = as_vector2(position, "position")
    r_mag = float(np.linalg.norm(r))
    if r_mag == 0.0:
        raise InvalidArgumentError("Circular velocity is undefined at the origin")
    direction = -1.0 if retrograde else 1.0
    perpendicular = np.array([-r[1], r[0]]) / r_mag
    return direction * np.sqrt(mu / r_mag) * perpendicular


def escape_speed(r: float, mu: float) -> float:
    """Speed at distance r with exactly zero specific energy."""
    return float(np.sqrt(2.0 * mu / r))


def third_law_period(a: float, mu: float) -> float:
    """Kepler's third law, T = 2*pi*sqrt(a^3/mu)."""
    return float(TWO_PI * np.sqrt(a ** 3 / mu))


# ========== FACTORIES ==========
def sun_engine(scheme="taylor", compile=True):
    """
    Create an engine with the default body orbiting SUN.

    Parameters
    ----------
    scheme : IntegratorType or str, optional
        Integration scheme (default 'taylor')
    compile : bool, optional
        If True (default), compile the heyoka integrator immediately.

    Returns
    -------
    OrbitEngine
    """
    from .engine import OrbitEngine
    return OrbitEngine(DEFAULT_POSITION, DEFAULT_VELOCITY, mu=SUN.mu,
                       collision_radius=SUN.radius, scheme=scheme, compile=compile)


def unit_engine(a: float = 1.0, e: float = 0.0, scheme="taylor", compile=True):
    """
    Create an engine around UNIT_BODY starting at periapsis of (a, e).

    With the defaults this is the circular orbit of radius 1 and period 2*pi.
    """
    from .engine import OrbitEngine
    position, velocity = periapsis_state(a, e, UNIT_BODY.mu)
    return OrbitEngine(position, velocity, mu=UNIT_BODY.mu,
                       collision_radius=UNIT_BODY.radius, scheme=scheme, compile=compile)
