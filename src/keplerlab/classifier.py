"""
Orbit classification: OrbitalState -> OrbitalElements + OrbitType.

Everything here is a pure function of the current state. Specific energy and
angular momentum are computed once and every other quantity is derived from
them, so two calls on the same state give identical results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .config import config
from .kepler import true_to_mean
from .state import OrbitalState
from .utils import TWO_PI, cross_2d, heading, wrap_angle, wrap_between


# define an enumerated list of orbit types
class OrbitType(Enum):
    STABLE_ORBIT = 'stable'     # bound, 0 <= e < 1
    ESCAPE_ORBIT = 'escape'     # parabolic or hyperbolic, e >= 1
    CRASH_ORBIT = 'crash'       # periapsis at or inside the collision radius


@dataclass(frozen=True)
class OrbitalElements:
    """
    Snapshot of the orbit's geometry at one instant.

    Quantities that only exist for bound orbits (a, b, c, period, apoapsis,
    mean_anomaly) are None otherwise. Angles are in radians.

    Attributes
    ----------
    a : float or None
        Semi-major axis, -mu/(2*energy)
    e : float
        Eccentricity, >= 0; snapped to 0 below config.SNAP_TO_CIRCULAR
    b : float or None
        Semi-minor axis, a*sqrt(1 - e^2)
    period : float or None
        Orbital period, 2*pi*sqrt(a^3/mu)
    c : float or None
        Distance from the ellipse center to either focus, a*e
    argument_of_periapsis : float
        Direction of periapsis from +x, in [0, 2*pi); 0 for circles
    true_anomaly : float
        Angle from periapsis to the body, measured in the direction of
        motion. In [0, 2*pi) for bound orbits, [-pi, pi) otherwise.
    mean_anomaly : float or None
        Uniformly advancing angle, in [0, 2*pi)
    periapsis : float
        Closest approach distance, L^2/(mu*(1 + e))
    apoapsis : float or None
        Farthest distance, a*(1 + e)
    energy : float
        Specific orbital energy, v^2/2 - mu/|r|
    angular_momentum : float
        Specific angular momentum, x*vy - y*vx (positive counterclockwise)
    retrograde : bool
        True for clockwise motion
    """
    a: Optional[float]
    e: float
    b: Optional[float]
    period: Optional[float]
    c: Optional[float]
    argument_of_periapsis: float
    true_anomaly: float
    mean_anomaly: Optional[float]
    periapsis: float
    apoapsis: Optional[float]
    energy: float
    angular_momentum: float
    retrograde: bool

    @property
    def is_bound(self) -> bool:
        return self.energy < 0.0

    @property
    def area(self) -> Optional[float]:
        """Area of the ellipse, pi*a*b, or None if the orbit is not bound."""
        if self.a is None:
            return None
        return float(np.pi * self.a * self.b)

    @property
    def areal_velocity(self) -> float:
        """Constant rate at which area is swept, |L|/2."""
        return 0.5 * abs(self.angular_momentum)


@dataclass(frozen=True)
class OrbitalData:
    """
    Extended metrics for the "more orbital data" display.

    Directions are angles from +x in (-pi, pi]. Values tied to the ellipse
    (distance to the empty focus) are None for unbound orbits.
    """
    position_magnitude: float
    position_direction: float
    velocity_magnitude: float
    velocity_direction: float
    radial_velocity: float
    tangential_velocity: float
    distance_to_focus: float
    distance_to_empty_focus: Optional[float]
    escape_speed: float
    escape_radius: float
    gravity: float


# ========== CLASSIFICATION ==========
def classify(state: OrbitalState) -> Tuple[OrbitalElements, OrbitType]:
    """
    Derive orbital elements and orbit type from the current state.

    Parameters
    ----------
    state : OrbitalState
        Initialized state

    Returns
    -------
    elements : OrbitalElements
    orbit_type : OrbitType

    Notes
    -----
    Zero energy (parabolic) counts as ESCAPE_ORBIT. Zero angular momentum is
    a radial orbit through the central body and counts as CRASH_ORBIT, as
    does any orbit whose periapsis lies at or inside the effective collision
    radius (see OrbitalState.effective_collision_radius) and that still has
    periapsis ahead of it.
    """
    r = state.position
    v = state.velocity
    mu = state.mu
    R = state.effective_collision_radius

    r_mag = float(np.linalg.norm(r))
    v_sq = float(np.dot(v, v))
    r_dot_v = float(np.dot(r, v))

    energy = 0.5 * v_sq - mu / r_mag
    L = cross_2d(r, v)
    radial = abs(L) <= config.SNAP_TO_ZERO_THRESHOLD
    bound = energy < 0.0

    e = float(np.sqrt(max(0.0, 1.0 + 2.0 * energy * L * L / (mu * mu))))

    # eccentricity vector points at periapsis for either sense of rotation
    e_vec = ((v_sq - mu / r_mag) * r - r_dot_v * v) / mu
    if e < config.SNAP_TO_CIRCULAR:
        e = 0.0
        omega = 0.0
    else:
        omega = wrap_angle(heading(e_vec))

    direction = -1.0 if L < 0.0 else 1.0
    if bound:
        true_anomaly = wrap_angle(direction * (heading(r) - omega))
    else:
        true_anomaly = wrap_between(direction * (heading(r) - omega), -np.pi, np.pi)

    periapsis = L * L / (mu * (1.0 + e))

    if bound:
        a = -mu / (2.0 * energy)
        b = a * np.sqrt(max(0.0, 1.0 - e * e))
        c = a * e
        period = TWO_PI * np.sqrt(a ** 3 / mu)
        apoapsis = a * (1.0 + e)
        mean_anomaly = true_to_mean(true_anomaly, e) if e < 1.0 else None
        a, b, c, period, apoapsis = (float(a), float(b), float(c),
                                     float(period), float(apoapsis))
    else:
        a = b = c = period = apoapsis = mean_anomaly = None

    elements = OrbitalElements(
        a=a, e=e, b=b, period=period, c=c,
        argument_of_periapsis=omega,
        true_anomaly=true_anomaly,
        mean_anomaly=mean_anomaly,
        periapsis=float(periapsis),
        apoapsis=apoapsis,
        energy=float(energy),
        angular_momentum=float(L),
        retrograde=L < 0.0,
    )

    # periapsis still ahead: always for an ellipse, only inbound for escape
    periapsis_ahead = bound or r_dot_v < 0.0
    if state.crashed or radial or (periapsis <= R and periapsis_ahead):
        orbit_type = OrbitType.CRASH_ORBIT
    elif bound:
        orbit_type = OrbitType.STABLE_ORBIT
    else:
        orbit_type = OrbitType.ESCAPE_ORBIT

    return elements, orbit_type


def orbital_data(state: OrbitalState,
                 elements: Optional[OrbitalElements] = None) -> OrbitalData:
    """
    Position and velocity decomposition plus escape and gravity metrics.

    Parameters
    ----------
    state : OrbitalState
        Initialized state
    elements : OrbitalElements, optional
        Elements for the same state; computed if omitted

    Returns
    -------
    OrbitalData
    """
    if elements is None:
        elements, _ = classify(state)

    r = state.position
    v = state.velocity
    mu = state.mu
    r_mag = float(np.linalg.norm(r))
    v_mag = float(np.linalg.norm(v))

    empty_focus = None
    if elements.a is not None:
        empty_focus = 2.0 * elements.a - r_mag

    # radius at which the current speed would be exactly escape speed
    escape_radius = 2.0 * mu / (v_mag * v_mag) if v_mag > 0.0 else float("inf")

    return OrbitalData(
        position_magnitude=r_mag,
        position_direction=heading(r),
        velocity_magnitude=v_mag,
        velocity_direction=heading(v),
        radial_velocity=float(np.dot(r, v)) / r_mag,
        tangential_velocity=elements.angular_momentum / r_mag,
        distance_to_focus=r_mag,
        distance_to_empty_focus=empty_focus,
        escape_speed=float(np.sqrt(2.0 * mu / r_mag)),
        escape_radius=escape_radius,
        gravity=mu / (r_mag * r_mag),
    )


class OrbitClassifier:
    """
    Read-only view that classifies one OrbitalState.

    Parameters
    ----------
    state : OrbitalState
        State to observe; never modified
    """

    def __init__(self, state: OrbitalState):
        self._state = state

    def classify(self) -> Tuple[OrbitalElements, OrbitType]:
        return classify(self._state)

    def orbital_data(self, elements: Optional[OrbitalElements] = None) -> OrbitalData:
        return orbital_data(self._state, elements)

    @property
    def state(self) -> OrbitalState:
        return self._state

    def __repr__(self):
        return f"OrbitClassifier({self._state!r})"

