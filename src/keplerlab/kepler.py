"""
Anomaly conversions for elliptic orbits.

Mean anomaly M grows uniformly in time, eccentric anomaly E is measured from
the ellipse center, true anomaly nu from the focus. Kepler's equation
M = E - e*sin(E) links the first two and is solved by Newton iteration.
"""

import numpy as np

from .config import config
from .errors import InvalidArgumentError, NumericDegeneracyError
from .utils import TWO_PI, wrap_angle


def _check_elliptic(e: float):
    if not (0.0 <= e < 1.0):
        raise InvalidArgumentError(
            f"Anomaly conversions require 0 <= e < 1, got e={e}"
        )


def solve_kepler(M: float, e: float) -> float:
    """
    Solve Kepler's equation M = E - e*sin(E) for the eccentric anomaly.

    Parameters
    ----------
    M : float
        Mean anomaly [rad], any value
    e : float
        Eccentricity, 0 <= e < 1

    Returns
    -------
    float
        Eccentric anomaly E in [0, 2*pi)

    Raises
    ------
    InvalidArgumentError
        If e is outside [0, 1)
    NumericDegeneracyError
        If Newton iteration does not converge in config.KEPLER_MAX_ITER steps
    """
    _check_elliptic(e)
    M = wrap_angle(M)
    if e == 0.0:
        return M

    # starting guess from Danby, robust up to e -> 1
    E = M + 0.85 * e * np.sign(np.sin(M)) if M != 0.0 else 0.0
    for _ in range(config.KEPLER_MAX_ITER):
        f = E - e * np.sin(E) - M
        f_prime = 1.0 - e * np.cos(E)
        delta = f / f_prime
        E -= delta
        if abs(delta) < config.KEPLER_TOL:
            return wrap_angle(E)

    raise NumericDegeneracyError(
        f"Kepler's equation did not converge for M={M}, e={e} "
        f"after {config.KEPLER_MAX_ITER} iterations"
    )


def eccentric_to_true(E: float, e: float) -> float:
    """Convert eccentric anomaly to true anomaly, result in [0, 2*pi)."""
    _check_elliptic(e)
    nu = np.arctan2(np.sqrt(1.0 - e * e) * np.sin(E), np.cos(E) - e)
    return wrap_angle(nu)


def true_to_eccentric(nu: float, e: float) -> float:
    """Convert true anomaly to eccentric anomaly, result in [0, 2*pi)."""
    _check_elliptic(e)
    E = np.arctan2(np.sqrt(1.0 - e * e) * np.sin(nu), e + np.cos(nu))
    return wrap_angle(E)


def mean_to_true(M: float, e: float) -> float:
    """True anomaly reached at mean anomaly M."""
    return eccentric_to_true(solve_kepler(M, e), e)


def true_to_mean(nu: float, e: float) -> float:
    """Mean anomaly at true anomaly nu, result in [0, 2*pi)."""
    E = true_to_eccentric(nu, e)
    return wrap_angle(E - e * np.sin(E))


def orbit_radius(a: float, e: float, nu: float) -> float:
    """Distance from the focus on an ellipse of axis a and eccentricity e."""
    return a * (1.0 - e * e) / (1.0 + e * np.cos(nu))


def time_between(nu_start: float, nu_end: float, e: float, period: float) -> float:
    """
    Time to travel from true anomaly nu_start to nu_end.

    Parameters
    ----------
    nu_start, nu_end : float
        True anomalies [rad]
    e : float
        Eccentricity
    period : float
        Orbital period

    Returns
    -------
    float
        Travel time in [0, period)
    """
    dM = true_to_mean(nu_end, e) - true_to_mean(nu_start, e)
    return wrap_angle(dM) / TWO_PI * period
