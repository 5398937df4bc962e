"""
Utility functions for the Keplerlab package.
"""

import numpy as np

TWO_PI = 2.0 * np.pi


def as_vector2(value, name: str = "vector") -> np.ndarray:
    """
    Convert input to a float 2-vector.

    Parameters
    ----------
    value : array-like
        Two components (x, y)
    name : str, optional
        Name used in the error message

    Returns
    -------
    np.ndarray
        Array of shape (2,) with dtype float

    Raises
    ------
    ValueError
        If the input does not have exactly two components
    """
    arr = np.asarray(value, dtype=float).reshape(-1)
    if arr.shape != (2,):
        raise ValueError(f"{name} must have 2 components, got shape {arr.shape}")
    return arr


def readonly(arr: np.ndarray) -> np.ndarray:
    """Return a read-only copy of arr."""
    out = np.array(arr, dtype=float, copy=True)
    out.flags.writeable = False
    return out


def cross_2d(a, b) -> float:
    """Scalar (z) component of the cross product of two 2-vectors."""
    return float(a[0] * b[1] - a[1] * b[0])


def heading(vec) -> float:
    """Angle of a 2-vector measured from +x, in (-pi, pi]."""
    return float(np.arctan2(vec[1], vec[0]))


def polar(radius: float, angle: float) -> np.ndarray:
    """Build a 2-vector from polar coordinates."""
    return np.array([radius * np.cos(angle), radius * np.sin(angle)])


def wrap_between(value: float, lo: float, hi: float) -> float:
    """
    Wrap value into the half-open interval [lo, hi).

    Examples
    --------
    >>> wrap_between(370.0, 0.0, 360.0)
    10.0
    """
    span = hi - lo
    wrapped = lo + (value - lo) % span
    # float modulo can land exactly on hi
    if wrapped >= hi:
        wrapped = lo
    return float(wrapped)


def wrap_angle(angle: float) -> float:
    """Wrap an angle into [0, 2*pi)."""
    return wrap_between(angle, 0.0, TWO_PI)
