"""
Global Configuration for Keplerlab Package
==========================================

This module provides package-wide configuration settings that users can modify
to control numerical tolerances, integration accuracy and the defaults used by
the orbit engine.

Examples
--------
View current configuration:

>>> import keplerlab
>>> print(keplerlab.config)

Modify settings:

>>> keplerlab.config.INTEGRATION_TOL = 1e-12  # Looser Taylor tolerance
>>> keplerlab.config.DEFAULT_DIVISIONS = 6    # Six Law 2 sectors

Reset to defaults:

>>> keplerlab.config.reset()

Temporarily modify settings:

>>> with keplerlab.temp_config(SNAP_TO_CIRCULAR=1e-3):
...     # Nearly circular orbits report e = 0 inside this block
...     engine.current_elements().e

Notes
-----
These settings affect package-wide behavior. Modifying them will impact
all subsequent operations until changed again or reset. Integrators that have
already been compiled keep the tolerance they were compiled with.
"""

from dataclasses import dataclass
from contextlib import contextmanager


@dataclass
class KeplerlabConfig:
    """
    Global configuration for Keplerlab package.

    Attributes
    ----------
    EQUALITY_RTOL : float
        Relative tolerance for floating-point equality comparisons.
        Default: 1e-12
    EQUALITY_ATOL : float
        Absolute tolerance for floating-point equality comparisons.
        Default: 1e-14
    SNAP_TO_ZERO_THRESHOLD : float
        Values below this threshold are treated as exactly zero.
        Used for vanishing radius and angular momentum.
        Default: 1e-12
    SNAP_TO_CIRCULAR : float
        Eccentricity below this threshold treated as circular orbit (e=0).
        Default: 1e-8
    INTEGRATION_TOL : float
        Tolerance handed to the heyoka Taylor integrator.
        Default: 1e-15
    VERLET_STEP_FRACTION : float
        Largest velocity Verlet substep, as a fraction of the dynamical time
        sqrt(r0^3/mu) of the initial state.
        Default: 1e-3
    COLLISION_RADIUS_FLOOR : float
        Smallest effective collision radius, as a fraction of the initial
        radius. Applies when the central body radius is smaller (or zero), so
        a fall into the point mass is stopped as a crash.
        Default: 1e-6
    BOUNDARY_RTOL : float
        Division boundaries closer than this fraction of the period to the end
        of a step are deferred to the next step.
        Default: 1e-9
    KEPLER_TOL : float
        Convergence tolerance for Newton iteration on Kepler's equation.
        Default: 1e-14
    KEPLER_MAX_ITER : int
        Iteration cap for Kepler's equation.
        Default: 50
    DEFAULT_DIVISIONS : int
        Number of Law 2 period divisions for a new engine.
        Default: 4
    MIN_DIVISIONS, MAX_DIVISIONS : int
        Allowed range for the number of period divisions.
        Default: 2, 6
    DEFAULT_PATH_POINTS : int
        Default number of points when sampling the orbit path.
        Default: 360
    PERIOD_THRESHOLD_FRACTION : float
        Fraction of a period after which the period timer reports that the
        body is close to completing its orbit.
        Default: 0.8
    MORE_ORBITAL_DATA : bool
        Default for the engine's "more orbital data" display hint.
        Default: False
    INSTANCE_WARNING_THRESHOLD : int
        Number of live Taylor integrators before a ResourceWarning is issued.
        Default: 10
    """

    # Numerical tolerance for equality comparisons
    EQUALITY_RTOL: float = 1e-12
    EQUALITY_ATOL: float = 1e-14

    # Snapping behavior thresholds
    SNAP_TO_ZERO_THRESHOLD: float = 1e-12
    SNAP_TO_CIRCULAR: float = 1e-8

    # Integration
    INTEGRATION_TOL: float = 1e-15
    VERLET_STEP_FRACTION: float = 1e-3
    COLLISION_RADIUS_FLOOR: float = 1e-6
    BOUNDARY_RTOL: float = 1e-9
    KEPLER_TOL: float = 1e-14
    KEPLER_MAX_ITER: int = 50

    # Engine defaults
    DEFAULT_DIVISIONS: int = 4
    MIN_DIVISIONS: int = 2
    MAX_DIVISIONS: int = 6
    DEFAULT_PATH_POINTS: int = 360
    PERIOD_THRESHOLD_FRACTION: float = 0.8
    MORE_ORBITAL_DATA: bool = False
    INSTANCE_WARNING_THRESHOLD: int = 10

    def reset(self):
        """
        Reset all configuration values to package defaults.

        Examples
        --------
        >>> import keplerlab
        >>> keplerlab.config.DEFAULT_DIVISIONS = 2  # Modify
        >>> keplerlab.config.reset()  # Back to defaults
        >>> keplerlab.config.DEFAULT_DIVISIONS
        4
        """
        defaults = KeplerlabConfig()
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(defaults, key))

    def __repr__(self):
        """Return formatted string showing all configuration values."""
        lines = ["KeplerlabConfig:"]
        lines.append("  Numerical Tolerances:")
        lines.append(f"    EQUALITY_RTOL = {self.EQUALITY_RTOL}")
        lines.append(f"    EQUALITY_ATOL = {self.EQUALITY_ATOL}")
        lines.append("  Snapping Thresholds:")
        lines.append(f"    SNAP_TO_ZERO_THRESHOLD = {self.SNAP_TO_ZERO_THRESHOLD}")
        lines.append(f"    SNAP_TO_CIRCULAR = {self.SNAP_TO_CIRCULAR}")
        lines.append("  Integration:")
        lines.append(f"    INTEGRATION_TOL = {self.INTEGRATION_TOL}")
        lines.append(f"    VERLET_STEP_FRACTION = {self.VERLET_STEP_FRACTION}")
        lines.append(f"    COLLISION_RADIUS_FLOOR = {self.COLLISION_RADIUS_FLOOR}")
        lines.append(f"    BOUNDARY_RTOL = {self.BOUNDARY_RTOL}")
        lines.append(f"    KEPLER_TOL = {self.KEPLER_TOL}")
        lines.append(f"    KEPLER_MAX_ITER = {self.KEPLER_MAX_ITER}")
        lines.append("  Engine:")
        lines.append(f"    DEFAULT_DIVISIONS = {self.DEFAULT_DIVISIONS}")
        lines.append(f"    MIN_DIVISIONS = {self.MIN_DIVISIONS}")
        lines.append(f"    MAX_DIVISIONS = {self.MAX_DIVISIONS}")
        lines.append(f"    DEFAULT_PATH_POINTS = {self.DEFAULT_PATH_POINTS}")
        lines.append(f"    PERIOD_THRESHOLD_FRACTION = {self.PERIOD_THRESHOLD_FRACTION}")
        lines.append(f"    MORE_ORBITAL_DATA = {self.MORE_ORBITAL_DATA}")
        lines.append(f"    INSTANCE_WARNING_THRESHOLD = {self.INSTANCE_WARNING_THRESHOLD}")
        return "\n".join(lines)


# Global configuration instance
config = KeplerlabConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Context manager for temporarily modifying configuration values.

    Configuration is automatically restored when the context exits,
    even if an exception occurs.

    Parameters
    ----------
    **kwargs
        Configuration attributes to temporarily modify.

    Examples
    --------
    >>> import keplerlab
    >>> with keplerlab.temp_config(DEFAULT_DIVISIONS=6):
    ...     engine = keplerlab.OrbitEngine()
    >>> # Previous config restored here
    >>> keplerlab.config.DEFAULT_DIVISIONS
    4

    Raises
    ------
    AttributeError
        If an invalid configuration attribute is specified.
    """
    old_values = {}
    for key, value in kwargs.items():
        if not hasattr(config, key):
            raise AttributeError(
                f"KeplerlabConfig has no attribute '{key}'. "
                f"Valid attributes: {list(config.__dataclass_fields__.keys())}"
            )
        old_values[key] = getattr(config, key)
        setattr(config, key, value)

    try:
        yield config
    finally:
        for key, value in old_values.items():
            setattr(config, key, value)
