"""
Keplerlab: Two-Body Orbit Engine for Kepler's Laws

A Python package that advances a body around a fixed central mass, classifies
its orbit and derives the quantities behind Kepler's three laws: orbit shape,
equal areas in equal times, and the period/semi-major-axis relationship.
"""

# Core classes
from .engine import OrbitEngine, LawMode, THIRD_LAW_POWERS
from .state import OrbitalState, StateVector
from .integrator import Integrator, IntegratorType, StepResult
from .classifier import (OrbitClassifier, OrbitType, OrbitalElements, OrbitalData,
                         classify, orbital_data)
from .divisions import DivisionPlanner, Division, DivisionMode
from .tracker import PeriodTracker, TrackingState

# Errors
from .errors import (KeplerlabError, InvalidArgumentError, InvalidStateError,
                     NumericDegeneracyError)

# Configuration
from .config import config, temp_config

# Presets
from .defaults import (CentralBody, TargetOrbit, SUN, UNIT_BODY,
                       DEFAULT_POSITION, DEFAULT_VELOCITY,
                       periapsis_state, circular_velocity, escape_speed,
                       third_law_period, sun_engine, unit_engine)

# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from keplerlab import *"
__all__ = [
    # Classes
    "OrbitEngine",
    "OrbitalState",
    "StateVector",
    "Integrator",
    "StepResult",
    "OrbitClassifier",
    "OrbitalElements",
    "OrbitalData",
    "DivisionPlanner",
    "Division",
    "PeriodTracker",
    "CentralBody",
    # Enumerations
    "LawMode",
    "THIRD_LAW_POWERS",
    "IntegratorType",
    "OrbitType",
    "DivisionMode",
    "TrackingState",
    "TargetOrbit",
    # Functions
    "classify",
    "orbital_data",
    "periapsis_state",
    "circular_velocity",
    "escape_speed",
    "third_law_period",
    "sun_engine",
    "unit_engine",
    # Errors
    "KeplerlabError",
    "InvalidArgumentError",
    "InvalidStateError",
    "NumericDegeneracyError",
    # Configuration
    "config",
    "temp_config",
    # Constants
    "SUN",
    "UNIT_BODY",
    "DEFAULT_POSITION",
    "DEFAULT_VELOCITY",
]
