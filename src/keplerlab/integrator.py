"""
Time integration of the two-body problem in the orbital plane.

Two schemes advance an OrbitalState under a = -mu*r/|r|^3:

- TAYLOR: heyoka adaptive Taylor series integrator. The swept area is carried
  as a fifth state variable, and reaching the collision radius is a terminal
  event, so the step stops at the interpolated contact time.
- VERLET: velocity Verlet in numpy. Symplectic and exactly time-reversible
  for a fixed substep; swept area is the shoelace sum over substep chords.
"""

import copy
import logging
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import heyoka as hy
import numpy as np

from .config import config
from .errors import InvalidArgumentError, InvalidStateError, NumericDegeneracyError
from .state import OrbitalState
from .utils import cross_2d

logger = logging.getLogger(__name__)


# define an enumerated list of integration schemes
class IntegratorType(Enum):
    TAYLOR = 'taylor'
    VERLET = 'verlet'


@dataclass(frozen=True)
class StepResult:
    """
    Outcome of one call to Integrator.advance.

    Attributes
    ----------
    dt : float
        Simulated time actually advanced. Shorter than requested when the
        body reached the collision radius during the step.
    swept_area : float
        Unsigned area swept by the radius vector during the step
    collided : bool
        True if the step ended at the collision radius
    """
    dt: float
    swept_area: float
    collided: bool


class Integrator:
    """
    Advances an OrbitalState in place.

    Parameters
    ----------
    state : OrbitalState
        State owned by this integrator. Nothing else writes to it except
        ``OrbitalState.initialize``.
    scheme : IntegratorType or str, optional
        'taylor' (default) or 'verlet'
    compile : bool, optional
        Build the heyoka integrator immediately (default True). Ignored for
        the Verlet scheme.

    Notes
    -----
    The heyoka integrator is compiled once per tolerance and cached at class
    level; each Integrator works on a deep copy of the cached one. mu and the
    collision radius are runtime parameters, so a single compiled integrator
    serves every initial condition.
    """
    # ========== CLASS CONSTANTS ==========
    _compiled_cache = {}
    _instance_count = 0

    # ========== CONSTRUCTION ==========
    def __init__(self, state: OrbitalState, scheme="taylor", compile: bool = True):
        self._state = state
        self._scheme = self._parse_scheme(scheme)
        self._ta = None
        self._counted = False
        self._verlet_generation = None
        self._verlet_max_step = None

        if self._scheme == IntegratorType.TAYLOR and compile:
            self._compile_integrator()

    # ========== PROPAGATION ==========
    def advance(self, dt: float) -> StepResult:
        """
        Advance the state by dt, which may be negative.

        Parameters
        ----------
        dt : float
            Simulated time increment. Negative values integrate backward,
            which the engine never does but the reversibility checks use.

        Returns
        -------
        StepResult

        Raises
        ------
        InvalidArgumentError
            If dt is not a finite number
        InvalidStateError
            If the state has not been initialized
        NumericDegeneracyError
            If the integration produced a non-finite state. The state is
            left as it was before the call.
        """
        try:
            dt = float(dt)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"dt must be a number, got {dt!r}") from exc
        if not np.isfinite(dt):
            raise InvalidArgumentError(f"dt must be finite, got {dt}")

        state = self._state
        if not state.is_initialized:
            raise InvalidStateError("Cannot advance an uninitialized OrbitalState")
        if dt == 0.0 or state.crashed:
            return StepResult(0.0, 0.0, False)

        t0 = state.time
        area0 = state.swept_area
        if self._scheme == IntegratorType.TAYLOR:
            pos, vel, t, area, collided = self._advance_taylor(dt)
        else:
            pos, vel, t, area, collided = self._advance_verlet(dt)

        if not (np.all(np.isfinite(pos)) and np.all(np.isfinite(vel))
                and np.isfinite(t) and np.isfinite(area)):
            raise NumericDegeneracyError(
                f"Integration failed: state became invalid during the step.\n"
                f"Initial state: r={state.position}, v={state.velocity}, t={t0}\n"
                f"Final state: r={pos}, v={vel}, t={t}\n"
                f"Likely causes:\n"
                f"  - Collision radius of zero with a radial or near-radial orbit\n"
                f"  - Step far larger than the orbital period"
            )

        state._commit(pos, vel, t, area, crashed=collided)
        if collided:
            logger.info("Collision with central body at t=%.9g (r=%.9g)",
                        t, float(np.linalg.norm(pos)))
        return StepResult(t - t0, abs(area - area0), collided)

    def _advance_taylor(self, dt):
        """Propagate with heyoka, stopping at the collision event."""
        if self._ta is None:
            self._compile_integrator()
        ta = self._ta
        state = self._state

        ta.time = float(state.time)
        ta.state[:] = [*state.position, *state.velocity, state.swept_area]
        ta.pars[:] = [state.mu, state.effective_collision_radius]
        ta.reset_cooldowns()

        outcome = ta.propagate_for(delta_t=dt)[0]
        if outcome == hy.taylor_outcome.err_nf_state:
            raise NumericDegeneracyError(
                f"Taylor integration produced a non-finite state near t={ta.time}"
            )
        # anything else that is not time_limit is the terminal collision event
        collided = outcome != hy.taylor_outcome.time_limit

        out = np.array(ta.state, dtype=float)
        return out[0:2], out[2:4], float(ta.time), float(out[4]), collided

    def _advance_verlet(self, dt):
        """Velocity Verlet with fixed substeps and chord collision detection."""
        state = self._state
        mu = state.mu
        R = state.effective_collision_radius

        n = max(1, int(np.ceil(abs(dt) / self._verlet_step())))
        h = dt / n

        r = np.array(state.position, dtype=float)
        v = np.array(state.velocity, dtype=float)
        t = state.time
        area = state.swept_area
        a = self._accel(r, mu)

        for _ in range(n):
            v_half = v + 0.5 * h * a
            r_new = r + h * v_half
            # a fixed substep can jump over the central body, so test the chord
            s = self._chord_crossing(r, r_new, R)
            if s is not None:
                r_hit = r + s * (r_new - r)
                v_hit = v + s * h * a
                area += 0.5 * cross_2d(r, r_hit)
                return r_hit, v_hit, t + s * h, area, True

            a_new = self._accel(r_new, mu)
            v = v_half + 0.5 * h * a_new
            # shoelace term for the chord r -> r_new
            area += 0.5 * cross_2d(r, r_new)
            r = r_new
            a = a_new
            t += h

        return r, v, t, area, False

    # ========== VERLET HELPERS ==========
    def _verlet_step(self) -> float:
        """Largest substep, fixed per initialize so reversal is exact."""
        state = self._state
        if self._verlet_generation != state.generation:
            r0 = state.radius
            self._verlet_max_step = (config.VERLET_STEP_FRACTION
                                     * np.sqrt(r0**3 / state.mu))
            self._verlet_generation = state.generation
        return self._verlet_max_step

    @staticmethod
    def _accel(r, mu):
        rmag = float(np.linalg.norm(r))
        if rmag <= config.SNAP_TO_ZERO_THRESHOLD:
            raise NumericDegeneracyError(
                f"Radius vanished during integration (|r|={rmag:.3e}); "
                f"the collision radius floor is too small for this step size"
            )
        return -mu * r / rmag**3

    @staticmethod
    def _chord_crossing(r0, r1, R) -> Optional[float]:
        """
        First fraction s in [0, 1] where the chord r0 -> r1 reaches radius R.

        Returns None if the whole chord stays outside R. A chord that starts
        inside R (only possible after a collision) reports s = 0.
        """
        d = r1 - r0
        qa = float(np.dot(d, d))
        qb = 2.0 * float(np.dot(r0, d))
        qc = float(np.dot(r0, r0)) - R * R
        if qc <= 0.0:
            return 0.0
        if qa == 0.0:
            return None
        disc = qb * qb - 4.0 * qa * qc
        if disc < 0.0:
            return None
        # both roots share a sign since qc > 0; the smaller is the entry point
        s = (-qb - np.sqrt(disc)) / (2.0 * qa)
        if s < 0.0 or s > 1.0:
            return None
        return float(s)

    # ========== TAYLOR COMPILATION ==========
    @staticmethod
    def _build_eom():
        """
        Build symbolic heyoka equations of motion.

        Returns
        -------
        sys : list of (var, rhs) tuples
            State order [x, y, vx, vy, A]; A is the signed swept area
        events : list of hy.t_event
            Terminal event at |r| = R

        Notes
        -----
        hy.par[0] is mu and hy.par[1] the collision radius.
        """
        x, y, vx, vy, A = hy.make_vars("x", "y", "vx", "vy", "A")
        mu = hy.par[0]
        R = hy.par[1]
        r = hy.sqrt(x**2 + y**2)

        sys = [
            (x, vx),
            (y, vy),
            (vx, -mu * x / r**3),
            (vy, -mu * y / r**3),
            (A, 0.5 * (x * vy - y * vx)),
        ]
        events = [hy.t_event(x**2 + y**2 - R**2)]
        return sys, events

    def _compile_integrator(self):
        """
        Get a private heyoka integrator, compiling it on first use.

        Compilation performs automatic differentiation and LLVM code
        generation; it happens once per tolerance per process.
        """
        if self._ta is not None:
            return
        tol = float(config.INTEGRATION_TOL)
        template = Integrator._compiled_cache.get(tol)
        if template is None:
            logger.info("Compiling Taylor integrator (tol=%g)...", tol)
            sys, events = self._build_eom()
            template = hy.taylor_adaptive(
                sys=sys,
                state=[1.0, 0.0, 0.0, 1.0, 0.0],  # Dummy state
                pars=[1.0, 0.0],
                tol=tol,
                t_events=events,
            )
            Integrator._compiled_cache[tol] = template
            logger.info("Compilation complete")
        self._ta = copy.deepcopy(template)

        Integrator._instance_count += 1
        self._counted = True
        if Integrator._instance_count > config.INSTANCE_WARNING_THRESHOLD:
            warnings.warn(
                f"Created {Integrator._instance_count} Taylor integrators. "
                f"Each one holds its own copy of the compiled heyoka "
                f"integrator. Consider reusing OrbitEngine objects.",
                ResourceWarning,
                stacklevel=3
            )

    # ========== PROPERTY ACCESS ==========
    @property
    def scheme(self) -> IntegratorType:
        return self._scheme

    @property
    def state(self) -> OrbitalState:
        return self._state

    @property
    def is_compiled(self) -> bool:
        """True if the heyoka integrator is ready (always False for Verlet)."""
        return self._ta is not None

    @classmethod
    def get_instance_count(cls):
        """Get current number of live Taylor integrators."""
        return cls._instance_count

    @classmethod
    def reset_instance_count(cls):
        """Reset instance counter (useful for testing)."""
        cls._instance_count = 0

    # ========== SPECIAL METHODS ==========
    def __del__(self):
        if getattr(self, "_counted", False):
            Integrator._instance_count -= 1

    def __repr__(self):
        return f"Integrator(scheme='{self._scheme.value}', compiled={self.is_compiled})"

    # ========== STATIC METHODS ==========
    @staticmethod
    def _parse_scheme(scheme):
        """Convert string or enum to IntegratorType enum"""
        if isinstance(scheme, IntegratorType):
            return scheme
        elif isinstance(scheme, str):
            type_map = {
                'taylor': IntegratorType.TAYLOR,
                'heyoka': IntegratorType.TAYLOR,
                'verlet': IntegratorType.VERLET,
                'velocity_verlet': IntegratorType.VERLET,
            }
            if scheme.lower() in type_map:
                return type_map[scheme.lower()]
            raise InvalidArgumentError(f"Unknown integrator scheme '{scheme}'. "
                                       f"Use: {list(type_map.keys())}")
        else:
            raise InvalidArgumentError(f"scheme must be IntegratorType or str, "
                                       f"got {type(scheme)}")
