"""
Test suite for orbit classification.

Tests cover:
- Energy sign boundary (parabolic is ESCAPE)
- Element values for circles, ellipses and hyperbolas
- CRASH_ORBIT conditions (radial, low periapsis, collision flag)
- Anomalies and rotation sense
- Extended orbital data
"""

import pytest
import numpy as np
from keplerlab import (
    OrbitalState, OrbitClassifier, OrbitType, TargetOrbit,
    classify, orbital_data, periapsis_state, temp_config
)


def classify_rv(position, velocity, mu=1.0, collision_radius=0.0):
    return classify(OrbitalState(position, velocity, mu=mu,
                                 collision_radius=collision_radius))


def angle_distance(a, b):
    """Smallest separation between two angles."""
    d = (a - b) % (2 * np.pi)
    return min(d, 2 * np.pi - d)


class TestEnergyBoundary:
    """Test the bound/unbound sign boundary."""

    def test_zero_energy_is_escape(self):
        """Exactly parabolic speed classifies as ESCAPE_ORBIT."""
        elements, orbit_type = classify_rv([1.0, 0.0], [0.0, 2.0], mu=2.0)

        assert elements.energy == 0.0
        assert orbit_type == OrbitType.ESCAPE_ORBIT
        assert elements.a is None
        assert elements.period is None

    def test_slightly_negative_energy_is_stable(self):
        """Energy of -1e-9 is still bound."""
        v = np.sqrt(4.0 - 2e-9)
        elements, orbit_type = classify_rv([1.0, 0.0], [0.0, v], mu=2.0)

        assert elements.energy == pytest.approx(-1e-9, rel=1e-6)
        assert orbit_type == OrbitType.STABLE_ORBIT
        assert elements.period is not None


class TestEllipticElements:
    """Test elements of bound orbits."""

    def test_circular_orbit(self):
        """Unit circle: a = b = 1, e = 0, T = 2*pi."""
        elements, orbit_type = classify_rv([1.0, 0.0], [0.0, 1.0])

        assert orbit_type == OrbitType.STABLE_ORBIT
        assert elements.e == 0.0
        assert elements.a == pytest.approx(1.0)
        assert elements.b == pytest.approx(1.0)
        assert elements.c == pytest.approx(0.0)
        assert elements.period == pytest.approx(2 * np.pi)
        assert elements.argument_of_periapsis == 0.0

    def test_ellipse_from_periapsis(self):
        """Elements of a known ellipse are recovered."""
        r0, v0 = periapsis_state(a=2.0, e=0.5, mu=3.0)
        elements, _ = classify_rv(r0, v0, mu=3.0)

        assert elements.a == pytest.approx(2.0)
        assert elements.e == pytest.approx(0.5)
        assert elements.b == pytest.approx(2.0 * np.sqrt(0.75))
        assert elements.c == pytest.approx(1.0)
        assert elements.periapsis == pytest.approx(1.0)
        assert elements.apoapsis == pytest.approx(3.0)
        assert elements.period == pytest.approx(2 * np.pi * np.sqrt(8.0 / 3.0))
        assert angle_distance(elements.true_anomaly, 0.0) < 1e-9
        assert angle_distance(elements.argument_of_periapsis, 0.0) < 1e-9

    def test_rotated_ellipse(self):
        """Argument of periapsis follows the periapsis direction."""
        r0, v0 = periapsis_state(a=1.0, e=0.3, mu=1.0, argument_of_periapsis=1.0)
        elements, _ = classify_rv(r0, v0)

        assert elements.argument_of_periapsis == pytest.approx(1.0)

    def test_near_circular_snaps(self):
        """Eccentricity below the snap threshold reports a circle."""
        r0, v0 = periapsis_state(a=1.0, e=1e-4, mu=1.0, argument_of_periapsis=2.0)
        with temp_config(SNAP_TO_CIRCULAR=1e-3):
            elements, _ = classify_rv(r0, v0)

        assert elements.e == 0.0
        assert elements.argument_of_periapsis == 0.0

    def test_area_and_areal_velocity(self):
        r0, v0 = periapsis_state(a=2.0, e=0.6, mu=1.0)
        elements, _ = classify_rv(r0, v0)

        assert elements.area == pytest.approx(np.pi * 2.0 * 1.6)
        assert elements.areal_velocity * elements.period == pytest.approx(elements.area)

    @pytest.mark.parametrize("target", list(TargetOrbit))
    def test_target_orbits_round_trip(self, target):
        """Preset orbits reproduce their a and e."""
        r0, v0 = target.initial_state(mu=1.0)
        elements, orbit_type = classify_rv(r0, v0)

        assert orbit_type == OrbitType.STABLE_ORBIT
        assert elements.a == pytest.approx(target.semi_major_axis, rel=1e-9)
        assert elements.e == pytest.approx(target.eccentricity, rel=1e-9)


class TestAnomalies:
    """Test true/mean anomaly and rotation sense."""

    def test_prograde_quarter_turn(self):
        """Body at +y on a prograde circle is at pi/2."""
        elements, _ = classify_rv([0.0, 1.0], [-1.0, 0.0])

        assert not elements.retrograde
        assert elements.true_anomaly == pytest.approx(np.pi / 2)
        assert elements.mean_anomaly == pytest.approx(np.pi / 2)

    def test_retrograde_measured_along_motion(self):
        """Retrograde anomaly increases clockwise."""
        elements, _ = classify_rv([0.0, 1.0], [1.0, 0.0])

        assert elements.retrograde
        assert elements.angular_momentum == pytest.approx(-1.0)
        assert elements.true_anomaly == pytest.approx(3 * np.pi / 2)

    def test_apoapsis_anomaly(self):
        """Body at apoapsis has true anomaly pi."""
        r0, v0 = periapsis_state(a=1.0, e=0.4, mu=1.0)
        elements, _ = classify_rv(-r0 * 1.4 / 0.6, -v0 * 0.6 / 1.4)

        assert elements.true_anomaly == pytest.approx(np.pi)
        assert elements.mean_anomaly == pytest.approx(np.pi)


class TestUnbound:
    """Test hyperbolic orbits."""

    def test_hyperbolic_elements_undefined(self):
        elements, orbit_type = classify_rv([1.0, 0.0], [0.0, 2.0])

        assert orbit_type == OrbitType.ESCAPE_ORBIT
        assert elements.e > 1.0
        for name in ("a", "b", "c", "period", "apoapsis", "mean_anomaly"):
            assert getattr(elements, name) is None
        assert elements.area is None

    def test_hyperbolic_periapsis(self):
        """Periapsis is L^2/(mu(1+e)) for open orbits too."""
        elements, _ = classify_rv([1.0, 0.0], [0.0, 2.0])
        assert elements.periapsis == pytest.approx(1.0)


class TestCrash:
    """Test CRASH_ORBIT conditions."""

    def test_radial_orbit(self):
        """Zero angular momentum is a crash, not an undefined eccentricity."""
        elements, orbit_type = classify_rv([1.0, 0.0], [-0.5, 0.0])

        assert orbit_type == OrbitType.CRASH_ORBIT
        assert elements.angular_momentum == 0.0
        assert np.isfinite(elements.e)

    def test_outbound_radial_is_crash(self):
        """Radial motion away from the center also passes through it."""
        _, orbit_type = classify_rv([1.0, 0.0], [0.5, 0.0])
        assert orbit_type == OrbitType.CRASH_ORBIT

    def test_bound_periapsis_inside_radius(self):
        """An ellipse dipping into the central body is a crash."""
        _, orbit_type = classify_rv([1.0, 0.0], [0.0, 0.3], collision_radius=0.1)
        assert orbit_type == OrbitType.CRASH_ORBIT

    def test_bound_periapsis_outside_radius(self):
        _, orbit_type = classify_rv([1.0, 0.0], [0.0, 0.3], collision_radius=0.01)
        assert orbit_type == OrbitType.STABLE_ORBIT

    def test_escape_inbound_hits(self):
        """Inbound hyperbola with low periapsis will hit."""
        _, orbit_type = classify_rv([1.0, 0.0], [-2.0, 0.05], collision_radius=0.5)
        assert orbit_type == OrbitType.CRASH_ORBIT

    def test_escape_outbound_misses(self):
        """Outbound hyperbola has already passed periapsis."""
        _, orbit_type = classify_rv([1.0, 0.0], [2.0, 0.05], collision_radius=0.5)
        assert orbit_type == OrbitType.ESCAPE_ORBIT

    def test_periapsis_below_floor_is_crash(self):
        """A point-mass body still crashes orbits grazing the floor radius."""
        elements, orbit_type = classify_rv([1.0, 0.0], [0.0, 1e-4])

        assert elements.periapsis < 1e-6
        assert orbit_type == OrbitType.CRASH_ORBIT

    def test_periapsis_above_floor_is_stable(self):
        _, orbit_type = classify_rv([1.0, 0.0], [0.0, 0.01])
        assert orbit_type == OrbitType.STABLE_ORBIT

    def test_crashed_state_is_crash(self):
        """The integrator's collision flag overrides the geometry."""
        state = OrbitalState([1.0, 0.0], [0.0, 1.0], mu=1.0)
        state._commit([1.0, 0.0], [0.0, 1.0], 0.0, 0.0, crashed=True)

        _, orbit_type = classify(state)
        assert orbit_type == OrbitType.CRASH_ORBIT


class TestDeterminism:
    """Test that classification is pure."""

    def test_idempotent(self):
        state = OrbitalState([1.3, -0.2], [0.1, 0.8], mu=1.0)
        first = classify(state)
        second = classify(state)

        assert first == second

    def test_does_not_touch_state(self):
        state = OrbitalState([1.3, -0.2], [0.1, 0.8], mu=1.0)
        before = state.snapshot()
        classify(state)

        assert state.snapshot() == before
        assert state.generation == 1

    def test_classifier_view(self):
        """OrbitClassifier wraps the module-level functions."""
        state = OrbitalState([1.0, 0.0], [0.0, 1.0], mu=1.0)
        view = OrbitClassifier(state)

        assert view.classify() == classify(state)
        assert view.state is state


class TestOrbitalData:
    """Test extended metrics."""

    def test_circular_metrics(self):
        state = OrbitalState([0.0, 2.0], [-0.5, 0.0], mu=0.5)
        data = orbital_data(state)

        assert data.position_magnitude == pytest.approx(2.0)
        assert data.position_direction == pytest.approx(np.pi / 2)
        assert data.velocity_magnitude == pytest.approx(0.5)
        assert data.velocity_direction == pytest.approx(np.pi)
        assert data.radial_velocity == pytest.approx(0.0)
        assert data.tangential_velocity == pytest.approx(0.5)
        assert data.escape_speed == pytest.approx(np.sqrt(0.5))
        assert data.escape_radius == pytest.approx(4.0)
        assert data.gravity == pytest.approx(0.125)

    def test_focus_distances_sum_to_major_axis(self):
        """Distances to both foci add up to 2a on an ellipse."""
        r0, v0 = periapsis_state(a=2.0, e=0.5, mu=1.0)
        state = OrbitalState(r0, v0, mu=1.0)
        data = orbital_data(state)

        assert data.distance_to_focus + data.distance_to_empty_focus == pytest.approx(4.0)

    def test_unbound_empty_focus_undefined(self):
        state = OrbitalState([1.0, 0.0], [0.0, 2.0], mu=1.0)
        assert orbital_data(state).distance_to_empty_focus is None
