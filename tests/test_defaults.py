"""
Test suite for preset bodies, target orbits and initial-condition helpers.
"""

import pytest
import numpy as np
from keplerlab import (
    CentralBody, TargetOrbit, SUN, UNIT_BODY, DEFAULT_POSITION, DEFAULT_VELOCITY,
    OrbitalState, OrbitType, InvalidArgumentError, classify,
    periapsis_state, circular_velocity, escape_speed, third_law_period,
    sun_engine, unit_engine
)


class TestCentralBody:
    """Test CentralBody validation and presets."""

    def test_sun_preset(self):
        assert SUN.mu == 2e6
        assert SUN.radius > 0
        assert SUN.name == 'Sun'

    def test_unit_body(self):
        assert UNIT_BODY.mu == 1.0
        assert UNIT_BODY.radius == 0.0

    @pytest.mark.parametrize("mu", [0.0, -5.0])
    def test_rejects_bad_mu(self, mu):
        with pytest.raises(InvalidArgumentError, match="must be positive"):
            CentralBody(mu=mu)

    def test_rejects_negative_radius(self):
        with pytest.raises(ValueError, match="Radius must be non-negative"):
            CentralBody(mu=1.0, radius=-1.0)

    def test_immutable(self):
        with pytest.raises(AttributeError):
            SUN.mu = 1.0

    def test_default_body_is_circular(self):
        """The default body sits on a circle of radius 200 around the Sun."""
        state = OrbitalState(DEFAULT_POSITION, DEFAULT_VELOCITY, mu=SUN.mu,
                             collision_radius=SUN.radius)
        elements, orbit_type = classify(state)

        assert orbit_type == OrbitType.STABLE_ORBIT
        assert elements.e == 0.0
        assert elements.a == pytest.approx(200.0)


class TestTargetOrbits:
    """Test target orbit presets."""

    def test_values(self):
        assert TargetOrbit.MARS.eccentricity == 0.0934
        assert TargetOrbit.MARS.semi_major_axis == 1.5
        assert TargetOrbit.HALLEY.eccentricity == 0.967

    def test_all_presets_present(self):
        names = {t.name for t in TargetOrbit}
        assert names == {"MERCURY", "VENUS", "EARTH", "MARS", "JUPITER",
                         "ERIS", "NEREID", "HALLEY"}

    def test_initial_state_scaled(self):
        """scale converts AU to model units."""
        r, v = TargetOrbit.EARTH.initial_state(mu=SUN.mu, scale=100.0)
        elements, _ = classify(OrbitalState(r, v, mu=SUN.mu))

        assert elements.a == pytest.approx(100.0)
        assert elements.e == pytest.approx(0.0167)


class TestInitialConditions:
    """Test initial-condition helpers."""

    def test_periapsis_state(self):
        r, v = periapsis_state(a=2.0, e=0.5, mu=3.0)

        assert np.linalg.norm(r) == pytest.approx(1.0)
        # vis-viva: v^2 = mu (2/r - 1/a)
        assert np.linalg.norm(v) ** 2 == pytest.approx(3.0 * (2.0 - 0.5))
        assert np.dot(r, v) == pytest.approx(0.0, abs=1e-12)

    def test_retrograde_periapsis_state(self):
        r, v = periapsis_state(a=1.0, e=0.2, mu=1.0, retrograde=True)
        assert r[0] * v[1] - r[1] * v[0] < 0

    @pytest.mark.parametrize("a, e, mu", [(0.0, 0.1, 1.0), (1.0, 1.0, 1.0),
                                          (1.0, -0.1, 1.0), (1.0, 0.1, 0.0)])
    def test_periapsis_state_rejects(self, a, e, mu):
        with pytest.raises(InvalidArgumentError):
            periapsis_state(a, e, mu)

    def test_circular_velocity(self):
        v = circular_velocity([0.0, 4.0], mu=4.0)

        assert np.allclose(v, [-1.0, 0.0])
        assert np.allclose(circular_velocity([0.0, 4.0], mu=4.0, retrograde=True), [1.0, 0.0])

    def test_circular_velocity_at_origin(self):
        with pytest.raises(InvalidArgumentError, match="origin"):
            circular_velocity([0.0, 0.0], mu=1.0)

    def test_escape_speed(self):
        assert escape_speed(2.0, 1.0) == pytest.approx(1.0)

    def test_third_law_period(self):
        assert third_law_period(1.0, 1.0) == pytest.approx(2 * np.pi)
        # T^2 scales with a^3
        ratio = third_law_period(4.0, 1.0) / third_law_period(1.0, 1.0)
        assert ratio == pytest.approx(8.0)


class TestFactories:
    """Test engine factory functions."""

    def test_sun_engine(self):
        engine = sun_engine(scheme='verlet')

        assert engine.current_type() == OrbitType.STABLE_ORBIT
        assert engine.state.mu == SUN.mu
        assert engine.state.collision_radius == SUN.radius
        assert engine.current_elements().period == pytest.approx(4 * np.pi)

    def test_unit_engine(self):
        engine = unit_engine(compile=False)

        assert engine.current_elements().period == pytest.approx(2 * np.pi)
        assert np.allclose(engine.current_state().position, [1.0, 0.0])

    def test_unit_engine_ellipse(self):
        engine = unit_engine(a=2.0, e=0.5, scheme='verlet')
        assert engine.current_elements().e == pytest.approx(0.5)
