"""Smoke tests to verify package imports work."""

def test_package_imports():
    """Test that all main classes can be imported."""
    from keplerlab import OrbitEngine, OrbitalState, Integrator, DivisionPlanner
    assert OrbitEngine is not None
    assert OrbitalState is not None
    assert Integrator is not None
    assert DivisionPlanner is not None

def test_version_exists():
    """Test that version is defined."""
    import keplerlab
    assert hasattr(keplerlab, '__version__')
    assert keplerlab.__version__ == "0.1.0"

def test_all_names_resolve():
    """Every name in __all__ is importable from the package."""
    import keplerlab
    for name in keplerlab.__all__:
        assert hasattr(keplerlab, name), name

def test_can_create_engine():
    """Test basic OrbitEngine creation."""
    from keplerlab import OrbitEngine, OrbitType
    engine = OrbitEngine([1.0, 0.0], [0.0, 1.0], mu=1.0)
    assert engine.current_type() == OrbitType.STABLE_ORBIT

def test_can_create_state():
    """Test basic OrbitalState creation."""
    from keplerlab import OrbitalState
    state = OrbitalState([2.0, 0.0], [0.0, 0.5], mu=1.0)
    assert state.radius == 2.0
    assert state.generation == 1

def test_errors_are_value_errors():
    """Input errors can be caught as ValueError."""
    from keplerlab import InvalidArgumentError, InvalidStateError, NumericDegeneracyError
    assert issubclass(InvalidArgumentError, ValueError)
    assert issubclass(InvalidStateError, ValueError)
    assert issubclass(NumericDegeneracyError, ArithmeticError)
