"""
Exception classes raised by the orbit engine.

All exceptions derive from KeplerlabError and from the builtin type that
best describes them, so ``except ValueError`` keeps catching bad input.
CRASH_ORBIT is a physical outcome and never raised.
"""


class KeplerlabError(Exception):
    """Base class for all keplerlab exceptions."""


class InvalidArgumentError(KeplerlabError, ValueError):
    """
    An argument is outside its allowed range.

    Raised for negative or non-finite time steps, division counts outside
    [MIN_DIVISIONS, MAX_DIVISIONS], non-positive gravitational parameters
    and unknown enumeration names.
    """


class InvalidStateError(KeplerlabError, ValueError):
    """
    A position/velocity pair does not describe a finite orbit.

    Raised when initializing with a zero or non-finite position, a
    non-finite velocity, or a position inside the collision radius.
    """


class NumericDegeneracyError(KeplerlabError, ArithmeticError):
    """
    Integration produced a non-finite state or a vanishing radius.

    The state that was current before the failing call is left untouched.
    """
