from __future__ import annotations

"""
Exception taxonomy shared by the models and the evaluation helpers.
"""


class BasisLearnError(Exception):
    """Base class for every error raised by basislearn."""


class ValidationError(BasisLearnError, ValueError):
    """Shape, dimension or configuration problems with the inputs."""


class StateError(BasisLearnError, RuntimeError):
    """The operation needs a trained model."""


class NumericError(BasisLearnError, ArithmeticError):
    """A quantity is undefined, e.g. a ratio with a zero denominator."""
