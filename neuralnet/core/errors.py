"""Exception hierarchy shared by the matrix and training layers."""

from __future__ import annotations


class NeuralNetError(Exception):
    """Base class for every error raised by :mod:`neuralnet`."""


class ConstructionError(NeuralNetError, ValueError):
    """Invalid hyperparameters detected while building a configuration."""


class DimensionMismatch(NeuralNetError, ValueError):
    """Matrix operands have shapes the requested operation cannot combine."""


class OutOfRange(NeuralNetError, IndexError):
    """Row, column or slice bounds fall outside a matrix."""


class AliasingError(NeuralNetError, ValueError):
    """An in-place write would read its own buffer through a transposed view."""


class TrainingError(NeuralNetError, RuntimeError):
    """A training or prediction run was given inputs it cannot use."""


class NumericalError(TrainingError, ArithmeticError):
    """The cost function hit a non-positive logarithm argument."""


__all__ = [
    "AliasingError",
    "ConstructionError",
    "DimensionMismatch",
    "NeuralNetError",
    "NumericalError",
    "OutOfRange",
    "TrainingError",
]
