"""Core numerical primitives for neuralnet."""

from . import activations, errors, matrix, types

__all__ = ["activations", "errors", "matrix", "types"]
