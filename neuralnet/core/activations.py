"""Activation functions, their derivatives and initialisation scales."""

from __future__ import annotations

import math
from enum import Enum

import numpy as np

from .types import Array


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def relu_deriv(x: Array) -> Array:
    return (x > 0).astype(np.float64)


def sigmoid(x: Array) -> Array:
    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(x: Array) -> Array:
    s = sigmoid(x)
    return s * (1.0 - s)


def tanh(x: Array) -> Array:
    return np.tanh(x)


def tanh_deriv(x: Array) -> Array:
    return 1.0 - np.tanh(x) ** 2


class Activation(str, Enum):
    """Closed set of supported activations.

    Each member pairs its primal with the matching derivative so the forward
    and backward passes cannot drift apart.
    """

    RELU = "relu"
    SIGMOID = "sigmoid"
    TANH = "tanh"

    @classmethod
    def parse(cls, value: "Activation | str") -> "Activation":
        if isinstance(value, Activation):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unknown activation {value!r}. Available activations: {choices}"
            ) from exc

    def apply(self, z: Array) -> Array:
        if self is Activation.RELU:
            return relu(z)
        if self is Activation.SIGMOID:
            return sigmoid(z)
        return tanh(z)

    def derivative(self, z: Array) -> Array:
        if self is Activation.RELU:
            return relu_deriv(z)
        if self is Activation.SIGMOID:
            return sigmoid_deriv(z)
        return tanh_deriv(z)

    def init_scale(self, fan_in: int) -> float:
        """``sqrt(2 / fan_in)`` for ReLU, ``sqrt(1 / fan_in)`` otherwise."""

        if fan_in <= 0:
            raise ValueError(f"fan_in must be positive, got {fan_in}")
        numerator = 2.0 if self is Activation.RELU else 1.0
        return math.sqrt(numerator / fan_in)


__all__ = [
    "Activation",
    "relu",
    "relu_deriv",
    "sigmoid",
    "sigmoid_deriv",
    "tanh",
    "tanh_deriv",
]
