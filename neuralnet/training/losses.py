"""Binary cross-entropy cost and its gradient seed."""

from __future__ import annotations

import numpy as np

from ..core.errors import DimensionMismatch, NumericalError
from ..core.matrix import Matrix, MatrixView
from ..core.types import Array


def _check_open_interval(a: Array) -> None:
    if not np.all(np.isfinite(a)):
        raise NumericalError("Output activation contains non-finite values; training diverged")
    if np.any(a <= 0.0) or np.any(a >= 1.0):
        raise NumericalError(
            "Output activation saturated to 0 or 1, log argument is non-positive; "
            "lower the learning rate or revisit initialisation"
        )


def binary_cross_entropy(
    activations: MatrixView,
    labels: MatrixView,
    *,
    output_weights: MatrixView | None = None,
    regularization_factor: float = 0.0,
) -> float:
    """Return ``J = (1/m) * (-sum[y log a + (1-y) log(1-a)] + (lambda/2) ||W_L||^2)``.

    The penalty term is only added when ``regularization_factor`` is positive
    and uses the weights passed as ``output_weights`` (the output layer).
    Raises :class:`NumericalError` instead of clamping saturated outputs.
    """

    if activations.dims() != labels.dims():
        raise DimensionMismatch(
            f"Activations are {activations.rows}x{activations.cols}, "
            f"labels are {labels.rows}x{labels.cols}"
        )
    a = activations.values
    y = labels.values
    _check_open_interval(a)
    m = labels.cols
    total = -float(np.sum(y * np.log(a) + (1.0 - y) * np.log(1.0 - a)))
    if regularization_factor > 0 and output_weights is not None:
        total += regularization_factor / 2.0 * output_weights.frobenius_norm_squared()
    return total / m


def cross_entropy_seed(dest: Matrix, activations: MatrixView, labels: MatrixView) -> Matrix:
    """Write ``dJ/dA = -y/a + (1-y)/(1-a)`` into ``dest``."""

    return dest.combine(
        labels, activations, lambda y, a: -y / a + (1.0 - y) / (1.0 - a)
    )


__all__ = ["binary_cross_entropy", "cross_entropy_seed"]
