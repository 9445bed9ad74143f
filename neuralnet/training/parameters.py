"""Trainable parameters, momentum state and per-batch working buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from ..core import matrix as mx
from ..core.matrix import Matrix, MatrixView
from ..core.types import Array
from .hyperparams import HyperParameters


@dataclass
class ParameterStore:
    """Weights ``W[i]`` (``n[i] x n[i-1]``) and biases ``b[i]`` (``n[i] x 1``).

    Lists are indexed by layer number; slot 0 is the input layer and holds
    ``None``.
    """

    weights: List[Matrix | None]
    biases: List[Matrix | None]

    @classmethod
    def initialize(
        cls, params: HyperParameters, feature_count: int, rng: np.random.Generator
    ) -> "ParameterStore":
        dims = params.layer_dims(feature_count)
        weights: List[Matrix | None] = [None]
        biases: List[Matrix | None] = [None]
        for i in range(1, len(dims)):
            scale = params.layer(i).init_scale(dims[i - 1])
            weights.append(mx.random(dims[i], dims[i - 1], scale, rng))
            biases.append(mx.zeros(dims[i], 1))
        return cls(weights=weights, biases=biases)

    @classmethod
    def zeros_like(cls, other: "ParameterStore") -> "ParameterStore":
        weights: List[Matrix | None] = [None]
        biases: List[Matrix | None] = [None]
        for W, b in zip(other.weights[1:], other.biases[1:]):
            weights.append(mx.zeros(*W.dims()))
            biases.append(mx.zeros(*b.dims()))
        return cls(weights=weights, biases=biases)

    @property
    def depth(self) -> int:
        return len(self.weights) - 1

    @property
    def input_dim(self) -> int:
        return self.weights[1].cols

    def W(self, i: int) -> Matrix:
        return self.weights[i]

    def b(self, i: int) -> Matrix:
        return self.biases[i]

    def state_dict(self) -> Dict[str, Array]:
        state: Dict[str, Array] = {}
        for i in range(1, self.depth + 1):
            state[f"W{i}"] = self.weights[i].to_numpy()
            state[f"b{i}"] = self.biases[i].to_numpy()
        return state

    def parameter_count(self) -> int:
        return int(
            sum(W.rows * W.cols + b.rows for W, b in zip(self.weights[1:], self.biases[1:]))
        )


# Momentum accumulators share the parameter layout exactly.
VelocityStore = ParameterStore


@dataclass
class LayerCache:
    """Working buffers of one layer for one batch.

    ``a`` of layer 0 is a read-only view of the batch inputs; every other
    field of layer 0 stays ``None``. ``mask`` is only allocated for layers that
    apply dropout.
    """

    a: MatrixView
    z: Matrix | None = None
    mask: Matrix | None = None
    dw: Matrix | None = None
    db: Matrix | None = None
    dz: Matrix | None = None
    da: Matrix | None = None
    masked: bool = field(default=False)


def build_caches(
    dims: Sequence[int],
    inputs: MatrixView,
    *,
    dropout_layers: Sequence[int] = (),
    with_gradients: bool = True,
) -> List[LayerCache]:
    """Allocate caches for every layer, sized to ``inputs``' example count.

    Inference passes ``with_gradients=False`` and gets only ``z`` and ``a``.
    """

    if inputs.rows != dims[0]:
        raise ValueError(f"Inputs have {inputs.rows} features, network expects {dims[0]}")
    m = inputs.cols
    caches = [LayerCache(a=inputs)]
    for i in range(1, len(dims)):
        caches.append(
            LayerCache(
                a=mx.zeros(dims[i], m),
                z=mx.zeros(dims[i], m),
                mask=mx.zeros(dims[i], m) if i in dropout_layers else None,
                dw=mx.zeros(dims[i], dims[i - 1]) if with_gradients else None,
                db=mx.zeros(dims[i], 1) if with_gradients else None,
                dz=mx.zeros(dims[i], m) if with_gradients else None,
                da=mx.zeros(dims[i], m) if with_gradients else None,
            )
        )
    return caches


__all__ = ["LayerCache", "ParameterStore", "VelocityStore", "build_caches"]
