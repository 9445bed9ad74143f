"""Forward propagation, backward propagation and parameter updates.

Layers are numbered from 1 (first hidden layer) to ``L`` (the sigmoid output
layer); ``caches[0].a`` holds the batch inputs. Every function writes into the
buffers allocated by :func:`neuralnet.training.parameters.build_caches` and
allocates nothing on the hot path except the fresh dropout draws.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..core import matrix as mx
from ..core.matrix import Matrix, MatrixView
from .hyperparams import HyperParameters
from .losses import cross_entropy_seed
from .parameters import LayerCache, ParameterStore, VelocityStore


def forward_layer(
    params: HyperParameters,
    store: ParameterStore,
    caches: Sequence[LayerCache],
    i: int,
    *,
    training: bool,
    rng: np.random.Generator | None = None,
) -> None:
    """``Z = W·A_prev + b``, ``A = act(Z)``, then inverted dropout when training."""

    cache = caches[i]
    cache.z.multiply_into(store.W(i), caches[i - 1].a)
    cache.z.add_column_vector(cache.z, store.b(i))
    cache.a.elementwise(cache.z, params.layer(i).activation.apply)
    cache.masked = False
    if training and params.dropout_enabled and i < params.depth:
        if cache.mask is None:
            raise ValueError(f"Layer {i} has no dropout mask buffer")
        keep = params.dropout_keep_probability
        draws = mx.random_unit(cache.a.rows, cache.a.cols, keep, rng)
        cache.mask.elementwise(draws, lambda d: d / keep)
        cache.a.combine(cache.a, cache.mask, np.multiply)
        cache.masked = True


def forward(
    params: HyperParameters,
    store: ParameterStore,
    caches: Sequence[LayerCache],
    *,
    training: bool,
    rng: np.random.Generator | None = None,
) -> Matrix:
    """Run every layer and return the output activation buffer."""

    for i in range(1, params.depth + 1):
        forward_layer(params, store, caches, i, training=training, rng=rng)
    return caches[params.depth].a


def backward_layer(
    params: HyperParameters,
    store: ParameterStore,
    caches: Sequence[LayerCache],
    i: int,
) -> None:
    """Fill ``DZ``, ``DW`` and ``Db`` of layer ``i`` and ``DA`` of layer ``i - 1``.

    ``DA`` of layer ``i`` must already hold the upstream gradient.
    """

    cache = caches[i]
    prev = caches[i - 1]
    m = cache.z.cols

    cache.dz.elementwise(cache.z, params.layer(i).activation.derivative)
    cache.dz.combine(cache.dz, cache.da, np.multiply)

    cache.dw.multiply_into(cache.dz, prev.a.transpose())
    if params.regularization_enabled:
        lam = params.regularization_factor
        cache.dw.combine(cache.dw, store.W(i), lambda g, w: g + lam * w)
    cache.dw.scale(1.0 / m)

    cache.db.row_sum(cache.dz, normalize=True)

    if i > 1:
        prev.da.multiply_into(store.W(i).transpose(), cache.dz)
        if prev.masked:
            # Same mask as the forward pass, never a fresh draw.
            prev.da.combine(prev.da, prev.mask, np.multiply)


def backward(
    params: HyperParameters,
    store: ParameterStore,
    caches: Sequence[LayerCache],
    labels: MatrixView,
) -> None:
    """Seed the output gradient from the labels and back-propagate to layer 1."""

    output = caches[params.depth]
    cross_entropy_seed(output.da, output.a, labels)
    for i in range(params.depth, 0, -1):
        backward_layer(params, store, caches, i)


def update_layer(
    params: HyperParameters,
    store: ParameterStore,
    caches: Sequence[LayerCache],
    i: int,
    velocity: VelocityStore | None = None,
) -> None:
    """Gradient-descent step for layer ``i``, through momentum when enabled."""

    lr = params.learning_rate
    cache = caches[i]
    step_w: MatrixView = cache.dw
    step_b: MatrixView = cache.db
    if params.momentum_enabled:
        if velocity is None:
            raise ValueError("Momentum is enabled but no velocity store was supplied")
        beta = params.momentum_beta

        def _ema(v, g):
            return beta * v + (1.0 - beta) * g

        step_w = velocity.W(i).combine(velocity.W(i), cache.dw, _ema)
        step_b = velocity.b(i).combine(velocity.b(i), cache.db, _ema)

    store.W(i).combine(store.W(i), step_w, lambda p, g: p - lr * g)
    store.b(i).combine(store.b(i), step_b, lambda p, g: p - lr * g)


def update(
    params: HyperParameters,
    store: ParameterStore,
    caches: Sequence[LayerCache],
    velocity: VelocityStore | None = None,
) -> None:
    for i in range(1, params.depth + 1):
        update_layer(params, store, caches, i, velocity)


__all__ = [
    "backward",
    "backward_layer",
    "forward",
    "forward_layer",
    "update",
    "update_layer",
]
