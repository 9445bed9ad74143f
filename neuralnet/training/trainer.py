"""Training loop and predictor for binary classifiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence, Tuple

import numpy as np

from ..core import matrix as mx
from ..core.errors import TrainingError
from ..core.matrix import MatrixView
from ..core.types import Array, ModelDescription
from . import propagation
from .batching import Batch, partition
from .hyperparams import HyperParameters
from .losses import binary_cross_entropy
from .metrics import PredictionReport, prediction_report, threshold
from .parameters import ParameterStore, VelocityStore, build_caches


def _as_view(value: MatrixView | Array, name: str) -> MatrixView:
    if isinstance(value, MatrixView):
        return value.view()
    array = np.asarray(value, dtype=np.float64)
    if array.ndim == 1:
        array = array.reshape(1, -1)
    if array.ndim != 2 or array.size == 0:
        raise TrainingError(f"{name} must be a non-empty two-dimensional matrix")
    return mx.from_numpy(array).view()


def _check_labels(features: MatrixView, labels: MatrixView) -> None:
    if labels.rows != 1:
        raise TrainingError(f"Labels must be a single row, got {labels.rows} rows")
    if features.cols != labels.cols:
        raise TrainingError(
            f"Feature matrix has {features.cols} examples but labels have {labels.cols}"
        )
    values = labels.values
    if not np.all((values == 0.0) | (values == 1.0)):
        raise TrainingError("Labels must be exactly 0 or 1")


@dataclass(frozen=True)
class TrainedModel:
    """Hyperparameters paired with the parameters they produced.

    ``cost_history`` holds ``(iteration, cost)`` for every reported iteration.
    Prediction never mutates the model. ``parameters`` is the store the run
    trained and stays owned by the model; read it through :meth:`weights`,
    :meth:`bias` or ``parameters.state_dict()`` (copies) rather than writing to it.
    """

    hyperparameters: HyperParameters
    parameters: ParameterStore = field(repr=False)
    cost_history: Tuple[Tuple[int, float], ...] = ()

    @property
    def feature_count(self) -> int:
        return self.parameters.input_dim

    def describe(self) -> ModelDescription:
        return self.hyperparameters.describe(self.feature_count)

    def weights(self, layer: int) -> MatrixView:
        """Read-only view of ``W[layer]``."""

        return self.parameters.W(layer).view()

    def bias(self, layer: int) -> MatrixView:
        return self.parameters.b(layer).view()

    @property
    def final_cost(self) -> float | None:
        return self.cost_history[-1][1] if self.cost_history else None

    def predict_proba(self, features: MatrixView | Array) -> Array:
        """Return the ``1 x m`` output activations, computed without dropout."""

        inputs = _as_view(features, "features")
        if inputs.rows != self.feature_count:
            raise TrainingError(
                f"Model expects {self.feature_count} features per example, got {inputs.rows}"
            )
        dims = self.hyperparameters.layer_dims(self.feature_count)
        caches = build_caches(dims, inputs, with_gradients=False)
        output = propagation.forward(
            self.hyperparameters, self.parameters, caches, training=False
        )
        return output.to_numpy()

    def predict_labels(self, features: MatrixView | Array) -> Array:
        return threshold(self.predict_proba(features))

    def evaluate(
        self, features: MatrixView | Array, labels: MatrixView | Array
    ) -> PredictionReport:
        inputs = _as_view(features, "features")
        targets = _as_view(labels, "labels")
        _check_labels(inputs, targets)
        return prediction_report(self.predict_proba(inputs), targets.values)


class Trainer:
    """Run the iteration/batch loop for one set of hyperparameters.

    ``callbacks`` are objects with an ``on_step(iteration, metrics)`` method, or
    plain callables with the same signature. They receive ``{"cost": ...}``
    every ``report_every`` iterations and on the last iteration.
    """

    def __init__(
        self, hyperparameters: HyperParameters, callbacks: Sequence[object] | None = None
    ) -> None:
        self.hyperparameters = hyperparameters
        self.callbacks = list(callbacks or [])

    def run(self, features: MatrixView | Array, labels: MatrixView | Array) -> TrainedModel:
        params = self.hyperparameters
        inputs = _as_view(features, "features")
        targets = _as_view(labels, "labels")
        _check_labels(inputs, targets)

        rng = np.random.default_rng(params.seed)
        store = ParameterStore.initialize(params, inputs.rows, rng)
        velocity: VelocityStore | None = (
            ParameterStore.zeros_like(store) if params.momentum_enabled else None
        )
        dropout_layers = range(1, params.depth) if params.dropout_enabled else ()
        batches = partition(
            inputs,
            targets,
            params.layer_dims(inputs.rows),
            params.mini_batch_size,
            dropout_layers=dropout_layers,
        )

        history: List[Tuple[int, float]] = []
        for iteration in range(1, params.iterations + 1):
            cost = self._run_iteration(batches, store, velocity, rng)
            if iteration % params.report_every == 0 or iteration == params.iterations:
                history.append((iteration, cost))
                self._emit(iteration, {"cost": cost})

        return TrainedModel(hyperparameters=params, parameters=store, cost_history=tuple(history))

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_iteration(
        self,
        batches: Sequence[Batch],
        store: ParameterStore,
        velocity: VelocityStore | None,
        rng: np.random.Generator,
    ) -> float:
        params = self.hyperparameters
        L = params.depth
        weighted = 0.0
        examples = 0
        for batch in batches:
            output = propagation.forward(
                params, store, batch.caches, training=True, rng=rng
            )
            cost = binary_cross_entropy(
                output,
                batch.labels,
                output_weights=store.W(L),
                regularization_factor=params.regularization_factor,
            )
            propagation.backward(params, store, batch.caches, batch.labels)
            propagation.update(params, store, batch.caches, velocity)
            weighted += cost * batch.size
            examples += batch.size
        return weighted / examples

    def _emit(self, iteration: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_step"):
                callback.on_step(iteration, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(iteration, metrics)


def train_model(
    hyperparameters: HyperParameters,
    features: MatrixView | Array,
    labels: MatrixView | Array,
    callbacks: Sequence[object] | None = None,
) -> TrainedModel:
    """Train a network on ``features`` (``n x m``) and 0/1 ``labels`` (``1 x m``).

    Raises :class:`~neuralnet.core.errors.TrainingError` on unusable inputs and
    :class:`~neuralnet.core.errors.NumericalError` when the cost diverges; no
    model is returned from an aborted run.
    """

    return Trainer(hyperparameters, callbacks=callbacks).run(features, labels)


def predict(
    model: TrainedModel, features: MatrixView | Array, labels: MatrixView | Array
) -> PredictionReport:
    """Count correct and incorrect thresholded predictions over a dataset."""

    return model.evaluate(features, labels)


__all__ = ["TrainedModel", "Trainer", "predict", "train_model"]
