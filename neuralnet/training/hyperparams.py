"""Hyperparameter containers and their validating builder."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Tuple

from ..core.activations import Activation
from ..core.errors import ConstructionError
from ..core.types import ModelDescription

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..data.dataset import DataSet
    from .trainer import TrainedModel


@dataclass(frozen=True)
class LayerSpec:
    """One dense layer: its width and activation."""

    neurons: int
    activation: Activation

    def init_scale(self, fan_in: int) -> float:
        return self.activation.init_scale(fan_in)


@dataclass(frozen=True)
class HyperParameters:
    """Validated, immutable training configuration.

    ``layers`` excludes the input layer, whose width comes from the dataset.
    ``regularization_factor``, ``dropout_keep_probability``, ``mini_batch_size``
    and ``momentum_beta`` each use ``0`` to mean "disabled"; a keep
    probability of ``1`` keeps every unit and is therefore also a no-op.
    """

    layers: Tuple[LayerSpec, ...]
    learning_rate: float = 0.01
    iterations: int = 1000
    regularization_factor: float = 0.0
    dropout_keep_probability: float = 0.0
    mini_batch_size: int = 0
    momentum_beta: float = 0.0
    seed: int | None = None
    report_every: int = 100

    def __post_init__(self) -> None:
        _validate(self)

    # ------------------------------------------------------------------
    # Derived flags

    @property
    def depth(self) -> int:
        return len(self.layers)

    @property
    def regularization_enabled(self) -> bool:
        return self.regularization_factor > 0

    @property
    def dropout_enabled(self) -> bool:
        return 0 < self.dropout_keep_probability < 1

    @property
    def momentum_enabled(self) -> bool:
        return self.momentum_beta > 0

    def layer(self, index: int) -> LayerSpec:
        """Return layer ``index`` counting the first hidden layer as 1."""

        if not 1 <= index <= len(self.layers):
            raise IndexError(f"Layer index {index} outside [1, {len(self.layers)}]")
        return self.layers[index - 1]

    def layer_dims(self, feature_count: int) -> List[int]:
        return [int(feature_count)] + [layer.neurons for layer in self.layers]

    def describe(self, feature_count: int) -> ModelDescription:
        return ModelDescription(layer_dims=self.layer_dims(feature_count))

    def to_config(self) -> Dict[str, Any]:
        """Return the ``model``/``train`` config sections that rebuild this object."""

        train = asdict(self)
        train.pop("layers")
        return {
            "model": {
                "layers": [
                    {"neurons": layer.neurons, "activation": layer.activation.value}
                    for layer in self.layers
                ]
            },
            "train": train,
        }

    @classmethod
    def from_config(
        cls, model_cfg: Mapping[str, Any], train_cfg: Mapping[str, Any] | None = None
    ) -> "HyperParameters":
        if "layers" not in model_cfg:
            raise KeyError("Model config requires a `layers` list")
        builder = HyperParametersBuilder()
        for entry in model_cfg["layers"]:  # type: ignore[union-attr]
            if not isinstance(entry, Mapping):
                raise TypeError(f"Layer entries must be mappings, got {entry!r}")
            builder = builder.add_n_layers(
                entry.get("activation", "relu"),
                int(entry["neurons"]),
                int(entry.get("repeat", 1)),
            )
        train_cfg = dict(train_cfg or {})
        if "learning_rate" in train_cfg:
            builder = builder.set_learning_rate(float(train_cfg["learning_rate"]))
        if "iterations" in train_cfg:
            builder = builder.set_iterations(int(train_cfg["iterations"]))
        if "regularization_factor" in train_cfg:
            builder = builder.set_regularization_factor(
                float(train_cfg["regularization_factor"])
            )
        if "dropout_keep_probability" in train_cfg:
            builder = builder.set_dropout_keep_probability(
                float(train_cfg["dropout_keep_probability"])
            )
        if "mini_batch_size" in train_cfg:
            builder = builder.set_mini_batch_size(int(train_cfg["mini_batch_size"]))
        if "momentum_beta" in train_cfg:
            builder = builder.set_momentum_beta(float(train_cfg["momentum_beta"]))
        if train_cfg.get("seed") is not None:
            builder = builder.set_seed(int(train_cfg["seed"]))
        if "report_every" in train_cfg:
            builder = builder.set_report_every(int(train_cfg["report_every"]))
        return builder.build()

    def train_model(self, dataset: "DataSet", callbacks=()) -> "TrainedModel":
        """Train on ``dataset`` with these hyperparameters."""

        from .trainer import train_model

        return train_model(self, dataset.features, dataset.labels, callbacks=callbacks)

    def __str__(self) -> str:
        title = (
            f"number of layers: {len(self.layers)}, learning rate: "
            f"{self.learning_rate:.4f}, iterations: {self.iterations}"
        )
        lines = ["Hyperparameters:", title, "layers:"]
        for idx, layer in enumerate(self.layers, start=1):
            lines.append(
                f"  layer {idx} - {layer.neurons} neuron(s), "
                f"{layer.activation.value} activation function"
            )
        extras = []
        if self.regularization_enabled:
            extras.append(f"L2 factor: {self.regularization_factor}")
        if self.dropout_enabled:
            extras.append(f"dropout keep probability: {self.dropout_keep_probability}")
        if self.mini_batch_size:
            extras.append(f"mini-batch size: {self.mini_batch_size}")
        if self.momentum_enabled:
            extras.append(f"momentum beta: {self.momentum_beta}")
        if extras:
            lines.append(", ".join(extras))
        return "\n".join(lines) + "\n"


def _validate(params: HyperParameters) -> None:
    for idx, layer in enumerate(params.layers, start=1):
        if not isinstance(layer.activation, Activation):
            raise ConstructionError(f"layer {idx} has no valid activation function")
        if layer.neurons <= 0:
            raise ConstructionError(f"layer {idx} defined with {layer.neurons} neurons")
    if not math.isfinite(params.learning_rate) or params.learning_rate <= 0:
        raise ConstructionError("learning rate must be greater than 0")
    if params.iterations < 1:
        raise ConstructionError("number of iterations must be greater than 0")
    if not params.layers:
        raise ConstructionError("no layers defined")
    output = params.layers[-1]
    if output.activation is not Activation.SIGMOID:
        raise ConstructionError("last layer must have sigmoid activation function")
    if output.neurons != 1:
        raise ConstructionError("last layer must have 1 neuron")
    if not math.isfinite(params.regularization_factor) or params.regularization_factor < 0:
        raise ConstructionError("regularization factor must be 0 (disabled) or positive")
    if not 0 <= params.dropout_keep_probability <= 1:
        raise ConstructionError("dropout keep probability must lie in (0, 1], or be 0")
    if params.mini_batch_size < 0:
        raise ConstructionError("mini-batch size must be 0 (full batch) or positive")
    if not 0 <= params.momentum_beta < 1:
        raise ConstructionError("momentum beta must lie in [0, 1)")
    if params.report_every < 1:
        raise ConstructionError("report interval must be at least 1 iteration")


@dataclass(frozen=True)
class HyperParametersBuilder:
    """Accumulate settings through pure transformations, validate in :meth:`build`.

    Every setter returns a new builder, so partially configured builders can be
    shared and branched safely::

        base = HyperParametersBuilder().add_layers("relu", 5, 4)
        params = base.add_layers("sigmoid", 1).set_learning_rate(0.1).build()
    """

    pending_layers: Tuple[Tuple[int, Any], ...] = field(default_factory=tuple)
    learning_rate: float = 0.01
    iterations: int = 1000
    regularization_factor: float = 0.0
    dropout_keep_probability: float = 0.0
    mini_batch_size: int = 0
    momentum_beta: float = 0.0
    seed: int | None = None
    report_every: int = 100

    def add_layers(self, activation: Activation | str, *neurons: int) -> "HyperParametersBuilder":
        added = tuple((int(n), activation) for n in neurons)
        return replace(self, pending_layers=self.pending_layers + added)

    def add_n_layers(
        self, activation: Activation | str, neurons: int, n: int
    ) -> "HyperParametersBuilder":
        return self.add_layers(activation, *([neurons] * n))

    def set_learning_rate(self, learning_rate: float) -> "HyperParametersBuilder":
        return replace(self, learning_rate=learning_rate)

    def set_iterations(self, iterations: int) -> "HyperParametersBuilder":
        return replace(self, iterations=iterations)

    def set_regularization_factor(self, factor: float) -> "HyperParametersBuilder":
        return replace(self, regularization_factor=factor)

    def set_dropout_keep_probability(self, keep_prob: float) -> "HyperParametersBuilder":
        return replace(self, dropout_keep_probability=keep_prob)

    def set_mini_batch_size(self, size: int) -> "HyperParametersBuilder":
        return replace(self, mini_batch_size=size)

    def set_momentum_beta(self, beta: float) -> "HyperParametersBuilder":
        return replace(self, momentum_beta=beta)

    def set_seed(self, seed: int | None) -> "HyperParametersBuilder":
        return replace(self, seed=seed)

    def set_report_every(self, iterations: int) -> "HyperParametersBuilder":
        return replace(self, report_every=iterations)

    def build(self) -> HyperParameters:
        """Validate and freeze the accumulated settings.

        Raises :class:`~neuralnet.core.errors.ConstructionError` describing the
        first invalid setting.
        """

        layers = []
        for idx, (neurons, activation) in enumerate(self.pending_layers, start=1):
            try:
                parsed = Activation.parse(activation)
            except ValueError as exc:
                raise ConstructionError(f"layer {idx}: {exc}") from exc
            layers.append(LayerSpec(neurons=neurons, activation=parsed))
        return HyperParameters(
            layers=tuple(layers),
            learning_rate=float(self.learning_rate),
            iterations=int(self.iterations),
            regularization_factor=float(self.regularization_factor),
            dropout_keep_probability=float(self.dropout_keep_probability),
            mini_batch_size=int(self.mini_batch_size),
            momentum_beta=float(self.momentum_beta),
            seed=self.seed,
            report_every=int(self.report_every),
        )


__all__ = ["HyperParameters", "HyperParametersBuilder", "LayerSpec"]
