"""neuralnet public API."""

from .core import activations  # noqa: F401
from .core import errors  # noqa: F401
from .core import matrix  # noqa: F401
from .core import types  # noqa: F401
from .core.activations import Activation
from .core.errors import (
    AliasingError,
    ConstructionError,
    DimensionMismatch,
    NeuralNetError,
    NumericalError,
    OutOfRange,
    TrainingError,
)
from .core.matrix import Matrix, MatrixView
from .data import DataSet, available_datasets, get_dataset
from .training.hyperparams import HyperParameters, HyperParametersBuilder, LayerSpec
from .training.metrics import PredictionReport
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import TrainedModel, Trainer, predict, train_model

__all__ = [
    "Activation",
    "AliasingError",
    "ConstructionError",
    "DataSet",
    "DimensionMismatch",
    "HyperParameters",
    "HyperParametersBuilder",
    "LayerSpec",
    "Matrix",
    "MatrixView",
    "NeuralNetError",
    "NumericalError",
    "OutOfRange",
    "PredictionReport",
    "TrainedModel",
    "Trainer",
    "TrainingError",
    "activations",
    "available_datasets",
    "errors",
    "get_dataset",
    "load_preset",
    "matrix",
    "predict",
    "presets",
    "run_pipeline",
    "train_model",
    "types",
]
