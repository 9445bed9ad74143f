"""Binary classification metrics for trained models."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Mapping

import numpy as np

from ..core.types import Array

THRESHOLD = 0.5


@dataclass(frozen=True)
class PredictionReport:
    """Outcome of :func:`neuralnet.training.trainer.predict`."""

    correct: int
    incorrect: int
    accuracy: float

    @property
    def total(self) -> int:
        return self.correct + self.incorrect

    def as_dict(self) -> Dict[str, float]:
        return {k: float(v) for k, v in asdict(self).items()}

    def __str__(self) -> str:
        return (
            f"correct: {self.correct}, incorrect: {self.incorrect}, "
            f"accuracy: {self.accuracy:.2%}"
        )


def threshold(probabilities: Array, cutoff: float = THRESHOLD) -> Array:
    """Map output probabilities to 0/1 labels; ties go to the positive class."""

    return (np.asarray(probabilities) >= cutoff).astype(np.int64)


def prediction_report(probabilities: Array, targets: Array) -> PredictionReport:
    preds = threshold(probabilities).reshape(-1)
    targs = np.asarray(targets).reshape(-1).astype(np.int64)
    if preds.shape != targs.shape:
        raise ValueError(f"Got {preds.size} predictions for {targs.size} labels")
    correct = int(np.sum(preds == targs))
    incorrect = int(preds.size - correct)
    accuracy = correct / preds.size if preds.size else 0.0
    return PredictionReport(correct=correct, incorrect=incorrect, accuracy=float(accuracy))


def compute_metric(name: str, probabilities: Array, targets: Array) -> float:
    key = name.lower()
    preds = threshold(probabilities).reshape(-1)
    targs = np.asarray(targets).reshape(-1).astype(np.int64)
    if key == "accuracy":
        return float(np.mean(preds == targs))
    if key in {"precision", "recall", "f1"}:
        tp = float(np.sum((preds == 1) & (targs == 1)))
        fp = float(np.sum((preds == 1) & (targs == 0)))
        fn = float(np.sum((preds == 0) & (targs == 1)))
        precision = tp / (tp + fp + 1e-9)
        recall = tp / (tp + fn + 1e-9)
        if key == "precision":
            return float(precision)
        if key == "recall":
            return float(recall)
        return float(2 * precision * recall / (precision + recall + 1e-9))
    raise KeyError(f"Unknown metric: {name}")


def default_metrics() -> list[str]:
    return ["accuracy", "precision", "recall", "f1"]


def compute_metrics(
    names: Iterable[str], probabilities: Array, targets: Array
) -> Mapping[str, float]:
    return {name.lower(): compute_metric(name, probabilities, targets) for name in names}


__all__ = [
    "PredictionReport",
    "compute_metric",
    "compute_metrics",
    "default_metrics",
    "prediction_report",
    "threshold",
]
