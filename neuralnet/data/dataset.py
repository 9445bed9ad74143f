"""Labelled feature matrices handed to the trainer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from ..core import matrix as mx
from ..core.matrix import Matrix
from ..core.types import Array
from .utils import deterministic_split


def _binary_labels(labels: Sequence[float] | Array) -> Array:
    values = np.asarray(labels, dtype=np.float64).reshape(-1)
    if not np.all((values == 0.0) | (values == 1.0)):
        raise ValueError("Labels must be 0/1 (or booleans)")
    return values


@dataclass(frozen=True)
class DataSet:
    """Features laid out ``(feature_count x example_count)`` with a ``1 x m`` label row."""

    features: Matrix
    labels: Matrix
    name: str = "dataset"

    def __post_init__(self) -> None:
        if self.labels.rows != 1:
            raise ValueError(f"Labels must be a single row, got {self.labels.rows}")
        if self.features.cols != self.labels.cols:
            raise ValueError(
                f"{self.features.cols} feature columns but {self.labels.cols} labels"
            )

    @property
    def feature_count(self) -> int:
        return self.features.rows

    @property
    def example_count(self) -> int:
        return self.features.cols

    @classmethod
    def from_vectors(
        cls,
        vectors: Sequence[Sequence[float]],
        labels: Sequence[bool | int | float],
        *,
        name: str = "dataset",
    ) -> "DataSet":
        """Stack one feature vector per example into columns."""

        if len(vectors) != len(labels):
            raise ValueError(f"{len(vectors)} feature vectors but {len(labels)} labels")
        return cls(
            features=mx.horizontal_stack(vectors),
            labels=mx.row_vector(_binary_labels(labels).tolist()),
            name=name,
        )

    @classmethod
    def from_arrays(cls, X: Array, y: Array, *, name: str = "dataset") -> "DataSet":
        """Build from example-major ``X`` (``m x n``) and a length-``m`` ``y``."""

        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2:
            raise ValueError(f"X must be two-dimensional, got shape {X.shape}")
        y = _binary_labels(y)
        if X.shape[0] != y.size:
            raise ValueError(f"{X.shape[0]} examples but {y.size} labels")
        return cls(
            features=mx.from_numpy(X.T),
            labels=mx.from_numpy(y.reshape(1, -1)),
            name=name,
        )

    def subset(self, indices: Sequence[int]) -> "DataSet":
        idx = np.asarray(indices, dtype=np.int64)
        return DataSet(
            features=mx.from_numpy(self.features.values[:, idx]),
            labels=mx.from_numpy(self.labels.values[:, idx]),
            name=self.name,
        )

    def split(self, test_split: float = 0.2, seed: int = 0) -> Tuple["DataSet", "DataSet"]:
        """Return ``(train, test)`` with a deterministic shuffle."""

        if test_split <= 0:
            raise ValueError("test_split must be positive to produce a test set")
        indices = deterministic_split(self.example_count, test_split=test_split, seed=seed)
        return self.subset(indices.train), self.subset(indices.test)

    def positive_fraction(self) -> float:
        return float(np.mean(self.labels.values))


__all__ = ["DataSet"]
