"""Splitting and scaling helpers shared by the dataset factories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import numpy as np


@dataclass(frozen=True)
class SplitIndices:
    """Example indices of a train/test partition, each sorted ascending."""

    train: np.ndarray
    test: np.ndarray

    @property
    def sizes(self) -> Dict[str, int]:
        return {"train": int(self.train.size), "test": int(self.test.size)}


def deterministic_split(
    n_samples: int,
    *,
    test_split: float = 0.2,
    seed: int = 0,
) -> SplitIndices:
    """Assign ``round(n_samples * test_split)`` seeded-random examples to the test side.

    A positive ``test_split`` always yields at least one test example, and the
    training side must keep at least one.
    """

    if not 0.0 <= test_split < 1.0:
        raise ValueError(f"test_split must lie in [0, 1), got {test_split}")
    n_test = int(round(n_samples * test_split))
    if test_split > 0:
        n_test = max(n_test, 1)
    if n_test >= n_samples:
        raise ValueError(
            f"{n_samples} examples cannot hold a test split of {test_split}"
        )
    order = np.random.default_rng(seed).permutation(n_samples)
    return SplitIndices(train=np.sort(order[n_test:]), test=np.sort(order[:n_test]))


@dataclass(frozen=True)
class Standardizer:
    """Per-feature ``(x - mean) / std`` fitted on example-major training data.

    Constant features keep a unit ``std`` so they map to zero instead of NaN.
    """

    mean: np.ndarray
    std: np.ndarray

    @classmethod
    def fit(cls, X: np.ndarray) -> "Standardizer":
        X = np.asarray(X, dtype=np.float64)
        std = X.std(axis=0)
        return cls(mean=X.mean(axis=0), std=np.where(std > 0, std, 1.0))

    def transform(self, X: np.ndarray) -> np.ndarray:
        return (np.asarray(X, dtype=np.float64) - self.mean) / self.std

    def as_dict(self) -> Dict[str, List[float]]:
        return {"mean": self.mean.tolist(), "std": self.std.tolist()}


__all__ = ["SplitIndices", "Standardizer", "deterministic_split"]
