"""Name -> factory registry for the datasets a run can train on."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping

import numpy as np

from .dataset import DataSet
from .utils import Standardizer, deterministic_split


@dataclass(frozen=True)
class DatasetSpec:
    """A named dataset, already split and ready for training.

    ``test`` is ``None`` when the factory was asked for no held-out examples.
    ``provenance`` records how the data was produced (source, seed, scaling)
    and is copied verbatim into the run manifest.
    """

    name: str
    train: DataSet
    test: DataSet | None = None
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def feature_count(self) -> int:
        return self.train.feature_count

    @property
    def splits(self) -> Dict[str, int]:
        return {
            "train": self.train.example_count,
            "test": 0 if self.test is None else self.test.example_count,
        }


DatasetFactory = Callable[..., DatasetSpec]

_FACTORIES: Dict[str, DatasetFactory] = {}


def register_dataset(name: str) -> Callable[[DatasetFactory], DatasetFactory]:
    """Decorator registering ``factory`` under ``name``; re-registering replaces it."""

    def _register(factory: DatasetFactory) -> DatasetFactory:
        _FACTORIES[name] = factory
        return factory

    return _register


def get_dataset(name: str, /, **options: Any) -> DatasetSpec:
    """Build dataset ``name``, forwarding ``options`` to its factory."""

    try:
        factory = _FACTORIES[name]
    except KeyError:
        known = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {name!r}; registered datasets: {known}") from None
    spec = factory(**options)
    _check(spec)
    return spec


def available_datasets() -> List[str]:
    return sorted(_FACTORIES)


def spec_from_arrays(
    name: str,
    X: np.ndarray,
    y: np.ndarray,
    *,
    test_split: float,
    seed: int,
    standardize_inputs: bool = False,
    provenance: Mapping[str, Any] | None = None,
) -> DatasetSpec:
    """Split example-major ``X``/``y`` and optionally standardise on the train side."""

    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    record: Dict[str, Any] = {"seed": seed, "test_split": test_split, **dict(provenance or {})}
    indices = deterministic_split(X.shape[0], test_split=test_split, seed=seed)
    X_train, X_test = X[indices.train], X[indices.test]
    if standardize_inputs:
        scaler = Standardizer.fit(X_train)
        X_train, X_test = scaler.transform(X_train), scaler.transform(X_test)
        record["normalization"] = scaler.as_dict()
    record["standardize_inputs"] = standardize_inputs

    train = DataSet.from_arrays(X_train, y[indices.train], name=name)
    test = None
    if indices.test.size:
        test = DataSet.from_arrays(X_test, y[indices.test], name=name)
    return DatasetSpec(name=name, train=train, test=test, provenance=record)


def _check(spec: DatasetSpec) -> None:
    if spec.test is not None and spec.test.feature_count != spec.train.feature_count:
        raise ValueError(
            f"Dataset {spec.name!r}: train has {spec.train.feature_count} features, "
            f"test has {spec.test.feature_count}"
        )


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
    "spec_from_arrays",
]
