"""Datasets and the dataset registry."""

# Ensure built-in datasets register themselves when the package is imported.
from . import breast_cancer as _breast_cancer  # noqa: F401
from . import csv_generic as _csv_generic  # noqa: F401
from . import synthetic as _synthetic  # noqa: F401
from .dataset import DataSet
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "DataSet",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
