"""Two-class datasets read from a CSV file."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.preprocessing import LabelEncoder

from .registry import DatasetSpec, register_dataset, spec_from_arrays


@register_dataset("csv")
def load_csv_binary(
    *,
    csv_path: str | Path | None = None,
    target_col: str = "target",
    positive_label: object | None = None,
    test_split: float = 0.2,
    seed: int = 0,
    standardize_inputs: bool = True,
    **_: object,
) -> DatasetSpec:
    """Load numeric feature columns plus one two-valued ``target_col``.

    ``positive_label`` names the target value mapped to 1; by default the
    larger of the two values in sorted order is positive.
    """

    if csv_path is None:
        raise ValueError("The csv dataset requires a `csv_path` option")
    path = Path(csv_path)
    frame = pd.read_csv(path)
    if target_col not in frame.columns:
        raise KeyError(f"Target column {target_col!r} not in {list(frame.columns)}")
    target = frame.pop(target_col)

    encoder = LabelEncoder().fit(target)
    classes = list(encoder.classes_)
    if len(classes) != 2:
        raise ValueError(
            f"Binary classification needs exactly 2 target values, found {len(classes)}"
        )
    if positive_label is None:
        y = encoder.transform(target).astype(np.float64)
    elif positive_label in classes:
        y = (target == positive_label).to_numpy(dtype=np.float64)
    else:
        raise ValueError(f"positive_label {positive_label!r} not among {classes}")

    return spec_from_arrays(
        "csv",
        frame.to_numpy(dtype=np.float64),
        y,
        test_split=test_split,
        seed=seed,
        standardize_inputs=standardize_inputs,
        provenance={
            "path": str(path),
            "target_col": target_col,
            "classes": [str(c) for c in classes],
        },
    )


__all__ = ["load_csv_binary"]
