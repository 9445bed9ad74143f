"""Small generated binary classification problems."""

from __future__ import annotations

import numpy as np

from .registry import DatasetSpec, register_dataset, spec_from_arrays

# Four linearly separable points: the sign of the coordinates decides the class.
TOY_FEATURES = np.array([[1.0, 2.0], [2.0, 1.0], [-1.0, -2.0], [-2.0, -1.0]])
TOY_LABELS = np.array([1.0, 1.0, 0.0, 0.0])


@register_dataset("toy")
def make_toy(*, seed: int = 0, test_split: float = 0.0, **_: object) -> DatasetSpec:
    """The four-example separable set used for smoke tests; no test split by default."""

    return spec_from_arrays(
        "toy",
        TOY_FEATURES,
        TOY_LABELS,
        test_split=test_split,
        seed=seed,
        provenance={"type": "synthetic"},
    )


@register_dataset("blobs")
def make_blobs(
    *,
    n_samples: int = 200,
    n_features: int = 2,
    separation: float = 3.0,
    seed: int = 0,
    test_split: float = 0.2,
    **_: object,
) -> DatasetSpec:
    """Two isotropic Gaussian clusters ``separation`` apart along the diagonal."""

    rng = np.random.default_rng(seed)
    offset = np.full(n_features, separation / (2.0 * np.sqrt(n_features)))
    n_neg = n_samples // 2
    X = np.vstack(
        [
            rng.normal(-offset, 1.0, size=(n_neg, n_features)),
            rng.normal(offset, 1.0, size=(n_samples - n_neg, n_features)),
        ]
    )
    y = np.concatenate([np.zeros(n_neg), np.ones(n_samples - n_neg)])
    order = rng.permutation(n_samples)
    return spec_from_arrays(
        "blobs",
        X[order],
        y[order],
        test_split=test_split,
        seed=seed,
        provenance={
            "type": "synthetic",
            "n_samples": n_samples,
            "n_features": n_features,
            "separation": separation,
        },
    )


@register_dataset("xor")
def make_xor(
    *,
    n_samples: int = 200,
    noise: float = 0.1,
    seed: int = 0,
    test_split: float = 0.2,
    **_: object,
) -> DatasetSpec:
    """Noisy points around the corners of ``[-1, 1]^2`` labelled by XOR of the signs."""

    rng = np.random.default_rng(seed)
    corners = rng.integers(0, 2, size=(n_samples, 2))
    X = corners * 2.0 - 1.0 + noise * rng.standard_normal((n_samples, 2))
    y = (corners[:, 0] != corners[:, 1]).astype(np.float64)
    return spec_from_arrays(
        "xor",
        X,
        y,
        test_split=test_split,
        seed=seed,
        provenance={"type": "synthetic", "n_samples": n_samples, "noise": noise},
    )


__all__ = ["TOY_FEATURES", "TOY_LABELS", "make_blobs", "make_toy", "make_xor"]
