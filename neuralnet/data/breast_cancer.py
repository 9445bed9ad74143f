"""Wisconsin diagnostic breast cancer dataset bundled with scikit-learn."""

from __future__ import annotations

from sklearn.datasets import load_breast_cancer

from .registry import DatasetSpec, register_dataset, spec_from_arrays


@register_dataset("breast_cancer")
def build_breast_cancer_dataset(
    *,
    test_split: float = 0.2,
    seed: int = 0,
    standardize_inputs: bool = True,
    **_: object,
) -> DatasetSpec:
    """Return the 30-feature WDBC dataset (label 1 = benign).

    The data ships inside scikit-learn, so no download is involved. Inputs are
    standardised with statistics from the training split only.
    """

    bunch = load_breast_cancer()
    return spec_from_arrays(
        "breast_cancer",
        bunch.data,
        bunch.target,
        test_split=test_split,
        seed=seed,
        standardize_inputs=standardize_inputs,
        provenance={
            "source": "sklearn.datasets.load_breast_cancer",
            "positive_class": str(bunch.target_names[1]),
        },
    )


__all__ = ["build_breast_cancer_dataset"]
