"""Mini-batch partitioning over column ranges of the training set."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..core.matrix import MatrixView
from .parameters import LayerCache, build_caches


@dataclass
class Batch:
    """Contiguous examples ``[start, stop)`` plus the caches sized for them."""

    start: int
    stop: int
    inputs: MatrixView
    labels: MatrixView
    caches: List[LayerCache]

    @property
    def size(self) -> int:
        return self.stop - self.start


def partition_ranges(example_count: int, mini_batch_size: int) -> List[Tuple[int, int]]:
    """Split ``[0, example_count)`` into contiguous ranges in a fixed order.

    ``mini_batch_size`` of 0, or at least ``example_count``, yields a single
    full batch; otherwise the final range holds the remainder.
    """

    if example_count <= 0:
        raise ValueError("Cannot partition an empty example set")
    if mini_batch_size < 0:
        raise ValueError("mini_batch_size must be non-negative")
    if mini_batch_size == 0 or mini_batch_size >= example_count:
        return [(0, example_count)]
    return [
        (start, min(start + mini_batch_size, example_count))
        for start in range(0, example_count, mini_batch_size)
    ]


def partition(
    features: MatrixView,
    labels: MatrixView,
    dims: Sequence[int],
    mini_batch_size: int,
    *,
    dropout_layers: Sequence[int] = (),
) -> List[Batch]:
    """Return one :class:`Batch` per range, each viewing (not copying) the data."""

    batches: List[Batch] = []
    for start, stop in partition_ranges(features.cols, mini_batch_size):
        inputs = features.columns(start, stop)
        batches.append(
            Batch(
                start=start,
                stop=stop,
                inputs=inputs,
                labels=labels.columns(start, stop),
                caches=build_caches(dims, inputs, dropout_layers=dropout_layers),
            )
        )
    return batches


__all__ = ["Batch", "partition", "partition_ranges"]
