"""Core typing contracts for neuralnet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class ModelDescription:
    """Layer widths of a network, input layer first."""

    layer_dims: List[int]

    @property
    def parameter_count(self) -> int:
        dims = self.layer_dims
        return int(sum(dims[i] * dims[i - 1] + dims[i] for i in range(1, len(dims))))


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`neuralnet.training.pipelines.run_pipeline`."""

    iterations: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    evaluation: Dict[str, Dict[str, float]] = field(default_factory=dict)
