"""Condense a run's cost curve into a small, reproducible JSON summary."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

_METADATA_KEYS = frozenset({"iteration", "seed", "split", "sha"})


def compute_auc(points: Sequence[float]) -> float:
    """Trapezoidal area under ``points`` with unit spacing between reports."""

    if len(points) < 2:
        return 0.0
    y = np.asarray(points, dtype=np.float64)
    return float(np.sum((y[1:] + y[:-1]) / 2.0))


def _read_records(path: Path) -> List[Mapping[str, object]]:
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8") as handle:
        return [json.loads(line) for line in handle if line.strip()]


def _curves(records: Sequence[Mapping[str, object]]) -> Dict[str, List[Tuple[int, float]]]:
    curves: Dict[str, List[Tuple[int, float]]] = {}
    for position, record in enumerate(records):
        iteration = int(record.get("iteration", position))  # type: ignore[arg-type]
        for key, value in record.items():
            if key in _METADATA_KEYS or isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                curves.setdefault(key, []).append((iteration, float(value)))
    return curves


def summarize_curve(curve: Sequence[Tuple[int, float]], tail: int) -> Dict[str, float]:
    """Statistics of one metric reported at ``(iteration, value)`` points."""

    iterations = np.asarray([it for it, _ in curve], dtype=np.int64)
    values = np.asarray([v for _, v in curve], dtype=np.float64)
    best = int(np.argmin(values))
    window = values[-tail:] if tail > 0 else values[:0]
    return {
        "first": float(values[0]),
        "last": float(values[-1]),
        "min": float(values[best]),
        "max": float(values.max()),
        "mean": float(values.mean()),
        "best_iteration": int(iterations[best]),
        "improvement": float(values[0] - values[-1]),
        "tail_auc": compute_auc(window.tolist()),
    }


def write_summary(
    metrics_jsonl: str | Path, out_summary_json: str | Path, *, tail: int = 32
) -> str:
    """Summarise the JSONL metrics at ``metrics_jsonl`` into ``out_summary_json``.

    Only metric values enter the summary (never timestamps or commit hashes), so
    two runs with the same seed produce byte-identical files.
    """

    records = _read_records(Path(metrics_jsonl))
    tail_window = min(tail, len(records))
    summary = {
        "version": 1,
        "records": len(records),
        "tail_window": tail_window,
        "metrics": {
            name: summarize_curve(curve, tail_window)
            for name, curve in _curves(records).items()
        },
    }
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["compute_auc", "summarize_curve", "write_summary"]
