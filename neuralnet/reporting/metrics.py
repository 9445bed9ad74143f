"""Training callbacks that persist or print the reported cost.

Each sink exposes ``on_step(iteration, metrics)`` and is also callable with the
same arguments, so it can be handed to
:class:`neuralnet.training.trainer.Trainer` directly.
"""

from __future__ import annotations

import csv
import json
import subprocess
import sys
from pathlib import Path
from typing import Dict, Mapping, TextIO


def _git_sha() -> str:
    """Commit of the working tree, or ``"unknown"`` outside a git checkout."""

    try:
        completed = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return completed.stdout.strip() or "unknown"


def _numeric(metrics: Mapping[str, object]) -> Dict[str, float]:
    return {
        key: float(value)
        for key, value in metrics.items()
        if isinstance(value, (int, float)) and not isinstance(value, bool)
    }


class _FileSink:
    """Truncate ``path`` on creation and append one record per report."""

    def __init__(self, path: str | Path, *, split: str) -> None:
        self.path = Path(path)
        self.split = split
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("", encoding="utf-8")

    def on_step(self, iteration: int, metrics: Mapping[str, object]) -> None:
        raise NotImplementedError

    def __call__(self, iteration: int, metrics: Mapping[str, object]) -> None:
        self.on_step(iteration, metrics)


class JsonlSink(_FileSink):
    """One JSON object per reported iteration, tagged with split, seed and commit."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        super().__init__(path, split=split)
        self.seed = seed
        self.sha = sha if sha is not None else _git_sha()

    def on_step(self, iteration: int, metrics: Mapping[str, object]) -> None:
        record: Dict[str, object] = {
            "iteration": int(iteration),
            "split": self.split,
            "seed": self.seed,
            "sha": self.sha,
        }
        record.update(_numeric(metrics))
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")


class CsvSink(_FileSink):
    """Tabular copy of the reports; columns are fixed by the first record."""

    def __init__(self, path: str | Path, *, split: str = "train") -> None:
        super().__init__(path, split=split)
        self._fieldnames: list[str] | None = None

    def on_step(self, iteration: int, metrics: Mapping[str, object]) -> None:
        row: Dict[str, object] = {"iteration": int(iteration), "split": self.split}
        row.update(_numeric(metrics))
        if self._fieldnames is None:
            self._fieldnames = sorted(row)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self._fieldnames, extrasaction="ignore")
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)


class CostPrinter:
    """Print ``iter: N, cost C`` for every report (to stdout unless ``stream`` is given)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def on_step(self, iteration: int, metrics: Mapping[str, object]) -> None:
        if "cost" not in metrics:
            return
        cost = float(metrics["cost"])  # type: ignore[arg-type]
        print(f"iter: {iteration}, cost {cost:.6f}", file=self.stream or sys.stdout)

    def __call__(self, iteration: int, metrics: Mapping[str, object]) -> None:
        self.on_step(iteration, metrics)


__all__ = ["CostPrinter", "CsvSink", "JsonlSink"]
