"""Cost-curve plotting that works on headless machines."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Training callback that records the cost and draws it on :meth:`close`.

    With ``enable_plots=False`` the adapter is inert: it records nothing and
    never imports matplotlib.
    """

    filename = "cost.png"

    def __init__(self, run_dir: str | Path, enable_plots: bool = False) -> None:
        self.run_dir = Path(run_dir)
        self.enable_plots = enable_plots
        self._points: List[Tuple[int, float]] = []

    def on_step(self, iteration: int, metrics: Mapping[str, object]) -> None:
        if self.enable_plots and "cost" in metrics:
            self._points.append((int(iteration), float(metrics["cost"])))  # type: ignore[arg-type]

    def __call__(self, iteration: int, metrics: Mapping[str, object]) -> None:
        self.on_step(iteration, metrics)

    def close(self) -> Path | None:
        """Write the figure and return its path, or ``None`` when nothing was drawn."""

        if not self._points:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        from matplotlib import pyplot as plt

        iterations = [it for it, _ in self._points]
        costs = [cost for _, cost in self._points]
        fig, ax = plt.subplots(figsize=(6, 4))
        try:
            ax.plot(iterations, costs, marker="o", markersize=3)
            ax.set_xlabel("iteration")
            ax.set_ylabel("cross-entropy cost")
            ax.grid(True, alpha=0.3)
            self.run_dir.mkdir(parents=True, exist_ok=True)
            target = self.run_dir / self.filename
            fig.savefig(target, dpi=100, bbox_inches="tight")
        finally:
            plt.close(fig)
        return target


__all__ = ["PlotAdapter"]
