"""Headless-safe plotting of the training error curve."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from ..core.types import TrainingStatus


class PlotAdapter:
    """Collect training errors and optionally emit a matplotlib figure."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_status(self, status: TrainingStatus) -> None:
        if not self.enable_plots:
            return
        self._history.append((status.iterations, float(status.error)))

    def close(self) -> str | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        iterations, errors = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(iterations, errors)
        ax.set_xlabel("Iteration")
        ax.set_ylabel("Mean squared error")
        ax.set_yscale("log")
        ax.set_title("Autoencoder training")
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return str(plot_path)

    __call__ = on_status
