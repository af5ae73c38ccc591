"""Run summaries built from the captured training callbacks."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np

TRACKED_METRICS = ("error", "avg_hidden_activation")


def compute_auc(values: Sequence[float], iterations: Sequence[float] | None = None) -> float:
    """Trapezoidal area under ``values`` plotted against ``iterations``.

    Without ``iterations`` consecutive points are one step apart.
    """

    if len(values) < 2:
        return 0.0
    y = np.asarray(values, dtype=np.float64)
    if iterations is None:
        x = np.arange(len(values), dtype=np.float64)
    else:
        x = np.asarray(iterations, dtype=np.float64)
    return float(np.sum((x[1:] - x[:-1]) * (y[1:] + y[:-1]) / 2.0))


def _series(records: Sequence[Mapping[str, object]], name: str) -> tuple[np.ndarray, np.ndarray]:
    points = [
        (float(record["iteration"]), float(record[name]))  # type: ignore[arg-type]
        for record in records
        if record.get(name) is not None
    ]
    if not points:
        return np.zeros(0), np.zeros(0)
    iterations, values = zip(*points)
    return np.asarray(iterations), np.asarray(values)


def build_summary(records: Sequence[Mapping[str, object]], tail: int) -> Mapping[str, object]:
    """Per-metric statistics plus the iteration with the lowest training error.

    ``tail_auc`` integrates the last ``tail`` callbacks over their iteration
    numbers, so a sparse callback period still measures iterations.
    """

    tail_window = min(tail, len(records)) if records else 0
    metrics: dict[str, Mapping[str, float]] = {}
    for name in TRACKED_METRICS:
        iterations, values = _series(records, name)
        if not values.size:
            continue
        window = min(tail_window, values.size)
        metrics[name] = {
            "min": float(np.min(values)),
            "max": float(np.max(values)),
            "mean": float(np.mean(values)),
            "last": float(values[-1]),
            "tail_auc": compute_auc(values[-window:], iterations[-window:]) if window else 0.0,
        }

    summary: dict[str, object] = {
        "version": 2,
        "records": len(records),
        "tail_window": tail_window,
        "metrics": metrics,
    }
    iterations, errors = _series(records, "error")
    if errors.size:
        best = int(np.argmin(errors))
        summary["best_iteration"] = int(iterations[best])
        summary["best_error"] = float(errors[best])
        summary["last_iteration"] = int(iterations[-1])
    return summary


def write_summary(
    records: Sequence[Mapping[str, object]], out_summary_json: str | Path, *, tail: int = 32
) -> str:
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = build_summary(records, tail)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["TRACKED_METRICS", "compute_auc", "build_summary", "write_summary"]
