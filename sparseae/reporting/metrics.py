"""Metrics sinks fed by the training callback."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, List, Mapping

from ..core.types import TrainingStatus


def _record(status: TrainingStatus) -> Dict[str, float | int]:
    record: Dict[str, float | int] = {"iteration": int(status.iterations)}
    record.update(status.as_metrics())
    return record


class JsonlSink:
    """Append-only JSONL writer, one line per callback."""

    def __init__(self, path: str | Path, *, seed: int | None = None, sha: str | None = None) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.seed = seed
        self.sha = sha

    def on_status(self, status: TrainingStatus) -> None:
        record: Dict[str, object] = {"seed": self.seed}
        if self.sha is not None:
            record["sha"] = self.sha
        record.update(_record(status))
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_status


class CsvSink:
    """Write metrics to CSV; the header is taken from the first record."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self._fieldnames: List[str] | None = None

    def on_status(self, status: TrainingStatus) -> None:
        row = _record(status)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            if self._fieldnames is None:
                self._fieldnames = sorted(row)
                writer = csv.DictWriter(handle, fieldnames=self._fieldnames)
                writer.writeheader()
            else:
                writer = csv.DictWriter(handle, fieldnames=self._fieldnames)
            writer.writerow(row)

    __call__ = on_status


class MetricsCapture:
    """Keep every record in memory."""

    def __init__(self) -> None:
        self.history: List[Mapping[str, float | int]] = []

    def on_status(self, status: TrainingStatus) -> None:
        self.history.append(_record(status))

    @property
    def last(self) -> Mapping[str, float | int] | None:
        return self.history[-1] if self.history else None

    __call__ = on_status


class CallbackFanout:
    """Forward one training callback to several sinks."""

    def __init__(self, *sinks) -> None:
        self.sinks = [sink for sink in sinks if sink is not None]

    def __call__(self, status: TrainingStatus) -> None:
        for sink in self.sinks:
            sink(status)


__all__ = ["JsonlSink", "CsvSink", "MetricsCapture", "CallbackFanout"]
