"""Core typing contracts for sparseae."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Union

import numpy as np

Array = np.ndarray
Lookup = Dict[str, int]
Record = Mapping[str, float]


@dataclass(frozen=True)
class Dense:
    """A plain numeric vector fed straight to the network."""

    values: Array


@dataclass(frozen=True)
class Labeled:
    """A label-keyed record that must pass through a lookup table."""

    values: Record


Example = Union[Dense, Labeled]


def as_example(value: object) -> Example:
    """Tag ``value`` as :class:`Dense` or :class:`Labeled`."""

    if isinstance(value, (Dense, Labeled)):
        return value
    if isinstance(value, Mapping):
        return Labeled(values=value)
    return Dense(values=np.asarray(value, dtype=np.float64))


@dataclass(frozen=True)
class Datum:
    """A single dense training pattern."""

    input: Array
    output: Array


@dataclass(frozen=True)
class TrainResult:
    """Summary returned by :meth:`sparseae.training.engine.Autoencoder.train`."""

    error: float
    iterations: int


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`sparseae.training.pipelines.run_pipeline`."""

    iterations: int
    error: float
    metrics_path: str
    manifest_path: str
    model_path: str
    summary_path: str = ""


@dataclass(frozen=True)
class TrainingStatus:
    """Progress snapshot handed to training callbacks."""

    iterations: int
    error: float
    avg_hidden_activation: float | None = None

    def as_metrics(self) -> Dict[str, float]:
        metrics = {"error": float(self.error)}
        if self.avg_hidden_activation is not None:
            metrics["avg_hidden_activation"] = float(self.avg_hidden_activation)
        return metrics


@dataclass
class NetworkState:
    """Per-layer arrays owned by one engine instance.

    ``weights[l][n, k]`` connects node ``k`` of layer ``l - 1`` to node ``n``
    of layer ``l``. Index 0 of ``weights``, ``biases`` and ``changes`` holds an
    empty array since the input layer has no incoming connections.
    """

    sizes: List[int]
    outputs: List[Array]
    errors: List[Array]
    deltas: List[Array]
    weights: List[Array]
    biases: List[Array]
    changes: List[Array]
    hidden_sums: Array = field(default_factory=lambda: np.zeros(0))
    avg_hidden_activation: Array = field(default_factory=lambda: np.zeros(0))

    @property
    def output_layer(self) -> int:
        return len(self.sizes) - 1

    @property
    def hidden_layer(self) -> int:
        return self.output_layer - 1

    def copy_parameters(self) -> Dict[str, List[Array]]:
        return {
            "weights": [w.copy() for w in self.weights],
            "biases": [b.copy() for b in self.biases],
        }


def layer_sizes(sizes: Sequence[int]) -> List[int]:
    return [int(size) for size in sizes]


__all__ = [
    "Array",
    "Lookup",
    "Record",
    "Dense",
    "Labeled",
    "Example",
    "as_example",
    "Datum",
    "TrainResult",
    "RunResult",
    "TrainingStatus",
    "NetworkState",
    "layer_sizes",
]
