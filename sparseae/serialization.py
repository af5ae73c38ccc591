"""JSON snapshots of a trained network and the standalone inference artifact.

A snapshot looks like::

    {"layers": [
        {"x": {}, "y": {}},
        {"0": {"bias": -0.98, "weights": {"x": 0.83, "y": 1.24}},
         "1": {"bias": 3.48, "weights": {"x": 1.78, "y": -2.67}}},
        {"f": {"bias": 0.27, "weights": {"0": 1.31, "1": 2.00}}},
    ]}

Layer 0 and the last layer use label keys when a lookup is registered,
numeric strings otherwise.
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from .core.lookup import is_numeric_keys, lookup_from_hash
from .core.types import Array, Lookup, NetworkState
from .errors import SizeMismatchError, SnapshotFormatError

Snapshot = Dict[str, Any]


def _node_keys(size: int, lookup: Lookup | None) -> List[str]:
    if lookup:
        return list(lookup)
    return [str(index) for index in range(size)]


def encode(
    state: NetworkState,
    input_lookup: Lookup | None = None,
    output_lookup: Lookup | None = None,
) -> Snapshot:
    """Return the labeled JSON-compatible mapping for ``state``."""

    last = state.output_layer
    layers: List[Dict[str, Any]] = []
    prev_keys: List[str] = []
    for layer, size in enumerate(state.sizes):
        if layer == 0:
            lookup = input_lookup
        elif layer == last:
            lookup = output_lookup
        else:
            lookup = None
        keys = _node_keys(size, lookup)
        prev_index = (
            input_lookup if layer == 1 and input_lookup else {k: i for i, k in enumerate(prev_keys)}
        )
        node_index = lookup if lookup else {k: i for i, k in enumerate(keys)}
        nodes: Dict[str, Any] = {}
        for key in keys:
            if layer == 0:
                nodes[key] = {}
                continue
            row = node_index[key]
            nodes[key] = {
                "bias": float(state.biases[layer][row]),
                "weights": {
                    pred: float(state.weights[layer][row, prev_index[pred]]) for pred in prev_keys
                },
            }
        layers.append(nodes)
        prev_keys = keys
    return {"layers": layers}


@dataclass(frozen=True)
class DecodedSnapshot:
    sizes: List[int]
    weights: List[Array]
    biases: List[Array]
    input_lookup: Lookup | None
    output_lookup: Lookup | None


def _layers(snapshot: Mapping[str, Any]) -> Sequence[Mapping[str, Any]]:
    try:
        layers = snapshot["layers"]
    except (KeyError, TypeError) as exc:
        raise SnapshotFormatError("snapshot has no 'layers' entry") from exc
    if not isinstance(layers, Sequence) or len(layers) < 2:
        raise SnapshotFormatError("snapshot needs at least two layers")
    for index, layer in enumerate(layers):
        if not isinstance(layer, Mapping) or not layer:
            raise SnapshotFormatError(f"layer {index} has no nodes")
    return layers


def decode(snapshot: Mapping[str, Any]) -> DecodedSnapshot:
    """Rebuild dense parameters and lookups from a snapshot."""

    layers = _layers(snapshot)
    last = len(layers) - 1
    sizes = [len(layer) for layer in layers]
    weights: List[Array] = [np.zeros(0)]
    biases: List[Array] = [np.zeros(0)]
    input_lookup = None if is_numeric_keys(layers[0]) else lookup_from_hash(layers[0])
    output_lookup = None if is_numeric_keys(layers[last]) else lookup_from_hash(layers[last])

    for index in range(1, len(layers)):
        prev_keys = [str(key) for key in layers[index - 1]]
        matrix = np.zeros((sizes[index], sizes[index - 1]), dtype=np.float64)
        bias = np.zeros(sizes[index], dtype=np.float64)
        for row, (key, node) in enumerate(layers[index].items()):
            try:
                bias[row] = float(node["bias"])
                node_weights = node["weights"]
                matrix[row] = [float(node_weights[pred]) for pred in prev_keys]
            except (KeyError, TypeError) as exc:
                raise SnapshotFormatError(
                    f"layer {index} node {key!r} is missing {exc.args[0]!r}"
                ) from exc
        weights.append(matrix)
        biases.append(bias)

    return DecodedSnapshot(
        sizes=sizes,
        weights=weights,
        biases=biases,
        input_lookup=input_lookup,
        output_lookup=output_lookup,
    )


def _sigmoid(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


class StandaloneNetwork:
    """Callable that mimics ``Autoencoder.run`` from a snapshot alone.

    It walks the snapshot's labeled layers directly and shares no state with
    the engine that produced it.
    """

    def __init__(self, snapshot: Mapping[str, Any]):
        decode(snapshot)
        self.snapshot: Snapshot = copy.deepcopy(dict(snapshot))

    @property
    def input_keys(self) -> List[str]:
        return [str(key) for key in self.snapshot["layers"][0]]

    def _coerce(self, record: Mapping[str, float] | Sequence[float]) -> Dict[str, float]:
        if isinstance(record, Mapping):
            return {str(key): float(value or 0.0) for key, value in record.items()}
        values = list(record)
        keys = self.input_keys
        if len(values) != len(keys):
            raise SizeMismatchError("input", len(keys), len(values))
        return {key: float(value) for key, value in zip(keys, values)}

    def __call__(self, record: Mapping[str, float] | Sequence[float]) -> Dict[str, float]:
        values = self._coerce(record)
        output: Dict[str, float] = {}
        for layer in self.snapshot["layers"][1:]:
            output = {}
            for key, node in layer.items():
                total = node["bias"]
                for pred, weight in node["weights"].items():
                    total += weight * values.get(pred, 0.0)
                output[key] = _sigmoid(total)
            values = output
        return output

    def to_json(self) -> Snapshot:
        return copy.deepcopy(self.snapshot)


__all__ = ["Snapshot", "DecodedSnapshot", "encode", "decode", "StandaloneNetwork"]
