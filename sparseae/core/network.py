"""Forward, backward and update primitives over a :class:`NetworkState`."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..errors import SizeMismatchError, TopologyError
from .activations import mse, random_weights, sigmoid, sigmoid_deriv
from .types import Array, NetworkState, layer_sizes


def _empty() -> Array:
    return np.zeros(0, dtype=np.float64)


def init_state(sizes: Sequence[int], rng: np.random.Generator) -> NetworkState:
    """Allocate outputs, errors, deltas, weights, biases and momentum buffers."""

    sizes = layer_sizes(sizes)
    if len(sizes) < 2:
        raise TopologyError(f"need at least an input and an output layer, got {sizes}")
    if any(size <= 0 for size in sizes):
        raise TopologyError(f"layer sizes must be positive, got {sizes}")

    outputs, errors, deltas = [], [], []
    weights, biases, changes = [], [], []
    for layer, size in enumerate(sizes):
        outputs.append(np.zeros(size, dtype=np.float64))
        errors.append(np.zeros(size, dtype=np.float64))
        deltas.append(np.zeros(size, dtype=np.float64))
        if layer == 0:
            weights.append(_empty())
            biases.append(_empty())
            changes.append(_empty())
            continue
        prev_size = sizes[layer - 1]
        biases.append(random_weights(rng, size))
        weights.append(random_weights(rng, (size, prev_size)))
        changes.append(np.zeros((size, prev_size), dtype=np.float64))

    hidden_size = sizes[len(sizes) - 2]
    return NetworkState(
        sizes=sizes,
        outputs=outputs,
        errors=errors,
        deltas=deltas,
        weights=weights,
        biases=biases,
        changes=changes,
        hidden_sums=np.zeros(hidden_size, dtype=np.float64),
        avg_hidden_activation=np.zeros(hidden_size, dtype=np.float64),
    )


def state_from_parameters(weights: Sequence[Array], biases: Sequence[Array]) -> NetworkState:
    """Build a state around existing parameters with zeroed training buffers."""

    sizes = [int(np.shape(weights[1])[1])] + [int(np.shape(w)[0]) for w in weights[1:]]
    state = init_state(sizes, np.random.default_rng(0))
    for layer in range(1, len(sizes)):
        state.weights[layer] = np.array(weights[layer], dtype=np.float64)
        state.biases[layer] = np.array(biases[layer], dtype=np.float64)
    return state


def forward(state: NetworkState, inputs: Array) -> Array:
    """Sigmoid activations layer by layer; returns the output layer."""

    if inputs.ndim != 1 or inputs.shape[0] != state.sizes[0]:
        raise SizeMismatchError("input", state.sizes[0], int(inputs.size))
    state.outputs[0] = inputs
    activ = inputs
    for layer in range(1, len(state.sizes)):
        activ = sigmoid(state.weights[layer] @ activ + state.biases[layer])
        state.outputs[layer] = activ
    return activ


def accumulate_hidden(state: NetworkState) -> None:
    state.hidden_sums += state.outputs[state.hidden_layer]


def backward(
    state: NetworkState,
    target: Array,
    hidden_penalty: Array | None = None,
) -> None:
    """Fill ``errors`` and ``deltas`` from the output layer back to the input.

    ``hidden_penalty`` is added to the hidden-layer error before the sigmoid
    derivative is applied.
    """

    last = state.output_layer
    if target.ndim != 1 or target.shape[0] != state.sizes[last]:
        raise SizeMismatchError("target", state.sizes[last], int(target.size))
    for layer in range(last, -1, -1):
        output = state.outputs[layer]
        if layer == last:
            error = target - output
        else:
            error = state.weights[layer + 1].T @ state.deltas[layer + 1]
        state.errors[layer] = error
        if hidden_penalty is not None and layer == state.hidden_layer:
            error = error + hidden_penalty
        state.deltas[layer] = error * sigmoid_deriv(output)


def adjust(state: NetworkState, learning_rate: float, momentum: float) -> None:
    """Gradient step with momentum on weights; biases get no momentum."""

    for layer in range(1, len(state.sizes)):
        incoming = state.outputs[layer - 1]
        delta = state.deltas[layer]
        change = learning_rate * np.outer(delta, incoming) + momentum * state.changes[layer]
        state.changes[layer] = change
        state.weights[layer] += change
        state.biases[layer] += learning_rate * delta


def pattern_error(state: NetworkState) -> float:
    return mse(state.errors[state.output_layer])


__all__ = [
    "init_state",
    "state_from_parameters",
    "forward",
    "accumulate_hidden",
    "backward",
    "adjust",
    "pattern_error",
]
