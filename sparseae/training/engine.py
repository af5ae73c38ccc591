"""Autoencoder engine: per-pattern backpropagation with momentum and sparsity."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence

import numpy as np

from ..core.lookup import build_lookup, to_array, to_hash
from ..core.network import (
    accumulate_hidden,
    adjust,
    backward,
    forward,
    init_state,
    pattern_error,
    state_from_parameters,
)
from ..core.sparsity import REGISTRY as SPARSITY_REGISTRY
from ..core.types import (
    Array,
    Datum,
    Dense,
    Labeled,
    Lookup,
    NetworkState,
    TrainingStatus,
    TrainResult,
    as_example,
)
from ..errors import (
    InvalidInputError,
    NotInitializedError,
    SizeMismatchError,
    TopologyError,
)
from ..serialization import StandaloneNetwork, decode, encode
from .config import AutoencoderConfig, TrainOptions

logger = logging.getLogger(__name__)


def default_hidden_sizes(input_size: int) -> List[int]:
    return [max(3, input_size // 2)]


class Autoencoder:
    """Feed-forward sigmoid network trained to reproduce its targets.

    Options mirror :class:`~sparseae.training.config.AutoencoderConfig`; pass
    either a config object or keyword arguments (or both, keywords win).
    """

    def __init__(self, config: AutoencoderConfig | None = None, **options: Any) -> None:
        if config is None:
            config = AutoencoderConfig.from_mapping(options)
        elif options:
            config = replace(config, **options)
        self.config = config
        self.state: NetworkState | None = None
        self.input_lookup: Lookup | None = None
        self.output_lookup: Lookup | None = None
        self._sparsity = SPARSITY_REGISTRY.get(config.sparsity_gradient)

    # ------------------------------------------------------------------
    # State

    @property
    def sizes(self) -> List[int]:
        return list(self._require_state().sizes)

    @property
    def avg_hidden_activation(self) -> Array:
        return self._require_state().avg_hidden_activation

    def _require_state(self) -> NetworkState:
        if self.state is None:
            raise NotInitializedError("network has not been trained, initialized or loaded")
        return self.state

    def initialize(self, sizes: Sequence[int]) -> NetworkState:
        if self.config.make_sparse and len(sizes) < 3:
            raise TopologyError("sparse mode needs a hidden layer between input and output")
        rng = np.random.default_rng(self.config.seed)
        self.state = init_state(sizes, rng)
        return self.state

    # ------------------------------------------------------------------
    # Inference

    def run(self, input: Any) -> Array | dict[str, float]:
        """Forward pass with label translation at both ends when registered."""

        example = as_example(input)
        if isinstance(example, Labeled):
            if self.input_lookup is None:
                raise InvalidInputError("labeled input given to a network trained on vectors")
            vector = to_array(self.input_lookup, example.values)
        else:
            vector = example.values
        output = self.run_input(vector)
        if self.output_lookup is not None:
            return to_hash(self.output_lookup, output)
        return output

    def run_input(self, input: Any) -> Array:
        """Forward pass over a dense vector; the vector is kept, not copied."""

        return forward(self._require_state(), np.asarray(input, dtype=np.float64))

    # ------------------------------------------------------------------
    # Training

    def compute_hidden_sums(self) -> None:
        accumulate_hidden(self._require_state())

    def hidden_penalty(self) -> Array | None:
        """Scaled sparsity term for the hidden deltas, ``None`` when not sparse."""

        if not self.config.make_sparse:
            return None
        state = self._require_state()
        term = self._sparsity(
            self.config.sparsity_parameter,
            state.avg_hidden_activation,
            epsilon=self.config.sparsity_epsilon,
        )
        return self.config.sparsity_penalty * term

    def calculate_deltas(self, target: Any) -> None:
        state = self._require_state()
        backward(state, np.asarray(target, dtype=np.float64), self.hidden_penalty())

    def adjust_weights(self) -> None:
        adjust(self._require_state(), self.config.learning_rate, self.config.momentum)

    def train_pattern(self, input: Any, output: Any) -> float:
        """One forward/backward/update cycle; returns the pattern's MSE."""

        self.run_input(input)
        self.calculate_deltas(output)
        self.adjust_weights()
        return pattern_error(self._require_state())

    def format_data(self, data: Iterable[Any]) -> List[Datum]:
        """Turn label-keyed or vector records into dense :class:`Datum` items.

        A record without ``output`` is its own target.
        """

        records = [_as_record(item) for item in data]
        if not records:
            raise InvalidInputError("training data is empty")
        inputs = [as_example(record["input"]) for record in records]
        outputs = [as_example(record.get("output", record["input"])) for record in records]

        dense_inputs, self.input_lookup = _densify(inputs, self.input_lookup, "input")
        dense_outputs, self.output_lookup = _densify(outputs, self.output_lookup, "output")
        return [Datum(input=x, output=y) for x, y in zip(dense_inputs, dense_outputs)]

    def _update_sparsity(self, data: Sequence[Datum]) -> None:
        state = self._require_state()
        for datum in data:
            self.run_input(datum.input)
            self.compute_hidden_sums()
        state.avg_hidden_activation = state.hidden_sums / len(data)
        state.hidden_sums = np.zeros_like(state.hidden_sums)

    def train(
        self,
        data: Iterable[Any],
        options: TrainOptions | None = None,
        **kwargs: Any,
    ) -> TrainResult:
        """Train until ``iterations`` are spent or the error drops below ``error_thresh``."""

        if options is None:
            options = TrainOptions.from_mapping(kwargs)
        elif kwargs:
            options = replace(options, **kwargs)
        data = self.format_data(data)

        input_size = int(data[0].input.size)
        output_size = int(data[0].output.size)
        hidden = self.config.hidden_layers
        hidden_sizes = list(hidden) if hidden is not None else default_hidden_sizes(input_size)
        self.initialize([input_size, *hidden_sizes, output_size])
        state = self._require_state()

        error = 1.0
        iteration = 0
        while iteration < options.iterations and error > options.error_thresh:
            if self.config.make_sparse:
                self._update_sparsity(data)

            total = 0.0
            for datum in data:
                total += self.train_pattern(datum.input, datum.output)
            error = total / len(data)

            mean_hidden = (
                float(np.mean(state.avg_hidden_activation)) if self.config.make_sparse else None
            )
            if options.log and iteration % options.log_period == 0:
                logger.info("iterations: %d training error: %.6f", iteration, error)
                if mean_hidden is not None:
                    logger.info("avg hidden activation: %.6f", mean_hidden)
            if options.callback is not None and iteration % options.callback_period == 0:
                options.callback(
                    TrainingStatus(
                        iterations=iteration, error=error, avg_hidden_activation=mean_hidden
                    )
                )
            iteration += 1

        return TrainResult(error=float(error), iterations=iteration)

    # ------------------------------------------------------------------
    # Serialization

    def to_json(self) -> dict:
        return encode(self._require_state(), self.input_lookup, self.output_lookup)

    def from_json(self, snapshot: Mapping[str, Any]) -> "Autoencoder":
        """Replace the network with the one described by ``snapshot``.

        An outer layer whose keys are exactly ``"0"`` .. ``"n-1"`` in order is
        read as unlabeled, so a label set spelled that way comes back as a
        dense network without a lookup.
        """

        decoded = decode(snapshot)
        self.state = state_from_parameters(decoded.weights, decoded.biases)
        self.input_lookup = decoded.input_lookup
        self.output_lookup = decoded.output_lookup
        return self

    def to_function(self) -> StandaloneNetwork:
        return StandaloneNetwork(self.to_json())

    def save(self, path: str | Path) -> str:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_json(), indent=2))
        return str(path)

    @classmethod
    def load(cls, path: str | Path, config: AutoencoderConfig | None = None) -> "Autoencoder":
        snapshot = json.loads(Path(path).read_text())
        return cls(config).from_json(snapshot)


def _as_record(item: Any) -> Mapping[str, Any]:
    if isinstance(item, Datum):
        return {"input": item.input, "output": item.output}
    if isinstance(item, Mapping) and "input" in item:
        return item
    raise InvalidInputError("training records need an 'input' entry")


def _labeled_values(examples: Sequence[Dense | Labeled], what: str) -> List[Mapping[str, float]]:
    values = []
    for example in examples:
        if not isinstance(example, Labeled):
            raise InvalidInputError(f"{what} records mix labeled and dense values")
        values.append(example.values)
    return values


def _densify(
    examples: Sequence[Dense | Labeled],
    lookup: Lookup | None,
    what: str,
) -> tuple[List[Array], Lookup | None]:
    """Dense vectors for ``examples`` plus the lookup used to build them.

    Labeled examples build ``lookup`` when none is registered yet.
    """

    if isinstance(examples[0], Labeled):
        records = _labeled_values(examples, what)
        if lookup is None:
            lookup = build_lookup(records)
        return [to_array(lookup, values) for values in records], lookup

    vectors: List[Array] = []
    expected = examples[0].values.size
    for example in examples:
        if not isinstance(example, Dense):
            raise InvalidInputError(f"{what} records mix labeled and dense values")
        vector = example.values
        if vector.ndim != 1 or vector.size != expected:
            raise SizeMismatchError(what, int(expected), int(vector.size))
        vectors.append(vector)
    if expected == 0:
        raise InvalidInputError(f"{what} vectors are empty")
    return vectors, lookup


__all__ = ["Autoencoder", "default_hidden_sizes"]
