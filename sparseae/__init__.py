"""sparseae public API."""

from .core import activations, lookup, sparsity, types  # noqa: F401
from .core.lookup import build_lookup, lookup_from_hash, to_array, to_hash
from .core.types import Dense, Labeled, RunResult, TrainingStatus, TrainResult
from .errors import (
    ConfigurationError,
    InvalidInputError,
    NotInitializedError,
    SizeMismatchError,
    SnapshotFormatError,
    SparseAEError,
    TopologyError,
)
from .serialization import StandaloneNetwork
from .training.config import AutoencoderConfig, TrainOptions
from .training.engine import Autoencoder
from .training.pipelines import load_preset, presets, run_pipeline

__all__ = [
    "Autoencoder",
    "AutoencoderConfig",
    "TrainOptions",
    "StandaloneNetwork",
    "Dense",
    "Labeled",
    "RunResult",
    "TrainResult",
    "TrainingStatus",
    "build_lookup",
    "lookup_from_hash",
    "to_array",
    "to_hash",
    "load_preset",
    "presets",
    "run_pipeline",
    "activations",
    "lookup",
    "sparsity",
    "types",
    "SparseAEError",
    "SizeMismatchError",
    "InvalidInputError",
    "TopologyError",
    "ConfigurationError",
    "NotInitializedError",
    "SnapshotFormatError",
]
