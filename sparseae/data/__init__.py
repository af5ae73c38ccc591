"""Dataset registry and built-in datasets."""

# Ensure built-in datasets register themselves when the package is imported.
from . import builtin as _builtin  # noqa: F401
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = ["DatasetSpec", "available_datasets", "get_dataset", "register_dataset"]
