"""Exception taxonomy for sparseae."""

from __future__ import annotations


class SparseAEError(Exception):
    """Base class for every error raised by sparseae."""


class SizeMismatchError(SparseAEError, ValueError):
    """A vector does not match the size of the layer it is fed to."""

    def __init__(self, what: str, expected: int, actual: int) -> None:
        super().__init__(f"{what} has length {actual}, expected {expected}")
        self.expected = expected
        self.actual = actual


class InvalidInputError(SparseAEError, ValueError):
    """Training data is empty or structurally unusable."""


class TopologyError(SparseAEError, ValueError):
    """Layer sizes do not describe a usable network."""


class ConfigurationError(SparseAEError, ValueError):
    """An engine or training option is out of range."""


class NotInitializedError(SparseAEError, RuntimeError):
    """The engine was used before ``train``, ``initialize`` or ``from_json``."""


class SnapshotFormatError(SparseAEError, KeyError):
    """A serialized snapshot is missing layers, nodes or weights."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


__all__ = [
    "SparseAEError",
    "SizeMismatchError",
    "InvalidInputError",
    "TopologyError",
    "ConfigurationError",
    "NotInitializedError",
    "SnapshotFormatError",
]
