"""Core numerical primitives for sparseae."""

from . import activations, lookup, network, sparsity, types

__all__ = ["activations", "lookup", "network", "sparsity", "types"]
