"""Sparsity-penalty gradients applied to the hidden layer deltas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from .types import Array

DEFAULT_EPSILON = 1e-6

PenaltyFn = Callable[[float, Array], Array]


def clamp_activation(avg_activation: Array, epsilon: float = DEFAULT_EPSILON) -> Array:
    """Keep mean activations strictly inside ``(0, 1)``."""

    return np.clip(avg_activation, epsilon, 1.0 - epsilon)


def kl_gradient(target: float, avg_activation: Array) -> Array:
    """d/d(rho_hat) of ``KL(target || rho_hat)``."""

    return -(target / avg_activation) + (1.0 - target) / (1.0 - avg_activation)


@dataclass(frozen=True)
class SparsityGradient:
    """Term added to the hidden-layer error before the sigmoid derivative.

    Hidden deltas become ``(error + beta * term) * out * (1 - out)``.
    """

    name: str
    fn: PenaltyFn

    def __call__(
        self,
        target: float,
        avg_activation: Array,
        *,
        epsilon: float = DEFAULT_EPSILON,
    ) -> Array:
        return self.fn(target, clamp_activation(avg_activation, epsilon))


class SparsityRegistry:
    """Central registry for sparsity gradients."""

    def __init__(self) -> None:
        self._registry: Dict[str, SparsityGradient] = {}

    def register(self, name: str, fn: PenaltyFn) -> None:
        self._registry[name] = SparsityGradient(name, fn)

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def get(self, name: str) -> SparsityGradient:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown sparsity gradient {name!r}. Available: {available}")
        return self._registry[name]


REGISTRY = SparsityRegistry()


def _legacy(target: float, avg_activation: Array) -> Array:
    # Added with the same sign as the error signal. Known to converge poorly.
    return kl_gradient(target, avg_activation)


def _kl(target: float, avg_activation: Array) -> Array:
    # Errors are ``target - output`` (descent direction), so the loss
    # gradient of the penalty enters with the opposite sign.
    return -kl_gradient(target, avg_activation)


REGISTRY.register("legacy", _legacy)
REGISTRY.register("kl", _kl)

__all__ = [
    "DEFAULT_EPSILON",
    "SparsityGradient",
    "SparsityRegistry",
    "REGISTRY",
    "clamp_activation",
    "kl_gradient",
]
