"""Activation and error utilities for sparseae."""

from __future__ import annotations

import numpy as np

from .types import Array

WEIGHT_LOW = -0.02
WEIGHT_WIDTH = 0.05


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid ``1 / (1 + e^-x)``."""

    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(output: Array) -> Array:
    """Derivative of the sigmoid expressed through its output."""

    return output * (1.0 - output)


def mse(errors: Array) -> float:
    """Mean of the squared per-node errors."""

    if errors.size == 0:
        return 0.0
    return float(np.mean(np.square(errors)))


def random_weights(rng: np.random.Generator, shape) -> Array:
    """Small uniform values in ``[-0.02, 0.03)`` to keep units off saturation."""

    return rng.random(shape) * WEIGHT_WIDTH + WEIGHT_LOW


__all__ = ["sigmoid", "sigmoid_deriv", "mse", "random_weights"]
