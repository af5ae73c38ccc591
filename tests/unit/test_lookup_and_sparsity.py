import numpy as np
import pytest

from sparseae.core.lookup import (
    build_lookup,
    is_numeric_keys,
    lookup_from_hash,
    to_array,
    to_hash,
)
from sparseae.core.sparsity import REGISTRY, clamp_activation, kl_gradient


def test_build_lookup_merges_keys_in_first_seen_order():
    lookup = build_lookup([{"a": 1, "b": 0}, {"c": 1}, {"b": 1, "d": 1}])
    assert lookup == {"a": 0, "b": 1, "c": 2, "d": 3}


def test_to_array_fills_missing_labels_with_zero():
    lookup = {"a": 0, "b": 1, "c": 2}
    assert np.array_equal(to_array(lookup, {"c": 0.5}), np.array([0.0, 0.0, 0.5]))
    assert np.array_equal(to_array(lookup, {"a": 1, "zzz": 3}), np.array([1.0, 0.0, 0.0]))


def test_to_hash_and_lookup_from_hash():
    lookup = lookup_from_hash({"x": {}, "y": {}})
    assert lookup == {"x": 0, "y": 1}
    assert to_hash(lookup, np.array([0.25, 0.75])) == {"x": 0.25, "y": 0.75}


def test_numeric_key_detection():
    assert is_numeric_keys(["0", "1", "2"])
    assert not is_numeric_keys(["1", "0"])
    assert not is_numeric_keys(["a", "b"])


def test_legacy_gradient_matches_formula():
    rho, avg = 0.05, np.array([0.2, 0.5])
    term = REGISTRY.get("legacy")(rho, avg)
    assert np.allclose(term, -(rho / avg) + (1 - rho) / (1 - avg))


def test_kl_gradient_is_sign_corrected():
    avg = np.array([0.3])
    legacy = REGISTRY.get("legacy")(0.05, avg)
    corrected = REGISTRY.get("kl")(0.05, avg)
    assert legacy[0] > 0
    assert np.allclose(corrected, -legacy)


def test_gradients_stay_finite_at_saturated_activations():
    avg = np.array([0.0, 1.0])
    for name in REGISTRY.names():
        term = REGISTRY.get(name)(0.05, avg, epsilon=1e-6)
        assert np.all(np.isfinite(term))
    assert np.allclose(clamp_activation(avg, 1e-3), [1e-3, 1 - 1e-3])
    assert kl_gradient(0.05, np.array([0.05]))[0] == pytest.approx(0.0)


def test_unknown_gradient_lists_available_names():
    with pytest.raises(KeyError, match="legacy"):
        REGISTRY.get("l1")
