import json

import numpy as np
import pytest

from sparseae.errors import SizeMismatchError, SnapshotFormatError
from sparseae.serialization import StandaloneNetwork, decode
from sparseae.training.engine import Autoencoder


def test_to_json_layout_for_dense_network(trained_engine):
    snapshot = trained_engine.to_json()
    layers = snapshot["layers"]
    assert len(layers) == 3
    assert list(layers[0]) == ["0", "1", "2", "3"]
    assert all(node == {} for node in layers[0].values())
    assert list(layers[1]) == ["0", "1", "2"]
    node = layers[1]["2"]
    assert set(node) == {"bias", "weights"}
    assert list(node["weights"]) == ["0", "1", "2", "3"]
    assert node["weights"]["3"] == pytest.approx(trained_engine.state.weights[1][2, 3])
    assert layers[2]["1"]["bias"] == pytest.approx(trained_engine.state.biases[2][1])


def test_round_trip_reproduces_run(trained_engine):
    snapshot = json.loads(json.dumps(trained_engine.to_json()))
    restored = Autoencoder().from_json(snapshot)
    assert restored.sizes == trained_engine.sizes
    rng = np.random.default_rng(0)
    for x in rng.random((10, 4)):
        assert np.allclose(restored.run(x), trained_engine.run(x))


def test_round_trip_with_labels():
    data = [
        {"input": {"a": 1}, "output": {"x": 1}},
        {"input": {"b": 1}, "output": {"y": 1}},
        {"input": {"c": 1}, "output": {"x": 1, "y": 1}},
    ]
    engine = Autoencoder(seed=4)
    engine.train(data, iterations=300)
    snapshot = engine.to_json()
    assert list(snapshot["layers"][0]) == ["a", "b", "c"]
    assert list(snapshot["layers"][-1]) == ["x", "y"]
    assert list(snapshot["layers"][1]["0"]["weights"]) == ["a", "b", "c"]

    restored = Autoencoder().from_json(snapshot)
    assert restored.input_lookup == engine.input_lookup
    assert restored.output_lookup == engine.output_lookup
    record = {"b": 1, "c": 0.5}
    original = engine.run(record)
    again = restored.run(record)
    assert set(again) == {"x", "y"}
    for key in original:
        assert again[key] == pytest.approx(original[key])


def test_round_trip_treats_index_labels_as_dense():
    data = [{"input": {"0": 1, "1": 0}}, {"input": {"1": 1}}]
    engine = Autoencoder(seed=1, hidden_layers=[2])
    engine.train(data, iterations=20)
    assert engine.input_lookup == {"0": 0, "1": 1}

    restored = Autoencoder().from_json(engine.to_json())
    assert restored.input_lookup is None
    assert restored.output_lookup is None
    out = restored.run([0.0, 1.0])
    assert isinstance(out, np.ndarray)
    assert np.allclose(out, list(engine.run({"1": 1}).values()))


def test_to_function_matches_run_dense(trained_engine):
    func = trained_engine.to_function()
    assert isinstance(func, StandaloneNetwork)
    x = [0.0, 1.0, 0.0, 0.25]
    out = func(x)
    assert list(out) == ["0", "1", "2", "3"]
    assert np.allclose(list(out.values()), trained_engine.run(x))
    assert np.allclose(list(func({"1": 1.0, "3": 0.25}).values()), trained_engine.run(x))


def test_to_function_rejects_wrong_length_sequence(trained_engine):
    func = trained_engine.to_function()
    with pytest.raises(SizeMismatchError):
        func([1.0, 0.0])
    with pytest.raises(SizeMismatchError):
        func([0.0, 1.0, 0.0, 0.25, 1.0])


def test_to_function_is_independent_of_engine():
    data = [{"input": {"p": 1}, "output": {"p": 1}}, {"input": {"q": 1}, "output": {"q": 1}}]
    engine = Autoencoder(seed=2)
    engine.train(data, iterations=50)
    func = engine.to_function()
    before = func({"p": 1})
    expected = engine.run({"p": 1})
    for key in expected:
        assert before[key] == pytest.approx(expected[key])
    engine.train(data, iterations=200)
    assert func({"p": 1}) == before


@pytest.mark.parametrize(
    "snapshot",
    [
        {},
        {"layers": []},
        {"layers": [{"0": {}}]},
        {"layers": [{"0": {}}, {}]},
        {"layers": [{"0": {}}, {"0": {"weights": {"0": 0.1}}}]},
        {"layers": [{"0": {}, "1": {}}, {"0": {"bias": 0.0, "weights": {"0": 0.1}}}]},
    ],
)
def test_malformed_snapshots_raise(snapshot):
    with pytest.raises(SnapshotFormatError):
        decode(snapshot)
    with pytest.raises(SnapshotFormatError):
        Autoencoder().from_json(snapshot)
    with pytest.raises(SnapshotFormatError):
        StandaloneNetwork(snapshot)


def test_save_and_load(tmp_path, trained_engine):
    path = trained_engine.save(tmp_path / "nested" / "model.json")
    loaded = Autoencoder.load(path)
    x = np.array([1.0, 0.0, 0.0, 0.0])
    assert np.allclose(loaded.run(x), trained_engine.run(x))
