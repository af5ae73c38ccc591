import json
from pathlib import Path

import pytest

from sparseae.training import pipelines
from sparseae.training.engine import Autoencoder


def _config(run_dir: Path) -> dict:
    return {
        "data": {"name": "identity", "options": {"size": 4}},
        "model": {"hidden_layers": [3], "make_sparse": True, "sparsity_gradient": "kl"},
        "train": {
            "iterations": 60,
            "error_thresh": 0.0,
            "callback_period": 10,
            "seed": 11,
            "run_dir": str(run_dir),
            "enable_plots": False,
        },
    }


def test_pipeline_produces_artifacts(tmp_path):
    config = _config(tmp_path / "run")
    result = pipelines.run_pipeline(config)

    assert result.iterations == 60
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 11
    assert manifest["config"]["model"]["hidden_layers"] == [3]
    assert manifest["dataset"]["type"] == "identity"
    assert manifest["result"]["sizes"] == [4, 3, 4]
    assert manifest["result"]["last_metrics"]["iteration"] == 50

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [r["iteration"] for r in records] == [0, 10, 20, 30, 40, 50]
    assert all("error" in r and "avg_hidden_activation" in r for r in records)
    assert records[0]["seed"] == 11
    last = {key: records[-1][key] for key in ("iteration", "error", "avg_hidden_activation")}
    assert manifest["result"]["last_metrics"] == last

    csv_lines = (tmp_path / "run" / "metrics.csv").read_text().splitlines()
    assert csv_lines[0] == "avg_hidden_activation,error,iteration"
    assert len(csv_lines) == 7

    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["records"] == 6
    assert set(summary["metrics"]) == {"error", "avg_hidden_activation"}
    errors = [r["error"] for r in records]
    assert summary["best_error"] == min(errors)
    assert summary["best_iteration"] == records[errors.index(min(errors))]["iteration"]

    model = Autoencoder.load(result.model_path)
    assert model.sizes == [4, 3, 4]


def test_pipeline_determinism(tmp_path):
    first = pipelines.run_pipeline(_config(tmp_path / "run_a"))
    second = pipelines.run_pipeline(_config(tmp_path / "run_b"))
    assert Path(first.metrics_path).read_bytes() == Path(second.metrics_path).read_bytes()
    assert Path(first.summary_path).read_bytes() == Path(second.summary_path).read_bytes()
    assert Path(first.model_path).read_bytes() == Path(second.model_path).read_bytes()


def test_presets_include_builtin_and_file_presets():
    names = set(pipelines.presets())
    assert {"identity-4", "sparse-identity-8", "binary-16x8", "labeled-colors"} <= names
    assert "sparse-binary-legacy" in names
    preset = pipelines.load_preset("sparse-binary-legacy")
    assert preset["model"]["sparsity_gradient"] == "legacy"
    with pytest.raises(KeyError, match="identity-4"):
        pipelines.load_preset("missing")


def test_labeled_preset_writes_labeled_model(tmp_path):
    config = pipelines.load_preset("labeled-colors")
    config["train"]["iterations"] = 20
    config["train"]["run_dir"] = str(tmp_path / "labeled")
    result = pipelines.run_pipeline(config)
    snapshot = json.loads(Path(result.model_path).read_text())
    assert list(snapshot["layers"][0]) == ["red", "green", "blue", "alpha"]


def test_json_dataset(tmp_path):
    data_path = tmp_path / "data.json"
    data_path.write_text(json.dumps([{"input": [0, 1, 1]}, {"input": [1, 0, 0]}]))
    config = {
        "data": {"name": "json", "options": {"path": str(data_path)}},
        "model": {},
        "train": {"iterations": 5, "seed": 0, "run_dir": str(tmp_path / "run")},
    }
    result = pipelines.run_pipeline(config)
    assert result.iterations == 5
    assert Autoencoder.load(result.model_path).sizes == [3, 3, 3]
