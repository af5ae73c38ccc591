import json

from sparseae.core.types import TrainingStatus
from sparseae.reporting.metrics import CallbackFanout, CsvSink, JsonlSink, MetricsCapture
from sparseae.reporting.plots import PlotAdapter
from sparseae.reporting.summary import build_summary, compute_auc, write_summary


def test_sinks_record_statuses(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", seed=3, sha="abc")
    csv_sink = CsvSink(tmp_path / "m.csv")
    capture = MetricsCapture()
    fanout = CallbackFanout(jsonl, csv_sink, capture, None)
    fanout(TrainingStatus(iterations=0, error=0.25))
    fanout(TrainingStatus(iterations=10, error=0.125))

    lines = [json.loads(line) for line in (tmp_path / "m.jsonl").read_text().splitlines()]
    assert lines[1] == {"seed": 3, "sha": "abc", "iteration": 10, "error": 0.125}
    assert (tmp_path / "m.csv").read_text().splitlines()[0] == "error,iteration"
    assert capture.last == {"iteration": 10, "error": 0.125}


def test_summary_tracks_best_iteration(tmp_path):
    records = [
        {"iteration": 0, "error": 3.0, "avg_hidden_activation": 0.5},
        {"iteration": 10, "error": 1.0, "avg_hidden_activation": 0.25},
        {"iteration": 20, "error": 2.0, "avg_hidden_activation": 0.5},
    ]
    out = json.loads(open(write_summary(records, tmp_path / "s.json", tail=2)).read())
    assert out["records"] == 3
    assert out["best_iteration"] == 10
    assert out["best_error"] == 1.0
    assert out["last_iteration"] == 20
    assert out["metrics"]["error"]["min"] == 1.0
    assert out["metrics"]["error"]["last"] == 2.0
    assert out["metrics"]["error"]["tail_auc"] == compute_auc([1.0, 2.0], [10, 20]) == 15.0
    assert out["metrics"]["avg_hidden_activation"]["max"] == 0.5


def test_summary_skips_untracked_and_missing_metrics():
    summary = build_summary([{"iteration": 0, "error": 0.5, "seed": 4}], tail=8)
    assert set(summary["metrics"]) == {"error"}
    assert summary["metrics"]["error"]["tail_auc"] == 0.0
    empty = build_summary([], tail=8)
    assert empty["records"] == 0
    assert empty["metrics"] == {}
    assert "best_iteration" not in empty


def test_compute_auc_unit_steps():
    assert compute_auc([2.0, 1.0]) == 1.5
    assert compute_auc([4.0]) == 0.0


def test_plot_adapter_headless(tmp_path):
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_status(TrainingStatus(iterations=0, error=1.0))
    adapter.on_status(TrainingStatus(iterations=1, error=0.5))
    adapter.close()
    assert (tmp_path / "loss.png").exists()


def test_plot_adapter_disabled(tmp_path):
    adapter = PlotAdapter(tmp_path / "off")
    adapter(TrainingStatus(iterations=0, error=1.0))
    assert adapter.close() is None
    assert not (tmp_path / "off").exists()
