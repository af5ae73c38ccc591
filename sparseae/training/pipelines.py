"""Config-driven autoencoder runs that write metrics, model and manifest."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Mapping

from ..core.types import RunResult
from ..data import get_dataset
from ..reporting._git import git_sha
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CallbackFanout, CsvSink, JsonlSink, MetricsCapture
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .config import AutoencoderConfig, TrainOptions
from .engine import Autoencoder

_PRESETS: Dict[str, Mapping[str, object]] = {
    "identity-4": {
        "data": {"name": "identity", "options": {"size": 4}},
        "model": {"learning_rate": 0.3, "momentum": 0.1},
        "train": {
            "iterations": 20000,
            "error_thresh": 0.005,
            "callback_period": 100,
            "seed": 0,
            "run_dir": "runs/identity-4",
            "enable_plots": False,
        },
    },
    "sparse-identity-8": {
        "data": {"name": "identity", "options": {"size": 8}},
        "model": {
            "hidden_layers": [6],
            "make_sparse": True,
            "sparsity_parameter": 0.05,
            "sparsity_penalty": 0.1,
            "sparsity_gradient": "kl",
        },
        "train": {
            "iterations": 5000,
            "error_thresh": 0.005,
            "callback_period": 50,
            "seed": 1,
            "run_dir": "runs/sparse-identity-8",
            "enable_plots": False,
        },
    },
    "binary-16x8": {
        "data": {"name": "binary", "options": {"n": 16, "size": 8, "density": 0.25, "seed": 0}},
        "model": {"hidden_layers": [6], "learning_rate": 0.5},
        "train": {
            "iterations": 3000,
            "error_thresh": 0.01,
            "callback_period": 50,
            "seed": 2,
            "run_dir": "runs/binary-16x8",
            "enable_plots": False,
        },
    },
    "labeled-colors": {
        "data": {"name": "labeled", "options": {"labels": ["red", "green", "blue", "alpha"]}},
        "model": {"hidden_layers": [3]},
        "train": {
            "iterations": 5000,
            "callback_period": 100,
            "seed": 3,
            "run_dir": "runs/labeled-colors",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None

_TRAIN_OPTION_KEYS = {"iterations", "error_thresh", "log", "log_period", "callback_period"}


def read_config_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load configs in YAML format") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        presets: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                presets[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = presets
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        available = ", ".join(sorted(presets()))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from exc


def build_engine(config: Mapping[str, object]) -> Autoencoder:
    model_cfg = dict(config.get("model", {}))  # type: ignore[arg-type]
    train_cfg = config.get("train", {})
    if "seed" in train_cfg and "seed" not in model_cfg:  # type: ignore[operator]
        model_cfg["seed"] = int(train_cfg["seed"])  # type: ignore[index]
    return Autoencoder(AutoencoderConfig.from_mapping(model_cfg))


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train one autoencoder as described by ``config`` and write its artifacts."""

    data_cfg = config.get("data", {})
    train_cfg: Mapping[str, object] = config.get("train", {})  # type: ignore[assignment]
    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))  # type: ignore[index, union-attr]

    engine = build_engine(config)
    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=engine.config.seed, sha=git_sha())
    csv_sink = CsvSink(run_dir / "metrics.csv")
    capture = MetricsCapture()
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    options = TrainOptions.from_mapping(
        {key: value for key, value in train_cfg.items() if key in _TRAIN_OPTION_KEYS}
    )

    _print_startup_summary(
        dataset_name=dataset.name,
        records=len(dataset),
        model=engine.config.to_dict(),
        options=options,
    )
    result = engine.train(
        dataset.examples,
        options,
        callback=CallbackFanout(jsonl, csv_sink, capture, plots),
    )
    plots.close()

    model_path = engine.save(run_dir / "model.json")
    resolved = _resolved_config(config, engine)
    (run_dir / "config.json").write_text(json.dumps(resolved, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=resolved,
        dataset_provenance=dataset.provenance,
        result={
            "error": result.error,
            "iterations": result.iterations,
            "sizes": engine.sizes,
            "last_metrics": capture.last,
        },
    )
    summary_tail = int(train_cfg.get("summary_tail", 32))  # type: ignore[arg-type]
    summary_path = write_summary(capture.history, run_dir / "summary.json", tail=summary_tail)

    return RunResult(
        iterations=result.iterations,
        error=result.error,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        model_path=model_path,
        summary_path=summary_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _resolved_config(config: Mapping[str, object], engine: Autoencoder) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config))
    copied["model"] = engine.config.to_dict()
    copied["model"]["hidden_layers"] = engine.sizes[1:-1]
    return copied


def _print_startup_summary(
    *,
    dataset_name: str,
    records: int,
    model: Mapping[str, object],
    options: TrainOptions,
) -> None:
    print("=== sparseae run ===")
    print(f"Dataset       : {dataset_name} ({records} records)")
    print(f"Hidden layers : {model['hidden_layers'] or 'auto'}")
    print(f"Learning rate : {model['learning_rate']}  momentum {model['momentum']}")
    if model["make_sparse"]:
        print(
            f"Sparsity      : rho={model['sparsity_parameter']} beta={model['sparsity_penalty']}"
            f" gradient={model['sparsity_gradient']}"
        )
    print(f"Iterations    : {options.iterations} (error threshold {options.error_thresh})")
    print("====================")


__all__ = ["run_pipeline", "load_preset", "presets", "build_engine", "read_config_file"]
