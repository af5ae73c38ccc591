"""Command line entry point for sparseae training runs."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

from sparseae.training import pipelines


def _format_result(result) -> str:
    payload = {
        "iterations": result.iterations,
        "error": result.error,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "model": result.model_path,
    }
    if getattr(result, "summary_path", ""):
        payload["summary"] = result.summary_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="identity-4",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--data", type=Path, help="JSON list of {input, output} training records")
    parser.add_argument("--run-dir", type=Path, help="Directory receiving the run artifacts")
    parser.add_argument("--seed", type=int, help="Seed for the initial weights")
    parser.add_argument("--iterations", type=int, help="Maximum training iterations")
    parser.add_argument(
        "--sparse",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable the hidden-layer sparsity penalty",
    )
    parser.add_argument(
        "--log", action="store_true", help="Log training progress every log period"
    )
    parser.add_argument("--enable-plots", action="store_true", help="Write loss.png")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = json.loads(json.dumps(pipelines.read_config_file(args.config)))
        if {"data", "model", "train"} <= set(override.keys()):
            config = override
        else:
            config = _merge(config, override)

    train_cfg = config.setdefault("train", {})
    model_cfg = config.setdefault("model", {})
    if args.data:
        config["data"] = {"name": "json", "options": {"path": str(args.data)}}
    if args.run_dir:
        train_cfg["run_dir"] = str(args.run_dir)
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.iterations is not None:
        train_cfg["iterations"] = int(args.iterations)
    if args.sparse is not None:
        model_cfg["make_sparse"] = bool(args.sparse)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.log:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
        train_cfg["log"] = True

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
