"""Small in-memory datasets for smoke runs and presets."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Mapping

import numpy as np

from .registry import DatasetSpec, register_dataset


@register_dataset("identity")
def make_identity(size: int = 4, **_: object) -> DatasetSpec:
    """One-hot patterns of length ``size`` mapped to themselves."""

    eye = np.eye(int(size), dtype=np.float64)
    examples = [{"input": row.tolist(), "output": row.tolist()} for row in eye]
    return DatasetSpec(
        name="identity",
        examples=examples,
        provenance={"type": "identity", "size": int(size)},
    )


@register_dataset("binary")
def make_binary(n: int = 16, size: int = 8, density: float = 0.25, seed: int = 0, **_: object) -> DatasetSpec:
    """Random sparse binary vectors, each its own target."""

    rng = np.random.default_rng(seed)
    x = (rng.random((int(n), int(size))) < density).astype(np.float64)
    examples = [{"input": row.tolist(), "output": row.tolist()} for row in x]
    return DatasetSpec(
        name="binary",
        examples=examples,
        provenance={
            "type": "binary",
            "n": int(n),
            "size": int(size),
            "density": float(density),
            "seed": int(seed),
        },
    )


@register_dataset("labeled")
def make_labeled(labels: List[str] | None = None, **_: object) -> DatasetSpec:
    """Identity patterns expressed as label-keyed records; absent labels are 0."""

    labels = list(labels or ["red", "green", "blue", "alpha"])
    examples = [{"input": {label: 1.0}, "output": {label: 1.0}} for label in labels]
    return DatasetSpec(
        name="labeled",
        examples=examples,
        provenance={"type": "labeled", "labels": labels},
    )


@register_dataset("json")
def make_json(path: str | Path | None = None, **_: object) -> DatasetSpec:
    """Records read from a JSON list of ``{"input": ..., "output": ...}`` objects."""

    if path is None:
        raise ValueError("The json dataset requires a `path` option")
    path = Path(path)
    raw: Any = json.loads(path.read_text())
    if not isinstance(raw, list):
        raise TypeError(f"{path.name} must contain a JSON list of records")
    examples: List[Mapping[str, Any]] = []
    for record in raw:
        if not isinstance(record, Mapping):
            raise TypeError(f"{path.name} contains a non-object record")
        examples.append(dict(record))
    return DatasetSpec(
        name="json",
        examples=examples,
        provenance={"type": "json", "path": str(path), "records": len(examples)},
    )


__all__ = ["make_identity", "make_binary", "make_labeled", "make_json"]
