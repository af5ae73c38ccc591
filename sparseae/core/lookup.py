"""Label lookup tables translating records to dense vectors and back."""

from __future__ import annotations

from typing import Iterable, Mapping

import numpy as np

from .types import Array, Lookup, Record


def lookup_from_hash(layer: Mapping[str, object]) -> Lookup:
    """Index the keys of ``layer`` in iteration order."""

    return {str(key): index for index, key in enumerate(layer)}


def build_lookup(records: Iterable[Record]) -> Lookup:
    """Union of the keys of ``records``, indexed in first-seen order."""

    merged: dict[str, None] = {}
    for record in records:
        for key in record:
            merged.setdefault(str(key), None)
    return lookup_from_hash(merged)


def to_array(lookup: Lookup, record: Record) -> Array:
    """Dense vector for ``record``; labels absent from it are zero.

    Labels unknown to ``lookup`` are ignored.
    """

    array = np.zeros(len(lookup), dtype=np.float64)
    for key, value in record.items():
        index = lookup.get(str(key))
        if index is not None:
            array[index] = float(value or 0.0)
    return array


def to_hash(lookup: Lookup, vector: Array) -> dict[str, float]:
    return {key: float(vector[index]) for key, index in lookup.items()}


def is_numeric_keys(keys: Iterable[str]) -> bool:
    """``True`` when ``keys`` are exactly ``"0" .. "n-1"`` in order."""

    return all(str(key) == str(index) for index, key in enumerate(keys))


__all__ = ["build_lookup", "to_array", "to_hash", "lookup_from_hash", "is_numeric_keys"]
