"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, MutableMapping


@dataclass(frozen=True)
class DatasetSpec:
    """Training records plus the metadata needed to reproduce them.

    Attributes
    ----------
    name:
        Registry identifier of the dataset.
    examples:
        ``{"input": ..., "output": ...}`` records accepted by
        :meth:`sparseae.training.engine.Autoencoder.train`. Values are either
        dense vectors or label-keyed mappings.
    provenance:
        Arbitrary metadata describing how the records were produced, written
        verbatim into run manifests.
    """

    name: str
    examples: List[Mapping[str, Any]]
    provenance: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.examples)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory, as a decorator or directly::

        @register_dataset("identity")
        def make_identity(**kwargs):
            ...

        register_dataset("identity", make_identity)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` for ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if not spec.examples:
        raise ValueError(f"Dataset {spec.name!r} produced no examples")
    for record in spec.examples:
        if "input" not in record:
            raise ValueError(f"Dataset {spec.name!r} has a record without 'input'")


__all__ = ["DatasetSpec", "available_datasets", "get_dataset", "register_dataset"]
