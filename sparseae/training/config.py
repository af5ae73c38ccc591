"""Engine and training-loop options."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Mapping, Sequence

from ..core.sparsity import DEFAULT_EPSILON, REGISTRY as SPARSITY_REGISTRY
from ..core.types import TrainingStatus
from ..errors import ConfigurationError

Callback = Callable[[TrainingStatus], None]


def _pick(cls, options: Mapping[str, Any]) -> dict:
    names = {f.name for f in fields(cls)}
    unknown = set(options) - names
    if unknown:
        raise ConfigurationError(
            f"Unknown {cls.__name__} option(s): {', '.join(sorted(unknown))}"
        )
    return dict(options)


@dataclass(frozen=True)
class AutoencoderConfig:
    """Network hyper-parameters fixed for the lifetime of an engine."""

    learning_rate: float = 0.3
    momentum: float = 0.1
    hidden_layers: Sequence[int] | None = None
    make_sparse: bool = False
    sparsity_parameter: float = 0.05
    sparsity_penalty: float = 0.1
    sparsity_gradient: str = "legacy"
    sparsity_epsilon: float = DEFAULT_EPSILON
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.learning_rate < 0:
            raise ConfigurationError("learning_rate must be non-negative")
        if not 0 <= self.momentum < 1:
            raise ConfigurationError("momentum must be in [0, 1)")
        if self.hidden_layers is not None:
            hidden = tuple(int(size) for size in self.hidden_layers)
            if any(size <= 0 for size in hidden):
                raise ConfigurationError("hidden layer sizes must be positive")
            object.__setattr__(self, "hidden_layers", hidden)
        if not 0 < self.sparsity_parameter < 1:
            raise ConfigurationError("sparsity_parameter must be in (0, 1)")
        if self.sparsity_penalty < 0:
            raise ConfigurationError("sparsity_penalty must be non-negative")
        if not 0 < self.sparsity_epsilon < 0.5:
            raise ConfigurationError("sparsity_epsilon must be in (0, 0.5)")
        try:
            SPARSITY_REGISTRY.get(self.sparsity_gradient)
        except KeyError as exc:
            raise ConfigurationError(str(exc.args[0])) from exc

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "AutoencoderConfig":
        return cls(**_pick(cls, options))

    def to_dict(self) -> dict:
        payload = asdict(self)
        if payload["hidden_layers"] is not None:
            payload["hidden_layers"] = list(payload["hidden_layers"])
        return payload


@dataclass(frozen=True)
class TrainOptions:
    """Termination, logging and callback controls for one ``train`` call."""

    iterations: int = 20000
    error_thresh: float = 0.005
    log: bool = False
    log_period: int = 10
    callback: Callback | None = None
    callback_period: int = 10

    def __post_init__(self) -> None:
        if self.iterations < 0:
            raise ConfigurationError("iterations must be non-negative")
        if self.log_period <= 0 or self.callback_period <= 0:
            raise ConfigurationError("log_period and callback_period must be positive")

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "TrainOptions":
        return cls(**_pick(cls, options))


__all__ = ["AutoencoderConfig", "TrainOptions", "Callback"]
