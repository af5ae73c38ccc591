"""Training engine, options and pipelines."""

from .config import AutoencoderConfig, TrainOptions
from .engine import Autoencoder

__all__ = ["Autoencoder", "AutoencoderConfig", "TrainOptions"]
