"""scratchnet public API."""

import logging

from .config import TrainConfig, load_config
from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import ArgumentError, ShapeError, StateError
from .core.types import (
    DataPoint,
    EpochResult,
    LayerRecord,
    LogisticRecord,
    NetworkRecord,
    PerceptronRecord,
)
from .data.store import TabularStore
from .io import load_logistic, load_network, load_perceptron, save_model
from .models import Layer, LogisticRegression, Network, Perceptron
from .training import losses  # noqa: F401

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ArgumentError",
    "DataPoint",
    "EpochResult",
    "Layer",
    "LayerRecord",
    "LogisticRecord",
    "LogisticRegression",
    "Network",
    "NetworkRecord",
    "Perceptron",
    "PerceptronRecord",
    "ShapeError",
    "StateError",
    "TabularStore",
    "TrainConfig",
    "activations",
    "load_config",
    "load_logistic",
    "load_network",
    "load_perceptron",
    "losses",
    "save_model",
    "types",
]
