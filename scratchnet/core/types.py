"""Core typing contracts for scratchnet."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

import numpy as np

Array = np.ndarray


class DataPoint(NamedTuple):
    """A single ``(features, label)`` row produced by store iteration."""

    features: Array
    label: float


@dataclass(frozen=True)
class EpochResult:
    """Metrics recorded at the end of one training epoch."""

    epoch: int
    train_loss: float
    val_loss: Optional[float] = None
    val_accuracy: Optional[float] = None

    def as_metrics(self) -> Dict[str, float]:
        metrics = {"loss": self.train_loss}
        if self.val_loss is not None:
            metrics["val_loss"] = self.val_loss
        if self.val_accuracy is not None:
            metrics["val_accuracy"] = self.val_accuracy
        return metrics


@dataclass(frozen=True)
class LayerRecord:
    """Transfer record for a single dense layer.

    ``weights`` is row-major with shape ``units x (inputs + 1)``; column 0
    holds the bias terms.
    """

    inputs: int
    units: int
    activation: str
    weights: List[List[float]]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LayerRecord":
        return cls(
            inputs=int(payload["inputs"]),
            units=int(payload["units"]),
            activation=str(payload["activation"]),
            weights=[[float(v) for v in row] for row in payload["weights"]],
        )


@dataclass(frozen=True)
class NetworkRecord:
    """Transfer record for a fitted :class:`~scratchnet.models.network.Network`."""

    input_size: int
    hidden_layers: int
    output_size: int
    learning_rate: float
    epochs: int
    batch_size: int
    validation_split: float
    loss_gradient: str
    loss_function: str
    layers: List[LayerRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["layers"] = [layer.to_dict() for layer in self.layers]
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "NetworkRecord":
        return cls(
            input_size=int(payload["input_size"]),
            hidden_layers=int(payload["hidden_layers"]),
            output_size=int(payload["output_size"]),
            learning_rate=float(payload["learning_rate"]),
            epochs=int(payload["epochs"]),
            batch_size=int(payload["batch_size"]),
            validation_split=float(payload["validation_split"]),
            loss_gradient=str(payload["loss_gradient"]),
            loss_function=str(payload["loss_function"]),
            layers=[LayerRecord.from_dict(item) for item in payload["layers"]],
        )


@dataclass(frozen=True)
class PerceptronRecord:
    """Transfer record for a fitted :class:`~scratchnet.models.perceptron.Perceptron`."""

    learning_rate: float
    iterations: int
    threshold: float
    shuffle: bool
    seed: Optional[int]
    theta: List[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PerceptronRecord":
        seed = payload.get("seed")
        return cls(
            learning_rate=float(payload["learning_rate"]),
            iterations=int(payload["iterations"]),
            threshold=float(payload["threshold"]),
            shuffle=bool(payload["shuffle"]),
            seed=None if seed is None else int(seed),
            theta=[float(v) for v in payload["theta"]],
        )


@dataclass(frozen=True)
class LogisticRecord:
    """Transfer record for a fitted :class:`~scratchnet.models.logistic.LogisticRegression`."""

    learning_rate: float
    iterations: int
    theta: List[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LogisticRecord":
        return cls(
            learning_rate=float(payload["learning_rate"]),
            iterations=int(payload["iterations"]),
            theta=[float(v) for v in payload["theta"]],
        )


__all__ = [
    "Array",
    "DataPoint",
    "EpochResult",
    "LayerRecord",
    "LogisticRecord",
    "NetworkRecord",
    "PerceptronRecord",
]
