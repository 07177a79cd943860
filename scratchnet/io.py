"""JSON persistence for model transfer records."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

from .core.types import LogisticRecord, NetworkRecord, PerceptronRecord
from .models.logistic import LogisticRegression
from .models.network import Network
from .models.perceptron import Perceptron

logger = logging.getLogger(__name__)

Model = Union[Network, Perceptron, LogisticRegression]

_KINDS = {Network: "network", Perceptron: "perceptron", LogisticRegression: "logistic"}


def save_model(path: str | Path, model: Model) -> str:
    """Write ``model``'s record as indented JSON and return the path."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"kind": _KINDS[type(model)], "model": model.to_record().to_dict()}
    path.write_text(json.dumps(payload, indent=2))
    logger.info("Model exported to %s", path)
    return str(path)


def _read_payload(path: str | Path, kind: str) -> dict:
    path = Path(path)
    payload = json.loads(path.read_text())
    if not isinstance(payload, dict) or "model" not in payload:
        raise TypeError(f"{path.name} does not contain a model record")
    found = payload.get("kind", kind)
    if found != kind:
        raise TypeError(f"{path.name} holds a {found!r} model, expected {kind!r}")
    logger.info("Model imported from %s", path)
    return payload["model"]


def load_network(path: str | Path) -> Network:
    return Network.from_record(NetworkRecord.from_dict(_read_payload(path, "network")))


def load_perceptron(path: str | Path) -> Perceptron:
    return Perceptron.from_record(PerceptronRecord.from_dict(_read_payload(path, "perceptron")))


def load_logistic(path: str | Path) -> LogisticRegression:
    return LogisticRegression.from_record(
        LogisticRecord.from_dict(_read_payload(path, "logistic"))
    )


__all__ = ["load_logistic", "load_network", "load_perceptron", "save_model"]
