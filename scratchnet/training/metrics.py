"""Label encoding and classification metric helpers."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..core.errors import ArgumentError
from ..core.types import Array


def class_index(label: float, num_classes: int) -> int:
    """Return ``label`` as an integer class index in ``[0, num_classes)``."""

    if not np.isfinite(label) or float(label) != int(label):
        raise ArgumentError(f"Label {label!r} is not an integer class index")
    index = int(label)
    if not 0 <= index < num_classes:
        raise ArgumentError(f"Label {index} is outside the class range [0, {num_classes})")
    return index


def one_hot(index: int, num_classes: int) -> Array:
    out = np.zeros(num_classes, dtype=np.float64)
    out[index] = 1.0
    return out


def accuracy(labels: Sequence[float] | Array, outputs: Array) -> float:
    """Fraction of rows whose argmax output matches the integer label."""

    labels = np.asarray(labels)
    outputs = np.atleast_2d(np.asarray(outputs))
    if labels.shape[0] != outputs.shape[0]:
        raise ArgumentError(
            f"Got {labels.shape[0]} labels for {outputs.shape[0]} output rows"
        )
    if labels.shape[0] == 0:
        return 0.0
    pred_idx = np.argmax(outputs, axis=1)
    return float(np.mean(pred_idx == labels.astype(int)))


__all__ = ["accuracy", "class_index", "one_hot"]
