"""Classic perceptron for linearly separable ``{-1, +1}`` labels."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from ..core.errors import ArgumentError, StateError
from ..core.types import Array, PerceptronRecord
from ..data.store import TabularStore
from ..data.utils import draw_seed, resolve_rng

logger = logging.getLogger(__name__)


class Perceptron:
    """Perceptron trained with the rule ``theta += lr * (y - y_hat) * [1; x]``.

    Training stops early after the first epoch without a misclassification.
    ``theta`` starts at zero, or at uniform ``[0, 1)`` values when ``seed`` is
    given.
    """

    def __init__(
        self,
        learning_rate: float = 0.01,
        iterations: int = 1000,
        threshold: float = 0.0,
        *,
        shuffle: bool = False,
        seed: Optional[int] = None,
    ) -> None:
        if not learning_rate > 0:
            raise ArgumentError("learning_rate must be positive")
        if iterations < 0:
            raise ArgumentError("iterations must be non-negative")
        self.learning_rate = float(learning_rate)
        self.iterations = int(iterations)
        self.threshold = float(threshold)
        self.shuffle = bool(shuffle)
        self.seed = seed
        self.theta: Optional[Array] = None
        self.epochs_run = 0

    @property
    def fitted(self) -> bool:
        return self.theta is not None

    def activation(self, raw: float) -> int:
        return 1 if raw >= self.threshold else -1

    def fit(self, store: TabularStore) -> "Perceptron":
        if store is None or len(store) == 0:
            raise ArgumentError("Store must contain at least one row")
        labels = store.get_labels()
        if not np.all(np.isin(labels, (-1.0, 1.0))):
            raise ArgumentError("Labels must be either -1 or 1")

        n = store.feature_count + 1
        rng = resolve_rng(self.seed)
        if self.seed is None:
            theta = np.zeros(n, dtype=np.float64)
        else:
            theta = rng.random(n)
        data = store.deep_copy()

        self.epochs_run = 0
        for epoch in range(self.iterations):
            if self.shuffle:
                data.shuffle(draw_seed(rng))
            failed = False
            for row in range(len(data)):
                inputs = np.concatenate(([1.0], data.get_features_ref(row)))
                expected = data.get_label(row)
                prediction = self.activation(float(theta @ inputs))
                theta = theta + inputs * ((expected - prediction) * self.learning_rate)
                if prediction != expected:
                    failed = True
            self.epochs_run = epoch + 1
            logger.debug("Epoch %d/%d - theta=%s", epoch + 1, self.iterations, theta)
            if not failed:
                break

        self.theta = theta
        return self

    def predict(self, features: Sequence[float] | Array) -> int:
        if self.theta is None:
            raise StateError("Model has not been fitted yet")
        x = np.asarray(features, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.theta.shape[0] - 1:
            raise ArgumentError(
                f"Expected {self.theta.shape[0] - 1} features, but got {x.shape[0]}"
            )
        return self.activation(float(self.theta[0] + self.theta[1:] @ x))

    def score(self, store: TabularStore) -> float:
        if self.theta is None:
            raise StateError("Model has not been fitted yet")
        if store is None or len(store) == 0:
            raise ArgumentError("Store must contain at least one row")
        correct = sum(1 for point in store if self.predict(point.features) == point.label)
        return correct / len(store)

    def to_record(self) -> PerceptronRecord:
        if self.theta is None:
            raise StateError("Model has not been fitted yet")
        return PerceptronRecord(
            learning_rate=self.learning_rate,
            iterations=self.iterations,
            threshold=self.threshold,
            shuffle=self.shuffle,
            seed=self.seed,
            theta=self.theta.tolist(),
        )

    @classmethod
    def from_record(cls, record: PerceptronRecord) -> "Perceptron":
        model = cls(
            record.learning_rate,
            record.iterations,
            record.threshold,
            shuffle=record.shuffle,
            seed=record.seed,
        )
        model.theta = np.asarray(record.theta, dtype=np.float64)
        return model

    def __repr__(self) -> str:
        if self.theta is None:
            return "Perceptron (unfitted)"
        return f"Perceptron(theta={self.theta.tolist()!r})"


__all__ = ["Perceptron"]
