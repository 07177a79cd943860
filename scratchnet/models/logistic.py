"""Binary logistic regression fitted with full-batch gradient descent."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from ..core import activations
from ..core.errors import ArgumentError, StateError
from ..core.types import Array, LogisticRecord
from ..data.store import TabularStore

logger = logging.getLogger(__name__)


class LogisticRegression:
    """Classifier for ``{0, 1}`` labels with ``p = sigmoid(theta @ [1; x])``.

    ``theta`` starts at zero and every iteration takes one step along the
    mean gradient ``X^T (p - y) / m`` over the whole store.
    """

    def __init__(self, learning_rate: float = 0.01, iterations: int = 1000) -> None:
        if not learning_rate > 0:
            raise ArgumentError("learning_rate must be positive")
        if iterations < 0:
            raise ArgumentError("iterations must be non-negative")
        self.learning_rate = float(learning_rate)
        self.iterations = int(iterations)
        self._sigmoid = activations.resolve("sigmoid")
        self._theta: Optional[Array] = None

    @property
    def fitted(self) -> bool:
        return self._theta is not None

    @property
    def theta(self) -> Array:
        if self._theta is None:
            raise StateError("Model has not been fitted yet")
        return self._theta.copy()

    def fit(self, store: TabularStore) -> "LogisticRegression":
        if store is None or len(store) == 0:
            raise ArgumentError("Store must contain at least one row")
        y = store.get_labels()
        if not np.all(np.isin(y, (0.0, 1.0))):
            raise ArgumentError("Labels must be either 0 or 1")

        m = len(store)
        x = np.hstack([np.ones((m, 1)), store.get_features()])
        theta = np.zeros(x.shape[1], dtype=np.float64)
        for _ in range(self.iterations):
            predictions = self._sigmoid(x @ theta)
            gradient = x.T @ (predictions - y) / m
            theta = theta - self.learning_rate * gradient
        logger.debug("Fitted %d iterations - theta=%s", self.iterations, theta)

        self._theta = theta
        return self

    def predict(self, features: Sequence[float] | Array) -> float:
        """Return the probability that ``features`` belongs to class 1."""

        if self._theta is None:
            raise StateError("Model has not been fitted yet")
        x = np.asarray(features, dtype=np.float64).reshape(-1)
        if x.shape[0] != self._theta.shape[0] - 1:
            raise ArgumentError(
                f"Expected {self._theta.shape[0] - 1} features, but got {x.shape[0]}"
            )
        z = self._theta[0] + self._theta[1:] @ x
        return float(self._sigmoid(np.array([z]))[0])

    def classify(self, features: Sequence[float] | Array) -> int:
        return 1 if self.predict(features) >= 0.5 else 0

    def score(self, store: TabularStore) -> float:
        if self._theta is None:
            raise StateError("Model has not been fitted yet")
        if store is None or len(store) == 0:
            raise ArgumentError("Store must contain at least one row")
        correct = sum(1 for point in store if self.classify(point.features) == point.label)
        return correct / len(store)

    def to_record(self) -> LogisticRecord:
        if self._theta is None:
            raise StateError("Model has not been fitted yet")
        return LogisticRecord(
            learning_rate=self.learning_rate,
            iterations=self.iterations,
            theta=self._theta.tolist(),
        )

    @classmethod
    def from_record(cls, record: LogisticRecord) -> "LogisticRegression":
        model = cls(record.learning_rate, record.iterations)
        model._theta = np.asarray(record.theta, dtype=np.float64)
        return model

    def __repr__(self) -> str:
        if self._theta is None:
            return "LogisticRegression (unfitted)"
        terms = [f"{self._theta[0]:.4f}"]
        terms += [f"{value:.4f}*x{i}" for i, value in enumerate(self._theta[1:], start=1)]
        return f"LogisticRegression [y = {' + '.join(terms)}]"


__all__ = ["LogisticRegression"]
