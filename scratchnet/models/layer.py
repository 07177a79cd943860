"""Dense layer with an explicit bias column and cached forward state."""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..core import activations
from ..core.activations import ActivationFunction
from ..core.errors import ArgumentError, ShapeError, StateError
from ..core.types import Array, LayerRecord
from ..data.utils import SeedLike, resolve_rng


def xavier(rows: int, cols: int, rng: np.random.Generator) -> Array:
    """Draw ``rows x cols`` weights from ``N(0, sqrt(2 / (rows + cols - 1)))``."""

    scale = np.sqrt(2.0 / (rows + cols - 1))
    return rng.standard_normal((rows, cols)) * scale


class Layer:
    """One fully connected layer ``a = f(W @ [1; x])``.

    ``W`` has shape ``units x (inputs + 1)`` and column 0 multiplies the
    implicit bias input. The last input, pre-activation and activation output
    are cached by :meth:`forward` for the backward pass that follows it.
    """

    def __init__(
        self,
        input_count: int,
        unit_count: int,
        activation: ActivationFunction | str,
        *,
        weights: Optional[Array] = None,
        rng: SeedLike = None,
    ) -> None:
        if input_count <= 0 or unit_count <= 0:
            raise ArgumentError("Layer input and unit counts must be positive")
        if isinstance(activation, str):
            activation = activations.resolve(activation)
        self.input_count = int(input_count)
        self.unit_count = int(unit_count)
        self.activation = activation
        shape = (self.unit_count, self.input_count + 1)
        if weights is None:
            self._weights = xavier(shape[0], shape[1], resolve_rng(rng))
        else:
            weights = np.array(weights, dtype=np.float64, copy=True)
            if weights.shape != shape:
                raise ShapeError(f"Expected weights of shape {shape}, got {weights.shape}")
            self._weights = weights
        self._input: Optional[Array] = None
        self._pre_activation: Optional[Array] = None
        self._output: Optional[Array] = None

    @property
    def weights(self) -> Array:
        return self._weights.copy()

    @property
    def shape(self) -> tuple[int, int]:
        return self._weights.shape

    def forward(self, x: Array) -> Array:
        x = np.asarray(x, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.input_count:
            raise ShapeError(f"Expected {self.input_count} inputs, but got {x.shape[0]}")
        self._input = np.concatenate(([1.0], x))
        self._pre_activation = self._weights @ self._input
        self._output = self.activation(self._pre_activation)
        return self._output

    def gradient(self, delta: Array) -> Array:
        """Weight gradient ``delta @ [1; x]^T`` for the cached forward pass."""

        delta = self._check_delta(delta)
        return np.outer(delta, self._input)

    def backpropagate(self, delta: Array) -> Array:
        """Return ``(W^T @ delta)`` without the bias row.

        The caller still has to multiply by the previous layer's activation
        derivative.
        """

        delta = self._check_delta(delta)
        return (self._weights.T @ delta)[1:]

    def activation_derivative(self) -> Array:
        if self._pre_activation is None:
            raise StateError("activation_derivative() called before forward()")
        return self.activation.derivative(self._pre_activation)

    def apply_gradient(self, gradient: Array, learning_rate: float, batch_size: int) -> None:
        gradient = np.asarray(gradient, dtype=np.float64)
        if gradient.shape != self._weights.shape:
            raise ShapeError(
                f"Expected gradient of shape {self._weights.shape}, got {gradient.shape}"
            )
        self._weights -= gradient * (learning_rate / max(batch_size, 1))

    def zero_grad(self) -> Array:
        return np.zeros_like(self._weights)

    def to_record(self) -> LayerRecord:
        return LayerRecord(
            inputs=self.input_count,
            units=self.unit_count,
            activation=self.activation.name,
            weights=self._weights.tolist(),
        )

    @classmethod
    def from_record(cls, record: LayerRecord) -> "Layer":
        return cls(
            record.inputs,
            record.units,
            activations.resolve(record.activation),
            weights=np.asarray(record.weights, dtype=np.float64),
        )

    def _check_delta(self, delta: Array) -> Array:
        if self._input is None:
            raise StateError("Backward pass requested before forward()")
        delta = np.asarray(delta, dtype=np.float64).reshape(-1)
        if delta.shape[0] != self.unit_count:
            raise ShapeError(f"Expected delta of size {self.unit_count}, got {delta.shape[0]}")
        return delta

    def __repr__(self) -> str:
        return (
            f"Layer(inputs={self.input_count}, units={self.unit_count}, "
            f"activation={self.activation.name!r})"
        )


__all__ = ["Layer", "xavier"]
