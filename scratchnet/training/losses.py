"""Loss and terminal-gradient registries used by the network trainer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, Optional, TypeVar

import numpy as np

from ..core.activations import ActivationFunction
from ..core.errors import ArgumentError, ShapeError
from ..core.types import Array

LossFn = Callable[[Array, Array], float]
GradientFn = Callable[[Array, Array], Array]

F = TypeVar("F")


@dataclass(frozen=True)
class LossFunction:
    """Scalar loss of one output vector against its target."""

    name: str
    fn: LossFn

    def __call__(self, output: Array, target: Array) -> float:
        _check_shapes(output, target)
        return float(self.fn(output, target))


@dataclass(frozen=True)
class LossGradient:
    """Terminal delta injected at the output layer.

    Gradients with an ``output_activation`` are already taken with respect to
    that activation's pre-activation and are only valid after it. The others
    are taken with respect to the layer output; the trainer chains them
    through the output activation's derivative.
    """

    name: str
    fn: GradientFn
    output_activation: Optional[str] = None

    def __call__(self, output: Array, target: Array) -> Array:
        _check_shapes(output, target)
        return self.fn(output, target)

    def supports(self, activation: ActivationFunction) -> bool:
        if self.output_activation is not None:
            return activation.name == self.output_activation
        return activation.deriv is not None


class _Registry(Generic[F]):
    """Central name lookup for losses or loss gradients."""

    def __init__(self, kind: str, wrapper: Callable[..., F]) -> None:
        self._kind = kind
        self._wrapper = wrapper
        self._registry: Dict[str, F] = {}

    def register(
        self, name: str, fn: Callable, *, aliases: Iterable[str] = (), **options: Any
    ) -> None:
        entry = self._wrapper(name, fn, **options)
        self._registry[name] = entry
        for alias in aliases:
            self._registry[alias] = entry

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def resolve(self, name: str) -> F:
        if name not in self._registry:
            available = ", ".join(self.names())
            raise ArgumentError(f"Unknown {self._kind} {name!r}. Available: {available}")
        return self._registry[name]


LOSSES: _Registry[LossFunction] = _Registry("loss function", LossFunction)
GRADIENTS: _Registry[LossGradient] = _Registry("loss gradient", LossGradient)


def _check_shapes(output: Array, target: Array) -> None:
    if np.shape(output) != np.shape(target):
        raise ShapeError(
            f"Output shape {np.shape(output)} does not match target shape {np.shape(target)}"
        )


def _sse(output: Array, target: Array) -> float:
    diff = output - target
    return float(np.sum(np.square(diff)))


def _mse(output: Array, target: Array) -> float:
    diff = output - target
    return float(np.mean(np.square(diff)))


def _cross_entropy(output: Array, target: Array) -> float:
    eps = 1e-12
    probs = np.clip(output, eps, 1.0)
    return float(-np.sum(target * np.log(probs)))


def _softmax_cross_entropy_grad(output: Array, target: Array) -> Array:
    # dL/dz of cross-entropy through a softmax output.
    return output - target


def _mse_grad(output: Array, target: Array) -> Array:
    return 2.0 * (output - target) / output.size


LOSSES.register("sse", _sse)
LOSSES.register("mse", _mse)
LOSSES.register("cross_entropy", _cross_entropy, aliases=("ce", "crossEntropy"))

GRADIENTS.register(
    "softmax_cross_entropy",
    _softmax_cross_entropy_grad,
    aliases=("softmaxCrossEntropy",),
    output_activation="softmax",
)
GRADIENTS.register("mse", _mse_grad)


def resolve_loss(name: str) -> LossFunction:
    return LOSSES.resolve(name)


def resolve_gradient(name: str) -> LossGradient:
    return GRADIENTS.resolve(name)


__all__ = [
    "GRADIENTS",
    "LOSSES",
    "LossFunction",
    "LossGradient",
    "resolve_gradient",
    "resolve_loss",
]
