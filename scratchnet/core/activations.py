"""Layer activation functions resolved by name."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

import numpy as np

from .errors import ArgumentError
from .types import Array

ActivationFn = Callable[[Array], Array]


@dataclass(frozen=True)
class ActivationFunction:
    """Forward transform plus its derivative at the pre-activation."""

    name: str
    fn: ActivationFn
    deriv: Optional[ActivationFn] = None
    terminal_only: bool = False

    def __call__(self, z: Array) -> Array:
        return self.fn(z)

    def apply(self, z: Array) -> Array:
        return self.fn(z)

    def derivative(self, z: Array) -> Array:
        if self.deriv is None:
            raise NotImplementedError(
                f"{self.name} derivative is not elementwise; use {self.name} only as "
                "the output layer together with a matching loss gradient"
            )
        return self.deriv(z)


ActivationFactory = Callable[..., ActivationFunction]


class ActivationRegistry:
    """Name to activation lookup used when declaring and restoring layers."""

    def __init__(self) -> None:
        self._factories: Dict[str, ActivationFactory] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self, name: str, factory: ActivationFactory, *, aliases: Iterable[str] = ()
    ) -> None:
        self._factories[name] = factory
        for alias in aliases:
            self._aliases[alias] = name

    def names(self) -> Iterable[str]:
        return sorted(self._factories)

    def resolve(self, name: str) -> ActivationFunction:
        """Return the activation for ``name``.

        Parametric activations accept ``"leaky_relu=0.2"``; the legacy
        ``"leakyRelu=double:0.2"`` spelling is understood as well.
        """

        if not isinstance(name, str) or not name:
            raise ArgumentError(f"Activation name must be a non-empty string, got {name!r}")
        base, _, param = name.partition("=")
        base = self._aliases.get(base, base)
        if base not in self._factories:
            available = ", ".join(self.names())
            raise ArgumentError(f"Unknown activation {name!r}. Available activations: {available}")
        factory = self._factories[base]
        if not param:
            return factory()
        if param.startswith("double:"):
            param = param[len("double:") :]
        try:
            value = float(param)
        except ValueError as exc:
            raise ArgumentError(f"Invalid parameter in activation {name!r}") from exc
        try:
            return factory(value)
        except TypeError as exc:
            raise ArgumentError(f"Activation {base!r} takes no parameter") from exc


REGISTRY = ActivationRegistry()


def _sigmoid(z: Array) -> Array:
    out = np.empty_like(z, dtype=np.float64)
    pos = z >= 0
    out[pos] = 1.0 / (1.0 + np.exp(-z[pos]))
    exp_z = np.exp(z[~pos])
    out[~pos] = exp_z / (1.0 + exp_z)
    return out


def sigmoid() -> ActivationFunction:
    def deriv(z: Array) -> Array:
        s = _sigmoid(z)
        return s * (1.0 - s)

    return ActivationFunction("sigmoid", _sigmoid, deriv)


def softmax() -> ActivationFunction:
    def fn(z: Array) -> Array:
        shifted = z - np.max(z)
        exp = np.exp(shifted)
        return exp / np.sum(exp)

    return ActivationFunction("softmax", fn, None, terminal_only=True)


def linear() -> ActivationFunction:
    return ActivationFunction(
        "linear",
        lambda z: np.array(z, dtype=np.float64, copy=True),
        lambda z: np.ones_like(z, dtype=np.float64),
    )


def tanh() -> ActivationFunction:
    return ActivationFunction("tanh", np.tanh, lambda z: 1.0 - np.tanh(z) ** 2)


def relu() -> ActivationFunction:
    """Return the ReLU activation."""

    return ActivationFunction(
        "relu",
        lambda z: np.maximum(z, 0.0),
        lambda z: (z > 0).astype(np.float64),
    )


def leaky_relu(alpha: float = 0.01) -> ActivationFunction:
    return ActivationFunction(
        f"leaky_relu={alpha!r}",
        lambda z: np.where(z > 0, z, alpha * z),
        lambda z: np.where(z > 0, 1.0, alpha),
    )


def elu(alpha: float = 1.0) -> ActivationFunction:
    def fn(z: Array) -> Array:
        return np.where(z >= 0, z, alpha * np.expm1(np.minimum(z, 0.0)))

    def deriv(z: Array) -> Array:
        return np.where(z >= 0, 1.0, alpha * np.exp(np.minimum(z, 0.0)))

    return ActivationFunction(f"elu={alpha!r}", fn, deriv)


REGISTRY.register("sigmoid", sigmoid)
REGISTRY.register("softmax", softmax)
REGISTRY.register("linear", linear, aliases=("identity",))
REGISTRY.register("tanh", tanh)
REGISTRY.register("relu", relu)
REGISTRY.register("leaky_relu", leaky_relu, aliases=("leakyRelu",))
REGISTRY.register("elu", elu)


def resolve(name: str) -> ActivationFunction:
    return REGISTRY.resolve(name)


def available() -> Iterable[str]:
    return REGISTRY.names()


__all__ = [
    "ActivationFunction",
    "ActivationRegistry",
    "REGISTRY",
    "available",
    "elu",
    "leaky_relu",
    "linear",
    "relu",
    "resolve",
    "sigmoid",
    "softmax",
    "tanh",
]
