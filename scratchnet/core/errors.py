"""Exception taxonomy shared by the stores and models."""

from __future__ import annotations


class ArgumentError(ValueError):
    """Malformed input, out-of-range parameter or unknown registry name."""


class ShapeError(ArgumentError):
    """Vector or matrix dimensions do not match what the receiver expects."""


class StateError(RuntimeError):
    """Operation is not valid for the current lifecycle state."""


__all__ = ["ArgumentError", "ShapeError", "StateError"]
