"""Core numerical primitives for scratchnet."""

from . import activations, errors, types

__all__ = ["activations", "errors", "types"]
