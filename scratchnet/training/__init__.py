"""Loss registries and metrics used while training."""

from . import losses, metrics

__all__ = ["losses", "metrics"]
