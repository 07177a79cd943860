"""Random-source and preprocessing helpers shared by stores and models."""

from __future__ import annotations

import random
from typing import Optional, Union

import numpy as np

SeedLike = Union[int, np.random.Generator, None]

_PROCESS_RNG = np.random.default_rng()


def resolve_rng(seed: SeedLike = None) -> np.random.Generator:
    """Return a generator for ``seed``.

    ``None`` falls back to the process-level generator; callers only pass
    ``None`` at the outermost boundary of an operation.
    """

    if isinstance(seed, np.random.Generator):
        return seed
    if seed is None:
        return _PROCESS_RNG
    return np.random.default_rng(int(seed))


def draw_seed(rng: Optional[np.random.Generator] = None) -> int:
    """Draw a fresh non-negative 32-bit seed."""

    rng = rng or _PROCESS_RNG
    return int(rng.integers(0, 2**31 - 1))


def seed_everything(seed: int) -> np.random.Generator:
    """Seed Python and NumPy RNGs and return a generator."""

    global _PROCESS_RNG
    random.seed(seed)
    np.random.seed(seed % (2**32 - 1))
    _PROCESS_RNG = np.random.default_rng(seed)
    return np.random.default_rng(seed)


def standardize(
    array: np.ndarray,
    *,
    mean: np.ndarray | None = None,
    std: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Apply standard scaling returning the scaled array and parameters."""

    if mean is None or std is None:
        mean = array.mean(axis=0, keepdims=True)
        std = array.std(axis=0, keepdims=True)
        std = np.where(std == 0, 1.0, std)
    scaled = (array - mean) / std
    return scaled.astype(np.float64), mean.astype(np.float64), std.astype(np.float64)


__all__ = ["SeedLike", "draw_seed", "resolve_rng", "seed_everything", "standardize"]
