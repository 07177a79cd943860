"""Pure in-memory synthetic datasets."""

from __future__ import annotations

import numpy as np

from .store import TabularStore


def make_threshold_dataset(
    n_points: int = 200, threshold: float = 1.0, seed: int = 42
) -> TabularStore:
    """Uniform points in the unit square labelled ``1`` when ``x0 + x1 > threshold``."""

    rng = np.random.default_rng(seed)
    x = rng.random((n_points, 2))
    y = (x.sum(axis=1) > threshold).astype(np.float64)
    return TabularStore.from_arrays(x, y)


def make_and_gate(*, signed: bool = False) -> TabularStore:
    """The four rows of the logical AND truth table.

    With ``signed`` the labels are ``-1`` / ``+1`` as the perceptron expects,
    otherwise ``0`` / ``1``.
    """

    x = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])
    y = np.array([0.0, 0.0, 0.0, 1.0])
    if signed:
        y = 2.0 * y - 1.0
    return TabularStore.from_arrays(x, y)


def make_blobs(
    centers: np.ndarray, samples_per_class: int = 60, spread: float = 0.4, seed: int = 1
) -> TabularStore:
    """Gaussian clusters around ``centers``; the label is the cluster index."""

    rng = np.random.default_rng(seed)
    centers = np.asarray(centers, dtype=np.float64)
    inputs = []
    labels = []
    for idx, center in enumerate(centers):
        noise = spread * rng.standard_normal((samples_per_class, centers.shape[1]))
        inputs.append(center + noise)
        labels.append(np.full(samples_per_class, idx, dtype=np.float64))
    return TabularStore.from_arrays(np.vstack(inputs), np.concatenate(labels))


__all__ = ["make_and_gate", "make_blobs", "make_threshold_dataset"]
