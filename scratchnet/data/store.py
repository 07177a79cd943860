"""Growable tabular store of ``(feature vector, label)`` rows."""

from __future__ import annotations

from typing import Iterator, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..core.errors import ArgumentError, ShapeError
from ..core.types import Array, DataPoint
from .utils import SeedLike, draw_seed, resolve_rng

DEFAULT_CAPACITY = 10
_STAT_NAMES = ("count", "mean", "std", "min", "25%", "50%", "75%", "max")

ArrayLike = Union[Sequence[float], Array]


class TabularStore:
    """Rectangular float64 storage with amortized appends.

    Rows live in a preallocated ``capacity x feature_count`` matrix and a
    parallel label vector; only the first ``len(store)`` rows are in use.
    Accessors return copies unless their name says otherwise: the one
    exception is :meth:`get_features_ref`, which hands out a view of the
    underlying row so hot loops can read (or edit) it without copying.
    """

    def __init__(self, feature_count: int, capacity: int = DEFAULT_CAPACITY) -> None:
        if int(feature_count) <= 0:
            raise ArgumentError("Feature count must be greater than 0")
        if int(capacity) < 1:
            raise ArgumentError("Capacity must be greater than 0")
        self._feature_count = int(feature_count)
        self._length = 0
        self._features = np.zeros((int(capacity), self._feature_count), dtype=np.float64)
        self._labels = np.zeros(int(capacity), dtype=np.float64)

    @classmethod
    def from_arrays(cls, features: ArrayLike, labels: ArrayLike) -> "TabularStore":
        matrix = _as_matrix(features)
        store = cls(matrix.shape[1], capacity=max(1, matrix.shape[0]))
        store.add_rows(matrix, labels)
        return store

    @classmethod
    def _empty_like(cls, feature_count: int, capacity: int) -> "TabularStore":
        store = cls(feature_count)
        store._features = np.zeros((capacity, feature_count), dtype=np.float64)
        store._labels = np.zeros(capacity, dtype=np.float64)
        return store

    # ------------------------------------------------------------------
    # Shape information

    @property
    def feature_count(self) -> int:
        return self._feature_count

    @property
    def capacity(self) -> int:
        return int(self._labels.shape[0])

    def __len__(self) -> int:
        return self._length

    def size(self) -> int:
        return self._length

    def dimensions(self) -> Tuple[int, int]:
        """Return ``(rows, feature_count + 1)``, counting the label column."""

        return self._length, self._feature_count + 1

    # ------------------------------------------------------------------
    # Mutation

    def add(
        self,
        features: Union[ArrayLike, "TabularStore"],
        label: Optional[Union[float, ArrayLike]] = None,
    ) -> "TabularStore":
        """Append one row, a matrix of rows with labels, or another store."""

        if isinstance(features, TabularStore):
            return self.add_store(features)
        if np.ndim(features) == 2:
            if label is None:
                raise ArgumentError("Labels are required when adding a feature matrix")
            return self.add_rows(features, label)
        if label is None or np.ndim(label) != 0:
            raise ArgumentError("A single row needs exactly one scalar label")
        row = _as_vector(features)
        if row.shape[0] != self._feature_count:
            raise ShapeError(
                f"Expected {self._feature_count} features, but got {row.shape[0]}"
            )
        if self._length == self.capacity:
            self._grow()
        self._features[self._length] = row
        self._labels[self._length] = float(label)
        self._length += 1
        return self

    def add_rows(self, features: ArrayLike, labels: ArrayLike) -> "TabularStore":
        matrix = _as_matrix(features)
        label_vec = _as_vector(labels)
        if matrix.shape[0] == 0 or label_vec.shape[0] == 0:
            raise ShapeError("Features and labels cannot be empty")
        if matrix.shape[0] != label_vec.shape[0]:
            raise ShapeError(
                f"Got {matrix.shape[0]} feature rows but {label_vec.shape[0]} labels"
            )
        if matrix.shape[1] != self._feature_count:
            raise ShapeError(
                f"Expected {self._feature_count} features, but got {matrix.shape[1]}"
            )
        self._append_block(matrix, label_vec)
        return self

    def add_dataset(self, dataset: ArrayLike, label_index: int) -> "TabularStore":
        """Append rows whose label sits in column ``label_index``."""

        matrix = _as_matrix(dataset)
        if matrix.shape[0] == 0:
            raise ShapeError("Dataset cannot be empty")
        cols = matrix.shape[1]
        if not 0 <= label_index < cols:
            raise IndexError(f"Label index {label_index} is out of bounds for {cols} columns")
        if cols - 1 != self._feature_count:
            raise ShapeError(
                f"Expected {self._feature_count} features, but got {cols - 1}"
            )
        labels = matrix[:, label_index]
        features = np.delete(matrix, label_index, axis=1)
        self._append_block(features, labels)
        return self

    def add_store(self, other: "TabularStore") -> "TabularStore":
        if other is None:
            raise ArgumentError("Store cannot be None")
        if other.feature_count != self._feature_count:
            raise ShapeError(
                f"Expected {self._feature_count} features, but got {other.feature_count}"
            )
        if len(other) == 0:
            raise ShapeError("Cannot add an empty store")
        self._append_block(other._features[: len(other)], other._labels[: len(other)])
        return self

    def remove_at(self, index: int) -> float:
        """Remove a row, shifting later rows down; returns its label."""

        index = self._normalize_index(index)
        removed = float(self._labels[index])
        last = self._length - 1
        if index < last:
            self._features[index:last] = self._features[index + 1 : self._length]
            self._labels[index:last] = self._labels[index + 1 : self._length]
        self._features[last] = 0.0
        self._labels[last] = 0.0
        self._length -= 1
        return removed

    remove = remove_at

    def clear(self) -> None:
        self._features[: self._length] = 0.0
        self._labels[: self._length] = 0.0
        self._length = 0

    def trim_to_size(self) -> None:
        if self.capacity == self._length:
            return
        self._features = self._features[: self._length].copy()
        self._labels = self._labels[: self._length].copy()

    # ------------------------------------------------------------------
    # Access

    def get_features(self) -> Array:
        return self._features[: self._length].copy()

    def get_labels(self) -> Array:
        return self._labels[: self._length].copy()

    def get_features_at(self, index: int) -> Array:
        return self._features[self._normalize_index(index)].copy()

    def get_features_ref(self, index: int) -> Array:
        """Return a *view* of row ``index``: writes go straight into the store.

        The view is only meaningful until the next call that grows, trims,
        shuffles or removes rows from this store.
        """

        return self._features[self._normalize_index(index)]

    def get_label(self, index: int) -> float:
        return float(self._labels[self._normalize_index(index)])

    def get(self, index: int) -> Array:
        """Return features followed by the label as one vector."""

        index = self._normalize_index(index)
        return np.append(self._features[index], self._labels[index])

    def __getitem__(self, index: int) -> DataPoint:
        return DataPoint(self.get_features_at(index), self.get_label(index))

    def __iter__(self) -> Iterator[DataPoint]:
        for index in range(self._length):
            yield DataPoint(self._features[index].copy(), float(self._labels[index]))

    # ------------------------------------------------------------------
    # Copies and partitions

    def deep_copy(self) -> "TabularStore":
        return self._slice(0, self._length)

    def __copy__(self) -> "TabularStore":
        return self.deep_copy()

    def __deepcopy__(self, memo: dict) -> "TabularStore":
        return self.deep_copy()

    def batch(self, start: int, size: int) -> "TabularStore":
        """Return a copy of rows ``[start, start + min(size, len - start))``."""

        if size <= 0:
            raise ArgumentError("Batch size must be greater than 0")
        if not 0 <= start < self._length:
            raise IndexError(f"Start index {start} is out of bounds for {self._length} rows")
        return self._slice(start, min(start + size, self._length))

    def head(self, n: int = 5) -> "TabularStore":
        if n <= 0:
            return self._slice(0, 0)
        return self._slice(0, min(n, self._length))

    def tail(self, n: int = 5) -> "TabularStore":
        if n <= 0:
            return self._slice(0, 0)
        return self._slice(self._length - min(n, self._length), self._length)

    def shuffle(self, seed: SeedLike = None) -> None:
        """Permute rows in place with a seeded Fisher-Yates pass."""

        if self._length <= 1:
            return
        rng = resolve_rng(seed)
        order = np.arange(self._length)
        for i in range(self._length - 1, 0, -1):
            j = int(rng.integers(0, i + 1))
            order[i], order[j] = order[j], order[i]
        self._features[: self._length] = self._features[order]
        self._labels[: self._length] = self._labels[order]

    def split(
        self,
        size_a: int,
        size_b: int,
        shuffle: bool = True,
        seed: SeedLike = None,
    ) -> Tuple["TabularStore", "TabularStore"]:
        """Return two independent stores of ``size_a`` and ``size_b`` rows.

        Rows are drawn from a copy, shuffled first when ``shuffle`` is set, so
        this store is left untouched.
        """

        if size_a < 0 or size_b < 0:
            raise ArgumentError("Split sizes must be non-negative")
        if size_a + size_b > self._length:
            raise ArgumentError(
                f"Cannot split {self._length} rows into {size_a} + {size_b}"
            )
        source = self.deep_copy()
        if shuffle:
            source.shuffle(draw_seed() if seed is None else seed)
        return source._slice(0, size_a), source._slice(size_a, size_a + size_b)

    def iterate_batches(
        self, batch_size: int, seed: SeedLike = None
    ) -> Iterator["TabularStore"]:
        """Lazily yield consecutive batches covering every row once.

        With a ``seed`` the batches come from a shuffled deep copy, so later
        edits to this store do not leak into the iteration.
        """

        if batch_size <= 0:
            raise ArgumentError("Batch size must be greater than 0")
        source = self
        if seed is not None:
            source = self.deep_copy()
            source.shuffle(seed)
        return _batch_generator(source, batch_size)

    # ------------------------------------------------------------------
    # Reporting

    def summary(self) -> pd.DataFrame:
        """Describe each column: count, mean, sample std, min, quartiles, max."""

        columns = [f"feature{i}" for i in range(self._feature_count)] + ["label"]
        if self._length == 0:
            return pd.DataFrame(index=list(_STAT_NAMES), columns=columns, dtype=np.float64)
        data = np.column_stack([self._features[: self._length], self._labels[: self._length]])
        stats = {name: _describe(data[:, idx]) for idx, name in enumerate(columns)}
        return pd.DataFrame(stats, index=list(_STAT_NAMES))

    def __repr__(self) -> str:
        rows, cols = self.dimensions()
        lines = [f"TabularStore({rows} rows, {cols} cols)"]
        preview = min(rows, 10)
        for index in range(preview):
            values = ", ".join(repr(float(v)) for v in self._features[index])
            lines.append(f"[{values}, label={float(self._labels[index])!r}]")
        if rows > preview:
            lines.append(f"... ({rows - preview} more rows)")
        return "\n".join(lines)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, TabularStore):
            return NotImplemented
        if self._feature_count != other._feature_count or self._length != other._length:
            return False
        n = self._length
        return bool(
            np.array_equal(self._features[:n], other._features[:n], equal_nan=True)
            and np.array_equal(self._labels[:n], other._labels[:n], equal_nan=True)
        )

    __hash__ = None  # mutable

    # ------------------------------------------------------------------
    # Internal helpers

    def _normalize_index(self, index: int) -> int:
        index = int(index)
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise IndexError(f"Row index out of range for {self._length} rows")
        return index

    def _slice(self, start: int, end: int) -> "TabularStore":
        count = end - start
        out = TabularStore._empty_like(self._feature_count, count)
        if count:
            out._features[:] = self._features[start:end]
            out._labels[:] = self._labels[start:end]
        out._length = count
        return out

    def _append_block(self, features: Array, labels: Array) -> None:
        count = features.shape[0]
        self._reserve(count)
        end = self._length + count
        self._features[self._length : end] = features
        self._labels[self._length : end] = labels
        self._length = end

    def _reserve(self, amount: int) -> None:
        needed = self._length + amount
        if needed > self.capacity:
            self._grow(needed)

    def _grow(self, min_capacity: int = 0) -> None:
        capacity = self.capacity
        new_capacity = max(min_capacity, capacity + (capacity >> 1), capacity + 1)
        features = np.zeros((new_capacity, self._feature_count), dtype=np.float64)
        labels = np.zeros(new_capacity, dtype=np.float64)
        features[: self._length] = self._features[: self._length]
        labels[: self._length] = self._labels[: self._length]
        self._features = features
        self._labels = labels


def _batch_generator(source: TabularStore, batch_size: int) -> Iterator[TabularStore]:
    for start in range(0, len(source), batch_size):
        yield source.batch(start, batch_size)


def _as_vector(values: ArrayLike) -> Array:
    try:
        vec = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ArgumentError("Values must be numeric") from exc
    if vec.ndim != 1:
        raise ShapeError(f"Expected a 1-D vector, got shape {vec.shape}")
    return vec


def _as_matrix(values: ArrayLike) -> Array:
    try:
        matrix = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ArgumentError("Rows must be numeric and of equal length") from exc
    if matrix.ndim == 1 and matrix.size == 0:
        return matrix.reshape(0, 0)
    if matrix.ndim != 2:
        raise ShapeError(f"Expected a 2-D matrix, got shape {matrix.shape}")
    return matrix


def _describe(column: Array) -> list[float]:
    n = column.shape[0]
    std = float(np.std(column, ddof=1)) if n >= 2 else float("nan")
    q25, q50, q75 = np.percentile(column, [25, 50, 75], method="linear")
    return [
        float(n),
        float(np.mean(column)),
        std,
        float(np.min(column)),
        float(q25),
        float(q50),
        float(q75),
        float(np.max(column)),
    ]


__all__ = ["DEFAULT_CAPACITY", "TabularStore"]
