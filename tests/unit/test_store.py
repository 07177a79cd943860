import copy
import math

import numpy as np
import pytest

from scratchnet.core.errors import ArgumentError, ShapeError
from scratchnet.core.types import DataPoint
from scratchnet.data.store import TabularStore


def _store(n: int = 6, features: int = 2) -> TabularStore:
    store = TabularStore(features)
    for i in range(n):
        store.add([float(i) + j / 10 for j in range(features)], float(i % 3))
    return store


def test_constructor_rejects_bad_sizes():
    with pytest.raises(ArgumentError):
        TabularStore(0)
    with pytest.raises(ArgumentError):
        TabularStore(3, capacity=0)


def test_add_copies_values_and_ref_aliases():
    store = TabularStore(3)
    row = [1.0, 2.0, 3.0]
    store.add(row, 1.0)
    row[0] = 99.0
    assert np.array_equal(store.get_features_at(0), [1.0, 2.0, 3.0])
    assert store.get_label(0) == 1.0

    copied = store.get_features_at(0)
    copied[1] = -1.0
    assert store.get_features_at(0)[1] == 2.0

    ref = store.get_features_ref(0)
    ref[1] = -1.0
    assert store.get_features_at(0)[1] == -1.0

    store.add([4.0, 5.0, 6.0], 0.0)
    assert np.array_equal(store.get_features_at(0), [1.0, -1.0, 3.0])


def test_add_wrong_length_raises_shape_error():
    store = TabularStore(2)
    with pytest.raises(ShapeError):
        store.add([1.0, 2.0, 3.0], 0.0)
    assert len(store) == 0


def test_growth_is_amortized():
    store = TabularStore(1, capacity=2)
    for i in range(3):
        store.add([float(i)], 0.0)
    assert store.capacity == 3

    store = TabularStore(1)
    for i in range(11):
        store.add([float(i)], 0.0)
    assert store.capacity == 15
    assert len(store) == 11


def test_bulk_add_preallocates_and_validates():
    store = TabularStore(2)
    features = np.arange(50, dtype=float).reshape(25, 2)
    store.add_rows(features, np.arange(25))
    assert len(store) == 25
    assert store.capacity == 25
    assert np.array_equal(store.get_features(), features)

    with pytest.raises(ShapeError):
        store.add_rows(features, np.arange(24))
    with pytest.raises(ShapeError):
        store.add_rows([], [])
    with pytest.raises(ShapeError):
        store.add_rows(np.ones((2, 3)), [0, 1])

    other = _store(4)
    store.add(other)
    assert len(store) == 29
    assert np.array_equal(store.get_features_at(-1), other.get_features_at(-1))
    with pytest.raises(ShapeError):
        store.add_store(TabularStore(2))


def test_add_dataset_extracts_label_column():
    store = TabularStore(2)
    store.add_dataset([[1.0, 7.0, 2.0], [3.0, 8.0, 4.0]], label_index=1)
    assert np.array_equal(store.get_features(), [[1.0, 2.0], [3.0, 4.0]])
    assert np.array_equal(store.get_labels(), [7.0, 8.0])
    with pytest.raises(IndexError):
        store.add_dataset([[1.0, 2.0, 3.0]], label_index=3)


def test_remove_at_shifts_and_zeroes():
    store = _store(4)
    labels = store.get_labels().tolist()
    removed = store.remove_at(1)
    assert removed == labels[1]
    assert store.get_labels().tolist() == [labels[0], labels[2], labels[3]]
    assert np.array_equal(store._features[3], [0.0, 0.0])
    assert store._labels[3] == 0.0

    assert store.remove_at(-1) == labels[3]
    assert len(store) == 2
    with pytest.raises(IndexError):
        store.remove_at(2)
    with pytest.raises(IndexError):
        store.remove_at(-3)


def test_clear_keeps_capacity():
    store = _store(5)
    capacity = store.capacity
    store.clear()
    assert len(store) == 0
    assert store.capacity == capacity
    assert store.get_features().shape == (0, 2)


def test_getters_return_independent_copies():
    store = _store(3)
    features = store.get_features()
    labels = store.get_labels()
    features[:] = 0.0
    labels[:] = -1.0
    assert store.get_features()[2, 0] == 2.0
    assert store.get_label(2) == 2.0
    assert np.array_equal(store.get(0), [0.0, 0.1, 0.0])


def test_batch_bounds_and_truncation():
    store = _store(5)
    chunk = store.batch(3, 10)
    assert len(chunk) == 2
    assert np.array_equal(chunk.get_labels(), store.get_labels()[3:])
    with pytest.raises(IndexError):
        store.batch(5, 1)
    with pytest.raises(IndexError):
        store.batch(-1, 1)
    with pytest.raises(ArgumentError):
        store.batch(0, 0)


def test_head_and_tail():
    store = _store(8)
    assert len(store.head()) == 5
    assert store.head(3).get_labels().tolist() == store.get_labels()[:3].tolist()
    assert store.tail(2).get_labels().tolist() == store.get_labels()[-2:].tolist()
    assert len(store.head(100)) == 8
    assert len(store.tail(0)) == 0
    assert len(store.head(-1)) == 0
    assert store.head(0).feature_count == 2


def test_shuffle_is_deterministic_per_seed():
    first = _store(20)
    second = _store(20)
    first.shuffle(7)
    second.shuffle(7)
    assert first == second
    assert first != _store(20)
    assert sorted(first.get_labels()) == sorted(_store(20).get_labels())

    third = _store(20)
    third.shuffle(8)
    assert third != first


def test_shuffle_keeps_rows_together():
    store = _store(10)
    store.shuffle(3)
    for point in store:
        assert point.features[0] == pytest.approx(point.features[1] - 0.1)
        assert point.label == float(int(point.features[0]) % 3)


def test_split_leaves_original_untouched():
    store = _store(10)
    before = store.deep_copy()
    a, b = store.split(3, 7, shuffle=True, seed=1)
    assert store == before
    assert (len(a), len(b)) == (3, 7)
    merged = sorted(a.get_labels().tolist() + b.get_labels().tolist())
    assert merged == sorted(store.get_labels().tolist())

    ordered_a, ordered_b = store.split(4, 2, shuffle=False)
    assert ordered_a == store.head(4)
    assert ordered_b == store.batch(4, 2)

    with pytest.raises(ArgumentError):
        store.split(6, 6)
    with pytest.raises(ArgumentError):
        store.split(-1, 2)


def test_iterate_batches_partitions_rows():
    store = _store(23)
    batches = list(store.iterate_batches(5))
    assert len(batches) == math.ceil(23 / 5)
    assert [len(b) for b in batches] == [5, 5, 5, 5, 3]
    stacked = np.concatenate([b.get_features() for b in batches])
    assert np.array_equal(stacked, store.get_features())


def test_iterate_batches_with_seed_uses_shuffled_copy():
    store = _store(23)
    before = store.deep_copy()
    batches = list(store.iterate_batches(4, seed=11))
    assert store == before
    assert all(len(b) <= 4 for b in batches)
    assert sum(len(b) for b in batches) == 23
    stacked = np.concatenate([b.get_features() for b in batches])
    assert sorted(stacked[:, 0].tolist()) == sorted(store.get_features()[:, 0].tolist())

    expected = store.deep_copy()
    expected.shuffle(11)
    assert np.array_equal(stacked, expected.get_features())


def test_iterate_batches_validates_eagerly():
    with pytest.raises(ArgumentError):
        _store(3).iterate_batches(0)


def test_summary_statistics():
    store = TabularStore.from_arrays([[1.0], [2.0], [3.0], [4.0]], [0.0, 0.0, 1.0, 1.0])
    summary = store.summary()
    assert list(summary.columns) == ["feature0", "label"]
    col = summary["feature0"]
    assert col["count"] == 4
    assert col["mean"] == pytest.approx(2.5)
    assert col["std"] == pytest.approx(1.2909944487)
    assert col["min"] == 1.0
    assert col["25%"] == pytest.approx(1.75)
    assert col["50%"] == pytest.approx(2.5)
    assert col["75%"] == pytest.approx(3.25)
    assert col["max"] == 4.0
    assert summary["label"]["mean"] == pytest.approx(0.5)

    single = TabularStore.from_arrays([[5.0]], [1.0]).summary()
    assert math.isnan(single["feature0"]["std"])
    assert single["feature0"]["25%"] == 5.0


def test_equality_ignores_capacity():
    a = TabularStore(2, capacity=50)
    b = TabularStore(2, capacity=1)
    for store in (a, b):
        store.add([1.0, 2.0], 1.0)
    assert a == b
    b.get_features_ref(0)[0] = 3.0
    assert a != b
    assert a != TabularStore(3)


def test_copies_are_independent():
    store = _store(4)
    clone = copy.deepcopy(store)
    shallow = copy.copy(store)
    clone.get_features_ref(0)[0] = 42.0
    shallow.add([0.0, 0.0], 0.0)
    assert store.get_features_at(0)[0] == 0.0
    assert len(store) == 4
    assert clone.capacity == 4


def test_trim_iteration_and_repr():
    store = _store(12)
    store.trim_to_size()
    assert store.capacity == 12
    assert store.dimensions() == (12, 3)
    points = list(store)
    assert isinstance(points[0], DataPoint)
    assert store[1].label == 1.0
    text = repr(store)
    assert text.startswith("TabularStore(12 rows, 3 cols)")
    assert "(2 more rows)" in text


def test_bulk_add_uses_amortized_step_when_larger():
    store = TabularStore(1)
    store.add_rows(np.zeros((8, 1)), np.zeros(8))
    store.add_rows(np.ones((3, 1)), np.ones(3))
    assert store.capacity == 15
    store.add_rows(np.ones((30, 1)), np.ones(30))
    assert store.capacity == 41
    assert len(store) == 41
