import numpy as np
import pytest

from scratchnet import LogisticRegression, TabularStore
from scratchnet.core.errors import ArgumentError, StateError
from scratchnet.core.types import LogisticRecord
from scratchnet.data.synthetic import make_and_gate, make_threshold_dataset


def _line_store() -> TabularStore:
    xs = [0.1, 0.2, 0.8, 0.9]
    return TabularStore.from_arrays([[v] for v in xs], [1.0 if v > 0.5 else 0.0 for v in xs])


def test_constructor_validation():
    with pytest.raises(ArgumentError):
        LogisticRegression(learning_rate=0.0)
    with pytest.raises(ArgumentError):
        LogisticRegression(iterations=-1)


def test_fit_rejects_empty_store_and_bad_labels():
    with pytest.raises(ArgumentError):
        LogisticRegression().fit(TabularStore(1))
    with pytest.raises(ArgumentError):
        LogisticRegression().fit(TabularStore.from_arrays([[1.0]], [2.0]))
    with pytest.raises(ArgumentError):
        LogisticRegression().fit(make_and_gate(signed=True))


def test_unfitted_model_raises():
    model = LogisticRegression()
    assert repr(model) == "LogisticRegression (unfitted)"
    assert not model.fitted
    with pytest.raises(StateError):
        model.classify([1.0])
    with pytest.raises(StateError):
        model.predict([1.0])
    with pytest.raises(StateError):
        _ = model.theta
    with pytest.raises(StateError):
        model.to_record()


def test_separable_line():
    model = LogisticRegression(0.5, 5000).fit(_line_store())
    theta = model.theta
    assert theta[1] > 0
    assert theta[0] < 0
    assert model.classify([0.2]) == 0
    assert model.classify([0.8]) == 1
    assert 0.0 < model.predict([0.5]) < 1.0
    assert model.score(_line_store()) == 1.0
    assert repr(model).startswith("LogisticRegression [y = ")


def test_single_gradient_step():
    store = _line_store()
    model = LogisticRegression(0.5, 1).fit(store)
    x = np.hstack([np.ones((4, 1)), store.get_features()])
    expected = -0.5 * x.T @ (0.5 - store.get_labels()) / 4
    assert np.allclose(model.theta, expected)


def test_threshold_dataset_accuracy():
    data = make_threshold_dataset(200, seed=42)
    model = LogisticRegression(1.0, 3000).fit(data)
    assert model.score(data) >= 0.9


def test_predict_validates_feature_count_and_theta_is_a_copy():
    model = LogisticRegression(0.5, 100).fit(_line_store())
    with pytest.raises(ArgumentError):
        model.predict([0.1, 0.2])
    theta = model.theta
    theta[:] = 0.0
    assert not np.allclose(model.theta, 0.0)


def test_record_round_trip():
    model = LogisticRegression(0.5, 200).fit(_line_store())
    restored = LogisticRegression.from_record(
        LogisticRecord.from_dict(model.to_record().to_dict())
    )
    assert np.array_equal(restored.theta, model.theta)
    assert restored.iterations == 200
    assert restored.predict([0.3]) == model.predict([0.3])
