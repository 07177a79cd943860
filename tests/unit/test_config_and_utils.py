import json

import numpy as np
import pytest

from scratchnet.config import SEED_ENV_VAR, TrainConfig, load_config
from scratchnet.core.errors import ArgumentError
from scratchnet.data import utils
from scratchnet.data.utils import draw_seed, resolve_rng, seed_everything, standardize


def test_defaults_validate():
    config = TrainConfig().validate()
    assert config.loss_gradient == "softmax_cross_entropy"
    assert config.loss_function == "sse"
    assert config.patience == 5
    assert config.to_dict()["batch_size"] == 1


@pytest.mark.parametrize(
    "overrides",
    [
        {"learning_rate": 0.0},
        {"epochs": -1},
        {"batch_size": 0},
        {"validation_split": 1.0},
        {"validation_split": -0.1},
        {"patience": 0},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ArgumentError):
        TrainConfig(**overrides).validate()


def test_from_mapping_rejects_unknown_keys(monkeypatch):
    monkeypatch.delenv(SEED_ENV_VAR, raising=False)
    with pytest.raises(ArgumentError):
        TrainConfig.from_mapping({"epochs": 2, "momentum": 0.9})
    assert TrainConfig.from_mapping({"epochs": 2}).seed is None


def test_env_seed_applies_when_unset(monkeypatch):
    monkeypatch.setenv(SEED_ENV_VAR, "123")
    assert TrainConfig.from_mapping({}).seed == 123
    assert TrainConfig.from_mapping({"seed": 9}).seed == 9


def test_load_json_config_with_train_section(tmp_path, monkeypatch):
    monkeypatch.delenv(SEED_ENV_VAR, raising=False)
    path = tmp_path / "run.json"
    path.write_text(json.dumps({"train": {"epochs": 20, "batch_size": 4}, "other": {}}))
    config = load_config(path)
    assert (config.epochs, config.batch_size) == (20, 4)


def test_load_yaml_config(tmp_path, monkeypatch):
    pytest.importorskip("yaml")
    monkeypatch.delenv(SEED_ENV_VAR, raising=False)
    path = tmp_path / "run.yaml"
    path.write_text("learning_rate: 0.05\nvalidation_split: 0.2\nloss_function: mse\n")
    config = load_config(path)
    assert config.learning_rate == 0.05
    assert config.validation_split == 0.2
    assert config.loss_function == "mse"


def test_load_config_rejects_unsupported_files(tmp_path):
    path = tmp_path / "run.toml"
    path.write_text("epochs = 1\n")
    with pytest.raises(ValueError):
        load_config(path)
    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]")
    with pytest.raises(TypeError):
        load_config(listing)


def test_resolve_rng():
    gen = np.random.default_rng(0)
    assert resolve_rng(gen) is gen
    assert resolve_rng(None) is utils._PROCESS_RNG
    assert resolve_rng(5).integers(0, 1000) == np.random.default_rng(5).integers(0, 1000)


def test_seed_everything_resets_process_rng():
    seed_everything(17)
    first = draw_seed()
    seed_everything(17)
    assert draw_seed() == first
    assert 0 <= first < 2**31 - 1


def test_standardize():
    data = np.array([[1.0, 5.0], [3.0, 5.0]])
    scaled, mean, std = standardize(data)
    assert np.allclose(scaled[:, 0], [-1.0, 1.0])
    assert np.allclose(scaled[:, 1], 0.0)
    assert np.allclose(mean, [[2.0, 5.0]])
    assert np.allclose(std, [[1.0, 1.0]])
