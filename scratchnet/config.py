"""Training hyperparameter configuration."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .core.errors import ArgumentError

SEED_ENV_VAR = "SCRATCHNET_SEED"


@dataclass(frozen=True)
class TrainConfig:
    """Hyperparameters consumed by :meth:`Network.apply_config`."""

    learning_rate: float = 0.01
    epochs: int = 1
    batch_size: int = 1
    validation_split: float = 0.0
    patience: int = 5
    seed: Optional[int] = None
    loss_gradient: str = "softmax_cross_entropy"
    loss_function: str = "sse"

    def validate(self) -> "TrainConfig":
        if not self.learning_rate > 0:
            raise ArgumentError("learning_rate must be positive")
        if self.epochs < 0:
            raise ArgumentError("epochs must be non-negative")
        if self.batch_size <= 0:
            raise ArgumentError("batch_size must be greater than 0")
        if not 0.0 <= self.validation_split < 1.0:
            raise ArgumentError("validation_split must be in [0, 1)")
        if self.patience <= 0:
            raise ArgumentError("patience must be greater than 0")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "TrainConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(mapping) - known
        if unknown:
            raise ArgumentError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        config = cls(**dict(mapping))
        if config.seed is None and os.environ.get(SEED_ENV_VAR):
            config = replace(config, seed=int(os.environ[SEED_ENV_VAR]))
        return config.validate()


def _read_config_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load config files in YAML format") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def load_config(path: str | Path) -> TrainConfig:
    """Read a JSON or YAML file into a validated :class:`TrainConfig`.

    A top-level ``train`` section is used when present, so the same file may
    carry other sections for other tools.
    """

    data = _read_config_file(Path(path))
    section = data.get("train", data)
    if not isinstance(section, Mapping):
        raise TypeError("Config 'train' section must be a mapping")
    return TrainConfig.from_mapping(section)


__all__ = ["SEED_ENV_VAR", "TrainConfig", "load_config"]
