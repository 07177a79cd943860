"""Feed-forward network trained with mini-batch gradient descent."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Sequence, Union

import numpy as np

from ..config import TrainConfig
from ..core import activations
from ..core.errors import ArgumentError, StateError
from ..core.types import Array, EpochResult, NetworkRecord
from ..data.store import TabularStore
from ..data.utils import draw_seed, resolve_rng
from ..training.losses import LossFunction, LossGradient, resolve_gradient, resolve_loss
from ..training.metrics import class_index, one_hot
from .layer import Layer

logger = logging.getLogger(__name__)

Callback = Union[Callable[[int, dict], None], object]


class Network:
    """Linear stack of dense layers for classification.

    A network moves through three states. While *building*, layers are
    declared in order with :meth:`layer` until ``hidden_layers + 1`` exist
    (the last one is the output layer). Once complete it is *configured*
    and hyperparameters or losses may still change. :meth:`fit` moves it to
    *fitted*, after which the architecture and hyperparameters are frozen
    and only :meth:`predict` / :meth:`score` are allowed.
    """

    def __init__(
        self,
        input_size: int,
        hidden_layers: int,
        output_size: int,
        learning_rate: float = 0.01,
        *,
        seed: Optional[int] = None,
    ) -> None:
        if input_size <= 0 or output_size <= 0:
            raise ArgumentError("input_size and output_size must be positive")
        if hidden_layers < 0:
            raise ArgumentError("hidden_layers must be non-negative")
        self.input_size = int(input_size)
        self.hidden_layers = int(hidden_layers)
        self.output_size = int(output_size)
        self.layers: List[Layer] = []
        self.history: List[EpochResult] = []
        self.fitted = False
        self._config = TrainConfig(learning_rate=learning_rate, seed=seed).validate()
        self._rng = resolve_rng(seed)
        self._loss_gradient = resolve_gradient(self._config.loss_gradient)
        self._loss_function = resolve_loss(self._config.loss_function)

    @classmethod
    def from_architecture(
        cls,
        input_size: int,
        units: Sequence[int],
        activation_names: Sequence[str],
        learning_rate: float = 0.01,
        *,
        seed: Optional[int] = None,
    ) -> "Network":
        """Build a network whose last entry of ``units`` is the output layer."""

        if len(units) == 0:
            raise ArgumentError("At least one layer must be declared")
        if len(units) != len(activation_names):
            raise ArgumentError("units and activation_names must have the same length")
        network = cls(input_size, len(units) - 1, units[-1], learning_rate, seed=seed)
        for count, name in zip(units, activation_names):
            network.layer(count, name)
        return network

    # ------------------------------------------------------------------
    # Building and configuration

    @property
    def state(self) -> str:
        if self.fitted:
            return "fitted"
        if len(self.layers) == self.hidden_layers + 1:
            return "configured"
        return "building"

    @property
    def config(self) -> TrainConfig:
        return self._config

    @property
    def learning_rate(self) -> float:
        return self._config.learning_rate

    @property
    def epochs(self) -> int:
        return self._config.epochs

    @property
    def batch_size(self) -> int:
        return self._config.batch_size

    @property
    def validation_split(self) -> float:
        return self._config.validation_split

    @property
    def patience(self) -> int:
        return self._config.patience

    @property
    def loss_gradient_name(self) -> str:
        return self._loss_gradient.name

    @property
    def loss_function_name(self) -> str:
        return self._loss_function.name

    def layer(self, units: int, activation: str) -> "Network":
        self._require_not_fitted()
        if len(self.layers) == self.hidden_layers + 1:
            raise StateError(
                f"Maximum number of layers reached ({self.hidden_layers + 1})"
            )
        function = activations.resolve(activation)
        is_output = len(self.layers) == self.hidden_layers
        if function.terminal_only and not is_output:
            raise ArgumentError(f"{function.name} is only supported on the output layer")
        if is_output and units != self.output_size:
            raise ArgumentError(
                f"Output layer must have {self.output_size} units, got {units}"
            )
        inputs = self.layers[-1].unit_count if self.layers else self.input_size
        self.layers.append(Layer(inputs, units, function, rng=self._rng))
        return self

    def configure(
        self,
        epochs: Optional[int] = None,
        batch_size: Optional[int] = None,
        validation_split: Optional[float] = None,
        *,
        patience: Optional[int] = None,
        learning_rate: Optional[float] = None,
    ) -> "Network":
        self._require_not_fitted()
        overrides = {
            "epochs": epochs,
            "batch_size": batch_size,
            "validation_split": validation_split,
            "patience": patience,
            "learning_rate": learning_rate,
        }
        changes = {key: value for key, value in overrides.items() if value is not None}
        self._config = replace(self._config, **changes).validate()
        return self

    def apply_config(self, config: TrainConfig) -> "Network":
        self._require_not_fitted()
        config = config.validate()
        gradient = resolve_gradient(config.loss_gradient)
        function = resolve_loss(config.loss_function)
        if config.seed is not None and config.seed != self._config.seed:
            self._rng = resolve_rng(config.seed)
        self._config = config
        self._loss_gradient = gradient
        self._loss_function = function
        return self

    def loss_gradient(self, gradient: Union[str, LossGradient]) -> "Network":
        self._require_not_fitted()
        if isinstance(gradient, str):
            gradient = resolve_gradient(gradient)
        self._loss_gradient = gradient
        self._config = replace(self._config, loss_gradient=gradient.name)
        return self

    def loss(self, function: Union[str, LossFunction]) -> "Network":
        self._require_not_fitted()
        if isinstance(function, str):
            function = resolve_loss(function)
        self._loss_function = function
        self._config = replace(self._config, loss_function=function.name)
        return self

    # ------------------------------------------------------------------
    # Training

    def fit(self, store: TabularStore, *, callbacks: Iterable[Callback] = ()) -> "Network":
        self._require_not_fitted()
        if len(self.layers) != self.hidden_layers + 1:
            raise StateError(
                f"Expected {self.hidden_layers + 1} layers (hidden + output), "
                f"but {len(self.layers)} were added"
            )
        self._check_store(store)
        self._check_loss_gradient()

        base_seed = self._config.seed if self._config.seed is not None else draw_seed()
        n = len(store)
        val_size = int(n * self._config.validation_split)
        validation, train = store.split(val_size, n - val_size, shuffle=True, seed=base_seed)
        logger.debug("Training on %d rows, validating on %d rows", len(train), len(validation))

        callbacks = list(callbacks)
        history: List[EpochResult] = []
        best_loss = float("inf")
        epochs_no_improve = 0
        for epoch in range(self._config.epochs):
            train_loss = self._train_epoch(train, seed=base_seed + epoch)
            if len(validation) == 0:
                result = EpochResult(epoch=epoch + 1, train_loss=train_loss)
                history.append(result)
                self._emit_epoch(result, callbacks)
                continue

            val_loss, val_accuracy = self._evaluate(validation)
            result = EpochResult(
                epoch=epoch + 1,
                train_loss=train_loss,
                val_loss=val_loss,
                val_accuracy=val_accuracy,
            )
            history.append(result)
            self._emit_epoch(result, callbacks)
            if val_loss < best_loss:
                best_loss = val_loss
                epochs_no_improve = 0
            else:
                epochs_no_improve += 1
                if epochs_no_improve >= self._config.patience:
                    logger.info(
                        "Early stopping after epoch %d (best val_loss=%.6f)",
                        epoch + 1,
                        best_loss,
                    )
                    break

        self.history = history
        self.fitted = True
        return self

    def _train_epoch(self, train: TabularStore, *, seed: int) -> float:
        losses: List[float] = []
        chain_output = self._loss_gradient.output_activation is None
        for batch in train.iterate_batches(self._config.batch_size, seed):
            accum = [layer.zero_grad() for layer in self.layers]
            for row in range(len(batch)):
                target = self._target(batch.get_label(row))
                output = self._forward(batch.get_features_ref(row))
                losses.append(self._loss_function(output, target))
                delta = self._loss_gradient(output, target)
                if chain_output:
                    delta = delta * self.layers[-1].activation_derivative()
                for idx in range(len(self.layers) - 1, -1, -1):
                    layer = self.layers[idx]
                    accum[idx] += layer.gradient(delta)
                    if idx > 0:
                        upstream = layer.backpropagate(delta)
                        delta = upstream * self.layers[idx - 1].activation_derivative()
            for layer, grad in zip(self.layers, accum):
                layer.apply_gradient(grad, self._config.learning_rate, len(batch))
        return float(np.mean(losses)) if losses else 0.0

    def _evaluate(self, store: TabularStore) -> tuple[float, float]:
        total_loss = 0.0
        correct = 0
        for row in range(len(store)):
            label = store.get_label(row)
            target = self._target(label)
            output = self._forward(store.get_features_ref(row))
            total_loss += self._loss_function(output, target)
            if int(np.argmax(output)) == int(label):
                correct += 1
        return total_loss / len(store), correct / len(store)

    def _emit_epoch(self, result: EpochResult, callbacks: Sequence[Callback]) -> None:
        if result.val_loss is None:
            logger.info(
                "Epoch %d/%d - loss=%.6f (no validation set)",
                result.epoch,
                self._config.epochs,
                result.train_loss,
            )
        else:
            logger.info(
                "Epoch %d/%d - loss=%.6f val_loss=%.6f val_acc=%.4f",
                result.epoch,
                self._config.epochs,
                result.train_loss,
                result.val_loss,
                result.val_accuracy,
            )
        metrics = result.as_metrics()
        for callback in callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(result.epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(result.epoch, metrics)

    # ------------------------------------------------------------------
    # Inference

    def predict(self, features: Sequence[float] | Array) -> Array:
        self._require_fitted()
        x = np.asarray(features, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.input_size:
            raise ArgumentError(f"Expected {self.input_size} features, but got {x.shape[0]}")
        return self._forward(x).copy()

    def predict_class(self, features: Sequence[float] | Array) -> int:
        return int(np.argmax(self.predict(features)))

    def score(self, store: TabularStore) -> float:
        """Fraction of rows whose argmax output equals the label."""

        self._require_fitted()
        self._check_store(store)
        correct = 0
        for row in range(len(store)):
            output = self._forward(store.get_features_ref(row))
            if float(np.argmax(output)) == store.get_label(row):
                correct += 1
        return correct / len(store)

    # ------------------------------------------------------------------
    # Records

    def to_record(self) -> NetworkRecord:
        return NetworkRecord(
            input_size=self.input_size,
            hidden_layers=self.hidden_layers,
            output_size=self.output_size,
            learning_rate=self._config.learning_rate,
            epochs=self._config.epochs,
            batch_size=self._config.batch_size,
            validation_split=self._config.validation_split,
            loss_gradient=self._loss_gradient.name,
            loss_function=self._loss_function.name,
            layers=[layer.to_record() for layer in self.layers],
        )

    @classmethod
    def from_record(cls, record: NetworkRecord) -> "Network":
        """Rebuild a fitted network with the weights stored in ``record``."""

        if len(record.layers) != record.hidden_layers + 1:
            raise ArgumentError(
                f"Record declares {record.hidden_layers} hidden layers but holds "
                f"{len(record.layers)} layers"
            )
        network = cls(
            record.input_size,
            record.hidden_layers,
            record.output_size,
            record.learning_rate,
        )
        network.configure(record.epochs, record.batch_size, record.validation_split)
        network.loss_gradient(record.loss_gradient)
        network.loss(record.loss_function)
        expected_inputs = record.input_size
        for layer_record in record.layers:
            if layer_record.inputs != expected_inputs:
                raise ArgumentError(
                    f"Layer expects {layer_record.inputs} inputs, previous layer "
                    f"provides {expected_inputs}"
                )
            layer = Layer.from_record(layer_record)
            is_output = len(network.layers) == record.hidden_layers
            if layer.activation.terminal_only and not is_output:
                raise ArgumentError(
                    f"{layer.activation.name} is only supported on the output layer"
                )
            network.layers.append(layer)
            expected_inputs = layer_record.units
        if expected_inputs != record.output_size:
            raise ArgumentError("Last layer does not match the declared output size")
        network.fitted = True
        return network

    # ------------------------------------------------------------------
    # Internal helpers

    def _forward(self, x: Array) -> Array:
        for layer in self.layers:
            x = layer.forward(x)
        return x

    def _target(self, label: float) -> Array:
        return one_hot(class_index(label, self.output_size), self.output_size)

    def _check_store(self, store: Optional[TabularStore]) -> None:
        if store is None or len(store) == 0:
            raise ArgumentError("Store must contain at least one row")
        if store.feature_count != self.input_size:
            raise ArgumentError(
                f"Expected {self.input_size} features, but got {store.feature_count}"
            )

    def _check_loss_gradient(self) -> None:
        activation = self.layers[-1].activation
        gradient = self._loss_gradient
        if gradient.supports(activation):
            return
        if gradient.output_activation is not None:
            raise ArgumentError(
                f"Loss gradient {gradient.name!r} requires a "
                f"{gradient.output_activation} output layer, got {activation.name}"
            )
        raise ArgumentError(
            f"Loss gradient {gradient.name!r} cannot be chained through "
            f"{activation.name}; pair a {activation.name} output with its matching gradient"
        )

    def _require_fitted(self) -> None:
        if not self.fitted:
            raise StateError("Model has not been fitted yet")

    def _require_not_fitted(self) -> None:
        if self.fitted:
            raise StateError("Model has already been fitted")

    def __repr__(self) -> str:
        layers = ", ".join(repr(layer) for layer in self.layers)
        return f"Network(input_size={self.input_size}, state={self.state!r}, layers=[{layers}])"


__all__ = ["Network"]
