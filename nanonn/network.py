"""A fully connected feed-forward network with softmax output."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from itertools import pairwise
from typing import Callable, Iterator

import numpy as np

from nanonn.config import (
    BATCH_SIZE,
    INPUT_SIZE,
    LAYERS,
    LEARNING_RATE,
    PATIENCE_LIMIT,
    PIXEL_SCALE,
)
from nanonn.dataset import Dataset

Activation = Callable[[np.ndarray], np.ndarray]


def leaky_relu(x):
    """Leaky ReLU with slope 0.01 for non-positive inputs."""
    values = np.asarray(x, dtype=float)
    result = np.where(values > 0.0, values, 0.01 * values)
    return float(result) if result.ndim == 0 else result


def leaky_relu_derivative(x):
    """Derivative of :func:`leaky_relu`."""
    values = np.asarray(x, dtype=float)
    result = np.where(values > 0.0, 1.0, 0.01)
    return float(result) if result.ndim == 0 else result


def softmax(logits) -> np.ndarray:
    """Numerically stable softmax."""
    values = np.asarray(logits, dtype=float)
    exps = np.exp(values - values.max())
    return exps / exps.sum()


def cross_entropy(y_true, y_pred) -> float:
    """Cross-entropy loss with predictions clamped away from 0 and 1."""
    eps = 1e-15
    truth = np.asarray(y_true, dtype=float)
    preds = np.clip(np.asarray(y_pred, dtype=float), eps, 1.0 - eps)
    return float(-(truth * np.log(preds)).sum())


def argmax(values) -> int:
    """Index of the largest value; the last one wins on ties, 0 when empty."""
    array = np.asarray(values, dtype=float)
    if array.size == 0:
        return 0
    if np.isnan(array).any():
        raise ValueError("cannot take argmax of NaN values")
    return int(array.size - 1 - np.argmax(array[::-1]))


def _one_hot(label: int, size: int) -> np.ndarray:
    target = np.zeros(size)
    if label < size:
        target[label] = 1.0
    return target


def _samples(dataset: Dataset) -> Iterator[tuple[np.ndarray, int]]:
    chunks = (
        dataset.pixels[offset : offset + INPUT_SIZE]
        for offset in range(0, len(dataset.pixels), INPUT_SIZE)
    )
    for chunk, label in zip(chunks, dataset.labels):
        yield np.frombuffer(chunk, dtype=np.uint8) * PIXEL_SCALE, label


@dataclass
class Layer:
    """A dense layer: ``weights`` is (outputs x inputs)."""

    weights: np.ndarray
    biases: np.ndarray

    def __post_init__(self) -> None:
        self.weights = np.array(self.weights, dtype=float, ndmin=2)
        self.biases = np.array(self.biases, dtype=float)
        if self.weights.shape[0] != self.biases.shape[0]:
            raise ValueError(
                f"layer has {self.weights.shape[0]} weight rows "
                f"but {self.biases.shape[0]} biases"
            )

    @classmethod
    def random(cls, in_dim: int, out_dim: int, rng: np.random.Generator | None = None) -> Layer:
        """Layer with weights uniform in ±0.5·sqrt(2/in_dim) and zero biases."""
        if in_dim < 1:
            raise ValueError("layer input dimension must be positive")
        rng = rng if rng is not None else np.random.default_rng()
        factor = math.sqrt(2.0 / in_dim)
        weights = (rng.random((out_dim, in_dim)) - 0.5) * factor
        return cls(weights, np.zeros(out_dim))

    def forward(self, inputs) -> np.ndarray:
        """Matrix-vector product plus bias."""
        return self.weights @ np.asarray(inputs, dtype=float) + self.biases

    def to_dict(self) -> dict:
        return {"weights": self.weights.tolist(), "biases": self.biases.tolist()}


class NeuralNetwork:
    """Feed-forward network trained by per-sample gradient descent."""

    def __init__(
        self,
        layers,
        activation: Activation = leaky_relu,
        activation_deriv: Activation = leaky_relu_derivative,
    ) -> None:
        self.layers: list[Layer] = list(layers)
        self.activation = activation
        self.activation_deriv = activation_deriv

    @classmethod
    def with_dims(
        cls,
        layer_dims=LAYERS,
        activation: Activation = leaky_relu,
        activation_deriv: Activation = leaky_relu_derivative,
        rng: np.random.Generator | None = None,
    ) -> NeuralNetwork:
        """Randomly initialised network with the given layer sizes."""
        rng = rng if rng is not None else np.random.default_rng()
        layers = [Layer.random(a, b, rng) for a, b in pairwise(layer_dims)]
        return cls(layers, activation, activation_deriv)

    def export_model(self, filename) -> None:
        """Write the layers as JSON."""
        with open(filename, "w", encoding="utf-8") as handle:
            json.dump({"layers": [layer.to_dict() for layer in self.layers]}, handle)

    @classmethod
    def import_model(
        cls,
        filename,
        activation: Activation = leaky_relu,
        activation_deriv: Activation = leaky_relu_derivative,
    ) -> NeuralNetwork:
        """Read a network written by :meth:`export_model`."""
        with open(filename, encoding="utf-8") as handle:
            data = json.load(handle)
        try:
            layers = [Layer(entry["weights"], entry["biases"]) for entry in data["layers"]]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"invalid model file: {exc}") from exc
        return cls(layers, activation, activation_deriv)

    def forward_cached(self, pixels) -> list[np.ndarray]:
        """Outputs of every layer, starting with the input itself."""
        current = np.asarray(pixels, dtype=float)
        outputs = [current]
        last = len(self.layers) - 1
        for index, layer in enumerate(self.layers):
            values = layer.forward(current)
            if index < last:
                current = np.asarray(self.activation(values), dtype=float)
            else:
                current = softmax(values)
            outputs.append(current)
        return outputs

    def forward(self, pixels) -> np.ndarray:
        """Class probabilities for one input."""
        return self.forward_cached(pixels)[-1]

    def _train_sample(self, pixels: np.ndarray, label: int, lr: float) -> None:
        outputs = self.forward_cached(pixels)
        delta = outputs[-1] - _one_hot(label, len(outputs[-1]))
        deltas = [delta]
        for layer, activated in zip(reversed(self.layers[1:]), reversed(outputs[1:-1])):
            delta = (layer.weights.T @ delta) * np.asarray(
                self.activation_deriv(activated), dtype=float
            )
            deltas.append(delta)
        deltas.reverse()
        for layer, previous, layer_delta in zip(self.layers, outputs, deltas):
            layer.biases -= lr * layer_delta
            layer.weights -= lr * np.outer(layer_delta, previous)

    def train(self, train: Dataset, val: Dataset, epochs: int) -> list[tuple[float, float]]:
        """Train with early stopping; return (loss, accuracy) per epoch run."""
        best_val_loss = math.inf
        patience = 0
        history: list[tuple[float, float]] = []
        for epoch in range(epochs):
            for batch in train.batches(BATCH_SIZE):
                for pixels, label in _samples(batch):
                    self._train_sample(pixels, label, LEARNING_RATE)

            val_loss, accuracy = self.validate(val)
            history.append((val_loss, accuracy))
            print(f"Epoch {epoch} - ValLoss: {val_loss:.4f}, ValAcc: {accuracy * 100:.2f}%")

            if val_loss < best_val_loss:
                best_val_loss = val_loss
                patience = 0
            elif patience >= PATIENCE_LIMIT:
                print(f"Early stopping at epoch {epoch}")
                break
            else:
                patience += 1
        return history

    def validate(self, val: Dataset) -> tuple[float, float]:
        """Mean cross-entropy loss and accuracy over a dataset."""
        loss = 0.0
        correct = 0
        for pixels, label in _samples(val):
            preds = self.forward(pixels)
            loss += cross_entropy(_one_hot(label, len(preds)), preds)
            if argmax(preds) == label:
                correct += 1
        if val.num_images == 0:
            return math.nan, math.nan
        return loss / val.num_images, correct / val.num_images

    def num_layers(self) -> int:
        return len(self.layers)

    def architecture(self) -> list[int]:
        """Layer sizes, input size first."""
        if not self.layers:
            return []
        return [self.layers[0].weights.shape[1]] + [
            layer.weights.shape[0] for layer in self.layers
        ]

    def __repr__(self) -> str:
        return (
            f"NeuralNetwork(architecture={self.architecture()}, "
            f"num_layers={self.num_layers()})"
        )