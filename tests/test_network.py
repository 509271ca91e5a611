import math

import numpy as np
import pytest

from nanonn.config import INPUT_SIZE
from nanonn.dataset import Dataset
from nanonn.network import (
    Layer,
    NeuralNetwork,
    argmax,
    cross_entropy,
    leaky_relu,
    leaky_relu_derivative,
    softmax,
)


def two_class_dataset(count=20):
    half = INPUT_SIZE // 2
    pixels = bytearray()
    labels = []
    for index in range(count):
        label = index % 2
        if label == 0:
            pixels += bytes([255] * half + [0] * (INPUT_SIZE - half))
        else:
            pixels += bytes([0] * half + [255] * (INPUT_SIZE - half))
        labels.append(label)
    return Dataset(bytes(pixels), bytes(labels))


def test_softmax_is_distribution():
    probs = softmax([1.0, 2.0, 3.0, -4.0])
    assert probs.sum() == pytest.approx(1.0)
    assert (probs > 0).all()
    assert np.allclose(softmax([1001.0, 1002.0, 1003.0, 996.0]), probs)


def test_cross_entropy():
    assert cross_entropy([0.0, 1.0], [0.0, 1.0]) == pytest.approx(0.0, abs=1e-12)
    assert cross_entropy([0.0, 1.0], [0.5, 0.5]) == pytest.approx(math.log(2))
    assert math.isfinite(cross_entropy([1.0, 0.0], [0.0, 1.0]))


def test_argmax_prefers_last_tie():
    assert argmax([1.0, 3.0, 3.0]) == 2
    assert argmax([]) == 0
    with pytest.raises(ValueError):
        argmax([1.0, float("nan")])


def test_leaky_relu():
    assert leaky_relu(2.5) == 2.5
    assert leaky_relu(-1.0) == pytest.approx(-0.01)
    assert leaky_relu_derivative(2.5) == 1.0
    assert leaky_relu_derivative(-3.0) == 0.01
    assert np.allclose(leaky_relu(np.array([-1.0, 1.0])), [-0.01, 1.0])


def test_layer_forward():
    layer = Layer([[1.0, 2.0], [3.0, 4.0]], [0.5, -1.0])
    assert np.allclose(layer.forward([1.0, 1.0]), [3.5, 6.0])


def test_layer_shape_mismatch():
    with pytest.raises(ValueError):
        Layer([[1.0, 2.0]], [0.0, 0.0])


def test_layer_random_bounds():
    layer = Layer.random(8, 5, np.random.default_rng(1))
    bound = 0.5 * math.sqrt(2.0 / 8)
    assert layer.weights.shape == (5, 8)
    assert np.abs(layer.weights).max() <= bound
    assert not layer.biases.any()


def test_architecture_and_repr():
    net = NeuralNetwork.with_dims([4, 3, 2], rng=np.random.default_rng(0))
    assert net.architecture() == [4, 3, 2]
    assert net.num_layers() == 2
    assert "architecture=[4, 3, 2]" in repr(net)


def test_forward_cached_layout():
    net = NeuralNetwork.with_dims([4, 3, 2], rng=np.random.default_rng(0))
    inputs = [0.1, 0.2, 0.3, 0.4]
    outputs = net.forward_cached(inputs)
    assert len(outputs) == net.num_layers() + 1
    assert np.allclose(outputs[0], inputs)
    assert [len(output) for output in outputs] == [4, 3, 2]
    assert net.forward(inputs).sum() == pytest.approx(1.0)


def test_export_import_round_trip(tmp_path):
    net = NeuralNetwork.with_dims([4, 3, 2], rng=np.random.default_rng(2))
    path = tmp_path / "model.json"
    net.export_model(path)
    loaded = NeuralNetwork.import_model(path)
    assert loaded.architecture() == net.architecture()
    inputs = [0.5, -0.5, 1.0, 0.0]
    assert np.allclose(loaded.forward(inputs), net.forward(inputs))


def test_import_malformed(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"layers": [{"weights": [[1.0]]}]}')
    with pytest.raises(ValueError):
        NeuralNetwork.import_model(path)


def test_validate_empty_is_nan():
    net = NeuralNetwork.with_dims([INPUT_SIZE, 4, 10], rng=np.random.default_rng(0))
    loss, accuracy = net.validate(Dataset(b"", b""))
    assert np.isnan([loss, accuracy]).tolist() == [True, True]


def test_validate_accuracy_range():
    net = NeuralNetwork.with_dims([INPUT_SIZE, 4, 10], rng=np.random.default_rng(0))
    loss, accuracy = net.validate(two_class_dataset(6))
    assert loss > 0
    assert 0.0 <= accuracy <= 1.0


def test_train_reduces_loss(capsys):
    data = two_class_dataset()
    net = NeuralNetwork.with_dims([INPUT_SIZE, 16, 10], rng=np.random.default_rng(0))
    before, _ = net.validate(data)
    history = net.train(data, data, 5)
    assert len(history) == 5
    assert history[-1][0] < before
    assert "Epoch 0 - ValLoss:" in capsys.readouterr().out