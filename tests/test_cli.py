import struct

import numpy as np
import pytest
from PIL import Image

from nanonn.cli import build_parser, format_predictions, load_image, main, train_and_save_model
from nanonn.config import LAYERS, MAGIC_NUMBER_IMAGES, MAGIC_NUMBER_LABELS
from nanonn.dataset import DatasetError
from nanonn.network import NeuralNetwork, argmax


def _write_png(path, size, value):
    Image.new("L", size, color=value).save(path)


def _write_idx(directory, prefix, images_name, labels_name, count):
    pixels = bytes((i * 37) % 256 for i in range(count * 784))
    header = struct.pack(">IIII", MAGIC_NUMBER_IMAGES, count, 28, 28)
    (directory / images_name).write_bytes(header + pixels)
    labels = bytes(i % 10 for i in range(count))
    (directory / labels_name).write_bytes(struct.pack(">II", MAGIC_NUMBER_LABELS, count) + labels)


def test_load_image_uniform_white(tmp_path):
    path = tmp_path / "white.png"
    _write_png(path, (28, 28), 255)
    pixels = load_image(path)
    assert pixels.shape == (784,)
    assert np.allclose(pixels, 1.0)


def test_load_image_resizes_large_image(tmp_path):
    path = tmp_path / "black.png"
    _write_png(path, (100, 60), 0)
    pixels = load_image(path)
    assert pixels.shape == (784,)
    assert pixels.max() == 0.0


def test_load_image_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_image(tmp_path / "missing.png")


def test_format_predictions_layout():
    probs = [0.05, 0.6, 0.1, 0.25, 0, 0, 0, 0, 0, 0]
    lines = format_predictions(probs).split("\n")
    assert lines[1] == "Prediction results:"
    assert lines[2] == "-" * 30
    assert lines[3].startswith("Digit 1:")
    assert lines[4].startswith("Digit 3:")
    assert lines[5].startswith("Digit 2:")
    assert lines[6] == "-" * 30
    assert lines[-1] == "The digit is probably 1 with 60.00% confidence."


def test_parser_rejects_two_modes():
    with pytest.raises(SystemExit) as info:
        build_parser().parse_args(["--gui", "--train"])
    assert info.value.code == 2


def test_parser_reads_image_and_model():
    args = build_parser().parse_args(["--image", "a.png", "--model", "m.json"])
    assert args.image == "a.png"
    assert args.model == "m.json"
    assert args.gui is False and args.train is False


def test_main_without_arguments_prints_help(capsys):
    assert main([]) == 2
    assert "--image" in capsys.readouterr().err


def test_main_predicts_with_saved_model(tmp_path, capsys):
    image_path = tmp_path / "digit.png"
    _write_png(image_path, (28, 28), 200)
    model_path = tmp_path / "model.json"
    nn = NeuralNetwork.with_dims((784, 10), rng=np.random.default_rng(7))
    nn.export_model(model_path)

    assert main(["--image", str(image_path), "--model", str(model_path)]) == 0
    out = capsys.readouterr().out
    expected_digit = argmax(nn.forward(load_image(image_path)))
    assert f"The digit is probably {expected_digit} with" in out
    assert f"Loading model: {model_path}" in out


def test_main_reports_missing_image(tmp_path, capsys):
    assert main(["--image", str(tmp_path / "none.png"), "--model", "x.json"]) == 1
    assert capsys.readouterr().err.startswith("Error:")


def test_train_and_save_model_without_dataset(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(DatasetError):
        train_and_save_model()


def test_train_and_save_model_writes_model(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    data_dir = tmp_path / "dataset"
    data_dir.mkdir()
    _write_idx(data_dir, "train", "train-images.idx3-ubyte", "train-labels.idx1-ubyte", 2)
    _write_idx(data_dir, "test", "t10k-images.idx3-ubyte", "t10k-labels.idx1-ubyte", 2)

    nn = train_and_save_model()
    assert nn.architecture() == list(LAYERS)
    restored = NeuralNetwork.import_model(tmp_path / "model.json")
    assert restored.architecture() == list(LAYERS)
    assert "TRAINING DATASET" in capsys.readouterr().out