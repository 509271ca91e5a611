"""Command-line entry point: train, classify an image, or open the drawing window."""

from __future__ import annotations

import argparse
import sys

import numpy as np
from PIL import Image

from nanonn.config import (
    DEFAULT_MODEL_PATH,
    EPOCHS,
    IMAGE_HEIGHT,
    IMAGE_WIDTH,
    LAYERS,
    PIXEL_SCALE,
    TEST_IMAGES_PATH,
    TEST_LABELS_PATH,
    TRAIN_IMAGES_PATH,
    TRAIN_LABELS_PATH,
)
from nanonn.dataset import Dataset, DatasetError
from nanonn.gui import DigitApp, rank_predictions
from nanonn.network import NeuralNetwork, leaky_relu, leaky_relu_derivative

RULE = "-" * 30


def load_image(filename) -> np.ndarray:
    """Load an image as 28x28 grayscale intensities scaled to [0, 1]."""
    with Image.open(filename) as img:
        gray = img.convert("L")
    resized = gray.resize((IMAGE_WIDTH, IMAGE_HEIGHT), Image.Resampling.LANCZOS)
    return np.asarray(resized, dtype=np.uint8).reshape(-1) * PIXEL_SCALE


def format_predictions(probs) -> str:
    """Render the three most likely digits and the best guess."""
    ranked = rank_predictions(probs)
    lines = ["", "Prediction results:", RULE]
    lines.extend(f"Digit {digit}: {prob * 100:.2f}%" for digit, prob in ranked[:3])
    best_digit, best_prob = ranked[0]
    lines.append(RULE)
    lines.append("")
    lines.append(f"The digit is probably {best_digit} with {best_prob * 100:.2f}% confidence.")
    return "\n".join(lines)


def train_and_save_model(activation=leaky_relu, activation_deriv=leaky_relu_derivative):
    """Train on the MNIST files, save the model and return it."""
    print("\nLoading MNIST datasets...")
    train_data = Dataset.load(TRAIN_IMAGES_PATH, TRAIN_LABELS_PATH)
    val_data = Dataset.load(TEST_IMAGES_PATH, TEST_LABELS_PATH)

    train_data.print_info("Training")
    val_data.print_info("Validation")

    nn = NeuralNetwork.with_dims(LAYERS, activation, activation_deriv)

    print(f"\nTraining model for {EPOCHS} epochs...")
    nn.train(train_data, val_data, EPOCHS)

    print("\nExporting model...")
    nn.export_model(DEFAULT_MODEL_PATH)
    return nn


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nano-nn",
        description="MNIST digit recognition CLI with optional GUI mode",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 1.0")
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--gui", action="store_true", help="Run interactive GUI mode")
    mode.add_argument(
        "--image",
        metavar="IMAGE_PATH",
        help="Path to the input image for digit recognition",
    )
    mode.add_argument("--train", action="store_true", help="Train the neural network model")
    parser.add_argument(
        "--model",
        metavar="MODEL_PATH",
        help="Path to the neural network model file (JSON)",
    )
    return parser


def _run(args: argparse.Namespace) -> None:
    if args.gui:
        nn = NeuralNetwork.import_model(
            args.model or DEFAULT_MODEL_PATH, leaky_relu, leaky_relu_derivative
        )
        DigitApp(nn).run()
        return

    if args.train:
        train_and_save_model(leaky_relu, leaky_relu_derivative)
        return

    print(f"Loading image: {args.image}")
    pixels = load_image(args.image)

    if args.model:
        print(f"Loading model: {args.model}")
        nn = NeuralNetwork.import_model(args.model, leaky_relu, leaky_relu_derivative)
    else:
        print("Initializing neural network and training...")
        nn = train_and_save_model(leaky_relu, leaky_relu_derivative)

    print("\nMaking prediction on input image...")
    print(format_predictions(nn.forward(pixels)))


def main(argv=None) -> int:
    parser = build_parser()
    arguments = sys.argv[1:] if argv is None else list(argv)
    if not arguments:
        parser.print_help(sys.stderr)
        return 2
    args = parser.parse_args(arguments)
    try:
        _run(args)
    except (DatasetError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())