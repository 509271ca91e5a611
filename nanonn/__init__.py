"""A small neural network for MNIST handwritten digit recognition, with a CLI and drawing window."""

__version__ = "0.1.0"