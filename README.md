# nanonn

A small fully connected neural network that learns to recognise handwritten
digits from the MNIST dataset. It trains with per-sample gradient descent,
saves its weights as JSON, and can classify a digit from an image file or from
a drawing made with the mouse.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

The drawing window uses `tkinter` from the standard library, so the Python
installation needs Tk support for `--gui`.

## Getting the data

The package does not download MNIST. Training reads the four IDX files from a
`dataset/` directory relative to the working directory:

```
dataset/train-images.idx3-ubyte
dataset/train-labels.idx1-ubyte
dataset/t10k-images.idx3-ubyte
dataset/t10k-labels.idx1-ubyte
```

## Usage

Exactly one of `--train`, `--image` or `--gui` is required. Run with no
arguments to see the help; `--version` prints the version.

Train a model and write it to `model.json`:

```
nanonn --train
```

The default network has layers of 784, 256, 128, 64, 32 and 10 neurons, uses
leaky ReLU on the hidden layers and softmax on the output, and trains for up to
20 epochs over batches of 128 images with a learning rate of 0.001. The t10k
files serve as the validation set; loss and accuracy on it are printed after
each epoch, and training stops early once the validation loss has failed to
improve for more than ten epochs in a row.

Classify an image with a saved model:

```
nanonn --image digit.png --model model.json
```

The image is converted to greyscale and resized to 28 × 28 with Lanczos
resampling. The three most likely digits are printed with their probabilities,
followed by the best guess. Without `--model`, a new model is trained first
(and saved to `model.json`).

Draw digits in a window and watch the prediction update as you draw:

```
nanonn --gui --model model.json
```

`--model` defaults to `model.json`. Drag with the left mouse button to paint
with a soft brush; the prediction is refreshed every 0.1 seconds and lists all
ten digits, most likely first. The Clear button empties the canvas.

Missing files, bad dataset files and invalid model files are reported as
`Error: ...` on standard error with exit status 1.

## Using the library

```python
from nanonn.dataset import Dataset
from nanonn.network import NeuralNetwork, leaky_relu, leaky_relu_derivative

train = Dataset.load("dataset/train-images.idx3-ubyte", "dataset/train-labels.idx1-ubyte")
val = Dataset.load("dataset/t10k-images.idx3-ubyte", "dataset/t10k-labels.idx1-ubyte")

nn = NeuralNetwork.with_dims([784, 64, 10], leaky_relu, leaky_relu_derivative, None)
history = nn.train(train, val, 5)  # (validation loss, accuracy) per epoch
nn.export_model("model.json")

probs = nn.forward([0.0] * 784)
```

- `nanonn.dataset` reads IDX files (`read_images`, `read_labels`,
  `Dataset.load`) and slices a `Dataset` with `create_batch` or `batches`.
  Problems with the files raise `DatasetError` or one of its subclasses
  `InvalidMagicNumberError` and `MismatchedCountsError`.
- `nanonn.network` holds `Layer`, `NeuralNetwork` and the helpers `softmax`,
  `cross_entropy`, `argmax`, `leaky_relu` and `leaky_relu_derivative`.
  `NeuralNetwork.import_model` loads a saved model back,
  `validate` returns mean loss and accuracy on a dataset, and `architecture()`
  reports the layer sizes.
- `nanonn.gui` provides `DigitCanvas` (the 28 × 28 paint grid),
  `rank_predictions` and the `DigitApp` window.
- `nanonn.config` holds the layer sizes, training settings and file paths.

A saved model is a JSON object of the form
`{"layers": [{"weights": [[...], ...], "biases": [...]}, ...]}`, with one
weight row per output neuron.

Images given to the network should be 784 values in the range 0 to 1, row by
row. White strokes on a black background match the training data.