"""Network architecture, training hyper-parameters and MNIST file locations."""

INPUT_SIZE = 784  # 28x28 pixels
HIDDEN_SIZE_1 = 256
HIDDEN_SIZE_2 = 128
HIDDEN_SIZE_3 = 64
HIDDEN_SIZE_4 = 32
OUTPUT_SIZE = 10  # digits 0-9

LAYERS = (
    INPUT_SIZE,
    HIDDEN_SIZE_1,
    HIDDEN_SIZE_2,
    HIDDEN_SIZE_3,
    HIDDEN_SIZE_4,
    OUTPUT_SIZE,
)

BATCH_SIZE = 128
EPOCHS = 20
PATIENCE_LIMIT = 10
LEARNING_RATE = 0.001

IMAGE_WIDTH = 28
IMAGE_HEIGHT = 28
PIXEL_SCALE = 1.0 / 255.0
MAGIC_NUMBER_IMAGES = 2051
MAGIC_NUMBER_LABELS = 2049

TRAIN_IMAGES_PATH = "dataset/train-images.idx3-ubyte"
TRAIN_LABELS_PATH = "dataset/train-labels.idx1-ubyte"
TEST_IMAGES_PATH = "dataset/t10k-images.idx3-ubyte"
TEST_LABELS_PATH = "dataset/t10k-labels.idx1-ubyte"

DEFAULT_MODEL_PATH = "model.json"