"""Reading MNIST IDX files and slicing them into batches."""

from __future__ import annotations

import struct
from dataclasses import dataclass, replace
from typing import BinaryIO, Iterator

from nanonn.config import (
    IMAGE_HEIGHT,
    IMAGE_WIDTH,
    INPUT_SIZE,
    MAGIC_NUMBER_IMAGES,
    MAGIC_NUMBER_LABELS,
)


class DatasetError(Exception):
    """Raised when a dataset file cannot be read."""

    prefix = "IO error"

    def __str__(self) -> str:
        if not self.args:
            return self.prefix
        return f"{self.prefix}: {self.args[0]}"


class InvalidMagicNumberError(DatasetError):
    """The file does not start with the expected IDX magic number."""

    prefix = "Invalid magic number"


class MismatchedCountsError(DatasetError):
    """The image and label files hold different numbers of items."""

    prefix = "Mismatched counts"


class InvalidDataError(DatasetError):
    """The file contents are not valid dataset data."""

    prefix = "Invalid data"


def _open(path) -> BinaryIO:
    try:
        return open(path, "rb")
    except OSError as exc:
        raise DatasetError(str(exc)) from exc


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    try:
        data = stream.read(size)
    except OSError as exc:
        raise DatasetError(str(exc)) from exc
    if len(data) != size:
        raise DatasetError("failed to fill whole buffer")
    return data


def _read_u32_be(stream: BinaryIO) -> int:
    (value,) = struct.unpack(">I", _read_exact(stream, 4))
    return value


def read_images(path) -> tuple[bytes, int, int, int, int]:
    """Read an IDX image file: (pixels, count, rows, columns, magic)."""
    with _open(path) as stream:
        magic = _read_u32_be(stream)
        if magic != MAGIC_NUMBER_IMAGES:
            raise InvalidMagicNumberError(
                f"Invalid magic number for images file: {magic} "
                f"(expected {MAGIC_NUMBER_IMAGES})"
            )
        num_images = _read_u32_be(stream)
        rows = _read_u32_be(stream)
        columns = _read_u32_be(stream)
        pixels = _read_exact(stream, num_images * rows * columns)
    return pixels, num_images, rows, columns, magic


def read_labels(path) -> tuple[bytes, int, int]:
    """Read an IDX label file: (labels, count, magic)."""
    with _open(path) as stream:
        magic = _read_u32_be(stream)
        if magic != MAGIC_NUMBER_LABELS:
            raise InvalidMagicNumberError(
                f"Invalid magic number for labels file: {magic} "
                f"(expected {MAGIC_NUMBER_LABELS})"
            )
        num_labels = _read_u32_be(stream)
        labels = _read_exact(stream, num_labels)
    return labels, num_labels, magic


@dataclass
class Dataset:
    """Raw image bytes with their labels and the IDX header fields."""

    pixels: bytes
    labels: bytes
    num_images: int | None = None
    rows: int = IMAGE_HEIGHT
    columns: int = IMAGE_WIDTH
    magic_number_images: int = MAGIC_NUMBER_IMAGES
    magic_number_labels: int = MAGIC_NUMBER_LABELS

    def __post_init__(self) -> None:
        self.pixels = bytes(self.pixels)
        self.labels = bytes(self.labels)
        if self.num_images is None:
            self.num_images = len(self.labels)

    @classmethod
    def load(cls, images_path, labels_path) -> Dataset:
        """Load a dataset from a pair of IDX image and label files."""
        pixels, num_images, rows, columns, magic_images = read_images(images_path)
        labels, num_labels, magic_labels = read_labels(labels_path)
        if num_images != num_labels:
            raise MismatchedCountsError(
                f"Number of images ({num_images}) and labels ({num_labels}) do not match"
            )
        print(f"Loaded dataset with {num_images} images and {num_labels} labels")
        return cls(
            pixels=pixels,
            labels=labels,
            num_images=num_images,
            rows=rows,
            columns=columns,
            magic_number_images=magic_images,
            magic_number_labels=magic_labels,
        )

    def create_batch(self, batch_size: int, batch_idx: int) -> Dataset | None:
        """Return the batch at ``batch_idx``, or None past the end."""
        start = batch_idx * batch_size
        if start >= self.num_images:
            return None
        end = min(start + batch_size, self.num_images)
        return replace(
            self,
            pixels=self.pixels[start * INPUT_SIZE : end * INPUT_SIZE],
            labels=self.labels[start:end],
            num_images=end - start,
        )

    def batches(self, batch_size: int) -> Iterator[Dataset]:
        """Yield consecutive batches of at most ``batch_size`` images."""
        if batch_size < 1:
            raise ValueError("batch size must be positive")
        batch_idx = 0
        while (batch := self.create_batch(batch_size, batch_idx)) is not None:
            yield batch
            batch_idx += 1

    def info(self, dataset_name: str) -> str:
        """Describe the dataset's header fields."""
        return (
            f"{dataset_name.upper()} DATASET\n"
            f"Magic number (images): {self.magic_number_images}\n"
            f"Number of images: {self.num_images}\n"
            f"Image dimensions: {self.rows} x {self.columns}\n\n"
            f"Magic number (labels): {self.magic_number_labels}\n"
            f"Number of labels: {len(self.labels)}\n\n"
        )

    def print_info(self, dataset_name: str) -> None:
        """Print the description produced by :meth:`info`."""
        print(self.info(dataset_name))