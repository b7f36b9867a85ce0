"""
Fixed-Length Binary Record Codec.

A record is one label byte followed by a channel-planar image payload
(all pixels of channel 0, then channel 1, then channel 2). A source file is
a plain concatenation of records with no separators, so the record count of
a file is ``floor(file_size / record_size)``.

Trailing bytes that do not form a whole record are ignored with a warning
by default, or rejected with ``RecordFramingError`` in strict mode.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from ..core.paths import LOGGER_NAME
from ..exceptions import FileAccessError, RecordFramingError

logger = logging.getLogger(LOGGER_NAME)

# Per-channel standardization constants (R, G, B), fixed for the dataset family
CIFAR10_MEAN: tuple[float, float, float] = (0.4914, 0.4822, 0.4465)
CIFAR10_STD: tuple[float, float, float] = (0.2470, 0.2435, 0.2616)


@dataclass(frozen=True)
class RecordLayout:
    """
    Geometry and normalization constants of one record family.

    Attributes:
        channels: Image channels stored planar in the payload.
        height: Image rows.
        width: Image columns.
        mean: Per-channel mean subtracted after rescaling to [0, 1].
        std: Per-channel standard deviation divided out after centering.
    """

    channels: int = 3
    height: int = 32
    width: int = 32
    mean: tuple[float, ...] = CIFAR10_MEAN
    std: tuple[float, ...] = CIFAR10_STD

    def __post_init__(self) -> None:
        if min(self.channels, self.height, self.width) <= 0:
            raise ValueError(f"Record geometry must be positive, got {self}")
        if len(self.mean) != self.channels or len(self.std) != self.channels:
            raise ValueError("mean/std must provide one value per channel")
        if any(s <= 0 for s in self.std):
            raise ValueError("std values must be positive")

    @property
    def image_bytes(self) -> int:
        """Payload size: ``channels * height * width``."""
        return self.channels * self.height * self.width

    @property
    def record_bytes(self) -> int:
        """Full record size: label byte plus payload."""
        return 1 + self.image_bytes


CIFAR10_LAYOUT = RecordLayout()


def count_records(path: Path, layout: RecordLayout = CIFAR10_LAYOUT) -> int:
    """Number of whole records in ``path`` (trailing partial bytes excluded)."""
    return Path(path).stat().st_size // layout.record_bytes


def decode_records(
    buffer: bytes,
    layout: RecordLayout = CIFAR10_LAYOUT,
    *,
    source: str = "<buffer>",
    strict: bool = False,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Split a raw byte buffer into planar images and labels.

    Args:
        buffer: Concatenated records.
        layout: Record geometry.
        source: Name used in warnings and errors.
        strict: Raise instead of ignoring a trailing partial record.

    Returns:
        ``(images, labels)``: uint8 array ``(N, C, H, W)`` and int64 array ``(N,)``.

    Raises:
        RecordFramingError: In strict mode, when the buffer length is not a
            whole multiple of the record size.
    """
    n_records, leftover = divmod(len(buffer), layout.record_bytes)
    if leftover:
        message = (
            f"{source}: {leftover} trailing byte(s) do not form a whole "
            f"{layout.record_bytes}-byte record"
        )
        if strict:
            raise RecordFramingError(message, path=None if source == "<buffer>" else source)
        logger.warning(f"{message}; ignored")

    if n_records == 0:
        rows = np.empty((0, layout.record_bytes), dtype=np.uint8)
    else:
        flat = np.frombuffer(buffer, dtype=np.uint8, count=n_records * layout.record_bytes)
        rows = flat.reshape(n_records, layout.record_bytes)

    labels = rows[:, 0].astype(np.int64)
    images = rows[:, 1:].reshape(n_records, layout.channels, layout.height, layout.width)
    return images, labels


def read_record_file(
    path: Path, layout: RecordLayout = CIFAR10_LAYOUT, *, strict: bool = False
) -> tuple[np.ndarray, np.ndarray]:
    """
    Read and decode every whole record of one source file.

    Args:
        path: Source file.
        layout: Record geometry.
        strict: Reject a trailing partial record.

    Returns:
        ``(images, labels)`` as in :func:`decode_records`.

    Raises:
        FileAccessError: If the file cannot be opened or read.
        RecordFramingError: In strict mode, on a trailing partial record.
    """
    path = Path(path)
    try:
        with path.open("rb") as handle:
            buffer = handle.read()
    except OSError as e:
        raise FileAccessError(f"Failed to open: {path} ({e.strerror or e})", path=path) from e

    return decode_records(buffer, layout, source=str(path), strict=strict)


def normalize_images(images: np.ndarray, layout: RecordLayout = CIFAR10_LAYOUT) -> np.ndarray:
    """
    Rescale uint8 pixels to [0, 1] and standardize per channel.

    Args:
        images: uint8 array shaped ``(..., C, H, W)``.
        layout: Supplies the per-channel mean/std.

    Returns:
        float32 array of the same shape.
    """
    mean = np.asarray(layout.mean, dtype=np.float32).reshape(-1, 1, 1)
    std = np.asarray(layout.std, dtype=np.float32).reshape(-1, 1, 1)
    scaled = images.astype(np.float32) / np.float32(255.0)
    return (scaled - mean) / std
