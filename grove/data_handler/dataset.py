"""
Binary Record Dataset Module.

Builds an immutable, index-addressable dataset from one or more fixed-record
binary source files (CIFAR-10 binary layout by default). Records are kept as
compact uint8 planes in RAM and normalized on access.

Key Components:
    Split: Training vs. evaluation selector.
    BinaryRecordDataset: PyTorch Dataset with ``from_directory`` / ``from_files``
        factories.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Sequence

import numpy as np
import torch
from torch.utils.data import Dataset

from ..core.logger import LogStyle
from ..core.paths import LOGGER_NAME
from ..exceptions import DatasetEmptyError
from .records import CIFAR10_LAYOUT, RecordLayout, normalize_images, read_record_file

logger = logging.getLogger(LOGGER_NAME)

# On-disk layout of the binary distribution
DATASET_SUBDIR = "cifar-10-batches-bin"
TRAIN_FILES: tuple[str, ...] = tuple(f"data_batch_{i}.bin" for i in range(1, 6))
TEST_FILES: tuple[str, ...] = ("test_batch.bin",)


class Split(str, Enum):
    """Dataset split selector."""

    TRAIN = "train"
    TEST = "test"


def split_files(root: Path, split: Split | str) -> list[Path]:
    """
    Ordered source files of a split.

    Args:
        root: Dataset root containing ``cifar-10-batches-bin/``.
        split: ``train`` (5 files) or ``test`` (1 file).

    Returns:
        Source file paths in read order.
    """
    base = Path(root) / DATASET_SUBDIR
    names = TRAIN_FILES if Split(split) is Split.TRAIN else TEST_FILES
    return [base / name for name in names]


# DATASET CLASS
class BinaryRecordDataset(Dataset[tuple[torch.Tensor, torch.Tensor]]):
    """
    Immutable collection of (normalized image, label) samples.

    The constructor accepts already-decoded arrays (no I/O). Use the
    classmethod factories to load from disk:

    - ``BinaryRecordDataset.from_directory(root, split)``
    - ``BinaryRecordDataset.from_files(paths)``
    """

    def __init__(
        self,
        images: np.ndarray,
        labels: np.ndarray,
        layout: RecordLayout = CIFAR10_LAYOUT,
    ) -> None:
        """
        Args:
            images: uint8 array ``(N, C, H, W)``, channel-planar.
            labels: integer array ``(N,)``.
            layout: Geometry and normalization constants.
        """
        expected = (layout.channels, layout.height, layout.width)
        if images.ndim != 4 or images.shape[1:] != expected:
            raise ValueError(f"images must be (N, {expected}), got {images.shape}")
        if len(images) != len(labels):
            raise ValueError(f"{len(images)} images but {len(labels)} labels")

        self.layout = layout
        self._images = np.array(images, dtype=np.uint8, copy=True)
        self._labels = np.array(labels, dtype=np.int64, copy=True).ravel()
        self._images.flags.writeable = False
        self._labels.flags.writeable = False

    @classmethod
    def from_files(
        cls,
        paths: Sequence[Path],
        layout: RecordLayout = CIFAR10_LAYOUT,
        *,
        strict: bool = False,
    ) -> BinaryRecordDataset:
        """
        Decode and concatenate the records of ``paths`` in order.

        Args:
            paths: Source files, read in the given order.
            layout: Record geometry.
            strict: Reject files with a trailing partial record.

        Raises:
            FileAccessError: If a source file cannot be opened.
            DatasetEmptyError: If no records were decoded from any file.
        """
        all_images: list[np.ndarray] = []
        all_labels: list[np.ndarray] = []
        for path in paths:
            images, labels = read_record_file(path, layout, strict=strict)
            logger.debug(f"{LogStyle.INDENT}{LogStyle.ARROW} {Path(path).name}: {len(labels)} records")
            all_images.append(images)
            all_labels.append(labels)

        total = sum(len(lbl) for lbl in all_labels)
        if total == 0:
            where = Path(paths[0]).parent if paths else None
            raise DatasetEmptyError(
                f"No records loaded. Check dataset path: {where}", path=where
            )

        return cls(np.concatenate(all_images), np.concatenate(all_labels), layout)

    @classmethod
    def from_directory(
        cls,
        root: Path,
        split: Split | str = Split.TRAIN,
        layout: RecordLayout = CIFAR10_LAYOUT,
        *,
        strict: bool = False,
    ) -> BinaryRecordDataset:
        """
        Load a split from the standard directory layout.

        Args:
            root: Dataset root containing ``cifar-10-batches-bin/``.
            split: ``train`` or ``test``.
            layout: Record geometry.
            strict: Reject files with a trailing partial record.
        """
        dataset = cls.from_files(split_files(root, split), layout, strict=strict)
        logger.info(LogStyle.kv(f"{Split(split).value.title()} split", f"{len(dataset)} samples"))
        return dataset

    @property
    def labels(self) -> np.ndarray:
        """Read-only label array."""
        return self._labels

    def __len__(self) -> int:
        """Returns the number of samples."""
        return len(self._labels)

    def __getitem__(self, idx: int) -> tuple[torch.Tensor, torch.Tensor]:
        """
        Retrieves a normalized sample-label pair.

        Returns:
            ``(image, label)``: float32 ``(C, H, W)`` tensor standardized per
            channel, and a scalar long tensor.
        """
        image = torch.from_numpy(normalize_images(self._images[idx], self.layout))
        return image, torch.tensor(int(self._labels[idx]), dtype=torch.long)
