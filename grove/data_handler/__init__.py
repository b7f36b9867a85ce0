"""
Data Handling Package.

Fixed-record binary decoding, the in-memory dataset and epoch-aware batching.
"""

from .dataset import DATASET_SUBDIR, TEST_FILES, TRAIN_FILES, BinaryRecordDataset, Split, split_files
from .loader import BatchIterator, EpochShuffleSampler, build_batch_iterators
from .records import (
    CIFAR10_LAYOUT,
    CIFAR10_MEAN,
    CIFAR10_STD,
    RecordLayout,
    count_records,
    decode_records,
    normalize_images,
    read_record_file,
)

__all__ = [
    "DATASET_SUBDIR",
    "TEST_FILES",
    "TRAIN_FILES",
    "BinaryRecordDataset",
    "Split",
    "split_files",
    "BatchIterator",
    "EpochShuffleSampler",
    "build_batch_iterators",
    "CIFAR10_LAYOUT",
    "CIFAR10_MEAN",
    "CIFAR10_STD",
    "RecordLayout",
    "count_records",
    "decode_records",
    "normalize_images",
    "read_record_file",
]
