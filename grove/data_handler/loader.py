"""
Batch Iteration Module.

Wraps ``torch.utils.data.DataLoader`` with an epoch-aware shuffling sampler so
every pass over the data is reproducible from ``(seed, epoch)`` alone, with no
dependency on global PRNG state. The final short batch is always emitted.

Key Components:

- ``EpochShuffleSampler``: Permutation sampler re-seeded at each pass
- ``BatchIterator``: Iterable of ``(images, labels)`` batches with ``set_epoch``
- ``build_batch_iterators``: Train/eval iterator pair from config
"""

from __future__ import annotations

import logging
from typing import Iterator, Sized

import torch
from torch.utils.data import DataLoader, Dataset, Sampler, SequentialSampler

from ..core import (
    LOGGER_NAME,
    DatasetConfig,
    LogStyle,
    TrainingConfig,
    make_generator,
    worker_init_fn,
)
from .dataset import BinaryRecordDataset

logger = logging.getLogger(LOGGER_NAME)


class EpochShuffleSampler(Sampler[int]):
    """
    Random permutation of all indices, drawn from ``seed + epoch``.

    When ``set_epoch`` has not been called before a pass, the internal epoch
    counter advances after each pass so successive passes differ.
    """

    def __init__(self, data_source: Sized, seed: int = 0) -> None:
        self.data_source = data_source
        self.seed = seed
        self.epoch = 0
        self._epoch_pinned = False

    def set_epoch(self, epoch: int) -> None:
        self.epoch = epoch
        self._epoch_pinned = True

    def __iter__(self) -> Iterator[int]:
        generator = make_generator(self.seed + self.epoch)
        order = torch.randperm(len(self.data_source), generator=generator).tolist()

        # Next pass draws a fresh permutation unless the caller pins it
        if self._epoch_pinned:
            self._epoch_pinned = False
        else:
            self.epoch += 1
        return iter(order)

    def __len__(self) -> int:
        return len(self.data_source)


class BatchIterator:
    """
    Re-iterable stream of stacked ``(images, labels)`` batches.

    Attributes:
        dataset: Source dataset (read-only).
        batch_size: Samples per batch; the last batch may be shorter.
        shuffle: Draw a fresh permutation per epoch instead of dataset order.
    """

    def __init__(
        self,
        dataset: Dataset,
        batch_size: int,
        *,
        shuffle: bool,
        seed: int = 0,
        num_workers: int = 0,
        pin_memory: bool = False,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        self.dataset = dataset
        self.batch_size = batch_size
        self.shuffle = shuffle

        self._sampler: Sampler[int] = (
            EpochShuffleSampler(dataset, seed=seed) if shuffle else SequentialSampler(dataset)
        )
        # Dedicated generator keeps worker base seeds off the global RNG
        self._loader = DataLoader(
            dataset,
            batch_size=batch_size,
            sampler=self._sampler,
            drop_last=False,
            num_workers=num_workers,
            pin_memory=pin_memory,
            worker_init_fn=worker_init_fn if num_workers > 0 else None,
            persistent_workers=num_workers > 0,
            generator=make_generator(seed),
        )

    def set_epoch(self, epoch: int) -> None:
        """Pin the shuffle permutation of the next pass to ``epoch``."""
        if isinstance(self._sampler, EpochShuffleSampler):
            self._sampler.set_epoch(epoch)

    def __iter__(self) -> Iterator[tuple[torch.Tensor, torch.Tensor]]:
        return iter(self._loader)

    def __len__(self) -> int:
        """Number of batches per pass: ``ceil(N / batch_size)``."""
        return len(self._loader)


def build_batch_iterators(
    train_ds: BinaryRecordDataset,
    eval_ds: BinaryRecordDataset,
    training_cfg: TrainingConfig,
    dataset_cfg: DatasetConfig,
    device: str = "cpu",
) -> tuple[BatchIterator, BatchIterator]:
    """
    Build the shuffled training iterator and the ordered evaluation iterator.

    Args:
        train_ds: Training split.
        eval_ds: Evaluation split.
        training_cfg: Supplies batch size and seed.
        dataset_cfg: Supplies worker count.
        device: Resolved device; memory is pinned for CUDA.

    Returns:
        ``(train_batches, eval_batches)``.
    """
    common = {
        "num_workers": dataset_cfg.num_workers,
        "pin_memory": device == "cuda",
    }
    train_batches = BatchIterator(
        train_ds,
        training_cfg.batch_size,
        shuffle=True,
        seed=training_cfg.seed,
        **common,
    )
    eval_batches = BatchIterator(eval_ds, training_cfg.batch_size, shuffle=False, **common)

    logger.info(
        f"{LogStyle.INDENT}{LogStyle.ARROW} {'Batches':<18}: "
        f"Train:[{len(train_batches)}] Eval:[{len(eval_batches)}] "
        f"(batch={training_cfg.batch_size}, workers={dataset_cfg.num_workers})"
    )
    return train_batches, eval_batches
