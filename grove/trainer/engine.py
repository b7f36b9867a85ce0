"""
Single-Pass Epoch Engine.

One execution kernel drives both training and evaluation passes over a
batch stream through any ``LearnerProtocol`` implementation. Loss is
accumulated weighted by batch size and accuracy as an integer count of
correct predictions, so a short final batch counts for exactly as many
samples as it holds.

Features:

- Divergence Guard: a training pass raises ``TrainingDivergedError`` on
  NaN/Inf loss so corrupted weights are never checkpointed.
- Progress Reporting: running stats every ``log_every`` batches via the
  logger and an optional callback, plus an optional tqdm bar.

Key Functions:
    count_correct: Number of rows whose argmax matches the label.
    accuracy_from_scores: Fraction of rows whose argmax matches the label.
    run_epoch: One full pass in train or eval mode.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable

import torch
import torch.nn.functional as F
from tqdm.auto import tqdm

from ..core import LOGGER_NAME, LogStyle
from ..exceptions import DatasetEmptyError, TrainingDivergedError
from ..learner import LearnerProtocol

# Module-level logger (avoid dynamic imports in exception handlers)
logger = logging.getLogger(LOGGER_NAME)

ProgressCallback = Callable[[int, float, float], None]


@dataclass(frozen=True)
class EpochResult:
    """
    Sample-weighted statistics of one pass.

    Attributes:
        mean_loss: ``sum(loss_b * size_b) / num_samples``.
        mean_accuracy: ``correct_predictions / num_samples``.
        num_samples: Samples processed.
        num_batches: Batches processed.
    """

    mean_loss: float
    mean_accuracy: float
    num_samples: int
    num_batches: int


def count_correct(scores: torch.Tensor, labels: torch.Tensor) -> int:
    """
    Number of samples whose highest score is the true class.

    Args:
        scores: Class scores ``(B, num_classes)``.
        labels: True class ids ``(B,)``.
    """
    if labels.numel() == 0:
        return 0
    predicted = scores.argmax(dim=1)
    return int((predicted == labels.to(predicted.device)).sum().item())


def accuracy_from_scores(scores: torch.Tensor, labels: torch.Tensor) -> float:
    """Fraction of samples whose highest score is the true class."""
    if labels.numel() == 0:
        return 0.0
    return count_correct(scores, labels) / labels.numel()


def run_epoch(
    learner: LearnerProtocol,
    batches: Iterable[tuple[torch.Tensor, torch.Tensor]],
    *,
    train: bool,
    log_every: int = 0,
    epoch: int = 0,
    use_tqdm: bool = False,
    progress_callback: ProgressCallback | None = None,
) -> EpochResult:
    """
    Performs a single full pass over ``batches``.

    In train mode every batch goes through ``learner.train_step``. In eval
    mode the runner calls ``learner.predict`` under ``torch.no_grad`` and
    computes the cross-entropy itself, leaving learner state untouched.

    Args:
        learner: Model behind the learner capability.
        batches: Iterable of ``(images, labels)`` batches.
        train: Training pass if True, evaluation pass otherwise.
        log_every: Emit running stats every N batches (0 disables).
        epoch: Epoch number used in progress messages.
        use_tqdm: Wrap the stream in a progress bar.
        progress_callback: Called as ``(batch_index, running_loss,
            running_accuracy)`` alongside each progress log line.

    Returns:
        Weighted statistics for the pass.

    Raises:
        TrainingDivergedError: If a training batch reports NaN/Inf loss.
        DatasetEmptyError: If the stream yields no samples.
    """
    stage = "Train" if train else "Eval"
    learner.set_mode("train" if train else "eval")

    loss_sum = 0.0
    correct = 0
    total_samples = 0
    num_batches = 0

    # Create iterator with or without progress bar
    if use_tqdm:
        iterator = tqdm(batches, desc=f"{stage} Epoch {epoch}", leave=False, ncols=100)
    else:
        iterator = batches

    for batch_idx, (images, labels) in enumerate(iterator, start=1):
        if train:
            loss, scores = learner.train_step(images, labels)
            # Guard: halt on diverged loss to prevent saving corrupted weights
            if not math.isfinite(loss):
                raise TrainingDivergedError(
                    f"Training diverged: loss={loss} at epoch {epoch}, batch {batch_idx}. "
                    "Check learning rate or data preprocessing."
                )
        else:
            with torch.no_grad():
                scores = learner.predict(images)
                loss = F.cross_entropy(scores, labels.to(scores.device)).item()

        batch_size = labels.size(0)
        loss_sum += loss * batch_size
        correct += count_correct(scores, labels)
        total_samples += batch_size
        num_batches += 1

        if use_tqdm:
            iterator.set_postfix({"loss": f"{loss:.4f}"})

        if log_every > 0 and batch_idx % log_every == 0:
            running_loss = loss_sum / total_samples
            running_acc = correct / total_samples
            logger.info(
                f"{LogStyle.INDENT}{LogStyle.ARROW} {stage} epoch {epoch} "
                f"batch {batch_idx}: loss={running_loss:.4f} acc={running_acc:.4f}"
            )
            if progress_callback is not None:
                progress_callback(batch_idx, running_loss, running_acc)

    if total_samples == 0:
        raise DatasetEmptyError(f"{stage} pass at epoch {epoch} produced no samples")

    return EpochResult(
        mean_loss=loss_sum / total_samples,
        mean_accuracy=correct / total_samples,
        num_samples=total_samples,
        num_batches=num_batches,
    )
