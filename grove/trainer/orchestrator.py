"""
Training Run Orchestration.

Drives the epoch-level lifecycle of a run: decide between a fresh start and
resuming from a checkpoint, then for every epoch execute the training pass,
the evaluation pass, the metrics append and the checkpoint write, strictly
in that order. Stopping after any completed epoch and resuming from its
checkpoint yields the same final state as an uninterrupted run.

State Machine:
    FRESH ─────────────┐
    RESUMING ──────────┼──► RUNNING(e) ──► RUNNING(e+1) ──► DONE
                       │        │
                       └────────┴──────► FAILED (error logged, re-raised)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable

import torch

from ..core import (
    LOGGER_NAME,
    CheckpointStore,
    LogStyle,
    MetricsLog,
    MetricsRow,
    checkpoint_path,
    log_epoch_summary,
    log_training_complete,
    metrics_path,
)
from ..exceptions import CorruptCheckpointError
from ..learner import LearnerProtocol
from .engine import ProgressCallback, run_epoch

logger = logging.getLogger(LOGGER_NAME)

Batches = Iterable[tuple[torch.Tensor, torch.Tensor]]


class RunState(str, Enum):
    """Lifecycle state of a training run."""

    FRESH = "fresh"
    RESUMING = "resuming"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass
class TrainingSummary:
    """
    Outcome of a completed run.

    Attributes:
        start_epoch: First epoch executed by this invocation.
        last_completed_epoch: Last epoch with metrics and checkpoint on disk.
        history: Metrics rows produced by this invocation, in epoch order.
        final_checkpoint: Checkpoint of ``last_completed_epoch`` (None if no
            epoch ever completed).
        metrics_file: Location of the metrics table.
    """

    start_epoch: int
    last_completed_epoch: int
    history: list[MetricsRow] = field(default_factory=list)
    final_checkpoint: Path | None = None
    metrics_file: Path | None = None


class TrainingOrchestrator:
    """
    Runs epochs ``start .. target_epochs`` against a Learner.

    Collaborators are injected so the orchestrator can be driven by the real
    PyTorch stack or by lightweight test doubles alike.

    Attributes:
        learner: Model behind the learner capability.
        train_batches: Shuffled training stream (``set_epoch`` honored if present).
        eval_batches: Ordered evaluation stream.
        target_epochs: Last epoch to run (inclusive).
        output_dir: Receives ``metrics.csv`` and ``checkpoint_epoch_<N>.pt``.
        resume_from: Checkpoint to resume from, or None for a fresh run.
        state: Current lifecycle state.
    """

    def __init__(
        self,
        learner: LearnerProtocol,
        train_batches: Batches,
        eval_batches: Batches,
        *,
        target_epochs: int,
        output_dir: Path,
        resume_from: Path | None = None,
        checkpoint_store: CheckpointStore | None = None,
        log_every: int = 0,
        use_tqdm: bool = False,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        if target_epochs < 1:
            raise ValueError(f"target_epochs must be >= 1, got {target_epochs}")

        self.learner = learner
        self.train_batches = train_batches
        self.eval_batches = eval_batches
        self.target_epochs = target_epochs
        self.output_dir = Path(output_dir)
        self.resume_from = Path(resume_from) if resume_from is not None else None
        self.store = checkpoint_store or CheckpointStore()
        self.log_every = log_every
        self.use_tqdm = use_tqdm
        self.progress_callback = progress_callback

        self.state = RunState.FRESH
        self.last_completed_epoch = 0
        self.final_checkpoint: Path | None = None
        self.history: list[MetricsRow] = []

    def _restore(self) -> int:
        """
        Apply the resume checkpoint if one exists.

        Returns:
            Epoch of the restored checkpoint, or 0 for a fresh start.

        Raises:
            CorruptCheckpointError: If the checkpoint cannot be parsed or its
                learner state does not fit the learner.
            FileAccessError: If the checkpoint exists but cannot be read.
        """
        if self.resume_from is None:
            logger.info(LogStyle.kv("Start", "fresh run"))
            return 0

        record = self.store.load(self.resume_from)
        if record is None:
            logger.warning(
                f"{LogStyle.WARNING} Resume file not found, starting fresh: {self.resume_from}"
            )
            return 0

        self.state = RunState.RESUMING
        try:
            self.learner.import_state(record.learner_state)
        except ValueError as e:
            raise CorruptCheckpointError(
                f"Checkpoint {self.resume_from} does not match the learner: {e}",
                path=self.resume_from,
            ) from e

        self.final_checkpoint = self.resume_from
        logger.info(
            LogStyle.kv("Resumed", f"{self.resume_from.name} (epoch {record.epoch})")
        )
        return record.epoch

    def run(self) -> TrainingSummary:
        """
        Execute the run to completion.

        Returns:
            Summary with the epoch range covered and the artifacts written.

        Raises:
            Exception: Any error from a stage is logged with its epoch, stage
                and path context, the state becomes FAILED, and the error
                propagates unchanged. Nothing is retried.
        """
        epoch = 0
        stage = "resume"
        stage_path: Path | None = self.resume_from
        metrics_file = metrics_path(self.output_dir)
        metrics: MetricsLog | None = None

        try:
            resumed_epoch = self._restore()
            self.last_completed_epoch = resumed_epoch
            start_epoch = resumed_epoch + 1

            stage, stage_path = "metrics", metrics_file
            metrics = MetricsLog.open(
                metrics_file, keep_through_epoch=resumed_epoch if resumed_epoch else None
            )

            for epoch in range(start_epoch, self.target_epochs + 1):
                self.state = RunState.RUNNING

                stage, stage_path = "train", None
                set_epoch = getattr(self.train_batches, "set_epoch", None)
                if callable(set_epoch):
                    set_epoch(epoch)
                train_result = run_epoch(
                    self.learner,
                    self.train_batches,
                    train=True,
                    log_every=self.log_every,
                    epoch=epoch,
                    use_tqdm=self.use_tqdm,
                    progress_callback=self.progress_callback,
                )

                stage = "eval"
                eval_result = run_epoch(self.learner, self.eval_batches, train=False, epoch=epoch)

                stage, stage_path = "metrics", metrics_file
                row = MetricsRow(
                    epoch=epoch,
                    train_loss=train_result.mean_loss,
                    train_accuracy=train_result.mean_accuracy,
                    val_loss=eval_result.mean_loss,
                    val_accuracy=eval_result.mean_accuracy,
                )
                metrics.append(row)
                self.history.append(row)

                stage, stage_path = "checkpoint", checkpoint_path(self.output_dir, epoch)
                self.final_checkpoint = self.store.save(
                    stage_path, self.learner.export_state(), epoch
                )
                self.last_completed_epoch = epoch

                log_epoch_summary(
                    epoch,
                    self.target_epochs,
                    row.train_loss,
                    row.train_accuracy,
                    row.val_loss,
                    row.val_accuracy,
                )

        except Exception:
            self.state = RunState.FAILED
            where = f" ({stage_path})" if stage_path is not None else ""
            logger.error(
                f"{LogStyle.WARNING} Run failed at epoch {epoch} during {stage}{where}"
            )
            raise
        finally:
            if metrics is not None:
                metrics.close()

        self.state = RunState.DONE
        log_training_complete(self.last_completed_epoch, metrics_file, self.final_checkpoint)

        return TrainingSummary(
            start_epoch=start_epoch,
            last_completed_epoch=self.last_completed_epoch,
            history=list(self.history),
            final_checkpoint=self.final_checkpoint,
            metrics_file=metrics_file,
        )
