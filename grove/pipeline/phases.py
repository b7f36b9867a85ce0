"""
Pipeline Phase Functions.

Wires a validated ``Config`` into the concrete collaborators of a run
(datasets, batch iterators, learner, checkpoint store) and hands them to the
``TrainingOrchestrator``.

Phases:
    1. Data preparation: decode both splits, build batch iterators.
    2. Training: run the orchestrator from a fresh start or a checkpoint.
"""

from __future__ import annotations

import logging

from ..core import (
    LOGGER_NAME,
    CheckpointStore,
    Config,
    LogStyle,
    get_cuda_name,
    log_run_header,
    set_seed,
)
from ..data_handler import BinaryRecordDataset, Split, build_batch_iterators
from ..learner import build_torch_learner
from ..trainer import TrainingOrchestrator, TrainingSummary

logger = logging.getLogger(LOGGER_NAME)


def run_training_phase(cfg: Config) -> TrainingSummary:
    """
    Execute a full training run described by ``cfg``.

    Dataset errors surface before any epoch starts. Checkpoints and the
    metrics table are written under ``cfg.telemetry.output_dir``.

    Args:
        cfg: Validated run configuration.

    Returns:
        Summary of the epochs completed by this invocation.
    """
    training, dataset, telemetry = cfg.training, cfg.dataset, cfg.telemetry
    device = cfg.hardware.device

    log_run_header(
        {
            "Data": dataset.data_dir,
            "Output": telemetry.output_dir,
            "Device": f"{device} ({get_cuda_name()})" if device == "cuda" else device,
            "Epochs": training.epochs,
            "Batch size": training.batch_size,
            "Learning rate": training.learning_rate,
            "Seed": training.seed,
            "Resume": telemetry.resume_from,
        }
    )

    # Weight initialization draws from the global generators
    set_seed(training.seed)

    # DATA PREPARATION
    LogStyle.log_phase_header(logger, "DATA PREPARATION", LogStyle.LIGHT)
    train_ds = BinaryRecordDataset.from_directory(
        dataset.data_dir, Split.TRAIN, strict=dataset.strict_records
    )
    eval_ds = BinaryRecordDataset.from_directory(
        dataset.data_dir, Split.TEST, strict=dataset.strict_records
    )
    train_batches, eval_batches = build_batch_iterators(
        train_ds, eval_ds, training, dataset, device=device
    )

    # TRAINING
    LogStyle.log_phase_header(logger, "TRAINING", LogStyle.DOUBLE)
    learner = build_torch_learner(
        training,
        device=device,
        in_channels=train_ds.layout.channels,
        num_classes=dataset.num_classes,
    )

    orchestrator = TrainingOrchestrator(
        learner,
        train_batches,
        eval_batches,
        target_epochs=training.epochs,
        output_dir=telemetry.output_dir,
        resume_from=telemetry.resume_from,
        checkpoint_store=CheckpointStore(),
        log_every=training.log_every,
        use_tqdm=training.use_tqdm,
    )
    return orchestrator.run()
