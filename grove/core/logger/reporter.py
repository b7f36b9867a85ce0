"""
Run Reporting Helpers.

Formats the run header, per-epoch summaries and the completion banner in
the project ``LogStyle``. Helpers take plain values so they can be used
from the orchestrator, the CLI and tests without importing torch.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from ..paths import LOGGER_NAME
from .styles import LogStyle

logger = logging.getLogger(LOGGER_NAME)


def _fmt(value: Any) -> str:
    """Render a config value for log display."""
    if isinstance(value, float):
        return f"{value:.2e}" if 0 < abs(value) < 0.001 else f"{value:.4f}"
    if value is None:
        return "-"
    return str(value)


def log_run_header(
    settings: Mapping[str, Any],
    logger_instance: logging.Logger | None = None,
) -> None:
    """
    Log the run banner followed by one ``» key : value`` line per setting.

    Args:
        settings: Ordered mapping of display names to values.
        logger_instance: Logger to write to (defaults to the module logger).
    """
    log = logger_instance or logger
    LogStyle.log_phase_header(log, "TRAINING RUN")
    for key, value in settings.items():
        log.info(LogStyle.kv(key, _fmt(value)))
    log.info("")


def log_epoch_summary(
    epoch: int,
    total_epochs: int,
    train_loss: float,
    train_accuracy: float,
    val_loss: float,
    val_accuracy: float,
    logger_instance: logging.Logger | None = None,
) -> None:
    """Log the structured train/val summary of one completed epoch."""
    log = logger_instance or logger
    I = LogStyle.INDENT  # noqa: E741
    A = LogStyle.ARROW
    log.info(LogStyle.LIGHT)
    log.info(f"{I}Epoch {epoch}/{total_epochs} {LogStyle.BULLET} completed")
    log.info(f"{I}{A} Loss  : T {train_loss:.4f} / V {val_loss:.4f}")
    log.info(f"{I}{A} Acc   : T {train_accuracy:.4f} / V {val_accuracy:.4f}")


def log_training_complete(
    last_epoch: int,
    metrics_file: Path,
    checkpoint: Path | None,
    logger_instance: logging.Logger | None = None,
) -> None:
    """Log the final banner with the artifacts a finished run leaves behind."""
    log = logger_instance or logger
    log.info(LogStyle.DOUBLE)
    log.info(
        f"{LogStyle.INDENT}{LogStyle.SUCCESS} Training Complete "
        f"{LogStyle.BULLET} Last epoch: {last_epoch}"
    )
    log.info(LogStyle.kv("Metrics", metrics_file))
    log.info(LogStyle.kv("Checkpoint", checkpoint))
    log.info(LogStyle.DOUBLE)
