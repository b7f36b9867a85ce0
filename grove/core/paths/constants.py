"""
Project-wide Constants and Filesystem Naming.

Single source of truth for logger identity, metric column names and the
on-disk naming of run artifacts (checkpoints, metrics table, logs).

Module Attributes:
    LOGGER_NAME: Global logger identity used by all modules for log synchronization.
    METRIC_*: Column names of the per-epoch metrics table, in header order.
    METRICS_FILENAME: Name of the metrics table inside the output directory.
    CHECKPOINT_PREFIX: Filename prefix of per-epoch checkpoints.
"""

from pathlib import Path
from typing import Final

# Global logger identity used by all modules to ensure log synchronization
LOGGER_NAME: Final[str] = "Grove"

# METRICS TABLE
METRIC_EPOCH: Final[str] = "epoch"
METRIC_TRAIN_LOSS: Final[str] = "train_loss"
METRIC_TRAIN_ACCURACY: Final[str] = "train_accuracy"
METRIC_VAL_LOSS: Final[str] = "val_loss"
METRIC_VAL_ACCURACY: Final[str] = "val_accuracy"

METRICS_COLUMNS: Final[tuple[str, ...]] = (
    METRIC_EPOCH,
    METRIC_TRAIN_LOSS,
    METRIC_TRAIN_ACCURACY,
    METRIC_VAL_LOSS,
    METRIC_VAL_ACCURACY,
)

# RUN ARTIFACTS
METRICS_FILENAME: Final[str] = "metrics.csv"
CHECKPOINT_PREFIX: Final[str] = "checkpoint_epoch_"
CHECKPOINT_SUFFIX: Final[str] = ".pt"
LOGS_DIRNAME: Final[str] = "logs"


# PATH HELPERS
def checkpoint_path(output_dir: Path, epoch: int) -> Path:
    """
    Resolve the checkpoint filename for a completed epoch.

    Args:
        output_dir: Run output directory.
        epoch: 1-indexed epoch the checkpoint captures.

    Returns:
        ``<output_dir>/checkpoint_epoch_<epoch>.pt``
    """
    return Path(output_dir) / f"{CHECKPOINT_PREFIX}{epoch}{CHECKPOINT_SUFFIX}"


def metrics_path(output_dir: Path) -> Path:
    """Location of the metrics table for a run."""
    return Path(output_dir) / METRICS_FILENAME
