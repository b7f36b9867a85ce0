"""
Filesystem Naming and Constants Package.

Centralizes the logger identity, metric column names and artifact naming
shared by the data, trainer and I/O layers.

Example:
    >>> from grove.core.paths import checkpoint_path
    >>> checkpoint_path(Path("outputs"), 3)
    PosixPath('outputs/checkpoint_epoch_3.pt')
"""

from .constants import (
    CHECKPOINT_PREFIX,
    CHECKPOINT_SUFFIX,
    LOGGER_NAME,
    LOGS_DIRNAME,
    METRIC_EPOCH,
    METRIC_TRAIN_ACCURACY,
    METRIC_TRAIN_LOSS,
    METRIC_VAL_ACCURACY,
    METRIC_VAL_LOSS,
    METRICS_COLUMNS,
    METRICS_FILENAME,
    checkpoint_path,
    metrics_path,
)

__all__ = [
    "LOGGER_NAME",
    "LOGS_DIRNAME",
    "METRIC_EPOCH",
    "METRIC_TRAIN_LOSS",
    "METRIC_TRAIN_ACCURACY",
    "METRIC_VAL_LOSS",
    "METRIC_VAL_ACCURACY",
    "METRICS_COLUMNS",
    "METRICS_FILENAME",
    "CHECKPOINT_PREFIX",
    "CHECKPOINT_SUFFIX",
    "checkpoint_path",
    "metrics_path",
]
