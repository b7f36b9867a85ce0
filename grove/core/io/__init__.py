"""
Input/Output & Persistence Utilities.

Run checkpoints, the per-epoch metrics table, YAML configuration
persistence and the atomic-write primitive they share.
"""

from .atomic import atomic_open
from .checkpoints import CheckpointRecord, CheckpointStore, latest_checkpoint
from .metrics_log import MetricsLog, MetricsRow, read_metrics
from .serialization import load_config_from_yaml, save_config_as_yaml

__all__ = [
    "atomic_open",
    # Checkpoints
    "CheckpointRecord",
    "CheckpointStore",
    "latest_checkpoint",
    # Metrics
    "MetricsLog",
    "MetricsRow",
    "read_metrics",
    # Serialization
    "save_config_as_yaml",
    "load_config_from_yaml",
]
