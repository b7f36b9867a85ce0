"""
Core Utilities Package

Configuration, logging, environment (device + seeding), persistence
(checkpoints, metrics, YAML) and project constants.
"""

# Configuration
from .config import Config, DatasetConfig, HardwareConfig, TelemetryConfig, TrainingConfig

# Environment & Hardware
from .environment import (
    detect_best_device,
    get_cuda_name,
    make_generator,
    set_seed,
    to_device_obj,
    worker_init_fn,
)

# Input/Output Utilities
from .io import (
    CheckpointRecord,
    CheckpointStore,
    MetricsLog,
    MetricsRow,
    latest_checkpoint,
    load_config_from_yaml,
    read_metrics,
    save_config_as_yaml,
)

# Logging
from .logger import Logger, LogStyle, log_epoch_summary, log_run_header, log_training_complete

# Constants & Paths
from .paths import LOGGER_NAME, METRICS_COLUMNS, checkpoint_path, metrics_path

__all__ = [
    # Configuration
    "Config",
    "DatasetConfig",
    "HardwareConfig",
    "TelemetryConfig",
    "TrainingConfig",
    # Environment
    "detect_best_device",
    "get_cuda_name",
    "make_generator",
    "set_seed",
    "to_device_obj",
    "worker_init_fn",
    # I/O
    "CheckpointRecord",
    "CheckpointStore",
    "MetricsLog",
    "MetricsRow",
    "latest_checkpoint",
    "load_config_from_yaml",
    "read_metrics",
    "save_config_as_yaml",
    # Logging
    "Logger",
    "LogStyle",
    "log_epoch_summary",
    "log_run_header",
    "log_training_complete",
    # Paths
    "LOGGER_NAME",
    "METRICS_COLUMNS",
    "checkpoint_path",
    "metrics_path",
]
