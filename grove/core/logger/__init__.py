"""
Telemetry Package.

Centralizes logger initialization and the shared visual style of log output.

Available Components:

- Logger: Stream and rotating-file logging initialization.
- LogStyle: Unified logging style constants.
- log_run_header / log_epoch_summary: Run-level reporting helpers.
"""

from .logger import ColorFormatter, Logger
from .reporter import log_epoch_summary, log_run_header, log_training_complete
from .styles import LogStyle

__all__ = [
    "ColorFormatter",
    "Logger",
    "LogStyle",
    "log_epoch_summary",
    "log_run_header",
    "log_training_complete",
]
