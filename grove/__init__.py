"""
Grove: resumable training harness for fixed-record binary image datasets.

Top-level convenience API re-exporting the most commonly used components
from subpackages, so users and the ``grove`` CLI can write:

    from grove import Config, run_training_phase
"""

from importlib.metadata import version as _pkg_version

__version__ = _pkg_version("grove")

from .core import Config, LogStyle, Logger
from .core.paths import LOGGER_NAME
from .pipeline import run_training_phase
from .trainer import TrainingOrchestrator, TrainingSummary

__all__ = [
    "__version__",
    # Core
    "Config",
    "LogStyle",
    "Logger",
    "LOGGER_NAME",
    # Pipeline
    "run_training_phase",
    # Trainer
    "TrainingOrchestrator",
    "TrainingSummary",
]
