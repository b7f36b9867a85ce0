"""
Training Package.

The shared single-pass epoch engine and the run orchestrator that sequences
train, eval, metrics and checkpoint stages across epochs.
"""

from .engine import EpochResult, ProgressCallback, accuracy_from_scores, count_correct, run_epoch
from .orchestrator import RunState, TrainingOrchestrator, TrainingSummary

__all__ = [
    "EpochResult",
    "ProgressCallback",
    "accuracy_from_scores",
    "count_correct",
    "run_epoch",
    "RunState",
    "TrainingOrchestrator",
    "TrainingSummary",
]
