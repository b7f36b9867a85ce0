"""
Grove Exception Hierarchy.

GroveError (base, Exception)
├── GroveConfigError(GroveError, ValueError)       ← config validation
├── FileAccessError(GroveError, OSError)           ← unreadable/unwritable paths
├── GroveDatasetError(GroveError)                  ← record decoding
│   ├── DatasetEmptyError                          ← zero records for a split
│   └── RecordFramingError                         ← trailing partial record (strict mode)
├── CorruptCheckpointError(GroveError)             ← checkpoint exists but is unparsable
├── MetricsWriteError(GroveError)                  ← metrics store unwritable
└── TrainingDivergedError(GroveError, RuntimeError) ← NaN/Inf loss during training

GroveConfigError multi-inherits from ValueError and FileAccessError from OSError
so existing ``except ValueError`` / ``except OSError`` blocks keep working.
"""

from __future__ import annotations

from pathlib import Path


class GroveError(Exception):
    """Base exception for all Grove errors."""


class GroveConfigError(GroveError, ValueError):
    """Configuration validation error (backward-compatible with ValueError)."""


class _PathError(GroveError):
    """Mixin carrying the filesystem path an error refers to."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class FileAccessError(_PathError, OSError):
    """Dataset source file or checkpoint path could not be opened or written."""


class GroveDatasetError(_PathError):
    """Dataset loading or record decoding error."""


class DatasetEmptyError(GroveDatasetError):
    """No records were decoded for a split (usually a wrong dataset root)."""


class RecordFramingError(GroveDatasetError):
    """A source file length is not a whole multiple of the record size."""


class CorruptCheckpointError(_PathError):
    """A checkpoint file exists but cannot be parsed."""


class MetricsWriteError(_PathError):
    """The metrics log could not be created or appended to."""


class TrainingDivergedError(GroveError, RuntimeError):
    """Training loss became NaN or Inf."""
