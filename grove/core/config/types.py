"""
Semantic Type Definitions & Validation Primitives.

Annotated Pydantic types shared by the configuration models. Constraints
are enforced at schema initialization so invalid hyperparameters never
reach the training loop.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import AfterValidator, Field, PlainSerializer


# VALIDATORS
def _sanitize_path(v: str | Path) -> Path:
    """
    Resolve path to absolute form without disk side-effects.

    Args:
        v: Path object or string to sanitize

    Returns:
        Absolute Path with home directory expanded
    """
    return Path(v).expanduser().resolve()


# GENERIC PRIMITIVES
PositiveInt = Annotated[int, Field(gt=0)]
NonNegativeInt = Annotated[int, Field(ge=0)]

# FILESYSTEM
ValidatedPath = Annotated[
    Path,
    AfterValidator(_sanitize_path),
    PlainSerializer(lambda v: str(v), when_used="json", return_type=str),
]

# TRAINING
BatchSize = Annotated[int, Field(ge=1, le=4096)]
LearningRate = Annotated[float, Field(gt=1e-8, lt=1.0)]
DropoutRate = Annotated[float, Field(ge=0.0, le=0.9)]
WorkerCount = Annotated[int, Field(ge=0, le=64)]

# SYSTEM
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DeviceType = Literal["auto", "cpu", "cuda", "mps"]
