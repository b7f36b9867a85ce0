"""
Telemetry & Run Output Manifest.

Where run artifacts go (metrics table, checkpoints, logs), which
checkpoint to resume from, and how verbose logging is.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..paths import LOGS_DIRNAME
from .types import LogLevel, ValidatedPath


class TelemetryConfig(BaseModel):
    """
    Output location, resume source and logging policy.

    Attributes:
        output_dir: Directory receiving metrics.csv, checkpoints and logs.
        resume_from: Checkpoint to resume from; absent files start fresh.
        log_level: Logging verbosity.
        log_to_file: Also write a rotating log file under ``output_dir/logs``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    output_dir: ValidatedPath = Field(default="./outputs")  # type: ignore[assignment]
    resume_from: ValidatedPath | None = None
    log_level: LogLevel = Field(default="INFO")
    log_to_file: bool = True

    @model_validator(mode="before")
    @classmethod
    def handle_empty_config(cls, data: Any) -> Any:
        """Treat an empty YAML section (``telemetry:``) as all defaults."""
        if data is None:
            return {}
        return data

    @property
    def log_dir(self) -> Path | None:
        """Directory for rotating log files, or None when file logging is off."""
        return self.output_dir / LOGS_DIRNAME if self.log_to_file else None
