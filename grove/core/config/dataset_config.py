"""
Dataset Source Configuration Schema.

Locates the binary record dataset and controls how strictly record
framing is checked and how many workers prefetch batches.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .types import PositiveInt, ValidatedPath, WorkerCount


class DatasetConfig(BaseModel):
    """
    Dataset location and ingestion policy.

    Attributes:
        data_dir: Root directory containing ``cifar-10-batches-bin/``.
        strict_records: Reject source files with a trailing partial record
            instead of ignoring the leftover bytes.
        num_workers: DataLoader worker processes used for batch prefetching.
        num_classes: Number of label classes the classifier predicts.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    data_dir: ValidatedPath = Field(default="./data")  # type: ignore[assignment]
    strict_records: bool = False
    num_workers: WorkerCount = Field(default=2)
    num_classes: PositiveInt = Field(default=10)
