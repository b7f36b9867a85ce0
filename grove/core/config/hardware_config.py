"""
Hardware Manifest.

Resolves the compute device. ``auto`` picks the best available
accelerator; an explicitly requested but unavailable accelerator falls
back to CPU with a warning.
"""

from __future__ import annotations

import warnings
from typing import cast

import torch
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..environment import detect_best_device
from .types import DeviceType


class HardwareConfig(BaseModel):
    """
    Device selection policy.

    Attributes:
        device: Compute device ('auto', 'cpu', 'cuda', 'mps').
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    device: DeviceType = Field(
        default="auto", description="Device selection: 'cpu', 'cuda', 'mps', or 'auto'"
    )

    @field_validator("device")
    @classmethod
    def resolve_device(cls, v: DeviceType) -> DeviceType:
        """
        Resolve ``auto`` and fall back to CPU for unavailable accelerators.

        Args:
            v: Requested device type

        Returns:
            Resolved device string
        """
        if v == "auto":
            return cast(DeviceType, detect_best_device())

        if v == "cuda" and not torch.cuda.is_available():
            warnings.warn(
                "CUDA was explicitly requested but is not available. Falling back to CPU.",
                UserWarning,
                stacklevel=2,
            )
            return "cpu"
        if v == "mps" and not torch.backends.mps.is_available():
            warnings.warn(
                "MPS was explicitly requested but is not available. Falling back to CPU.",
                UserWarning,
                stacklevel=2,
            )
            return "cpu"

        return v
