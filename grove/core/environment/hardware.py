"""
Hardware Discovery.

Detects the best available accelerator and turns device strings into live
``torch.device`` objects.
"""

from __future__ import annotations

import torch


def detect_best_device() -> str:
    """
    Detects the most performant hardware accelerator available (CUDA > MPS > CPU).

    Returns:
        The best available device string.
    """
    if torch.cuda.is_available():
        return "cuda"
    if hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
        return "mps"
    return "cpu"


def get_cuda_name() -> str:
    """Human-readable name of the primary GPU, or an empty string without CUDA."""
    return torch.cuda.get_device_name(0) if torch.cuda.is_available() else ""


def to_device_obj(device_str: str) -> torch.device:
    """
    Converts a device string into a live torch.device object.

    Args:
        device_str: Target device ('cuda', 'cpu', 'mps').

    Returns:
        The active computing device object.
    """
    return torch.device(device_str)
