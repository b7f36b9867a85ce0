"""
Two-Block CNN for 32×32 RGB Classification.

Reference topology for the CIFAR-10 binary dataset. Dropout masks are drawn
from an explicit ``torch.Generator`` owned by the caller, so a run restored
from a checkpoint draws exactly the masks an uninterrupted run would.

Architecture:
    Input [32×32×3] → Conv1 [16×16×32] → Conv2 [8×8×64] → Dropout
                   → Flatten [4096] → FC1 [256] → Dropout → FC2 [num_classes]
"""

from __future__ import annotations

import torch
import torch.nn as nn


class GeneratorDropout(nn.Module):
    """Inverted dropout whose masks come from a dedicated generator."""

    def __init__(self, p: float, generator: torch.Generator) -> None:
        super().__init__()
        if not 0.0 <= p < 1.0:
            raise ValueError(f"dropout probability must be in [0, 1), got {p}")
        self.p = p
        self.generator = generator

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        if not self.training or self.p == 0.0:
            return x
        # Mask drawn on the generator's device (CPU), then moved to the input
        keep = torch.rand(x.shape, generator=self.generator) >= self.p
        return x * keep.to(device=x.device, dtype=x.dtype) / (1.0 - self.p)

    def extra_repr(self) -> str:
        return f"p={self.p}"


# MODEL DEFINITION
class SimpleCNN(nn.Module):
    """Compact CNN for 32×32 inputs."""

    def __init__(
        self,
        generator: torch.Generator,
        in_channels: int = 3,
        num_classes: int = 10,
        dropout: float = 0.25,
    ) -> None:
        """
        Args:
            generator: Random source for dropout masks.
            in_channels: Input channels.
            num_classes: Number of output classes.
            dropout: Dropout probability after the conv stack and after FC1.
        """
        super().__init__()

        # Block 1: 32×32 → 16×16
        self.conv1 = nn.Conv2d(in_channels, 32, kernel_size=3, padding=1)
        # Block 2: 16×16 → 8×8
        self.conv2 = nn.Conv2d(32, 64, kernel_size=3, padding=1)
        self.pool = nn.MaxPool2d(2, 2)
        self.relu = nn.ReLU()
        self.dropout = GeneratorDropout(dropout, generator)

        self.fc1 = nn.Linear(64 * 8 * 8, 256)
        self.fc2 = nn.Linear(256, num_classes)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """Forward pass through the network."""
        x = self.pool(self.relu(self.conv1(x)))
        x = self.pool(self.relu(self.conv2(x)))
        x = self.dropout(x)
        x = torch.flatten(x, 1)
        x = self.dropout(self.relu(self.fc1(x)))
        return self.fc2(x)
