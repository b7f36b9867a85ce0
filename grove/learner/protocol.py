"""
Learner Capability Protocol.

The epoch loop and the orchestrator only ever talk to a model through this
narrow interface. Any object providing these five methods can be trained,
evaluated and checkpointed, whatever network or optimizer sits behind it.
"""

from __future__ import annotations

from typing import Any, Literal, Protocol, runtime_checkable

import torch

Mode = Literal["train", "eval"]


@runtime_checkable
class LearnerProtocol(Protocol):
    """
    Trainable classifier with opaque, restorable state.

    ``export_state`` must capture everything that influences future updates
    (weights, optimizer moments, private random streams) so that
    ``import_state(export_state())`` on a fresh instance continues identically.
    """

    def predict(self, images: torch.Tensor) -> torch.Tensor:
        """Class scores ``(B, num_classes)``; never updates state."""
        ...

    def train_step(self, images: torch.Tensor, labels: torch.Tensor) -> tuple[float, torch.Tensor]:
        """One optimization step; returns ``(batch_loss, scores)``."""
        ...

    def set_mode(self, mode: Mode) -> None:
        """Switch between training and evaluation behavior."""
        ...

    def export_state(self) -> dict[str, Any]:
        """Opaque, serializable snapshot of the full learner state."""
        ...

    def import_state(self, state: dict[str, Any]) -> None:
        """Restore a snapshot produced by ``export_state``."""
        ...
