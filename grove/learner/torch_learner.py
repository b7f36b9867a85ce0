"""
PyTorch Learner Backend.

Binds the reference ``SimpleCNN`` to an Adam optimizer and a cross-entropy
criterion behind the ``LearnerProtocol`` interface. The learner owns the
dropout generator and ships its state inside ``export_state`` so that a run
restored from a checkpoint continues bit-for-bit.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

import torch
import torch.nn as nn
import torch.optim as optim

from ..core import LOGGER_NAME, LogStyle, TrainingConfig, make_generator, to_device_obj
from .protocol import Mode
from .simple_cnn import SimpleCNN

logger = logging.getLogger(LOGGER_NAME)

_STATE_KEYS = ("model", "optimizer", "generator")


class TorchLearner:
    """
    Trainable classifier backed by ``torch.nn`` and ``torch.optim``.

    Attributes:
        model: Network producing class scores.
        optimizer: Parameter update rule.
        criterion: Training loss.
        device: Device the model runs on.
        generator: Random source for dropout masks (CPU).
    """

    def __init__(
        self,
        model: nn.Module,
        optimizer: optim.Optimizer,
        generator: torch.Generator,
        device: torch.device,
        criterion: nn.Module | None = None,
    ) -> None:
        self.model = model.to(device)
        self.optimizer = optimizer
        self.generator = generator
        self.device = device
        self.criterion = criterion if criterion is not None else nn.CrossEntropyLoss()

    def predict(self, images: torch.Tensor) -> torch.Tensor:
        with torch.no_grad():
            return self.model(images.to(self.device, non_blocking=True))

    def train_step(self, images: torch.Tensor, labels: torch.Tensor) -> tuple[float, torch.Tensor]:
        images = images.to(self.device, non_blocking=True)
        labels = labels.to(self.device, non_blocking=True)

        self.optimizer.zero_grad(set_to_none=True)
        scores = self.model(images)
        loss = self.criterion(scores, labels)
        loss.backward()
        self.optimizer.step()

        return loss.item(), scores.detach()

    def set_mode(self, mode: Mode) -> None:
        if mode == "train":
            self.model.train()
        elif mode == "eval":
            self.model.eval()
        else:
            raise ValueError(f"Unknown learner mode: {mode!r}")

    def export_state(self) -> dict[str, Any]:
        """Detached copy of weights, optimizer moments and the dropout stream."""
        return {
            "model": {k: v.detach().clone() for k, v in self.model.state_dict().items()},
            "optimizer": copy.deepcopy(self.optimizer.state_dict()),
            "generator": self.generator.get_state().clone(),
        }

    def import_state(self, state: dict[str, Any]) -> None:
        """
        Restore weights, optimizer moments and the dropout stream.

        Raises:
            ValueError: If the snapshot lacks a section or does not fit this
                network.
        """
        missing = [key for key in _STATE_KEYS if key not in state]
        if missing:
            raise ValueError(f"Learner state is missing section(s): {', '.join(missing)}")

        try:
            self.model.load_state_dict(state["model"])
            self.optimizer.load_state_dict(copy.deepcopy(state["optimizer"]))
            self.generator.set_state(state["generator"].cpu())
        except (RuntimeError, KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Learner state does not match this model: {e}") from e


def build_torch_learner(
    training: TrainingConfig,
    device: str = "cpu",
    in_channels: int = 3,
    num_classes: int = 10,
) -> TorchLearner:
    """
    Construct the reference CNN learner from config.

    Weight initialization draws from the global generator, so call
    ``set_seed`` beforehand for reproducible starting weights.

    Args:
        training: Supplies learning rate, dropout and the dropout seed.
        device: Resolved device string.
        in_channels: Image channels.
        num_classes: Output classes.

    Returns:
        Learner placed on ``device``.
    """
    device_obj = to_device_obj(device)
    generator = make_generator(training.seed)
    model = SimpleCNN(
        generator, in_channels=in_channels, num_classes=num_classes, dropout=training.dropout
    ).to(device_obj)
    optimizer = optim.Adam(model.parameters(), lr=training.learning_rate)

    n_params = sum(p.numel() for p in model.parameters())
    logger.info(
        f"{LogStyle.INDENT}{LogStyle.ARROW} {'Learner':<18}: SimpleCNN + Adam "
        f"(lr={training.learning_rate:.2e}, params={n_params:,}, device={device})"
    )
    return TorchLearner(model, optimizer, generator, device_obj)
