"""
Optimization & Epoch Loop Configuration Schema.

Hyperparameters consumed by the training orchestrator and handed opaquely
to the Learner (learning rate, dropout).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .types import BatchSize, DropoutRate, LearningRate, NonNegativeInt, PositiveInt


# TRAINING CONFIGURATION
class TrainingConfig(BaseModel):
    """
    Defines the epoch budget, batching and optimizer hyperparameters.

    Attributes:
        epochs: Target number of epochs (the run stops after this one).
        batch_size: Samples per batch for both train and eval passes.
        learning_rate: Adam learning rate passed to the Learner.
        dropout: Dropout probability of the reference CNN.
        seed: Base seed for weight init, shuffling and dropout generators.
        log_every: Emit running stats every N batches (0 disables).
        use_tqdm: Show a tqdm progress bar during training passes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    epochs: PositiveInt = Field(default=10)
    batch_size: BatchSize = Field(default=64)
    learning_rate: LearningRate = Field(default=1e-3)
    dropout: DropoutRate = Field(default=0.25)
    seed: int = Field(default=42, description="Random seed for reproducibility")
    log_every: NonNegativeInt = Field(default=100, description="Progress interval (batches)")
    use_tqdm: bool = False
