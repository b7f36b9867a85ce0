"""
Root Configuration Manifest.

Composes the training, dataset, hardware and telemetry sub-configs into the
single validated object the CLI hands to the training pipeline. Recipes are
YAML files; ``--set key.path=value`` overrides are merged before validation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...exceptions import GroveConfigError
from ..io.serialization import load_config_from_yaml
from .dataset_config import DatasetConfig
from .hardware_config import HardwareConfig
from .telemetry_config import TelemetryConfig
from .training_config import TrainingConfig


def _apply_overrides(data: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """
    Merge dotted-key overrides into a nested config dict.

    Args:
        data: Raw nested dict (typically loaded from YAML).
        overrides: Mapping like ``{"training.epochs": 5}``.

    Returns:
        New dict with overrides applied.

    Raises:
        GroveConfigError: If an override path crosses a non-mapping value.
    """
    merged: dict[str, Any] = {k: dict(v) if isinstance(v, dict) else v for k, v in data.items()}
    for dotted, value in overrides.items():
        *parents, leaf = dotted.split(".")
        node = merged
        for part in parents:
            child = node.get(part)
            if child is None:
                child = node[part] = {}
            elif not isinstance(child, dict):
                raise GroveConfigError(f"Cannot override '{dotted}': '{part}' is not a section")
            node = child
        node[leaf] = value
    return merged


class Config(BaseModel):
    """
    Validated run configuration (Single Source of Truth).

    Attributes:
        training: Epoch budget, batching and optimizer hyperparameters.
        dataset: Dataset location and ingestion policy.
        hardware: Device selection.
        telemetry: Output directory, resume source and logging policy.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    training: TrainingConfig = Field(default_factory=TrainingConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    hardware: HardwareConfig = Field(default_factory=HardwareConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @classmethod
    def from_dict(
        cls, data: dict[str, Any] | None, overrides: dict[str, Any] | None = None
    ) -> Config:
        """
        Build a Config from a nested dict plus optional dotted overrides.

        Empty sections (``None``) fall back to defaults.

        Raises:
            GroveConfigError: If validation fails.
        """
        raw = {k: v for k, v in (data or {}).items() if v is not None}
        if overrides:
            raw = _apply_overrides(raw, overrides)
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise GroveConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_recipe(cls, recipe: Path, overrides: dict[str, Any] | None = None) -> Config:
        """
        Load and validate a YAML recipe.

        Args:
            recipe: Path to the YAML recipe.
            overrides: Dotted-key overrides applied on top of the recipe.

        Raises:
            FileNotFoundError: If the recipe does not exist.
            GroveConfigError: If the recipe is not a mapping or fails validation.
        """
        data = load_config_from_yaml(recipe)
        if data is not None and not isinstance(data, dict):
            raise GroveConfigError(f"Recipe {recipe} must contain a mapping at top level")
        return cls.from_dict(data, overrides)
