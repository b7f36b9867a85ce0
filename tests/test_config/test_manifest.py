"""
Test Suite for the Configuration Manifest.

Covers defaults, constraint validation, dotted overrides, YAML recipes
and device resolution.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from pydantic import ValidationError

from grove.core.config import (
    Config,
    DatasetConfig,
    HardwareConfig,
    TelemetryConfig,
    TrainingConfig,
)
from grove.core.config.manifest import _apply_overrides
from grove.exceptions import GroveConfigError


# DEFAULTS
@pytest.mark.unit
def test_training_defaults():
    cfg = TrainingConfig()
    assert cfg.epochs == 10
    assert cfg.batch_size == 64
    assert cfg.learning_rate == pytest.approx(1e-3)
    assert cfg.dropout == pytest.approx(0.25)
    assert cfg.seed == 42
    assert cfg.log_every == 100


@pytest.mark.unit
def test_dataset_defaults_resolve_paths():
    cfg = DatasetConfig()
    assert cfg.data_dir.is_absolute()
    assert cfg.data_dir.name == "data"
    assert cfg.strict_records is False
    assert cfg.num_workers == 2
    assert cfg.num_classes == 10


@pytest.mark.unit
def test_telemetry_log_dir():
    cfg = TelemetryConfig(output_dir="/tmp/run")
    assert cfg.log_dir == Path("/tmp/run/logs")
    assert TelemetryConfig(log_to_file=False).log_dir is None
    assert cfg.resume_from is None


@pytest.mark.unit
def test_telemetry_defaults_are_resolved_paths():
    """Default output_dir is a resolved Path, so log_dir can be derived from it."""
    cfg = TelemetryConfig()
    assert isinstance(cfg.output_dir, Path)
    assert cfg.output_dir == Path("./outputs").resolve()
    assert cfg.log_dir == cfg.output_dir / "logs"


# VALIDATION
@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [{"epochs": 0}, {"batch_size": 0}, {"learning_rate": 0.0}, {"log_every": -1}, {"extra": 1}],
)
def test_training_constraints(kwargs):
    with pytest.raises(ValidationError):
        TrainingConfig(**kwargs)


@pytest.mark.unit
def test_configs_are_frozen():
    cfg = TrainingConfig()
    with pytest.raises(ValidationError):
        cfg.epochs = 5


@pytest.mark.unit
def test_from_dict_wraps_validation_error():
    """Invalid values surface as GroveConfigError (also a ValueError)."""
    with pytest.raises(GroveConfigError):
        Config.from_dict({"training": {"epochs": -3}})
    with pytest.raises(ValueError):
        Config.from_dict({"unknown_section": {}})


@pytest.mark.unit
def test_from_dict_empty_sections_use_defaults():
    cfg = Config.from_dict({"training": None, "telemetry": None})
    assert cfg.training == TrainingConfig()


# OVERRIDES
@pytest.mark.unit
def test_apply_overrides_nested():
    data = {"training": {"epochs": 3}}

    merged = _apply_overrides(data, {"training.epochs": 7, "dataset.num_workers": 0})

    assert merged == {"training": {"epochs": 7}, "dataset": {"num_workers": 0}}
    assert data == {"training": {"epochs": 3}}


@pytest.mark.unit
def test_apply_overrides_through_scalar_fails():
    with pytest.raises(GroveConfigError):
        _apply_overrides({"training": 5}, {"training.epochs": 1})


@pytest.mark.unit
def test_overrides_win_over_recipe(tmp_path):
    recipe = tmp_path / "recipe.yaml"
    recipe.write_text(
        yaml.safe_dump({"training": {"epochs": 3, "batch_size": 8}, "hardware": {"device": "cpu"}})
    )

    cfg = Config.from_recipe(recipe, overrides={"training.epochs": 5})

    assert cfg.training.epochs == 5
    assert cfg.training.batch_size == 8
    assert cfg.hardware.device == "cpu"


# RECIPES
@pytest.mark.unit
def test_empty_recipe_gives_defaults(tmp_path):
    recipe = tmp_path / "empty.yaml"
    recipe.write_text("")

    cfg = Config.from_recipe(recipe)

    assert cfg.training == TrainingConfig()


@pytest.mark.unit
def test_non_mapping_recipe_rejected(tmp_path):
    recipe = tmp_path / "list.yaml"
    recipe.write_text("- 1\n- 2\n")

    with pytest.raises(GroveConfigError):
        Config.from_recipe(recipe)


@pytest.mark.unit
def test_missing_recipe(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.from_recipe(tmp_path / "nope.yaml")


# HARDWARE
@pytest.mark.unit
def test_cpu_device_kept():
    assert HardwareConfig(device="cpu").device == "cpu"


@pytest.mark.unit
def test_auto_device_resolves_to_concrete():
    assert HardwareConfig(device="auto").device in ("cpu", "cuda", "mps")


@pytest.mark.unit
def test_unavailable_cuda_falls_back_with_warning():
    with patch("torch.cuda.is_available", return_value=False):
        with pytest.warns(UserWarning, match="CUDA"):
            cfg = HardwareConfig(device="cuda")
    assert cfg.device == "cpu"


@pytest.mark.unit
def test_unknown_device_rejected():
    with pytest.raises(ValidationError):
        HardwareConfig(device="tpu")
