"""
Configuration Package Initialization.

Flat public API for configuration components with lazy loading (PEP 562),
so importing ``grove.core.config`` does not pull in torch until a config
class that needs it is accessed.

Example:
    >>> from grove.core.config import Config
    >>> cfg = Config.from_recipe(Path("recipe.yaml"), overrides={"training.epochs": 3})
"""

from importlib import import_module
from typing import Any

__all__ = [
    "Config",
    "DatasetConfig",
    "HardwareConfig",
    "TelemetryConfig",
    "TrainingConfig",
    "ValidatedPath",
]

# LAZY IMPORTS MAPPING
_PKG = "grove.core.config"

_LAZY_IMPORTS: dict[str, str] = {
    "Config": f"{_PKG}.manifest",
    "DatasetConfig": f"{_PKG}.dataset_config",
    "HardwareConfig": f"{_PKG}.hardware_config",
    "TelemetryConfig": f"{_PKG}.telemetry_config",
    "TrainingConfig": f"{_PKG}.training_config",
    "ValidatedPath": f"{_PKG}.types",
}


def __getattr__(name: str) -> Any:
    """
    Lazily import configuration components on first access.

    Raises:
        AttributeError: If name is not in the public API.
    """
    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(_LAZY_IMPORTS[name])
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


def __dir__() -> list[str]:
    """Support for dir() and IDE auto-completion."""
    return sorted(__all__)
