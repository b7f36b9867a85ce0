"""
Configuration Serialization & Persistence Utilities.

Converts configuration objects (Pydantic models, dicts with Path values)
to YAML and writes them atomically, and loads raw recipe dicts back.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..paths import LOGGER_NAME
from .atomic import atomic_open

logger = logging.getLogger(LOGGER_NAME)


def save_config_as_yaml(data: Any, yaml_path: Path) -> Path:
    """
    Serializes and persists configuration data to a YAML file.

    Args:
        data: A Pydantic model (``model_dump`` protocol) or a plain dict.
        yaml_path: The destination filesystem path.

    Returns:
        The path where the YAML was written.

    Raises:
        ValueError: If the data structure cannot be serialized.
        OSError: If a filesystem-level error occurs.
    """
    try:
        raw = data.model_dump(mode="json") if hasattr(data, "model_dump") else data
        final_data = _sanitize_for_yaml(raw)
        body = yaml.safe_dump(
            final_data, default_flow_style=False, sort_keys=False, indent=4, allow_unicode=True
        )
    except (TypeError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Serialization failed: object structure is incompatible. Error: {e}")
        raise ValueError(f"Could not serialize configuration object: {e}") from e

    yaml_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with atomic_open(yaml_path, "w", encoding="utf-8") as f:
            f.write(body)
    except OSError as e:
        logger.error(f"IO Error: Could not write YAML to {yaml_path}. Error: {e}")
        raise

    logger.debug(f"Configuration frozen at → {yaml_path.name}")
    return yaml_path


def load_config_from_yaml(yaml_path: Path) -> Any:
    """
    Loads a raw configuration object from a YAML file.

    Args:
        yaml_path: Path to the source YAML file.

    Returns:
        The parsed YAML document (normally a dict, None for an empty file).

    Raises:
        FileNotFoundError: If the specified path does not exist.
    """
    if not yaml_path.exists():
        raise FileNotFoundError(f"YAML configuration file not found at: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _sanitize_for_yaml(obj: Any) -> Any:
    """Recursively convert Paths to strings and tuples to lists."""
    if isinstance(obj, dict):
        return {k: _sanitize_for_yaml(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize_for_yaml(i) for i in obj]
    if isinstance(obj, Path):
        return str(obj)
    return obj
