"""
Run Checkpoint Persistence.

A checkpoint bundles the Learner's opaque serialized state with the number
of the last fully completed epoch, written as one unit so that resuming
starts exactly at ``epoch + 1``.

Key Features:
    * Atomic writes (temporary sibling + ``os.replace``)
    * Secure loading with ``weights_only=True`` (no arbitrary code execution)
    * Absence is not an error: ``load`` returns None for a missing path
    * Existing but unparsable files raise ``CorruptCheckpointError``
"""

from __future__ import annotations

import logging
import pickle  # nosec B403
import re
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import torch

from ...exceptions import CorruptCheckpointError, FileAccessError
from ..paths import CHECKPOINT_PREFIX, CHECKPOINT_SUFFIX, LOGGER_NAME
from .atomic import atomic_open

logger = logging.getLogger(LOGGER_NAME)

_STATE_KEY = "learner_state"
_EPOCH_KEY = "epoch"
_CHECKPOINT_RE = re.compile(
    rf"^{re.escape(CHECKPOINT_PREFIX)}(\d+){re.escape(CHECKPOINT_SUFFIX)}$"
)

# Failures torch.load surfaces for truncated, foreign or garbage files
_PARSE_ERRORS = (
    pickle.UnpicklingError,
    RuntimeError,
    EOFError,
    ValueError,
    TypeError,
    KeyError,
    AttributeError,
    zipfile.BadZipFile,
)


@dataclass(frozen=True)
class CheckpointRecord:
    """
    Persisted ``(learner_state, epoch)`` pair.

    Attributes:
        learner_state: Opaque blob produced by ``Learner.export_state()``.
        epoch: Last epoch that fully completed before the checkpoint was written.
    """

    learner_state: Any
    epoch: int


class CheckpointStore:
    """
    Saves and restores run checkpoints keyed by filesystem path.

    Attributes:
        map_location: Device tensors are mapped to on load (CPU by default;
            the Learner moves them to its own device on import).
    """

    def __init__(self, map_location: str | torch.device = "cpu") -> None:
        self.map_location = map_location

    def save(self, path: Path, learner_state: Any, epoch: int) -> Path:
        """
        Write ``learner_state`` and ``epoch`` to ``path`` as one atomic unit.

        Args:
            path: Destination file (parent directories are created).
            learner_state: Blob from ``Learner.export_state()``.
            epoch: Last fully completed epoch.

        Returns:
            The path written.

        Raises:
            FileAccessError: If the checkpoint cannot be written.
        """
        path = Path(path)
        payload = {_STATE_KEY: learner_state, _EPOCH_KEY: int(epoch)}
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with atomic_open(path, "wb") as handle:
                torch.save(payload, handle)
        except OSError as e:
            raise FileAccessError(
                f"Could not write checkpoint for epoch {epoch} to {path}: {e}", path=path
            ) from e

        logger.debug(f"Checkpoint written → {path.name} (epoch {epoch})")
        return path

    def load(self, path: Path) -> CheckpointRecord | None:
        """
        Read a checkpoint back.

        Args:
            path: Checkpoint file to read.

        Returns:
            The stored record, or None if ``path`` does not exist.

        Raises:
            FileAccessError: If the file exists but cannot be read.
            CorruptCheckpointError: If the file exists but cannot be parsed.
        """
        path = Path(path)
        if not path.exists():
            return None

        try:
            payload = torch.load(path, map_location=self.map_location, weights_only=True)
        except OSError as e:
            raise FileAccessError(f"Could not read checkpoint {path}: {e}", path=path) from e
        except _PARSE_ERRORS as e:
            raise CorruptCheckpointError(
                f"Checkpoint {path} exists but cannot be parsed: {e}", path=path
            ) from e

        return _validate_payload(payload, path)


def _validate_payload(payload: Any, path: Path) -> CheckpointRecord:
    """Check the loaded object has the expected shape and build the record."""
    if not isinstance(payload, dict) or _STATE_KEY not in payload or _EPOCH_KEY not in payload:
        found = sorted(payload) if isinstance(payload, dict) else type(payload).__name__
        raise CorruptCheckpointError(
            f"Checkpoint {path} is missing '{_STATE_KEY}'/'{_EPOCH_KEY}' (found: {found})",
            path=path,
        )

    epoch = payload[_EPOCH_KEY]
    if isinstance(epoch, torch.Tensor) and epoch.numel() == 1:
        epoch = int(epoch.item())
    if isinstance(epoch, bool) or not isinstance(epoch, int) or epoch < 0:
        raise CorruptCheckpointError(
            f"Checkpoint {path} has an invalid epoch value: {epoch!r}", path=path
        )

    return CheckpointRecord(learner_state=payload[_STATE_KEY], epoch=epoch)


def latest_checkpoint(output_dir: Path) -> Path | None:
    """
    Find the checkpoint with the highest epoch number in ``output_dir``.

    Args:
        output_dir: Directory holding ``checkpoint_epoch_<N>.pt`` files.

    Returns:
        Path of the newest checkpoint, or None if there is none.
    """
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        return None

    best: tuple[int, Path] | None = None
    for candidate in output_dir.iterdir():
        match = _CHECKPOINT_RE.match(candidate.name)
        if match and candidate.is_file():
            epoch = int(match.group(1))
            if best is None or epoch > best[0]:
                best = (epoch, candidate)
    return best[1] if best else None
