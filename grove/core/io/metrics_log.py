"""
Per-Epoch Metrics Table.

Append-only CSV with a fixed five-column header
(``epoch, train_loss, train_accuracy, val_loss, val_accuracy``). Every row
is flushed and fsync'ed before ``append`` returns, so a crash mid-run leaves
the rows of all earlier epochs intact and readable by spreadsheet or
plotting tools.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import IO

import pandas as pd

from ...exceptions import MetricsWriteError
from ..paths import LOGGER_NAME, METRIC_EPOCH, METRICS_COLUMNS
from .atomic import atomic_open

logger = logging.getLogger(LOGGER_NAME)


@dataclass(frozen=True)
class MetricsRow:
    """One completed epoch: training and validation loss/accuracy."""

    epoch: int
    train_loss: float
    train_accuracy: float
    val_loss: float
    val_accuracy: float


def _to_frame(rows: list[MetricsRow]) -> pd.DataFrame:
    return pd.DataFrame([asdict(r) for r in rows], columns=list(METRICS_COLUMNS))


def read_metrics(path: Path) -> pd.DataFrame:
    """
    Load a metrics table.

    Args:
        path: CSV written by ``MetricsLog``.

    Returns:
        DataFrame with the five metric columns (empty if only the header exists).

    Raises:
        MetricsWriteError: If the file header does not match the metric columns.
    """
    try:
        frame = pd.read_csv(path, float_precision="round_trip")
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=list(METRICS_COLUMNS))

    if tuple(frame.columns) != METRICS_COLUMNS:
        raise MetricsWriteError(
            f"Metrics file {path} has unexpected columns {list(frame.columns)}", path=path
        )
    return frame


class MetricsLog:
    """
    Append-only writer for the per-epoch metrics table.

    Use :meth:`open` to create one; the instance owns the open file handle
    until :meth:`close` (or the end of a ``with`` block).

    Attributes:
        path: Location of the CSV file.
        last_epoch: Epoch of the most recent row on disk (0 when none).
    """

    def __init__(self, path: Path, handle: IO[str], last_epoch: int = 0) -> None:
        self.path = path
        self._handle = handle
        self.last_epoch = last_epoch

    @classmethod
    def open(cls, path: Path, keep_through_epoch: int | None = None) -> MetricsLog:
        """
        Create (or overwrite) the metrics table and write the header.

        Args:
            path: Destination CSV.
            keep_through_epoch: When resuming, rows already on disk for epochs
                ``<= keep_through_epoch`` are kept under the fresh header;
                later rows (epochs that never reached a checkpoint) are dropped.

        Returns:
            Open MetricsLog ready for ``append``.

        Raises:
            MetricsWriteError: If the file cannot be created or written.
        """
        path = Path(path)
        kept: list[MetricsRow] = []
        if keep_through_epoch is not None and path.is_file():
            kept = cls._rows_through(path, keep_through_epoch)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with atomic_open(path, "w", encoding="utf-8") as tmp:
                _to_frame(kept).to_csv(tmp, index=False, lineterminator="\n")
            handle = open(path, "a", encoding="utf-8", newline="")
        except OSError as e:
            raise MetricsWriteError(f"Could not create metrics file {path}: {e}", path=path) from e

        if kept:
            logger.info(f"Metrics history kept through epoch {kept[-1].epoch} → {path.name}")
        return cls(path, handle, last_epoch=kept[-1].epoch if kept else 0)

    @staticmethod
    def _rows_through(path: Path, epoch: int) -> list[MetricsRow]:
        """Rows of an existing table with ``epoch <= epoch``, in epoch order."""
        try:
            frame = read_metrics(path)
        except (OSError, ValueError) as e:
            raise MetricsWriteError(f"Could not read existing metrics {path}: {e}", path=path) from e

        frame = frame[frame[METRIC_EPOCH] <= epoch].sort_values(METRIC_EPOCH)
        return [
            MetricsRow(
                epoch=int(r.epoch),
                train_loss=float(r.train_loss),
                train_accuracy=float(r.train_accuracy),
                val_loss=float(r.val_loss),
                val_accuracy=float(r.val_accuracy),
            )
            for r in frame.itertuples(index=False)
        ]

    def append(self, row: MetricsRow) -> None:
        """
        Append exactly one row and make it durable before returning.

        Args:
            row: Metrics of the epoch that just completed.

        Raises:
            MetricsWriteError: If the log is closed, the epoch is not after the
                last recorded one, or the write fails.
        """
        if self._handle.closed:
            raise MetricsWriteError(f"Metrics log {self.path} is closed", path=self.path)
        if row.epoch <= self.last_epoch:
            raise MetricsWriteError(
                f"Epoch {row.epoch} is not after last recorded epoch {self.last_epoch}",
                path=self.path,
            )

        try:
            _to_frame([row]).to_csv(self._handle, header=False, index=False, lineterminator="\n")
            self._handle.flush()
            os.fsync(self._handle.fileno())
        except OSError as e:
            raise MetricsWriteError(
                f"Could not append epoch {row.epoch} to {self.path}: {e}", path=self.path
            ) from e

        self.last_epoch = row.epoch

    def close(self) -> None:
        """Close the underlying file handle (idempotent)."""
        if not self._handle.closed:
            self._handle.close()

    def __enter__(self) -> MetricsLog:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
