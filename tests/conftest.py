"""
Shared fixtures for the Grove test suite.

Builds miniature datasets in the CIFAR-10 binary layout under ``tmp_path``
so data, trainer and pipeline tests never need the real download.
"""

import logging
from pathlib import Path

import numpy as np
import pytest

from grove.core.paths import LOGGER_NAME
from grove.data_handler import CIFAR10_LAYOUT, DATASET_SUBDIR, TEST_FILES, TRAIN_FILES


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: multi-component tests touching disk")


def encode_records(labels, fill=None, layout=CIFAR10_LAYOUT) -> bytes:
    """
    Serialize records: one label byte then the planar payload.

    ``fill(i)`` returns the uint8 payload of record ``i`` shaped (C, H, W);
    by default every pixel of record ``i`` equals ``i % 256``.
    """
    chunks = []
    for i, label in enumerate(labels):
        if fill is None:
            payload = np.full(
                (layout.channels, layout.height, layout.width), i % 256, dtype=np.uint8
            )
        else:
            payload = np.asarray(fill(i), dtype=np.uint8)
        chunks.append(bytes([label]) + payload.tobytes())
    return b"".join(chunks)


@pytest.fixture
def write_records():
    """Factory writing ``labels`` as records to ``path`` (plus optional trailing bytes)."""

    def _write(path: Path, labels, fill=None, trailing: bytes = b"") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(encode_records(labels, fill) + trailing)
        return path

    return _write


@pytest.fixture
def cifar_root(tmp_path, write_records):
    """
    Dataset root with 5 training files of 4 records and a test file of 6.

    Training labels encode the file index (file k holds label k) so
    concatenation order is observable.
    """
    root = tmp_path / "data"
    base = root / DATASET_SUBDIR
    for k, name in enumerate(TRAIN_FILES):
        write_records(base / name, [k] * 4)
    write_records(base / TEST_FILES[0], [0, 1, 2, 3, 4, 5])
    return root


@pytest.fixture
def grove_caplog(caplog):
    """caplog that also sees the project logger (which does not propagate)."""
    project_logger = logging.getLogger(LOGGER_NAME)
    previous = project_logger.propagate
    project_logger.propagate = True
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
    yield caplog
    project_logger.propagate = previous
