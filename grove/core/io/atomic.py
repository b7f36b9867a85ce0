"""
Atomic File Replacement.

Writes go to a temporary sibling file that is flushed, fsync'ed and then
moved over the destination with ``os.replace``. Readers therefore see
either the previous file or the complete new one, never a partial write.
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator


@contextmanager
def atomic_open(path: Path, mode: str = "wb", encoding: str | None = None) -> Iterator[IO]:
    """
    Open a temporary sibling of ``path`` and move it into place on success.

    The parent directory must already exist. On any exception the temporary
    file is removed and the destination is left untouched.

    Args:
        path: Final destination.
        mode: ``"wb"`` or ``"w"``.
        encoding: Text encoding for ``"w"`` mode.

    Yields:
        Writable file object.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, mode, encoding=encoding) as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
