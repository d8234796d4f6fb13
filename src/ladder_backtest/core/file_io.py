"""File I/O for the log snapshot and the report artifact.

The log is read as a point-in-time snapshot without locking; the bot may
keep appending while we read. The report is replaced atomically
(write to a sibling temp file, ``fsync``, then ``os.replace``) so a
failed run never leaves a truncated report behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from .errors import LogFileMissingError

logger = logging.getLogger(__name__)


def read_log_lines(path: str | Path) -> list[str]:
    """Return the non-empty lines of the log at ``path``.

    Raises :class:`LogFileMissingError` when the file does not exist.
    Undecodable bytes are replaced rather than failing the run.
    """
    path = Path(path)
    if not path.exists():
        raise LogFileMissingError(str(path))
    text = path.read_text(encoding="utf-8", errors="replace")
    lines = [line for line in text.splitlines() if line]
    logger.debug("Read %d lines from %s", len(lines), path)
    return lines


def write_text_atomic(path: str | Path, content: str) -> None:
    """Overwrite ``path`` with ``content`` in one step."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
