"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "place_executable"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


def place_executable(src: Path, dest: Path) -> Path:
    """Move ``src`` to ``dest`` and mark it executable.

    The file is staged next to ``dest`` and swapped in with ``os.replace`` so a
    running copy of the old binary is never left half-written.

    Raises:
        OSError: If the source is missing or the destination is not writable.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    staged = dest.with_name(f".{dest.name}.new")
    shutil.move(str(src), str(staged))
    staged.chmod(0o755)
    os.replace(staged, dest)
    return dest
