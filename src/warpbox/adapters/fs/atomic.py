"""Crash-safe file replacement helpers."""
from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

__all__ = ["atomic_writer", "atomic_write_text"]


@contextmanager
def atomic_writer(path: Path, *, mode: int | None = None, encoding: str = "utf-8") -> Iterator[IO[str]]:
    """Yield a text handle whose content replaces ``path`` only on a clean exit.

    The data goes to a temp file in the destination directory, is fsynced and
    then moved over ``path`` with :func:`os.replace`. On any exception the temp
    file is removed and the previous ``path`` stays untouched.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="\n") as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        if mode is not None:
            try:
                os.chmod(tmp, mode)
            except PermissionError:
                pass
        os.replace(tmp, path)
    except BaseException:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass
        raise


def atomic_write_text(path: Path, text: str, *, mode: int | None = None) -> Path:
    with atomic_writer(path, mode=mode) as handle:
        handle.write(text)
    return Path(path)
