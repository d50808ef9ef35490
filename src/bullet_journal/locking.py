"""Whole-file writes and optional per-day-file locks."""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Generator, Iterable

import portalocker


def lock_path_for(path: Path) -> Path:
    """Sidecar lock file for a day file (``2026-01-06.md.lock``)."""
    return path.with_suffix(path.suffix + ".lock")


@contextmanager
def file_lock(path: Path, timeout: float = 10.0) -> Generator[None, None, None]:
    """Hold an exclusive lock on a day file for the duration of the block.

    Raises:
        portalocker.LockException: If lock cannot be acquired
    """
    lock_path = lock_path_for(path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock_path.touch(exist_ok=True)

    with portalocker.Lock(lock_path, timeout=timeout):
        yield


@contextmanager
def file_locks(paths: Iterable[Path], timeout: float = 10.0) -> Generator[None, None, None]:
    """Lock several files, always in sorted path order."""
    with ExitStack() as stack:
        for path in sorted(set(paths)):
            stack.enter_context(file_lock(path, timeout=timeout))
        yield


@contextmanager
def atomic_write(path: Path, encoding: str = "utf-8") -> Generator:
    """Replace a file's contents in one step.

    Writes to a sibling temp file, then renames it over the target. Readers
    see either the old or the new contents, never a partial file.

    Yields:
        Text file handle for writing
    """
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    try:
        # newline="" keeps "\n" on every platform
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            yield f

        if os.name == "nt" and path.exists():
            path.unlink()
        tmp_path.rename(path)

    except BaseException:
        if tmp_path.exists():
            tmp_path.unlink()
        raise
