"""Load and save the full line sequence of a date."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from .config import JournalConfig
from .errors import StorageUnavailableError
from .locking import atomic_write

logger = logging.getLogger(__name__)


def split_lines(content: str) -> list[str]:
    """Split file contents on "\\n" only; a final newline does not add a line.

    Unlike str.splitlines, other line-break characters inside a line are kept
    as they are.
    """
    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return lines


class DayFile:
    """Whole-file access to day files.

    Every mutation reads the complete file, edits it in memory and writes the
    complete file back. There is no append mode.
    """

    def __init__(self, config: JournalConfig):
        self.config = config

    def path_for(self, day: date) -> Path:
        """Resolve the file for a date, creating the data directory if needed."""
        try:
            self.config.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"cannot create data dir {self.config.data_dir}: {e}"
            ) from e
        return self.config.get_day_path(day)

    def load(self, day: date) -> list[str]:
        """Return the stored lines for a date, or [] when there is no file."""
        path = self.path_for(day)
        if not path.exists():
            return []
        try:
            # newline="" keeps "\r" bytes that belong to a line
            with open(path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailableError(f"cannot read {path}: {e}") from e
        return split_lines(content)

    def save(self, day: date, lines: list[str]) -> Path:
        """Overwrite the file for a date with the given lines.

        An empty list writes an empty file; otherwise lines are joined with
        newlines and terminated by one trailing newline.
        """
        path = self.path_for(day)
        contents = "\n".join(lines) + "\n" if lines else ""
        try:
            with atomic_write(path) as f:
                f.write(contents)
        except OSError as e:
            raise StorageUnavailableError(f"cannot write {path}: {e}") from e
        logger.debug("Wrote %d lines to %s", len(lines), path)
        return path
