"""Core journal engine - positional edits of day files."""

from __future__ import annotations

import logging
from contextlib import ExitStack, contextmanager
from datetime import date, datetime, time
from typing import Callable, Iterable, Optional

import portalocker

from .codec import NOTE_INDENT, OPEN_MARKER, DONE_MARKER, decode, encode, is_entry_line, meeting_bracket
from .config import JournalConfig
from .dayfile import DayFile
from .errors import (
    AlreadyCompletedError,
    EntryNotFoundError,
    InvalidOperationError,
    JournalError,
    StorageUnavailableError,
)
from .locking import file_locks
from .models import Entry, Meeting, Priority, filter_entries

logger = logging.getLogger(__name__)

__all__ = [
    "AlreadyCompletedError",
    "EntryNotFoundError",
    "InvalidOperationError",
    "JournalEngine",
    "JournalError",
    "StorageUnavailableError",
]


def _normalize_tags(tags: Iterable[str]) -> list[str]:
    normalized = []
    for tag in tags:
        tag = tag.strip().lstrip("#")
        if tag:
            normalized.append(tag)
    return normalized


def _find(entries: list[Entry], visible_id: int, day: date) -> Entry:
    for entry in entries:
        if entry.visible_index == visible_id:
            return entry
    raise EntryNotFoundError(f"bullet {visible_id} not found on {day}")


def delete_block(lines: list[str], line_index: int) -> list[int]:
    """Line indices owned by the entry at line_index.

    That is the entry line plus every following indented line that does not
    start another entry. Blank lines are stepped over and stay in place; the
    first unindented line or entry start ends the block.
    """
    block = [line_index]
    idx = line_index + 1
    while idx < len(lines):
        line = lines[idx]
        if not line.strip():
            idx += 1
            continue
        if not line.startswith(NOTE_INDENT) or is_entry_line(line):
            break
        block.append(idx)
        idx += 1
    return block


class JournalEngine:
    """Queries and mutations over per-date day files."""

    def __init__(self, config: JournalConfig, clock: Optional[Callable[[], datetime]] = None):
        self.config = config
        self.clock = clock or datetime.now
        self.days = DayFile(config)

    def today(self) -> date:
        return self.clock().date()

    @contextmanager
    def _locked(self, *days: date):
        """Lock the given day files when locking is enabled, else do nothing."""
        if not self.config.locking:
            yield
            return
        paths = [self.days.path_for(d) for d in days]
        with ExitStack() as stack:
            try:
                stack.enter_context(file_locks(paths, timeout=self.config.lock_timeout))
            except (portalocker.LockException, OSError) as e:
                raise StorageUnavailableError(f"cannot lock {days}: {e}") from e
            yield

    # ========== Queries ==========

    def entries(self, day: date) -> list[Entry]:
        """Decode all entries of a date."""
        return decode(self.days.load(day))

    def list_entries(
        self,
        day: date,
        tags: Iterable[str] = (),
        priority: Optional[Priority] = None,
    ) -> list[Entry]:
        """Entries carrying every given tag and, if given, exactly that priority."""
        return filter_entries(self.entries(day), tags, priority)

    def meetings(self, day: date) -> list[Entry]:
        """Entries with a meeting time, earliest first."""
        found = [e for e in self.entries(day) if e.meeting is not None]
        found.sort(key=lambda e: e.meeting.start)
        return found

    # ========== Mutations ==========

    def _append(self, day: date, entry: Entry) -> Entry:
        lines = self.days.load(day)
        lines.extend(encode(entry))
        path = self.days.save(day, lines)
        logger.info("Added to %s", path)
        return decode(lines)[-1]

    def add(
        self,
        day: date,
        text: str,
        priority: Priority = Priority.NONE,
        tags: Iterable[str] = (),
        notes: Iterable[str] = (),
    ) -> Entry:
        """Append a new open entry at the end of a date's file.

        The new entry always gets the highest visible index of the day.

        Returns:
            The entry as decoded from the saved lines.

        Raises:
            StorageUnavailableError: If the day file cannot be read or written.
        """
        entry = Entry(
            text=text.strip(),
            priority=priority,
            tags=_normalize_tags(tags),
            notes=list(notes),
        )
        with self._locked(day):
            return self._append(day, entry)

    def add_meeting(
        self,
        day: date,
        start: time,
        duration: Optional[int],
        title: str,
        tags: Iterable[str] = (),
        notes: Iterable[str] = (),
    ) -> Entry:
        """Add a meeting entry.

        The meeting bracket becomes part of the body text, so a meeting created
        here never carries a priority marker.
        """
        if duration is None:
            duration = self.config.default_meeting_duration
        bracket = meeting_bracket(Meeting(start=start, duration=duration))
        return self.add(day, f"{bracket} {title}", Priority.NONE, tags, notes)

    def complete(self, day: date, visible_id: int) -> Entry:
        """Mark an entry done. Completing a done entry changes nothing.

        Only the open marker on the entry line is replaced; the rest of the
        line is written back untouched.

        Raises:
            EntryNotFoundError: If no entry has that visible index.
        """
        with self._locked(day):
            lines = self.days.load(day)
            target = _find(decode(lines), visible_id, day)
            raw = lines[target.line_index]
            if raw.lstrip().startswith(OPEN_MARKER):
                lines[target.line_index] = raw.replace(OPEN_MARKER, DONE_MARKER, 1)
            self.days.save(day, lines)
        target.completed = True
        logger.info("Marked done: %s #%d", day, visible_id)
        return target

    def delete(self, day: date, visible_id: int) -> Entry:
        """Remove an entry together with its indented block.

        Raises:
            EntryNotFoundError: If no entry has that visible index.
        """
        with self._locked(day):
            lines = self.days.load(day)
            target = _find(decode(lines), visible_id, day)
            for idx in reversed(delete_block(lines, target.line_index)):
                del lines[idx]
            self.days.save(day, lines)
        logger.info("Deleted: %s #%d", day, visible_id)
        return target

    @staticmethod
    def _migrated_copy(entry: Entry) -> Entry:
        # Notes stay behind in the source file.
        return Entry(
            text=entry.text,
            priority=entry.priority,
            tags=list(entry.tags),
            meeting=entry.meeting,
        )

    def migrate_one(self, from_day: date, to_day: date, visible_id: int) -> Entry:
        """Move one open entry to another date.

        The destination gets a canonical copy without notes and is saved first.
        Only the entry line is then removed from the source; its note lines
        are left where they were.

        Raises:
            InvalidOperationError: If both dates are the same.
            EntryNotFoundError: If no entry has that visible index.
            AlreadyCompletedError: If the entry is already done.
        """
        if from_day == to_day:
            raise InvalidOperationError(f"cannot migrate {from_day} onto itself")

        with self._locked(from_day, to_day):
            lines = self.days.load(from_day)
            target = _find(decode(lines), visible_id, from_day)
            if target.completed:
                raise AlreadyCompletedError(
                    f"bullet {visible_id} on {from_day} is already done"
                )

            migrated = self._append(to_day, self._migrated_copy(target))
            del lines[target.line_index]
            self.days.save(from_day, lines)

        logger.info("Migrated %s #%d to %s", from_day, visible_id, to_day)
        return migrated

    def migrate_open(self, from_day: date, to_day: date) -> list[Entry]:
        """Move every open entry of from_day to to_day.

        Works on a single snapshot of the source taken before any write.
        Entries are appended to the destination in source order and saved
        once; the source lines are then removed bottom-up so earlier removals
        never shift the indices of entries still to be removed.

        Returns:
            The migrated entries as they were in the snapshot.

        Raises:
            InvalidOperationError: If both dates are the same.
        """
        if from_day == to_day:
            raise InvalidOperationError(f"cannot migrate {from_day} onto itself")

        with self._locked(from_day, to_day):
            lines = self.days.load(from_day)
            moving = [e for e in decode(lines) if not e.completed]
            if not moving:
                logger.info("No open bullets to migrate from %s", from_day)
                return []

            target_lines = self.days.load(to_day)
            for entry in moving:
                target_lines.extend(encode(self._migrated_copy(entry)))
            self.days.save(to_day, target_lines)

            for entry in sorted(moving, key=lambda e: e.line_index, reverse=True):
                del lines[entry.line_index]
            self.days.save(from_day, lines)

        logger.info("Migrated %d open bullets from %s to %s", len(moving), from_day, to_day)
        return moving
