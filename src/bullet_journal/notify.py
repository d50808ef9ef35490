"""Upcoming-meeting alerts with a persisted record of what already fired."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Callable, Optional

from .dayfile import split_lines
from .engine import JournalEngine
from .errors import StorageUnavailableError
from .locking import atomic_write
from .models import format_time

logger = logging.getLogger(__name__)

NOTIFY_TITLE = "Upcoming meeting"

Deliver = Callable[[str, str], None]


def make_key(day: date, start: time) -> str:
    """Dedup key for a meeting, e.g. ``2026-01-06|15:00``."""
    return f"{day.isoformat()}|{format_time(start)}"


def desktop_notify(title: str, message: str) -> None:
    """Show a desktop notification, or print it when notify-send is missing."""
    if shutil.which("notify-send"):
        subprocess.run(["notify-send", title, message], check=False)
    else:
        print(f"{title}: {message}")


class DedupStore:
    """Set of meeting keys that have already been notified.

    The file holds one key per line. It only ever grows: keys are never
    removed.
    """

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> set[str]:
        if not self.path.exists():
            return set()
        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailableError(f"cannot read {self.path}: {e}") from e
        return {line for line in split_lines(content) if line.strip()}

    def save(self, keys: set[str]) -> None:
        """Rewrite the whole file with the given keys."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with atomic_write(self.path) as f:
                f.writelines(f"{key}\n" for key in sorted(keys))
        except OSError as e:
            raise StorageUnavailableError(f"cannot write {self.path}: {e}") from e


@dataclass
class Notification:
    """A meeting alert that was handed to the deliverer."""
    key: str
    title: str
    message: str
    minutes_until: int


class MeetingNotifier:
    """Sends one alert per meeting shortly before it starts."""

    def __init__(
        self,
        engine: JournalEngine,
        store: Optional[DedupStore] = None,
        deliver: Optional[Deliver] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.engine = engine
        self.store = store or DedupStore(engine.config.get_dedup_path())
        self.deliver = deliver or desktop_notify
        self.clock = clock or engine.clock

    def notify_upcoming(self, window_minutes: Optional[int] = None) -> list[Notification]:
        """Alert on today's meetings starting within the next window_minutes.

        Meetings already in the dedup set, already started or further away
        than the window are skipped. The dedup file is rewritten only when
        something fired.

        Returns:
            The notifications that were attempted.
        """
        if window_minutes is None:
            window_minutes = self.engine.config.notify_window

        now = self.clock()
        today = now.date()
        sent = self.store.load()
        fired: list[Notification] = []

        for entry in self.engine.entries(today):
            if entry.meeting is None:
                continue
            key = make_key(today, entry.meeting.start)
            if key in sent:
                continue

            start = datetime.combine(today, entry.meeting.start)
            # Truncates toward zero: a meeting 30s ago still counts as 0.
            minutes_until = int((start - now).total_seconds() / 60)
            if not 0 <= minutes_until <= window_minutes:
                continue

            message = (
                f"{entry.text} at {format_time(entry.meeting.start)} "
                f"(in {minutes_until} min)"
            )
            try:
                self.deliver(NOTIFY_TITLE, message)
            except Exception as e:
                logger.warning("Notification for %s failed: %s", key, e)
            fired.append(Notification(key, NOTIFY_TITLE, message, minutes_until))

        if fired:
            self.store.save(sent | {n.key for n in fired})
            logger.info("Sent %d meeting notification(s)", len(fired))

        return fired
