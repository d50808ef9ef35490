"""Data models for journal entries and meetings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import IntEnum
from typing import Iterable, Optional


DEFAULT_MEETING_DURATION = 60


class Priority(IntEnum):
    """Priority of an entry."""
    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


_PRIORITY_NAMES = {
    "1": Priority.LOW,
    "low": Priority.LOW,
    "l": Priority.LOW,
    "2": Priority.MEDIUM,
    "med": Priority.MEDIUM,
    "medium": Priority.MEDIUM,
    "m": Priority.MEDIUM,
    "3": Priority.HIGH,
    "high": Priority.HIGH,
    "h": Priority.HIGH,
}


def parse_priority(value: Optional[str]) -> Optional[Priority]:
    """Parse a user supplied priority (low/med/high or 1/2/3).

    Returns None when no value is given.

    Raises:
        ValueError: If the value is not a known priority name
    """
    if value is None:
        return None
    try:
        return _PRIORITY_NAMES[value.strip().lower()]
    except KeyError:
        raise ValueError(f"invalid priority: {value}") from None


def parse_date(s: str) -> date:
    """Parse a YYYY-MM-DD date string."""
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"invalid date: {s}") from None


def parse_time(s: str) -> time:
    """Parse a 24h HH:MM time string."""
    try:
        return datetime.strptime(s, "%H:%M").time()
    except ValueError:
        raise ValueError(f"invalid time: {s}") from None


def format_time(t: time) -> str:
    """Format a time of day as HH:MM."""
    return t.strftime("%H:%M")


@dataclass
class Meeting:
    """Start time and optional duration of a meeting entry."""
    start: time
    duration: Optional[int] = None  # minutes

    @property
    def display_duration(self) -> int:
        """Duration shown to users; absent durations read as one hour."""
        if self.duration is None:
            return DEFAULT_MEETING_DURATION
        return self.duration


@dataclass
class Entry:
    """A task or meeting decoded from a day file.

    line_index and visible_index are only meaningful for the line list the
    entry was decoded from.
    """
    text: str
    completed: bool = False
    priority: Priority = Priority.NONE
    tags: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    meeting: Optional[Meeting] = None
    line_index: int = -1
    visible_index: int = 0

    def to_dict(self) -> dict:
        """Convert entry to dictionary for JSON serialization."""
        return {
            "id": self.visible_index,
            "completed": self.completed,
            "text": self.text,
            "priority": self.priority.name.lower(),
            "tags": list(self.tags),
            "notes": list(self.notes),
            "meeting": (
                {
                    "start": format_time(self.meeting.start),
                    "duration": self.meeting.duration,
                }
                if self.meeting
                else None
            ),
        }


def filter_entries(
    entries: Iterable[Entry],
    tags: Iterable[str] = (),
    priority: Optional[Priority] = None,
) -> list[Entry]:
    """Keep entries that carry every tag in tags and match priority if given."""
    wanted = list(tags)
    return [
        e for e in entries
        if (priority is None or e.priority == priority)
        and all(t in e.tags for t in wanted)
    ]
