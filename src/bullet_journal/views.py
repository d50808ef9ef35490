"""Listing, week and month views built on decoded entries."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from .codec import priority_prefix
from .engine import JournalEngine
from .models import Entry, Priority, format_time


MONTH_LEGEND = "legend: * meeting, + open bullets, . only done, ' ' empty"


def _entry_body(entry: Entry) -> str:
    status = "x" if entry.completed else " "
    time_prefix = f"[mtg {format_time(entry.meeting.start)}] " if entry.meeting else ""
    tags = "".join(f" #{t}" for t in entry.tags)
    return f"[{status}] {priority_prefix(entry.priority)}{time_prefix}{entry.text}{tags}"


def format_entry(entry: Entry) -> list[str]:
    """Numbered listing lines for an entry and its notes."""
    lines = [f"{entry.visible_index:>3}. {_entry_body(entry)}"]
    lines.extend(f"     ↳ {note}" for note in entry.notes)
    return lines


def format_meeting(day: date, entry: Entry) -> str:
    meeting = entry.meeting
    return f"{day} {format_time(meeting.start):>5} ({meeting.display_duration}m) {entry.text}"


@dataclass
class DaySummary:
    """Entries of one day in a week view."""
    day: date
    entries: list[Entry] = field(default_factory=list)

    @property
    def open_count(self) -> int:
        return sum(1 for e in self.entries if not e.completed)

    @property
    def done_count(self) -> int:
        return sum(1 for e in self.entries if e.completed)


def week_days(base: date) -> list[date]:
    """Monday through Sunday of the week containing base."""
    start = base - timedelta(days=base.weekday())
    return [start + timedelta(days=i) for i in range(7)]


def week_summary(
    engine: JournalEngine,
    base: date,
    tags: Iterable[str] = (),
    priority: Optional[Priority] = None,
) -> list[DaySummary]:
    wanted = list(tags)
    return [
        DaySummary(day, engine.list_entries(day, wanted, priority))
        for day in week_days(base)
    ]


def render_week(summaries: list[DaySummary]) -> str:
    out = []
    for summary in summaries:
        out.append("")
        out.append(f"# {summary.day}")
        out.append(f"Open: {summary.open_count}, Done: {summary.done_count}")
        for entry in summary.entries:
            out.append(f" - {_entry_body(entry)}")
            out.extend(f"   ↳ {note}" for note in entry.notes)
    return "\n".join(out)


def day_marker(entries: list[Entry]) -> str:
    if any(e.meeting is not None for e in entries):
        return "*"
    if any(not e.completed for e in entries):
        return "+"
    if entries:
        return "."
    return " "


def month_markers(engine: JournalEngine, base: date) -> dict[date, str]:
    """Calendar marker for every day in base's month."""
    last_day = calendar.monthrange(base.year, base.month)[1]
    markers = {}
    for d in range(1, last_day + 1):
        day = base.replace(day=d)
        markers[day] = day_marker(engine.entries(day))
    return markers


def render_month(base: date, markers: dict[date, str]) -> str:
    """Month grid, weeks starting on Monday."""
    first = base.replace(day=1)
    out = [f"{base.year}-{base.month:02d}", "Mo Tu We Th Fr Sa Su"]
    row = "   " * first.weekday()
    for day in sorted(markers):
        row += f"{day.day:>2}{markers[day]} "
        if day.weekday() == 6:
            out.append(row)
            row = ""
    if row:
        out.append(row)
    out.append(MONTH_LEGEND)
    return "\n".join(out)
