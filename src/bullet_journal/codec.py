"""Line codec for day files.

An entry is one line, optionally followed by note lines::

    - [ ] [mtg 15:00 30] (!!) Team sync #work
      - note: bring the numbers

Anything that is neither an entry nor a note line is left alone by every
operation in this package.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from .models import Entry, Meeting, Priority, format_time


OPEN_MARKER = "- [ ] "
DONE_MARKER = "- [x] "
NOTE_PREFIX = "  - note: "
NOTE_INDENT = "  "
MEETING_OPEN = "[mtg "

# Checked in this order: the longest marker must win.
PRIORITY_PREFIXES = (
    (Priority.HIGH, "(!!!) "),
    (Priority.MEDIUM, "(!!) "),
    (Priority.LOW, "(!) "),
)


def is_entry_line(line: str) -> bool:
    """True if the line starts an entry (leading whitespace allowed)."""
    stripped = line.lstrip()
    return stripped.startswith(OPEN_MARKER) or stripped.startswith(DONE_MARKER)


def is_note_line(line: str) -> bool:
    return line.startswith(NOTE_PREFIX)


def priority_prefix(priority: Priority) -> str:
    """Marker written in front of the body text, empty for no priority."""
    for level, prefix in PRIORITY_PREFIXES:
        if priority == level:
            return prefix
    return ""


def meeting_bracket(meeting: Meeting) -> str:
    """Render ``[mtg HH:MM]`` or ``[mtg HH:MM D]``."""
    if meeting.duration is None:
        return f"[mtg {format_time(meeting.start)}]"
    return f"[mtg {format_time(meeting.start)} {meeting.duration}]"


def _parse_meeting(rest: str) -> tuple[Optional[Meeting], str]:
    if not rest.startswith(MEETING_OPEN):
        return None, rest
    body = rest[len(MEETING_OPEN):]
    close = body.find("]")
    if close < 0:
        return None, rest

    meeting = None
    parts = body[:close].split()
    if parts:
        try:
            start = datetime.strptime(parts[0], "%H:%M").time()
        except ValueError:
            start = None
        if start is not None:
            duration = None
            if len(parts) > 1 and re.fullmatch(r"[0-9]+", parts[1]):
                duration = int(parts[1])
            meeting = Meeting(start=start, duration=duration)

    # The bracket is consumed even when its contents are malformed.
    return meeting, body[close + 1:].lstrip()


def _parse_priority(rest: str) -> tuple[Priority, str]:
    for level, prefix in PRIORITY_PREFIXES:
        if rest.startswith(prefix):
            return level, rest[len(prefix):]
    return Priority.NONE, rest


def _split_tags(rest: str) -> tuple[str, list[str]]:
    kept = []
    tags = []
    for token in rest.split():
        if token.startswith("#") and len(token) > 1:
            tags.append(token[1:])
        else:
            kept.append(token)
    return " ".join(kept), tags


def parse_body(rest: str) -> tuple[str, Priority, list[str], Optional[Meeting]]:
    """Parse what follows the completion marker of an entry line.

    Returns:
        Tuple of (text, priority, tags, meeting)
    """
    meeting, rest = _parse_meeting(rest)
    priority, rest = _parse_priority(rest)
    text, tags = _split_tags(rest)
    return text, priority, tags, meeting


def collect_notes(lines: list[str], start: int) -> list[str]:
    """Collect the note lines directly following an entry.

    Collection stops at the first line that is not a note, blank lines included.
    """
    notes = []
    idx = start
    while idx < len(lines) and is_note_line(lines[idx]):
        notes.append(lines[idx][len(NOTE_PREFIX):])
        idx += 1
    return notes


def decode(lines: list[str]) -> list[Entry]:
    """Decode all entries of a day file, numbering them from 1 in line order."""
    entries = []
    visible = 0
    for idx, line in enumerate(lines):
        stripped = line.lstrip()
        if stripped.startswith(OPEN_MARKER):
            completed = False
        elif stripped.startswith(DONE_MARKER):
            completed = True
        else:
            continue

        visible += 1
        text, priority, tags, meeting = parse_body(stripped[len(OPEN_MARKER):])
        entries.append(Entry(
            text=text,
            completed=completed,
            priority=priority,
            tags=tags,
            notes=collect_notes(lines, idx + 1),
            meeting=meeting,
            line_index=idx,
            visible_index=visible,
        ))
    return entries


def encode_line(entry: Entry) -> str:
    """Render the entry line alone, in canonical order."""
    parts = [DONE_MARKER if entry.completed else OPEN_MARKER]
    if entry.meeting is not None:
        parts.append(meeting_bracket(entry.meeting) + " ")
    parts.append(priority_prefix(entry.priority))
    parts.append(entry.text)
    for tag in entry.tags:
        parts.append(f" #{tag}")
    return "".join(parts)


def encode(entry: Entry) -> list[str]:
    """Render an entry and its notes as day file lines.

    Tags are always written at the end of the line, so text that had tags in
    the middle of a sentence comes back canonicalised.
    """
    lines = [encode_line(entry)]
    lines.extend(f"{NOTE_PREFIX}{note}" for note in entry.notes)
    return lines
