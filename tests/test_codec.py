"""Tests for the day file line codec."""

from datetime import time

import pytest

from bullet_journal.codec import (
    collect_notes,
    decode,
    encode,
    encode_line,
    is_entry_line,
    is_note_line,
    meeting_bracket,
    parse_body,
)
from bullet_journal.models import Entry, Meeting, Priority


class TestEntryLines:
    """Tests for entry start detection."""

    @pytest.mark.parametrize("line", [
        "- [ ] task",
        "- [x] done task",
        "    - [ ] indented task",
        "\t- [x] tabbed",
        "- [ ] ",
    ])
    def test_entry_starts(self, line):
        assert is_entry_line(line)

    @pytest.mark.parametrize("line", [
        "",
        "# Heading",
        "- [X] upper case x is not done",
        "- [ ]no space",
        "- [ ]",
        "* [ ] other bullet",
        "  - note: a note",
        "- task without box",
    ])
    def test_non_entries(self, line):
        assert not is_entry_line(line)

    def test_note_line_requires_exact_prefix(self):
        assert is_note_line("  - note: hello")
        assert is_note_line("  - note: ")
        assert not is_note_line("   - note: three spaces")
        assert not is_note_line("- note: no indent")
        assert not is_note_line("  - Note: capital")


class TestDecode:
    """Tests for decode."""

    def test_empty(self):
        assert decode([]) == []

    def test_open_and_done(self):
        entries = decode(["- [ ] first", "- [x] second"])

        assert [e.text for e in entries] == ["first", "second"]
        assert [e.completed for e in entries] == [False, True]
        assert [e.visible_index for e in entries] == [1, 2]
        assert [e.line_index for e in entries] == [0, 1]

    def test_visible_index_skips_foreign_lines(self):
        lines = [
            "# 2026-01-06",
            "",
            "- [ ] a",
            "some prose",
            "- [x] b",
            "  - note: n",
            "- [ ] c",
        ]
        entries = decode(lines)

        assert [e.visible_index for e in entries] == [1, 2, 3]
        assert [e.line_index for e in entries] == [2, 4, 6]

    @pytest.mark.parametrize("marker,expected", [
        ("(!!!) ", Priority.HIGH),
        ("(!!) ", Priority.MEDIUM),
        ("(!) ", Priority.LOW),
        ("", Priority.NONE),
    ])
    def test_priority(self, marker, expected):
        (entry,) = decode([f"- [ ] {marker}Ship it"])

        assert entry.priority == expected
        assert entry.text == "Ship it"

    def test_only_one_priority_marker(self):
        (entry,) = decode(["- [ ] (!) (!!!) text"])

        assert entry.priority == Priority.LOW
        assert entry.text == "(!!!) text"

    def test_priority_needs_trailing_space(self):
        (entry,) = decode(["- [ ] (!!)text"])

        assert entry.priority == Priority.NONE
        assert entry.text == "(!!)text"

    def test_tags_extracted_in_order(self):
        (entry,) = decode(["- [ ] Ship #work the #Release release #work"])

        assert entry.text == "Ship the release"
        assert entry.tags == ["work", "Release", "work"]

    def test_lone_hash_is_text(self):
        (entry,) = decode(["- [ ] Issue # 12"])

        assert entry.text == "Issue # 12"
        assert entry.tags == []

    def test_whitespace_collapsed(self):
        (entry,) = decode(["- [ ]   lots   of    space  "])

        assert entry.text == "lots of space"

    def test_meeting_with_duration(self):
        (entry,) = decode(["- [ ] [mtg 15:00 30] Team sync #work"])

        assert entry.meeting == Meeting(start=time(15, 0), duration=30)
        assert entry.text == "Team sync"
        assert entry.tags == ["work"]

    def test_meeting_without_duration(self):
        (entry,) = decode(["- [ ] [mtg 09:30] Standup"])

        assert entry.meeting == Meeting(start=time(9, 30), duration=None)
        assert entry.meeting.display_duration == 60

    def test_meeting_then_priority(self):
        (entry,) = decode(["- [x] [mtg 10:00 45] (!!!) Review"])

        assert entry.completed
        assert entry.meeting.start == time(10, 0)
        assert entry.priority == Priority.HIGH
        assert entry.text == "Review"

    def test_priority_before_meeting_hides_meeting(self):
        (entry,) = decode(["- [ ] (!) [mtg 10:00] Review"])

        assert entry.meeting is None
        assert entry.priority == Priority.LOW
        assert entry.text == "[mtg 10:00] Review"

    @pytest.mark.parametrize("bracket", ["[mtg 25:00]", "[mtg noon 30]", "[mtg ]", "[mtg 9h]"])
    def test_malformed_meeting_time(self, bracket):
        (entry,) = decode([f"- [ ] {bracket} Lunch"])

        assert entry.meeting is None
        assert entry.text == "Lunch"

    @pytest.mark.parametrize("duration", ["long", "\u00b2", "\u0663", "-5", "1.5"])
    def test_malformed_duration_keeps_time(self, duration):
        (entry,) = decode([f"- [ ] [mtg 12:00 {duration}] Lunch"])

        assert entry.meeting == Meeting(start=time(12, 0), duration=None)

    def test_unclosed_meeting_bracket_is_text(self):
        (entry,) = decode(["- [ ] [mtg 12:00 Lunch"])

        assert entry.meeting is None
        assert entry.text == "[mtg 12:00 Lunch"

    def test_notes_collected(self):
        lines = [
            "- [ ] task",
            "  - note: one",
            "  - note: two",
            "- [ ] next",
        ]
        first, second = decode(lines)

        assert first.notes == ["one", "two"]
        assert second.notes == []

    def test_blank_line_ends_notes(self):
        lines = [
            "- [ ] task",
            "  - note: one",
            "",
            "  - note: orphan",
        ]
        (entry,) = decode(lines)

        assert entry.notes == ["one"]

    def test_collect_notes_from_position(self):
        lines = ["x", "  - note: a", "  - note: b", "y"]

        assert collect_notes(lines, 1) == ["a", "b"]
        assert collect_notes(lines, 3) == []
        assert collect_notes(lines, 10) == []

    def test_parse_body(self):
        text, priority, tags, meeting = parse_body("[mtg 08:15 5] (!!) Call mum #family")

        assert (text, priority, tags) == ("Call mum", Priority.MEDIUM, ["family"])
        assert meeting == Meeting(time(8, 15), 5)


class TestEncode:
    """Tests for encode."""

    def test_plain(self):
        assert encode(Entry(text="Buy milk")) == ["- [ ] Buy milk"]

    def test_full_canonical_order(self):
        entry = Entry(
            text="Team sync",
            completed=True,
            priority=Priority.HIGH,
            tags=["work", "q1"],
            notes=["agenda", "minutes"],
            meeting=Meeting(time(15, 0), 30),
        )

        assert encode(entry) == [
            "- [x] [mtg 15:00 30] (!!!) Team sync #work #q1",
            "  - note: agenda",
            "  - note: minutes",
        ]

    def test_meeting_bracket(self):
        assert meeting_bracket(Meeting(time(7, 5))) == "[mtg 07:05]"
        assert meeting_bracket(Meeting(time(7, 5), 0)) == "[mtg 07:05 0]"

    def test_tags_move_to_line_end(self):
        (entry,) = decode(["- [ ] Ship #work the release"])

        assert entry.text == "Ship the release"
        assert entry.tags == ["work"]
        assert encode_line(entry) == "- [ ] Ship the release #work"

    def test_canonicalisation_is_idempotent(self):
        lines = [
            "  - [x] [mtg 09:00]   (!) Plan #a the #b day",
            "  - note: keep",
        ]
        first = decode(lines)[0]
        second = decode(encode(first))[0]

        for attr in ("text", "completed", "priority", "tags", "notes", "meeting"):
            assert getattr(second, attr) == getattr(first, attr)

    def test_tag_before_priority_marker_is_promoted(self):
        # A leading tag hides the marker on first decode; re-encoding moves the
        # tag to the end and exposes it.
        (first,) = decode(["- [ ] #a (!) x"])
        (second,) = decode([encode_line(first)])

        assert (first.priority, first.text) == (Priority.NONE, "(!) x")
        assert encode_line(first) == "- [ ] (!) x #a"
        assert (second.priority, second.text) == (Priority.LOW, "x")
        assert second.tags == ["a"]
