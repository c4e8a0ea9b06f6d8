"""
Tests for presentation helpers over parsed records.
"""

from __future__ import annotations

from chat.chat_view import (
    avatar_initials,
    conversation_title,
    format_transcript,
    group_by_date,
    is_self,
    participants,
    self_sender,
    sender_counts,
    summarize,
)
from chatstory.parsers import parse_export

EXPORT = "\n".join(
    [
        "12/02/2026, 10:45 pm - zain: hey",
        "12/02/2026, 10:46 pm - Sara: hi",
        "how are you",
        "13/02/2026, 08:00 am - zain: morning",
        "12/02/2026, 09:00 am - Sara: out of order",
    ]
)


def test_participants_and_self_follow_first_appearance() -> None:
    """The first sender seen is the self side; participants keep that order."""

    records = parse_export(EXPORT)

    assert participants(records) == ["zain", "Sara"]
    assert self_sender(records) == "zain"
    assert is_self(records[0], "zain")
    assert not is_self(records[1], "zain")
    assert not is_self(records[0], None)
    assert self_sender(()) is None


def test_sender_counts_and_summary() -> None:
    """Counts and the header summary are derived from the records."""

    records = parse_export(EXPORT)
    summary = summarize(records)

    assert sender_counts(records) == {"zain": 2, "Sara": 2}
    assert summary.title == "zain & Sara"
    assert summary.participants == ("zain", "Sara")
    assert summary.total_messages == 4
    assert conversation_title(records) == "zain & Sara"
    assert avatar_initials(records) == "ZS"


def test_group_by_date_uses_consecutive_runs() -> None:
    """A repeated date after a different one starts a new group."""

    groups = group_by_date(parse_export(EXPORT))

    assert [g.date for g in groups] == ["12/02/2026", "13/02/2026", "12/02/2026"]
    assert [len(g.records) for g in groups] == [2, 1, 1]
    assert group_by_date(()) == []


def test_helpers_do_not_change_records() -> None:
    """Deriving views leaves the parsed sequence untouched."""

    records = parse_export(EXPORT)
    before = [r.to_dict() for r in records]

    summarize(records)
    group_by_date(records)
    format_transcript(records)

    assert [r.to_dict() for r in records] == before


def test_format_transcript_layout() -> None:
    """Self messages are indented; others are labelled with the sender."""

    text = format_transcript(parse_export(EXPORT), indent=4)

    assert text.splitlines()[:8] == [
        "--- 12/02/2026 ---",
        "    > hey",
        "      [10:45 pm]",
        "Sara: hi",
        "  how are you",
        "  [10:46 pm]",
        "--- 13/02/2026 ---",
        "    > morning",
    ]


def test_format_transcript_keeps_self_for_subsets() -> None:
    """An explicit self name holds when the subset starts with someone else."""

    records = parse_export(EXPORT)
    subset = records[1:2]

    assert format_transcript(subset).startswith("--- 12/02/2026 ---\n    ")
    assert "Sara: hi" in format_transcript(subset, self_name="zain")
