"""Presentation helpers derived from a parsed message sequence.

Everything here is a pure function of the records returned by the export
parser: grouping by date for separators, choosing which sender is drawn on
the "self" side, and per-sender counts for the header stats. None of these
functions mutate the records they are given.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from chatstory.parsers import MessageRecord


@dataclass(frozen=True)
class DateGroup:
    """A run of consecutive records that share the same date label."""

    date: str
    records: Tuple[MessageRecord, ...]


@dataclass(frozen=True)
class ChatSummary:
    """Header-level facts about a chat."""

    title: str
    participants: Tuple[str, ...]
    self_sender: Optional[str]
    total_messages: int
    sender_counts: Dict[str, int]


def participants(records: Sequence[MessageRecord]) -> List[str]:
    """Return distinct senders in the order they first appear."""
    seen: Dict[str, None] = {}
    for record in records:
        seen.setdefault(record.sender, None)
    return list(seen)


def self_sender(records: Sequence[MessageRecord]) -> Optional[str]:
    """Return the sender drawn on the right-hand side.

    The export does not say who exported it, so the first sender encountered
    is treated as "self".
    """
    return records[0].sender if records else None


def is_self(record: MessageRecord, self_name: Optional[str]) -> bool:
    return self_name is not None and record.sender == self_name


def sender_counts(records: Sequence[MessageRecord]) -> Dict[str, int]:
    """Count messages per sender, keyed in first-seen order."""
    counts: Dict[str, int] = {}
    for record in records:
        counts[record.sender] = counts.get(record.sender, 0) + 1
    return counts


def group_by_date(records: Sequence[MessageRecord]) -> List[DateGroup]:
    """Split records into consecutive runs with the same verbatim date.

    A date that reappears later after a different one starts a new group;
    input order is never changed.
    """
    groups: List[DateGroup] = []
    run: List[MessageRecord] = []
    for record in records:
        if run and record.date != run[-1].date:
            groups.append(DateGroup(run[-1].date, tuple(run)))
            run = []
        run.append(record)
    if run:
        groups.append(DateGroup(run[-1].date, tuple(run)))
    return groups


def conversation_title(records: Sequence[MessageRecord]) -> str:
    return " & ".join(participants(records))


def avatar_initials(records: Sequence[MessageRecord]) -> str:
    """First letter of each participant, at most two, upper-cased."""
    letters = "".join(name[0] for name in participants(records) if name)
    return letters[:2].upper()


def summarize(records: Sequence[MessageRecord]) -> ChatSummary:
    """Collect the title, participants, self side, and counts for a chat."""
    return ChatSummary(
        title=conversation_title(records),
        participants=tuple(participants(records)),
        self_sender=self_sender(records),
        total_messages=len(records),
        sender_counts=sender_counts(records),
    )


def format_transcript(
    records: Sequence[MessageRecord],
    *,
    self_name: Optional[str] = None,
    indent: int = 8,
) -> str:
    """Render records as plain text with date separators.

    Messages from the self sender are indented and marked with ``>``; other
    messages are prefixed with the sender name. Continuation lines of a
    multi-line message keep the same indentation. Pass ``self_name`` when
    rendering a subset of a chat so the self side stays the same.
    """
    me = self_name if self_name is not None else self_sender(records)
    pad = " " * indent
    lines: List[str] = []
    for group in group_by_date(records):
        lines.append(f"--- {group.date} ---")
        for record in group.records:
            body = record.content.split("\n")
            if is_self(record, me):
                lines.append(f"{pad}> {body[0]}")
                lines.extend(f"{pad}  {extra}" for extra in body[1:])
                lines.append(f"{pad}  [{record.time}]")
            else:
                lines.append(f"{record.sender}: {body[0]}")
                lines.extend(f"  {extra}" for extra in body[1:])
                lines.append(f"  [{record.time}]")
    return "\n".join(lines)
