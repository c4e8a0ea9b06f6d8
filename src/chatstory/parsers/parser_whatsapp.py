"""Parser for WhatsApp "Export chat" text files.

Each message in the export starts with a header line carrying the date, the
time, and the sender, followed by the first line of the message body:

  12/02/2026, 10:45 pm - Zain: see you at 8
  12/02/2026, 22:45 - Zain: see you at 8

Lines that do not look like a header continue the most recent message. Blank
lines and any text before the first header are dropped. Date and time tokens
are kept verbatim; no attempt is made to interpret or validate them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple

# Digits and the meridiem letters are spelled out as ASCII classes so that
# matching does not depend on Unicode digit categories. ``\s`` stays Unicode
# aware: recent exports put U+202F (narrow no-break space) before "pm".
HEADER_RE = re.compile(
    r"^(?P<date>[0-9]{1,2}/[0-9]{1,2}/(?:[0-9]{4}|[0-9]{2}))"
    r",\s*"
    r"(?P<time>[0-9]{1,2}:[0-9]{2}(?:\s*[AaPp][Mm]?)?)"
    r"\s*-\s*"
    r"(?P<sender>[^:]+)"
    r":(?P<body>.*)$"
)


class HeaderMatch(NamedTuple):
    """Fields captured from a single header line."""

    date: str
    time: str
    sender: str
    body: str


@dataclass(frozen=True)
class MessageRecord:
    """One logical chat message recovered from an export."""

    sequence_index: int
    date: str
    time: str
    sender: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON shape used for parsed outputs."""
        return {
            "id": self.sequence_index,
            "date": self.date,
            "time": self.time,
            "sender": self.sender,
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MessageRecord":
        """Build a record from the mapping produced by :meth:`to_dict`."""
        return cls(
            sequence_index=int(data["id"]),
            date=str(data.get("date", "")),
            time=str(data.get("time", "")),
            sender=str(data.get("sender", "")),
            content=str(data.get("content", "")),
        )


@dataclass
class _PendingRecord:
    """The currently open message while lines are still being consumed."""

    sequence_index: int
    header: HeaderMatch
    fragments: List[str] = field(default_factory=list)

    def finalize(self) -> MessageRecord:
        return MessageRecord(
            sequence_index=self.sequence_index,
            date=self.header.date,
            time=self.header.time,
            sender=self.header.sender,
            content="\n".join(self.fragments),
        )


def split_lines(text: str) -> List[str]:
    """Split text into physical lines, accepting LF, CRLF and bare CR endings."""
    s = text.replace("\r\n", "\n").replace("\r", "\n")
    return s.split("\n")


def match_header(line: str) -> Optional[HeaderMatch]:
    """Return the header fields if ``line`` starts a new message, else None.

    The sender runs up to the first colon after the dash, so a body such as
    ``note: remember this`` never shifts the sender boundary.
    """
    m = HEADER_RE.match(line)
    if not m:
        return None
    return HeaderMatch(
        date=m.group("date"),
        time=m.group("time").strip(),
        sender=m.group("sender").strip(),
        body=m.group("body").strip(),
    )


def parse(text: str) -> Tuple[MessageRecord, ...]:
    """Parse a WhatsApp text export into an ordered tuple of records.

    Parameters:
    - text: Decoded export text.

    Returns the records in the order their header lines appear. An input
    without any header line yields an empty tuple; this function does not
    raise for malformed input.
    """
    records: List[MessageRecord] = []
    current: Optional[_PendingRecord] = None

    for raw in split_lines(text):
        header = match_header(raw)
        if header is not None:
            if current is not None:
                records.append(current.finalize())
            current = _PendingRecord(
                sequence_index=len(records),
                header=header,
                fragments=[header.body],
            )
            continue
        line = raw.strip()
        if current is None or not line:
            # Preamble before the first header, or a blank line
            continue
        current.fragments.append(line)

    if current is not None:
        records.append(current.finalize())
    return tuple(records)
