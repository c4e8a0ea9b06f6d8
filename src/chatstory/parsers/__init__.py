"""Parser dispatch utilities for chat export text."""

from __future__ import annotations

from typing import Tuple

from .parser_whatsapp import HeaderMatch, MessageRecord, match_header
from .parser_whatsapp import parse as _parse_whatsapp

NO_MESSAGES_HINT = "No messages found. Make sure the file is a WhatsApp .txt export."


class ParseFailed(Exception):
    """Raised when a parser cannot extract a usable message sequence."""


class NoMessagesFound(ParseFailed):
    """Raised when text was read successfully but held no recognizable messages."""

    def __init__(self, message: str = NO_MESSAGES_HINT) -> None:
        super().__init__(message)


def parse_export(text: str) -> Tuple[MessageRecord, ...]:
    """Parse export text into records. May return an empty tuple."""
    return _parse_whatsapp(text)


def require_messages(text: str) -> Tuple[MessageRecord, ...]:
    """Parse export text and raise NoMessagesFound when nothing was recognized.

    Callers that present results to a user should go through this helper so
    that an empty result is reported as "not an export" rather than as an I/O
    problem.
    """
    records = parse_export(text)
    if not records:
        raise NoMessagesFound()
    return records


__all__ = [
    "HeaderMatch",
    "MessageRecord",
    "NO_MESSAGES_HINT",
    "NoMessagesFound",
    "ParseFailed",
    "match_header",
    "parse_export",
    "require_messages",
]
