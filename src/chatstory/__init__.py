"""Chat export parsing pipeline: loaders, parsers, and CLI entry points."""

from .parsers import (
    MessageRecord,
    NoMessagesFound,
    ParseFailed,
    parse_export,
    require_messages,
)
