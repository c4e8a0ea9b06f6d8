"""Parsed chat loading and presentation helpers."""

from .chat_io import Chat, load_chat_for_file, load_chats_from_directory
from .chat_view import (
    ChatSummary,
    DateGroup,
    format_transcript,
    group_by_date,
    participants,
    self_sender,
    sender_counts,
    summarize,
)
