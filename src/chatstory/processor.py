"""Core processing helpers to parse chat exports into message JSONs.

This module reads an input file, hands its text to the export parser, and
classifies what happened. A file that was read but yielded no messages is
reported separately from a file that could not be read at all, so the CLI can
tell the user "this does not look like an export" instead of a generic error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .parsers import NoMessagesFound, require_messages
from .textloaders import SUPPORTED_EXTS, LoadError, load_text_from_file
from .util import normalize_meta_dict

logger = logging.getLogger(__name__)

OUTCOME_OK = "ok"
OUTCOME_NO_MESSAGES = "no_messages"
OUTCOME_LOAD_ERROR = "load_error"
OUTCOME_UNSUPPORTED = "unsupported"

PARSE_NOTES = "whatsapp_txt"


@dataclass
class ParseMeta:
    """
    A dataclass for parsing metadata.
    """

    src_path: str
    rel_path: str
    file_ext: str
    outcome: str
    ok: bool
    error: Optional[str]
    message_count: int


def _relative(src: Path, in_root: Path) -> str:
    """Return ``src`` relative to ``in_root``, or its name when ``in_root`` is the file."""
    if src == in_root:
        return src.name
    return str(src.relative_to(in_root))


def process_one_file(
    src: Path,
    in_root: Path,
) -> Tuple[ParseMeta, Optional[Dict[str, Any]]]:
    """Parse a single export and return metadata plus parsed output.

    The returned output is a dict with keys: meta, messages, notes; or None
    when the file was unsupported, unreadable, or held no messages.
    """
    rel = _relative(src, in_root)
    ext = src.suffix.lower()

    if ext not in SUPPORTED_EXTS:
        return (
            ParseMeta(
                str(src),
                rel,
                ext,
                OUTCOME_UNSUPPORTED,
                False,
                "unsupported extension",
                0,
            ),
            None,
        )

    try:
        text = load_text_from_file(src)
    except LoadError as e:
        logger.debug("load failed for %s: %s", src, e)
        return (
            ParseMeta(str(src), rel, ext, OUTCOME_LOAD_ERROR, False, str(e), 0),
            None,
        )

    try:
        records = require_messages(text)
    except NoMessagesFound as e:
        return (
            ParseMeta(str(src), rel, ext, OUTCOME_NO_MESSAGES, False, str(e), 0),
            None,
        )

    meta = ParseMeta(str(src), rel, ext, OUTCOME_OK, True, None, len(records))
    out = {
        "meta": normalize_meta_dict(meta),
        "messages": [record.to_dict() for record in records],
        "notes": PARSE_NOTES,
    }
    return meta, out
