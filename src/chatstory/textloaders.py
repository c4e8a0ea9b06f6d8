"""Utilities to read WhatsApp chat exports into decoded text.

Supported inputs: the plain ``.txt`` export, and the ``.zip`` archive that
WhatsApp produces when sharing an export, from which the chat text member is
extracted. Anything else is rejected before it reaches a parser.
"""

from __future__ import annotations

import logging
import zipfile
import zlib
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

TEXT_EXTS = {".txt"}
ARCHIVE_EXTS = {".zip"}
SUPPORTED_EXTS = TEXT_EXTS | ARCHIVE_EXTS

# --- Public API ----------------------------------------------------


class LoadError(Exception):
    """Raised when a loader fails to extract text from a file."""


def load_text_from_file(path: Path) -> str:
    """
    Extract decoded text from a chat export.
    Supported: .txt, .zip (WhatsApp share archive holding the chat .txt)
    """
    ext = path.suffix.lower()
    if ext in TEXT_EXTS:
        try:
            return read_text_best_effort(path)
        except OSError as e:
            raise LoadError(f"read failed: {e}") from e
    if ext in ARCHIVE_EXTS:
        return load_zip_text(path)
    raise LoadError(
        f"Please upload a .txt file exported from WhatsApp (got {ext or 'no extension'})"
    )


# --- Helpers -------------------------------------------------------


def read_text_best_effort(path: Path) -> str:
    """Read raw bytes from ``path`` and decode them with :func:`decode_text_best_effort`."""
    return decode_text_best_effort(path.read_bytes())


def decode_text_best_effort(raw: bytes) -> str:
    """Decode bytes using a best-effort set of encodings.

    Tries UTF BOM-aware decoders and several common encodings before falling
    back to UTF-8 with replacement for undecodable bytes.
    """
    # UTF BOMs
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw.decode("utf-8-sig", errors="replace")
    if raw.startswith((b"\xff\xfe", b"\xfe\xff")):
        return raw.decode("utf-16", errors="replace")
    for enc in ("utf-8", "cp1252", "latin-1"):
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return raw.decode("utf-8", errors="replace")


def _rank_member(name: str) -> int:
    """Lower is better: exact chat file first, then WhatsApp-named text files."""
    base = Path(name).name
    if base == "_chat.txt":
        return 0
    if base.lower().startswith("whatsapp chat"):
        return 1
    return 2


def pick_chat_member(names: List[str]) -> str:
    """Choose the archive member that holds the chat text.

    Raises LoadError when the archive has no ``.txt`` member.
    """
    candidates = [
        n
        for n in names
        if n.lower().endswith(".txt")
        and not n.endswith("/")
        and not Path(n).name.startswith("._")
    ]
    if not candidates:
        raise LoadError("zip archive holds no .txt chat export")
    # sorted() is stable, so archive order breaks ties
    return sorted(candidates, key=_rank_member)[0]


def load_zip_text(path: Path) -> str:
    """Extract and decode the chat text member from a WhatsApp export archive."""
    try:
        with zipfile.ZipFile(path) as zf:
            member = pick_chat_member(zf.namelist())
            logger.debug("reading %s from %s", member, path)
            raw = zf.read(member)
    except (zipfile.BadZipFile, OSError, EOFError, zlib.error) as e:
        raise LoadError(f"zip read failed: {e}") from e
    except (RuntimeError, NotImplementedError) as e:
        # encrypted members or an unsupported compression method
        raise LoadError(f"zip member unreadable: {e}") from e
    return decode_text_best_effort(raw)
