"""Helpers to load parsed chat JSON into reusable Chat objects."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from json import JSONDecodeError
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import json_repair

from chatstory.parsers import MessageRecord


@dataclass
class Chat:
    """In-memory representation of a single parsed chat export."""

    key: str
    notes: str
    records: Tuple[MessageRecord, ...]


def records_from_messages(messages: List[object]) -> Tuple[MessageRecord, ...]:
    """Convert parsed message dicts into records, skipping malformed entries.

    Entries without an integer-like ``id`` are dropped; the remaining records
    keep the ids stored in the file.
    """

    out: List[MessageRecord] = []
    for message in messages:
        if not isinstance(message, dict):
            continue
        try:
            out.append(MessageRecord.from_dict(message))
        except (KeyError, TypeError, ValueError):
            continue
    return tuple(out)


def load_chat_for_file(path: Path) -> Optional[Chat]:
    """Load a Chat from a parsed JSON file written by the ``parse`` command.

    Returns None (after a warning on stderr) when the file cannot be read,
    is not JSON, or does not carry a ``messages`` list.
    """

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as err:
        sys.stderr.write(f"[WARN] Failed to read {path}: {err}\n")
        return None
    try:
        data = json_repair.loads(raw)
    except (JSONDecodeError, ValueError) as err:
        sys.stderr.write(f"[WARN] Invalid JSON {path}: {err}\n")
        return None

    if not isinstance(data, dict) or not isinstance(data.get("messages"), list):
        sys.stderr.write(f"[WARN] Unsupported chat shape in {path}\n")
        return None

    meta = data.get("meta", {}) if isinstance(data.get("meta", {}), dict) else {}
    key = meta.get("rel_path") or meta.get("filename") or path.name
    notes = data.get("notes", "")
    return Chat(
        key=str(key),
        notes=notes if isinstance(notes, str) else "",
        records=records_from_messages(data["messages"]),
    )


def iter_chat_json_files(root: Path, *, followlinks: bool = False) -> Iterator[Path]:
    """Yield ``*.json`` files under ``root`` in a stable, sorted order."""

    for dirpath, dirnames, filenames in os.walk(root, followlinks=followlinks):
        dirnames.sort()
        for fn in sorted(filenames):
            if fn.lower().endswith(".json"):
                yield Path(dirpath) / fn


def load_chats_from_directory(root: Path) -> List[Chat]:
    """Load every parsed chat under ``root``, skipping unusable files."""

    chats: List[Chat] = []
    for path in iter_chat_json_files(root):
        chat_obj = load_chat_for_file(path)
        if chat_obj is not None:
            chats.append(chat_obj)
    return chats
