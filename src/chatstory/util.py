"""Utility helpers for filesystem, JSON serialization, and parsed outputs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

REQUIRED_MESSAGE_KEYS = ("id", "date", "time", "sender", "content")


def ensure_dir(p: Path) -> None:
    """Create directory `p` and all parents if they do not exist."""

    p.mkdir(parents=True, exist_ok=True)


def _sanitize(obj):
    """Recursively coerce strings to valid UTF-8 for safe JSON writing."""

    if isinstance(obj, str):
        # Lone surrogates cannot be encoded; they become "?" to keep JSON valid
        return obj.encode("utf-8", errors="replace").decode("utf-8")
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_sanitize(x) for x in obj]
    return obj


def write_json(path: Path, obj) -> None:
    """Write an object as pretty-printed UTF-8 JSON after sanitizing strings."""

    ensure_dir(path.parent)
    clean = _sanitize(obj)
    with path.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(clean, f, ensure_ascii=False, indent=2)


def normalize_meta_dict(meta: Any) -> Dict[str, Any]:
    """Return a canonical ``meta`` mapping from a ParseMeta-like object.

    Parameters:
    - meta: Object with ``src_path``, ``rel_path``, ``file_ext``, ``outcome``,
      and ``message_count`` attributes.

    Returns:
    - Dictionary suitable for JSON serialization with keys:
      ``filename``, ``rel_path``, ``full_path``, ``file_ext``, ``outcome``,
      and ``message_count``.
    """

    src = Path(meta.src_path)
    return {
        "filename": src.name,
        "rel_path": meta.rel_path,
        "full_path": str(src.resolve()),
        "file_ext": meta.file_ext,
        "outcome": meta.outcome,
        "message_count": meta.message_count,
    }


def expected_output_path(out_root: Path, rel_path: str) -> Path:
    """Return where the parsed JSON for ``rel_path`` is written under ``out_root``."""

    base = out_root / rel_path
    return base.with_name(base.name + ".json")


def write_parsed_output(out_root: Path, meta, out: Dict[str, Any]) -> Path:
    """Write a parsed chat payload under ``out_root``.

    Parameters:
    - out_root: Root directory for parsed JSON outputs.
    - meta: Parse metadata object (see :func:`normalize_meta_dict`).
    - out: Parsed payload containing ``messages`` and optional ``notes``.

    Returns:
    - Path to the JSON file that was written.
    """

    out_path = expected_output_path(out_root, meta.rel_path)
    payload: Dict[str, Any] = {
        "meta": normalize_meta_dict(meta),
        "notes": out.get("notes", ""),
        "messages": out.get("messages", []),
    }
    write_json(out_path, payload)
    return out_path


def looks_like_parsed_chat_json(obj: Any) -> bool:
    """Return True if ``obj`` matches the parsed chat JSON schema.

    Expected shape:
    {"messages": [ {"id": int, "date": str, "time": str, "sender": str,
    "content": str}, ... ], ...}
    """
    if not isinstance(obj, dict):
        return False
    messages = obj.get("messages")
    if not isinstance(messages, list):
        return False
    for message in messages:
        if not isinstance(message, dict):
            return False
        if any(key not in message for key in REQUIRED_MESSAGE_KEYS):
            return False
    return True
