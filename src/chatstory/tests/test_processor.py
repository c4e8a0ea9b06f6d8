"""
Tests for per-file processing outcomes and parsed output writing.
"""

from __future__ import annotations

import json
from pathlib import Path

from chatstory.processor import (
    OUTCOME_LOAD_ERROR,
    OUTCOME_NO_MESSAGES,
    OUTCOME_OK,
    OUTCOME_UNSUPPORTED,
    process_one_file,
)
from chatstory.util import (
    looks_like_parsed_chat_json,
    write_json,
    write_parsed_output,
)

EXPORT = (
    "1/2/2026, 9:00 am - Messages and calls are end-to-end encrypted.\n"
    "1/2/2026, 9:00 am - Alice: hi\n"
    "how are you?\n"
    "1/2/2026, 9:05 am - Bob: fine: thanks\n"
)


def test_ok_outcome_includes_messages(tmp_path: Path) -> None:
    """A valid export produces an ok ParseMeta and record dicts."""

    src = tmp_path / "chats" / "bob.txt"
    src.parent.mkdir()
    src.write_text(EXPORT, encoding="utf-8")

    meta, out = process_one_file(src, tmp_path / "chats")

    assert meta.ok is True
    assert meta.outcome == OUTCOME_OK
    assert meta.rel_path == "bob.txt"
    assert meta.message_count == 2
    assert out is not None
    assert [m["sender"] for m in out["messages"]] == ["Alice", "Bob"]
    assert out["messages"][0]["content"] == "hi\nhow are you?"
    assert out["messages"][1]["content"] == "fine: thanks"
    assert out["meta"]["outcome"] == OUTCOME_OK


def test_text_without_messages_is_distinct_from_load_errors(tmp_path: Path) -> None:
    """A readable file with zero headers reports no_messages, not a load error."""

    src = tmp_path / "notes.txt"
    src.write_text("shopping list\nmilk\n", encoding="utf-8")

    meta, out = process_one_file(src, tmp_path)

    assert out is None
    assert meta.ok is False
    assert meta.outcome == OUTCOME_NO_MESSAGES
    assert "No messages found" in (meta.error or "")


def test_bad_archive_is_a_load_error(tmp_path: Path) -> None:
    """Acquisition failures are classified as load_error."""

    src = tmp_path / "broken.zip"
    src.write_bytes(b"nope")

    meta, out = process_one_file(src, tmp_path)

    assert out is None
    assert meta.outcome == OUTCOME_LOAD_ERROR


def test_unsupported_extension_outcome(tmp_path: Path) -> None:
    """Files that are not exports are skipped as unsupported."""

    src = tmp_path / "photo.jpg"
    src.write_bytes(b"\xff\xd8")

    meta, out = process_one_file(src, tmp_path)

    assert out is None
    assert meta.outcome == OUTCOME_UNSUPPORTED


def test_single_file_root_uses_file_name(tmp_path: Path) -> None:
    """When the input root is the file itself, rel_path is its name."""

    src = tmp_path / "bob.txt"
    src.write_text(EXPORT, encoding="utf-8")

    meta, _ = process_one_file(src, src)

    assert meta.rel_path == "bob.txt"


def test_write_parsed_output_round_trip(tmp_path: Path) -> None:
    """Written payloads follow the parsed chat schema."""

    src = tmp_path / "in" / "sub" / "bob.txt"
    src.parent.mkdir(parents=True)
    src.write_text(EXPORT, encoding="utf-8")
    meta, out = process_one_file(src, tmp_path / "in")
    assert out is not None

    written = write_parsed_output(tmp_path / "out", meta, out)

    assert written == tmp_path / "out" / "sub" / "bob.txt.json"
    payload = json.loads(written.read_text(encoding="utf-8"))
    assert looks_like_parsed_chat_json(payload)
    assert payload["notes"] == "whatsapp_txt"
    assert payload["meta"]["message_count"] == 2


def test_looks_like_parsed_chat_json_rejects_other_shapes() -> None:
    """Only dicts carrying a list of complete message dicts qualify."""

    assert not looks_like_parsed_chat_json([])
    assert not looks_like_parsed_chat_json({"messages": "x"})
    assert not looks_like_parsed_chat_json({"messages": [{"role": "user"}]})


def test_write_json_replaces_lone_surrogates(tmp_path: Path) -> None:
    """Unencodable surrogates are written as "?" so the file stays valid UTF-8."""

    path = tmp_path / "out.json"

    write_json(path, {"content": "ok \ud83d end"})

    assert json.loads(path.read_text(encoding="utf-8")) == {"content": "ok ? end"}
