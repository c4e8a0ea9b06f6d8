"""CLI entry points for parsing and viewing WhatsApp chat exports.

Subcommands:
- parse:    parse one export or a directory tree of exports into JSON files
- show:     print a transcript with date separators
- stats:    print participants and per-sender message counts
- validate: check parsed JSON files for structural correctness
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import zipfile
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from chat import format_transcript, load_chat_for_file, summarize

from .parsers import MessageRecord, NoMessagesFound, require_messages
from .processor import (
    OUTCOME_NO_MESSAGES,
    ParseMeta,
    process_one_file,
)
from .textloaders import LoadError, load_text_from_file
from .util import (
    REQUIRED_MESSAGE_KEYS,
    ensure_dir,
    expected_output_path,
    looks_like_parsed_chat_json,
    write_parsed_output,
)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main CLI dispatcher.

    Parses arguments and executes the requested subcommand.
    """
    parser = argparse.ArgumentParser(
        prog="chatstory",
        description="Parse WhatsApp chat exports into structured messages",
    )

    sub = parser.add_subparsers(dest="cmd")

    # ---------------- parse ----------------
    p_parse = sub.add_parser("parse", help="Parse exports into JSON files")
    p_parse.add_argument(
        "--input", required=True, help="Export file or directory to process"
    )
    p_parse.add_argument(
        "-o",
        "--output-dir",
        help="Output directory for parsed results (default: INPUT + '_parsed')",
    )
    p_parse.add_argument(
        "-j", "--jobs", type=int, default=os.cpu_count(), help="Parallel workers"
    )
    p_parse.add_argument(
        "--single-thread",
        action="store_true",
        help="Force single-threaded parsing (no multiprocessing).",
    )
    p_parse.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p_parse.add_argument("--log-file", help="Write a detailed log under the output dir")
    p_parse.add_argument(
        "--no-progress", action="store_true", help="Disable parse progress bar"
    )
    p_parse.add_argument(
        "--overwrite",
        action="store_true",
        help="Process even if output file already exists (default: skip existing)",
    )

    # ---------------- show ----------------
    p_show = sub.add_parser("show", help="Print a chat transcript")
    p_show.add_argument("path", help="Export (.txt/.zip) or parsed .json file")
    p_show.add_argument(
        "--date",
        default=None,
        help="Only print messages whose date label equals this value",
    )

    # ---------------- stats ----------------
    p_stats = sub.add_parser("stats", help="Print per-sender message counts")
    p_stats.add_argument("path", help="Export (.txt/.zip) or parsed .json file")

    # ---------------- validate ----------------
    p_val = sub.add_parser("validate", help="Validate parsed JSONs")
    p_val.add_argument("parsed_dir")

    args = parser.parse_args(argv)

    if args.cmd == "parse":
        cmd_parse(args)
    elif args.cmd == "show":
        cmd_show(args)
    elif args.cmd == "stats":
        cmd_stats(args)
    elif args.cmd == "validate":
        cmd_validate(args)
    else:
        parser.print_help()
        raise SystemExit(2)


def _configure_logger(out_root: Path, verbose: bool, log_file: Optional[str]):
    """Set up the ``chatstory`` logger for a parse run."""
    logger = logging.getLogger("chatstory")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.INFO)
    ch = logging.StreamHandler()
    ch.setLevel(logging.INFO if verbose else logging.WARNING)
    ch.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(ch)
    if log_file:
        lf_path = out_root / log_file
        ensure_dir(lf_path.parent)
        fh = logging.FileHandler(str(lf_path), encoding="utf-8")
        fh.setLevel(logging.INFO)
        fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logger.addHandler(fh)
    return logger


def _gather_files(in_root: Path) -> List[Path]:
    """Return the files to parse: ``in_root`` itself, or everything below it."""
    if in_root.is_file():
        return [in_root]
    files = []
    for dirpath, dirnames, filenames in os.walk(in_root):
        dirnames.sort()
        for fn in sorted(filenames):
            # Skip hidden files and macOS resource forks
            if fn.startswith("."):
                continue
            files.append(Path(dirpath) / fn)
    return files


def cmd_parse(args) -> Path:
    """Parse every export under the input path and write JSON outputs.

    Returns the output directory path containing parsed JSONs.
    """
    in_root = Path(args.input).expanduser().resolve()
    if not in_root.exists():
        raise FileNotFoundError(in_root)

    if args.output_dir:
        out_root = Path(args.output_dir).expanduser().resolve()
    else:
        # INPUT + "_parsed", next to the input
        out_root = in_root.parent / (in_root.name + "_parsed")
    ensure_dir(out_root)

    logger = _configure_logger(out_root, args.verbose, args.log_file)

    # Decide execution mode
    use_single_thread = bool(getattr(args, "single_thread", False)) or (
        getattr(args, "jobs", 1) in (0, 1)
    )

    files = _gather_files(in_root)
    total = len(files)
    counts = {"ok": 0, "empty": 0, "fail": 0}

    def _record(meta: ParseMeta, out) -> None:
        if meta.ok and out is not None:
            write_parsed_output(out_root, meta, out)
            counts["ok"] += 1
            logger.info("[OK] %s (%d messages)", meta.rel_path, meta.message_count)
        elif meta.outcome == OUTCOME_NO_MESSAGES:
            counts["empty"] += 1
            logger.warning("[EMPTY] %s: %s", meta.rel_path, meta.error)
        else:
            counts["fail"] += 1
            logger.warning("[FAIL] %s: %s", meta.rel_path, meta.error)

    todo: List[Path] = []
    for src in files:
        rel = src.name if src == in_root else str(src.relative_to(in_root))
        exp_out = expected_output_path(out_root, rel)
        if exp_out.exists() and not args.overwrite:
            logger.info("[SKIP-EXISTS] %s -> %s", rel, exp_out)
            counts["ok"] += 1
            continue
        todo.append(src)

    if use_single_thread:
        # ---- Serial path ----
        iterator = todo if args.no_progress else tqdm(todo, desc="Files", unit="file")
        for src in iterator:
            try:
                meta, out = process_one_file(src, in_root)
            except (OSError, zipfile.BadZipFile, LoadError) as e:
                counts["fail"] += 1
                logger.error("[CRASH] %s: %s", src, e)
                continue
            _record(meta, out)
    else:
        # ---- Parallel path ----
        futures: Dict = {}
        with ProcessPoolExecutor(max_workers=args.jobs) as pool:
            for src in todo:
                fut = pool.submit(process_one_file, src, in_root)
                futures[fut] = src

            completed = as_completed(futures)
            if not args.no_progress:
                completed = tqdm(completed, total=len(futures), desc="Files", unit="file")
            for fut in completed:
                src = futures[fut]
                try:
                    meta, out = fut.result()
                except (OSError, zipfile.BadZipFile, LoadError) as e:
                    counts["fail"] += 1
                    logger.error("[CRASH] %s: %s", src, e)
                    continue
                _record(meta, out)

    print(f"Done. Parsed outputs under: {out_root}")
    print(
        f"Summary: ok={counts['ok']}, no_messages={counts['empty']}, "
        f"fail={counts['fail']}, total={total}"
    )
    return out_root


def load_records(path: Path) -> Tuple[MessageRecord, ...]:
    """Return records from an export or from a parsed JSON file.

    Raises LoadError when the file cannot be read and NoMessagesFound when it
    was read but holds no messages.
    """
    if path.suffix.lower() == ".json":
        chat_obj = load_chat_for_file(path)
        if chat_obj is None:
            raise LoadError(f"could not load parsed chat: {path}")
        if not chat_obj.records:
            raise NoMessagesFound()
        return chat_obj.records
    return require_messages(load_text_from_file(path))


def _load_records_or_exit(path_arg: str) -> Tuple[MessageRecord, ...]:
    path = Path(path_arg).expanduser().resolve()
    try:
        return load_records(path)
    except NoMessagesFound as e:
        raise SystemExit(str(e)) from e
    except LoadError as e:
        raise SystemExit(f"Could not read {path}: {e}") from e


def cmd_show(args) -> None:
    """Print a chat transcript with date separators."""
    records = _load_records_or_exit(args.path)
    summary = summarize(records)
    shown = records
    if args.date:
        shown = tuple(r for r in records if r.date == args.date)
        if not shown:
            raise SystemExit(f"No messages on {args.date}")
    print(f"{summary.title} ({summary.total_messages} messages)")
    print(format_transcript(shown, self_name=summary.self_sender))


def cmd_stats(args) -> None:
    """Print participants and per-sender message counts."""
    records = _load_records_or_exit(args.path)
    summary = summarize(records)
    print(f"Chat: {summary.title}")
    print(f"Self: {summary.self_sender}")
    print(f"Total messages: {summary.total_messages}")
    for name, count in summary.sender_counts.items():
        print(f"  {name}: {count}")


def _validate_payload(obj, file_path: Path) -> bool:
    """Return True if ``obj`` is a well-formed parsed chat payload."""
    if not looks_like_parsed_chat_json(obj):
        print(
            f"[INVALID] {file_path}: expected a messages list with keys "
            f"{', '.join(REQUIRED_MESSAGE_KEYS)}"
        )
        return False
    msgs = obj["messages"]
    if not msgs:
        print(f"[INVALID] {file_path}: require >= 1 message")
        return False
    for i, m in enumerate(msgs):
        if isinstance(m["id"], bool) or m["id"] != i:
            print(f"[INVALID] {file_path}: id {m['id']!r} at position {i}")
            return False
        if any(not isinstance(m[k], str) for k in REQUIRED_MESSAGE_KEYS[1:]):
            print(f"[INVALID] {file_path}: message {i} fields must be strings")
            return False
    return True


def cmd_validate(args) -> None:
    """Validate parsed JSON files for basic structural correctness."""
    parsed_dir = Path(args.parsed_dir).expanduser().resolve()
    if not parsed_dir.is_dir():
        raise FileNotFoundError(parsed_dir)

    ok = 0
    bad = 0
    for dirpath, _, filenames in os.walk(parsed_dir):
        for fn in filenames:
            if not fn.lower().endswith(".json"):
                continue
            p = Path(dirpath) / fn
            try:
                obj = json.loads(p.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
                print(f"[INVALID JSON] {p}: {e}")
                bad += 1
                continue

            if _validate_payload(obj, p):
                ok += 1
            else:
                bad += 1

    print(f"Validation summary: ok={ok}, bad={bad}, total={ok + bad}")
