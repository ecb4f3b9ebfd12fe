"""Command-line entry point: report, toggle or interactively edit locked subtrees."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Sequence, TextIO

from .errors import ModelAccessFailure
from .events import StatusMessage
from .services.settings import Settings, SettingsStore
from .session import DocumentSession
from .utils import logging as logging_utils

_LOGGER = logging.getLogger(__name__)


def configure_logging(debug: bool = False, *, force: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging_utils.setup_logging(level, force=force)
    _LOGGER.debug("Logging configured (level=%s)", logging.getLevelName(level))


def load_settings(
    path: Path | None = None,
    *,
    store: SettingsStore | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load(overrides=overrides)
    except OSError as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="outlinelock",
        description="Lock outline subtrees tagged with the lock tag.",
    )
    parser.add_argument("file", type=Path, help="Outline document (.org or .md).")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--toggle-line", type=int, metavar="N", help="Toggle the headline enclosing line N (1-based).")
    target.add_argument("--toggle-offset", type=int, metavar="N", help="Toggle the headline enclosing character offset N.")
    target.add_argument("--gui", action="store_true", help="Open the document in the lock-aware editor.")
    parser.add_argument("--lock-tag", help="Tag that marks a subtree as locked (default from settings).")
    parser.add_argument("--syntax", choices=("org", "markdown"), help="Heading syntax; inferred from the suffix by default.")
    parser.add_argument("--settings", type=Path, help="Path to an alternate settings.json.")
    parser.add_argument("--json", action="store_true", help="Print the lock report as JSON.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: Sequence[str] | None = None, *, stdout: TextIO | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    out = stdout or sys.stdout

    settings = load_settings(
        args.settings,
        overrides={"lock_tag": args.lock_tag, "outline_syntax": args.syntax, "debug_logging": args.debug or None},
    )
    configure_logging(settings.debug_logging)

    if not args.file.exists():
        parser.error(f"{args.file} does not exist")
    session = DocumentSession.open(args.file, settings, syntax=args.syntax)
    messages: list[StatusMessage] = []
    session.bus.subscribe(StatusMessage, messages.append)

    if args.gui:
        return _run_gui(session)

    if not session.commands.reapply_locks().ok:
        _print_messages(messages, out)
        return 1

    if args.toggle_line is not None or args.toggle_offset is not None:
        offset = _toggle_target(parser, args, session.document.text)
        result = session.commands.toggle_lock(offset)
        if not result.ok:
            _print_messages(messages, out)
            return 1
        session.save()

    try:
        report = _build_report(session)
    except ModelAccessFailure as exc:
        print(f"Cannot read outline: {exc}", file=out)
        return 1
    if args.json:
        json.dump(report, out, indent=2)
        out.write("\n")
    else:
        _print_messages(messages, out)
        _print_report(report, out)
    return 0


def _toggle_target(parser: argparse.ArgumentParser, args: argparse.Namespace, text: str) -> int:
    if args.toggle_offset is not None:
        if not 0 <= args.toggle_offset <= len(text):
            parser.error(f"--toggle-offset {args.toggle_offset} is outside the document (0..{len(text)})")
        return args.toggle_offset
    line_count = len(text.splitlines())
    if not 1 <= args.toggle_line <= line_count:
        parser.error(f"--toggle-line {args.toggle_line} is outside the document (1..{line_count})")
    return _line_offset(text, args.toggle_line)


def _line_offset(text: str, line: int) -> int:
    """Return the offset of the first character of 1-based ``line``."""

    if line < 1:
        return 0
    lines = text.splitlines(keepends=True)
    return sum(len(entry) for entry in lines[: line - 1])


def _build_report(session: DocumentSession) -> dict[str, Any]:
    document = session.document
    return {
        "path": str(document.metadata.path) if document.metadata.path else None,
        "lock_tag": session.settings.lock_tag,
        "headlines": [
            {
                "title": headline.title,
                "line": headline.line + 1,
                "start": headline.start,
                "end": headline.end,
            }
            for headline in session.synchronizer.locked_headlines()
        ],
        "locked": [span.to_dict() for span in document.protection.spans()],
    }


def _print_messages(messages: list[StatusMessage], out: TextIO) -> None:
    for message in messages:
        prefix = "warning: " if message.level == "warning" else ""
        print(f"{prefix}{message.message}", file=out)
    messages.clear()


def _print_report(report: dict[str, Any], out: TextIO) -> None:
    headlines = report["headlines"]
    if not headlines:
        print(f"No headlines tagged :{report['lock_tag']}:", file=out)
        return
    for entry in headlines:
        print(f"line {entry['line']:>5}  [{entry['start']}, {entry['end']})  {entry['title']}", file=out)


def _run_gui(session: DocumentSession) -> int:
    from PySide6.QtWidgets import QApplication

    from .editor.window import LockEditorWindow

    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")
    app = QApplication.instance() or QApplication(sys.argv)
    window = LockEditorWindow(session)
    session.start()
    window.resize(900, 700)
    window.show()
    return int(app.exec())


if __name__ == "__main__":  # pragma: no cover - manual entry point
    raise SystemExit(main())
