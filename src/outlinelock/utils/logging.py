"""Logging setup shared by the CLI and the editor window."""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path

__all__ = ["setup_logging", "get_log_path"]

LOG_DIR_ENV = "OUTLINELOCK_LOG_DIR"
_DEFAULT_LOG_DIR = Path.home() / ".outlinelock" / "logs"
_LOG_FILE_NAME = "outlinelock.log"
_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_CONSOLE_FORMAT = "outlinelock: %(levelname)s: %(message)s"
# Bus traffic is logged per publish; keep it out of debug sessions by default.
_CHATTY_LOGGERS: tuple[str, ...] = ("outlinelock.events",)

_log_path: Path | None = None


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    max_bytes: int = 512_000,
    backup_count: int = 2,
    force: bool = False,
) -> Path:
    """Route the root logger to a rotating log file and, optionally, stderr.

    The console only ever shows warnings and errors: stdout belongs to the
    CLI report. Repeated calls are no-ops unless ``force`` is set.
    """

    global _log_path
    if _log_path is not None and not force:
        return _log_path

    directory = Path(log_dir or os.environ.get(LOG_DIR_ENV) or _DEFAULT_LOG_DIR).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / _LOG_FILE_NAME

    handlers: list[logging.Handler] = [_file_handler(path, level, max_bytes, backup_count)]
    if console:
        handlers.append(_console_handler(level))
    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)

    chatty_level = max(level, logging.INFO)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)

    _log_path = path
    return path


def get_log_path() -> Path | None:
    """Return the active log file, or ``None`` before :func:`setup_logging`."""

    return _log_path


def _file_handler(path: Path, level: int, max_bytes: int, backup_count: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(max(level, logging.WARNING))
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler
