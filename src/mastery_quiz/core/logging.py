"""Logging helpers shared across mastery_quiz commands."""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]

_FILE_MARKER = "_mastery_quiz_file"
_CONSOLE_MARKER = "_mastery_quiz_console"

# Attributes every LogRecord carries; anything else came in via ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class JsonLogFormatter(logging.Formatter):
    """Emit log records as structured JSON lines."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = {
            key: _coerce_value(value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
        }
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info
        return json.dumps(payload, ensure_ascii=True)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
    filename: str | None = None,
) -> tuple[logging.Logger, Path]:
    """Configure ``name`` with a JSON-lines file and optional console echo.

    Calling this repeatedly for the same logger reuses the managed handlers
    instead of stacking duplicates.
    """

    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    file_level = logging.DEBUG if verbose else _coerce_level(level)
    log_name = filename or f"{name.rsplit('.', 1)[-1]}.log"
    handler, path = _ensure_file_handler(
        logger,
        _prepare_log_dir(log_dir) / log_name,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )
    handler.setLevel(file_level)

    if verbose:
        _enable_console_handler(logger)
    else:
        _disable_console_handler(logger)
    return logger, path


def _coerce_level(level: str) -> int:
    numeric = logging.getLevelName(level.strip().upper())
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def _ensure_file_handler(
    logger: logging.Logger,
    path: Path,
    *,
    max_bytes: int,
    backup_count: int,
) -> tuple[logging.Handler, Path]:
    for handler in logger.handlers:
        if getattr(handler, _FILE_MARKER, False):
            current = getattr(handler, "baseFilename", None)
            if current is not None and Path(current) == path:
                return handler, path
            logger.removeHandler(handler)
            handler.close()
            break
    try:
        handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except PermissionError:
        path = _prepare_log_dir(_fallback_log_dir()) / path.name
        handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    _chmod_safe(path, 0o600)
    handler.setFormatter(JsonLogFormatter())
    setattr(handler, _FILE_MARKER, True)
    logger.addHandler(handler)
    return handler, path


def _enable_console_handler(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        if getattr(handler, _CONSOLE_MARKER, False):
            handler.setLevel(logging.DEBUG)
            return
    console = logging.StreamHandler(stream=sys.stderr)
    console.setLevel(logging.DEBUG)
    console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    setattr(console, _CONSOLE_MARKER, True)
    logger.addHandler(console)


def _disable_console_handler(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _CONSOLE_MARKER, False):
            logger.removeHandler(handler)
            handler.close()


def _coerce_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _coerce_value(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_coerce_value(item) for item in value]
    return repr(value)


def _prepare_log_dir(log_dir: Path) -> Path:
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        log_dir = _fallback_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
    _chmod_safe(log_dir, 0o700)
    return log_dir


def _chmod_safe(path: Path, mode: int) -> None:
    try:
        path.chmod(mode)
    except (PermissionError, FileNotFoundError):  # pragma: no cover
        return


def _fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "mastery-quiz-logs"
