"""Centralized logging helpers.

Every module logs through ``logging.getLogger(__name__)``; this module owns the
root handler setup and the small helpers used to attach structured context to
debug records without paying for it when DEBUG is disabled.
"""
from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Dict, Iterable, Optional

from constants import Constants

# Attribute names extra_context() may attach to a LogRecord.
CONTEXT_FIELDS = (
    "event",
    "component",
    "action",
    "target",
    "outcome",
    "count",
    "attempt",
    "duration_ms",
    "exit_code",
    "tfm",
    "mode",
    "context",
)


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON objects including structured context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    value = getattr(logging, name, None)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Install the console handler (and optional file handler) on the root logger.

    Safe to call more than once: handlers installed by a previous call are
    replaced rather than duplicated.

    Args:
        level: Log level name; falls back to NUGETLOCK_LOG_LEVEL, then INFO.
        log_file: Optional path of an additional plain-text log file.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_nugetlock_handler", False):
            root.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler()
    if os.environ.get(Constants.ENV_LOG_FORMAT, "").strip().lower() == "json":
        console.setFormatter(JsonFormatter())
    else:
        console.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    console._nugetlock_handler = True  # type: ignore[attr-defined]
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        file_handler._nugetlock_handler = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)

    root.setLevel(_resolve_level(level))


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when the logger would emit DEBUG records."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping for structured log records, dropping None values."""
    return {key: value for key, value in kwargs.items() if value is not None}


def log_discovered_files(logger: logging.Logger, component: str, paths: Iterable[str]) -> None:
    """Emit one DEBUG record listing discovered files for a component."""
    if not is_debug_enabled(logger):
        return
    found = list(paths)
    logger.debug(
        "Discovered %d file(s): %s",
        len(found),
        ", ".join(found) or "none",
        extra=extra_context(event="discovery", component=component, count=len(found)),
    )


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds; live while inside the block, frozen after exit."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
