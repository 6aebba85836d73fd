"""Centralized logging helpers.

Provides a single ``configure_logging`` entry for the CLI, structured
``extra`` payload construction, URL redaction for safe request tracing and a
small timer used to report request durations.
"""
from __future__ import annotations

import logging
import os
import re
import sys
import time
import urllib.parse
from typing import Any, Dict, Optional

from constants import Constants

_SENSITIVE_QUERY_KEYS = {"token", "access_token", "private_token", "key", "api_key", "password", "secret"}
_REDACTED = "[REDACTED]"
_TOKEN_PATTERN = re.compile(r"(?i)\b(gh[pousr]_[A-Za-z0-9]{20,}|glpat-[A-Za-z0-9_\-]{20,})\b")


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger for CLI use.

    Level resolution order: explicit ``level`` argument, the
    ``MODSOURCE_LOG_LEVEL`` environment variable, then WARNING. Records are
    written to standard error; standard output carries the JSON result.

    Args:
        level: Optional level name (DEBUG, INFO, ...).
        log_file: Optional path of an additional log file.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "WARNING").upper()
    level_value = getattr(logging, level_name, logging.WARNING)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_modsource_handler", False):
            root.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    stream_handler._modsource_handler = True  # type: ignore[attr-defined]
    root.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        file_handler._modsource_handler = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)

    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` payload, dropping fields that are None."""
    return {key: value for key, value in fields.items() if value is not None}


def redact(text: str) -> str:
    """Mask access tokens embedded in free text."""
    if not text:
        return text
    return _TOKEN_PATTERN.sub(_REDACTED, text)


def safe_url(url: str) -> str:
    """Return ``url`` with user info and sensitive query values masked."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return redact(url)

    netloc = parts.netloc
    if "@" in netloc:
        netloc = f"{_REDACTED}@{netloc.rsplit('@', 1)[1]}"

    query = parts.query
    if query:
        pairs = urllib.parse.parse_qsl(query, keep_blank_values=True)
        query = "&".join(
            f"{k}={_REDACTED}" if k.lower() in _SENSITIVE_QUERY_KEYS else (f"{k}={v}" if v else k)
            for k, v in pairs
        )

    return redact(urllib.parse.urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment)))


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, measured up to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
