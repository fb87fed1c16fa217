"""
In-memory buffer of recent log records.

Lets the request-handling layer show what the engine has been doing
(source failures, rate limits, cache activity) without a log sink.

Usage:
    from tab_search.shared.log_buffer import install_log_buffer

    buffer = install_log_buffer()
    ...
    buffer.get_logs(level="warning", context="engine")
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone

MAX_LOG_ENTRIES = 1000  # Rolling window size
ROOT_LOGGER_NAME = "tab_search"


@dataclass(frozen=True)
class LogEntry:
    """Single buffered log record."""

    timestamp: datetime
    level: str  # lower-case level name: "info", "warning", ...
    message: str
    context: str  # name of the emitting logger


class LogBuffer(logging.Handler):
    """Logging handler keeping the most recent records in memory."""

    def __init__(self, capacity: int = MAX_LOG_ENTRIES, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._entries_lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(
                timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
                level=record.levelname.lower(),
                message=record.getMessage(),
                context=record.name,
            )
        except Exception:
            self.handleError(record)
            return
        with self._entries_lock:
            self._entries.append(entry)

    def get_logs(self, level: str | None = None, context: str | None = None) -> list[LogEntry]:
        """
        Buffered entries, oldest first.

        Args:
            level: Only entries at this level name (case-insensitive)
            context: Only entries whose logger name starts or ends with this,
                e.g. ``"tab_search.application"`` or ``"engine"``
        """
        with self._entries_lock:
            entries = list(self._entries)

        if level:
            wanted = level.lower()
            entries = [e for e in entries if e.level == wanted]
        if context:
            entries = [
                e for e in entries
                if e.context.startswith(context) or e.context.endswith(context)
            ]
        return entries

    def clear(self) -> None:
        with self._entries_lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def install_log_buffer(
    logger_name: str = ROOT_LOGGER_NAME,
    capacity: int = MAX_LOG_ENTRIES,
    level: int = logging.INFO,
) -> LogBuffer:
    """
    Attach a new ``LogBuffer`` to ``logger_name`` and return it.

    Lowers the logger's level to ``level`` if it would otherwise drop records.
    """
    buffer = LogBuffer(capacity=capacity, level=level)
    target = logging.getLogger(logger_name)
    target.addHandler(buffer)
    if target.level == logging.NOTSET or target.level > level:
        target.setLevel(level)
    return buffer


def uninstall_log_buffer(buffer: LogBuffer, logger_name: str = ROOT_LOGGER_NAME) -> None:
    logging.getLogger(logger_name).removeHandler(buffer)
