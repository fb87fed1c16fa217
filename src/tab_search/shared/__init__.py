"""Shared utilities."""

from .log_buffer import LogBuffer, LogEntry, install_log_buffer, uninstall_log_buffer

__all__ = [
    "LogBuffer",
    "LogEntry",
    "install_log_buffer",
    "uninstall_log_buffer",
]
