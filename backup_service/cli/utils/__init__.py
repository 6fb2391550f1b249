"""CLI utilities for running async operations and formatting output."""

from backup_service.cli.utils.async_runner import coro
from backup_service.cli.utils.formatters import (
    error,
    header,
    info,
    key_values,
    sections,
    success,
    warning,
)
from backup_service.cli.utils.settings import load_settings_or_exit

__all__ = [
    "coro",
    "error",
    "header",
    "info",
    "key_values",
    "load_settings_or_exit",
    "sections",
    "success",
    "warning",
]
