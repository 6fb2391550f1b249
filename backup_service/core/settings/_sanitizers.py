"""Helpers to sanitize environment variable values before validation."""

from __future__ import annotations

from typing import Any


def strip_inline_comment(value: str) -> str:
    """Remove a trailing ``  # comment`` from an env-file value.

    Docker and some dotenv parsers keep inline comments, so a line such as
    ``KEEP_BACKUPS=8  # two months of weeklies`` reaches us verbatim. A ``#``
    only starts a comment when it is preceded by whitespace: ``foo#bar`` is
    returned unchanged.
    """
    idx = value.find("#")
    if idx == -1:
        return value.strip()
    if idx == 0:
        return ""
    if not value[idx - 1].isspace():
        return value.strip()
    return value[:idx].strip()


def sanitize_inline_numeric(value: Any) -> Any:
    """Normalize numeric env vars that may carry inline comments."""
    if isinstance(value, str):
        cleaned = strip_inline_comment(value)
        if cleaned:
            return cleaned
    return value


def blank_to_none(value: Any) -> Any:
    """Treat whitespace-only strings as unset.

    ``env_ignore_empty`` only drops exactly-empty values; ``DB_NAME=" "`` would
    otherwise select a database literally named by a space.
    """
    if isinstance(value, str) and not value.strip():
        return None
    return value
