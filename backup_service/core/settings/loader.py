"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process:

    from backup_service.core.settings import get_backup_settings

    settings = get_backup_settings()  # First call: loads and validates
    settings = get_backup_settings()  # Subsequent calls: cached instance

Only entry points (the CLI) call the loaders. Everything below them receives
the settings object as an argument.

Testing:
    clear_all_caches()  # force a reload after changing the environment
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import ValidationError

from backup_service.core.exceptions import ConfigurationError

from .backup import BackupSettings
from .logs import LoggingSettings

logger = logging.getLogger(__name__)


def describe_validation_error(exc: ValidationError) -> list[str]:
    """Turn a pydantic ValidationError into one line per offending setting."""
    problems: list[str] = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "<settings>"
        if err.get("type") == "missing":
            problems.append(f"{field.upper()}: required setting is missing")
        else:
            problems.append(f"{field.upper()}: {err.get('msg', 'invalid value')}")
    return problems


def load_backup_settings() -> BackupSettings:
    """Build BackupSettings, converting validation failures to ConfigurationError.

    Raises:
        ConfigurationError: If a required setting is missing or a value is invalid.
    """
    try:
        return BackupSettings()
    except ValidationError as exc:
        problems = describe_validation_error(exc)
        logger.error(
            "Invalid backup configuration",
            extra={"problems": problems},
        )
        raise ConfigurationError(
            "Invalid backup configuration: " + "; ".join(problems),
            extra={"problems": problems},
        ) from exc


@lru_cache(maxsize=1)
def get_backup_settings() -> BackupSettings:
    """Get cached backup job settings.

    Returns:
        Validated and frozen BackupSettings instance.

    Raises:
        ConfigurationError: If the configuration is incomplete or invalid.
    """
    return load_backup_settings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


def clear_all_caches() -> None:
    """Clear all settings caches.

    Useful for testing or when you need to force reload settings.
    """
    get_backup_settings.cache_clear()
    get_logging_settings.cache_clear()
