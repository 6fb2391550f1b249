"""Pydantic Settings v2 configuration.

Settings are split by concern (backup job, logging) and read from, in order
of precedence:
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (optional)
    3. Environment variables
    4. .env file
    5. secrets_dir (Docker/Kubernetes secrets)

Import settings via cached loaders:
    from backup_service.core.settings import get_backup_settings
"""

from __future__ import annotations

from .backup import ALL_DATABASES_IDENTIFIER, BackupSettings
from .loader import (
    clear_all_caches,
    get_backup_settings,
    get_logging_settings,
    load_backup_settings,
)
from .logs import LoggingSettings

__all__ = [
    "ALL_DATABASES_IDENTIFIER",
    "BackupSettings",
    "LoggingSettings",
    "clear_all_caches",
    "get_backup_settings",
    "get_logging_settings",
    "load_backup_settings",
]
