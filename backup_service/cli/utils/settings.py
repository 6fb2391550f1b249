"""Settings loading for CLI commands."""

import sys

from backup_service.cli.utils.formatters import error
from backup_service.core.exceptions import ConfigurationError
from backup_service.core.settings import BackupSettings, get_backup_settings


def load_settings_or_exit() -> BackupSettings:
    """Load backup settings, exiting with status 1 if they are incomplete."""
    try:
        return get_backup_settings()
    except ConfigurationError as e:
        error("Missing or invalid configuration. Check your environment or .env file.")
        for problem in e.extra.get("problems", []):
            error(f"  {problem}")
        sys.exit(1)
