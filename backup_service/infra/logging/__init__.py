"""Logging infrastructure.

Basic usage:
    import logging

    from backup_service.infra.logging import setup_logging

    setup_logging()  # reads LOG_* settings once
    logger = logging.getLogger(__name__)
    logger.info("Backup uploaded", extra={"destination": "gdrive:backups/"})
"""

from backup_service.infra.logging.config import (
    complete,
    configure_logging,
    setup_logging,
    shutdown,
)
from backup_service.infra.logging.formatters import ExtraTextFormatter, JSONFormatter

__all__ = [
    "ExtraTextFormatter",
    "JSONFormatter",
    "complete",
    "configure_logging",
    "setup_logging",
    "shutdown",
]
