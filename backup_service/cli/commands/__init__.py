"""CLI command modules."""

from backup_service.cli.commands import config, run, scheduler

__all__ = [
    "config",
    "run",
    "scheduler",
]
