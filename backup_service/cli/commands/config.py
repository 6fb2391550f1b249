"""Configuration inspection commands."""

import json
import sys

import click

from backup_service.cli.utils import (
    error,
    info,
    load_settings_or_exit,
    sections,
    success,
    warning,
)
from backup_service.core.exceptions import ScheduleError
from backup_service.core.settings import get_logging_settings
from backup_service.tasks.scheduler import build_cron_trigger, next_fire_times


@click.group(name="config")
def config() -> None:
    """Configuration management commands."""


@config.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "table"]),
    default="table",
    help="Output format",
)
@click.option(
    "--show-secrets/--hide-secrets",
    default=False,
    help="Show sensitive values (database password)",
)
def show(output_format: str, show_secrets: bool) -> None:
    """Display current configuration settings."""
    settings = load_settings_or_exit()
    log_settings = get_logging_settings()

    password: str | None = None
    if settings.db_pass is not None:
        password = settings.db_pass.get_secret_value() if show_secrets else "***"

    config_dict: dict[str, dict[str, object]] = {
        "database": {
            "user": settings.db_user,
            "password": password,
            "name": settings.database_identifier,
        },
        "remote": {
            "destination": settings.remote_destination,
            "keep_backups": settings.keep_backups,
            "backup_prefix": settings.backup_prefix,
        },
        "local": {
            "staging_dir": str(settings.local_backup_dir),
        },
        "schedule": {
            "cron": settings.cron_schedule,
            "timezone": settings.cron_timezone or "local",
            "run_on_startup": settings.run_on_startup,
        },
        "tools": {
            "mysqldump": settings.mysqldump_path,
            "gzip": settings.gzip_path,
            "rclone": settings.rclone_path,
            "shell": settings.shell_executable or "/bin/sh",
        },
        "logging": {
            "level": log_settings.level,
            "json_logs": log_settings.json_logs,
            "file_path": str(log_settings.file_path) if log_settings.file_path else None,
        },
    }

    if output_format == "json":
        click.echo(json.dumps(config_dict, indent=2, default=str))
        return

    if not show_secrets:
        warning("Secrets are hidden. Use --show-secrets to display them.")
    sections("CONFIGURATION SETTINGS", config_dict)


@config.command()
def validate() -> None:
    """Validate required settings and the cron schedule."""
    info("Validating configuration...")
    settings = load_settings_or_exit()
    success("Required settings present")

    try:
        trigger = build_cron_trigger(settings.cron_schedule, settings.cron_timezone)
    except ScheduleError as e:
        error(e.detail)
        sys.exit(1)

    upcoming = next_fire_times(trigger, 1)
    success(f"Schedule '{settings.cron_schedule}' is valid")
    if upcoming:
        info(f"Next run: {upcoming[0].isoformat()}")
