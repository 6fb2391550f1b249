"""Commands that execute backups: the daemon and a one-off run."""
from __future__ import annotations

import json
import logging
import sys

import click

from backup_service.cli.utils import coro, error, key_values, load_settings_or_exit, success
from backup_service.core.exceptions import ScheduleError
from backup_service.tasks.backup import BackupPipeline
from backup_service.tasks.scheduler import BackupScheduler

logger = logging.getLogger(__name__)


@click.command(name="run")
@coro
async def run_daemon() -> None:
    """Run the backup daemon.

    Validates the configuration and the cron schedule, runs one backup
    immediately (unless RUN_ON_STARTUP=false) and then one per schedule
    occurrence until SIGINT/SIGTERM.

    \b
    Examples:
      backup-service run
      CRON_SCHEDULE="30 2 * * *" CRON_TIMEZONE=Europe/Madrid backup-service run
    """
    settings = load_settings_or_exit()
    logger.info("Backup service started")

    try:
        backup_scheduler = BackupScheduler(settings, BackupPipeline(settings))
    except ScheduleError as e:
        logger.error("Cannot schedule backups: %s", e.detail, extra=e.extra)
        error(e.detail)
        sys.exit(1)

    await backup_scheduler.serve_forever()


@click.command(name="backup")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format for the run summary",
)
@coro
async def backup_once(output_format: str) -> None:
    """Run a single backup cycle now and exit.

    Exits with status 1 if the dump, the upload or the remote listing failed.
    """
    settings = load_settings_or_exit()
    result = await BackupPipeline(settings).run()

    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        rows: dict[str, object] = {
            "Artifact": result.artifact,
            "Uploaded": result.uploaded,
            "Deleted": len(result.deleted),
        }
        if result.skipped:
            rows["Skipped"] = ", ".join(result.skipped)
        if result.failed_deletions:
            rows["Failed deletions"] = ", ".join(result.failed_deletions)
        rows["Duration"] = f"{result.duration_seconds:.2f}s"
        key_values(rows, width=9)

    if not result.succeeded:
        error(f"Backup failed: {result.error}")
        sys.exit(1)
    success("Backup completed")
