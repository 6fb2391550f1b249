"""Schedule inspection commands."""

from __future__ import annotations

import sys

import click

from backup_service.cli.utils import error, header, load_settings_or_exit
from backup_service.core.exceptions import ScheduleError
from backup_service.tasks.scheduler import build_cron_trigger, next_fire_times


@click.group(name="scheduler")
def scheduler() -> None:
    """Backup schedule commands."""


@scheduler.command(name="next")
@click.option(
    "--count",
    "-n",
    type=click.IntRange(min=1, max=100),
    default=5,
    show_default=True,
    help="Number of upcoming runs to show",
)
@click.option(
    "--schedule",
    "expression",
    default=None,
    help="Cron expression to preview instead of CRON_SCHEDULE",
)
@click.option(
    "--timezone",
    default=None,
    help="Timezone to preview instead of CRON_TIMEZONE",
)
def next_runs(count: int, expression: str | None, timezone: str | None) -> None:
    """Show the next scheduled backup times.

    \b
    Examples:
      backup-service scheduler next
      backup-service scheduler next --schedule "0 */6 * * *" --timezone UTC -n 4
    """
    if expression is None:
        settings = load_settings_or_exit()
        expression = settings.cron_schedule
        timezone = timezone or settings.cron_timezone

    try:
        trigger = build_cron_trigger(expression, timezone)
    except ScheduleError as e:
        error(e.detail)
        sys.exit(1)

    header(f"Next {count} runs for '{expression}'")
    for fire_time in next_fire_times(trigger, count):
        click.echo(f"  {fire_time.isoformat()}")
