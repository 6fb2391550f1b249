"""Main CLI entry point for backup-service."""

import sys

import click
from pydantic import ValidationError

from backup_service.cli.commands import config, run, scheduler
from backup_service.cli.utils import error
from backup_service.infra.logging import setup_logging


@click.group(invoke_without_command=True)
@click.version_option(version="0.1.0", prog_name="backup-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Backup Service - scheduled MySQL dumps uploaded with rclone.

    Without a command, starts the backup daemon (same as `run`).

    \b
    Commands:
      run        Run the daemon: backup now, then on CRON_SCHEDULE
      backup     Run a single backup cycle and exit
      config     Show or validate configuration
      scheduler  Preview upcoming scheduled runs

    \b
    Quick Start:
      backup-service config validate    # Check required settings and schedule
      backup-service backup             # One backup right now
      backup-service run                # Start the daemon
    """
    ctx.ensure_object(dict)
    if ctx.invoked_subcommand is None:
        ctx.invoke(run.run_daemon)


cli.add_command(run.run_daemon)
cli.add_command(run.backup_once)
cli.add_command(config.config)
cli.add_command(scheduler.scheduler)


def main() -> None:
    """Entry point for CLI."""
    try:
        setup_logging()
    except ValidationError as e:
        error(f"Invalid logging configuration: {e}")
        sys.exit(1)
    cli(obj={})


if __name__ == "__main__":
    main()
