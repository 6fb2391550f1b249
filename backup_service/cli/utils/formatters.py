"""Console output for CLI commands.

Status lines are colored with ``click.secho``; colors are stripped when the
output is not a terminal. Errors go to stderr so ``--format json`` output on
stdout stays parseable.
"""

from collections.abc import Mapping

import click

RULE = "=" * 60


def success(message: str) -> None:
    """Print a success message in green."""
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    """Print an error message in red on stderr."""
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    click.secho(f"⚠ {message}", fg="yellow")


def info(message: str) -> None:
    click.secho(f"ℹ {message}", fg="blue")


def header(message: str) -> None:
    """Print a bold cyan heading preceded by a blank line."""
    click.secho(f"\n{message}", fg="cyan", bold=True)


def key_values(rows: Mapping[str, object], width: int = 20) -> None:
    """Print ``key: value`` rows, indented, with values aligned at ``width``.

    Keys longer than ``width`` push their value right instead of being cut.
    """
    for key, value in rows.items():
        click.echo(f"  {key + ':':<{width}} {value}")


def sections(title: str, data: Mapping[str, Mapping[str, object]]) -> None:
    """Print nested settings as ``[SECTION]`` blocks between rules."""
    click.echo(f"\n{RULE}\n{title}\n{RULE}")
    for section, rows in data.items():
        click.echo(f"\n[{section.upper()}]")
        key_values(rows)
    click.echo(f"\n{RULE}")
