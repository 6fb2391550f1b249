"""Main entry point for backup-service.

``python -m backup_service.main`` behaves like the ``backup-service``
console script; with no arguments it starts the daemon. Click sets the
process exit status.
"""

from __future__ import annotations


def main() -> None:
    """Run the CLI."""
    from backup_service.cli.main import main as cli_main

    cli_main()


if __name__ == "__main__":
    main()
