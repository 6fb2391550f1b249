"""Command lines for mysqldump, gzip and rclone.

Every value that comes from configuration is shell-quoted. Builders return
complete command strings for a ``CommandRunner``.
"""

from __future__ import annotations

from pathlib import Path
from shlex import quote
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from backup_service.core.settings import BackupSettings

# Consistent InnoDB snapshot without locking tables, rows streamed instead of buffered
MYSQLDUMP_OPTIONS = ("--single-transaction", "--quick", "--lock-tables=false")

LSF_OPTIONS = ("--files-only", "--order-by", "modtime,ascending")


def build_dump_command(settings: BackupSettings, output_path: Path) -> str:
    """Build the ``mysqldump | gzip > file`` pipeline.

    ``pipefail`` makes a mysqldump failure fail the whole pipeline; without it
    the exit status would be gzip's.
    """
    parts = [quote(settings.mysqldump_path)]
    if settings.db_user:
        parts.append(f"--user={quote(settings.db_user)}")
    if settings.db_pass is not None:
        parts.append(f"--password={quote(settings.db_pass.get_secret_value())}")

    if settings.db_name:
        parts.append(quote(settings.db_name))
    else:
        parts.append("--all-databases")

    parts.extend(MYSQLDUMP_OPTIONS)

    dump = " ".join(parts)
    return f"set -o pipefail; {dump} | {quote(settings.gzip_path)} > {quote(str(output_path))}"


def build_upload_command(settings: BackupSettings, local_path: Path) -> str:
    """``rclone copy <file> <remote>:<dir>/``."""
    parts = [
        quote(settings.rclone_path),
        "copy",
        quote(str(local_path)),
        quote(settings.remote_destination),
    ]
    if settings.rclone_progress:
        parts.append("--progress")
    return " ".join(parts)


def build_list_command(settings: BackupSettings) -> str:
    """``rclone lsf`` listing file names only, oldest first."""
    return " ".join(
        [
            quote(settings.rclone_path),
            "lsf",
            quote(settings.remote_destination),
            *LSF_OPTIONS,
        ]
    )


def build_delete_command(settings: BackupSettings, filename: str) -> str:
    """``rclone delete <remote>:<dir>/<name>``."""
    return " ".join(
        [
            quote(settings.rclone_path),
            "delete",
            quote(settings.get_remote_path(filename)),
        ]
    )
