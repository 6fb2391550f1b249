"""Database backup job configuration settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._sanitizers import blank_to_none, sanitize_inline_numeric
from .yaml_sources import create_backup_yaml_source

ALL_DATABASES_IDENTIFIER = "all-databases"


class BackupSettings(BaseSettings):
    """Settings for the scheduled dump → upload → prune job.

    Environment variables are read without a prefix so an existing ``.env``
    file keeps working. Example:
        RCLONE_REMOTE="gdrive"
        GDRIVE_BACKUP_DIR="backups/mysql"
        LOCAL_BACKUP_DIR="/var/tmp/mysql-backups"
        KEEP_BACKUPS=8

    ``RCLONE_REMOTE``, ``GDRIVE_BACKUP_DIR`` and ``LOCAL_BACKUP_DIR`` are
    required; constructing the model without them raises ``ValidationError``.
    """

    # Database credentials (passed to mysqldump)
    db_user: str | None = Field(
        default=None,
        description="MySQL user; omitted from the dump command when unset",
    )
    db_pass: SecretStr | None = Field(
        default=None,
        description="MySQL password; omitted from the dump command when unset",
    )
    db_name: str | None = Field(
        default=None,
        description="Database to dump; every database is dumped when unset",
    )

    # Remote storage (rclone)
    rclone_remote: str = Field(
        min_length=1,
        description="rclone remote alias, as configured in rclone.conf",
    )
    gdrive_backup_dir: str = Field(
        description="Directory on the remote that holds the backup files",
    )
    keep_backups: int = Field(
        default=8,
        ge=0,
        description="Number of most recent remote backups to keep",
    )

    # Local staging
    local_backup_dir: Path = Field(
        description="Local directory where the dump is written before upload",
    )
    backup_prefix: str = Field(
        default="backup_",
        min_length=1,
        description="File name prefix for artifacts; remote files without it are never pruned",
    )

    # Scheduling
    cron_schedule: str = Field(
        default="0 6 * * *",
        description="Cron expression (5 fields, or 6 with leading seconds)",
    )
    cron_timezone: str | None = Field(
        default=None,
        description="IANA timezone for the cron schedule; local time when unset",
    )
    run_on_startup: bool = Field(
        default=True,
        description="Run one backup immediately when the daemon starts",
    )

    # External tools
    mysqldump_path: str = Field(
        default="mysqldump",
        description="Path to mysqldump binary",
    )
    gzip_path: str = Field(
        default="gzip",
        description="Path to gzip binary",
    )
    rclone_path: str = Field(
        default="rclone",
        description="Path to rclone binary",
    )
    rclone_progress: bool = Field(
        default=True,
        description="Pass --progress to rclone copy",
    )
    shell_executable: str | None = Field(
        default="/bin/bash",
        description="Shell used to run commands; must support 'set -o pipefail'",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,  # Ignore empty string env vars
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_backup_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @field_validator("keep_backups", mode="before")
    @classmethod
    def _normalize_numeric(cls, value: Any) -> Any:
        """Allow numeric env vars with inline comments."""
        return sanitize_inline_numeric(value)

    @field_validator("db_user", "db_name", "cron_timezone", "shell_executable", mode="before")
    @classmethod
    def _blank_as_unset(cls, value: Any) -> Any:
        return blank_to_none(value)

    @field_validator("db_pass", mode="before")
    @classmethod
    def _blank_password_as_unset(cls, value: Any) -> Any:
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        return blank_to_none(value)

    @field_validator("rclone_remote", mode="before")
    @classmethod
    def _strip_remote_colon(cls, value: Any) -> Any:
        """Accept both ``gdrive`` and ``gdrive:``."""
        if isinstance(value, str):
            return value.strip().rstrip(":")
        return value

    @field_validator("gdrive_backup_dir", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().rstrip("/")
        return value

    @field_validator("cron_schedule", mode="before")
    @classmethod
    def _normalize_schedule(cls, value: Any) -> Any:
        if isinstance(value, str):
            return " ".join(value.split())
        return value

    @property
    def database_identifier(self) -> str:
        """Name segment used in artifact file names."""
        return self.db_name or ALL_DATABASES_IDENTIFIER

    @property
    def remote_destination(self) -> str:
        """rclone destination directory, always with a trailing slash."""
        return f"{self.rclone_remote}:{self.gdrive_backup_dir}/"

    @property
    def secrets(self) -> list[str]:
        """Secret values that must never appear in logs."""
        if self.db_pass is None:
            return []
        return [self.db_pass.get_secret_value()]

    def get_backup_filename(self, timestamp: str) -> str:
        """Generate backup filename with timestamp.

        Args:
            timestamp: Filesystem-safe timestamp (e.g., "2024-05-01T06-00-00-123Z")

        Returns:
            Filename like "backup_shop_2024-05-01T06-00-00-123Z.sql.gz"
        """
        return f"{self.backup_prefix}{self.database_identifier}_{timestamp}.sql.gz"

    def get_local_path(self, filename: str) -> Path:
        """Get full local path for a backup file."""
        return self.local_backup_dir / filename

    def get_remote_path(self, filename: str) -> str:
        """Get the rclone path of a single file in the backup directory."""
        return f"{self.remote_destination}{filename}"
