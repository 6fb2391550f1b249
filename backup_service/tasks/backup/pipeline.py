"""Backup pipeline: dump, upload, prune remote, clean up local.

One ``BackupPipeline.run()`` call is one backup cycle:

1. Ensure the local staging directory exists
2. ``mysqldump | gzip`` into a timestamped artifact
3. ``rclone copy`` the artifact to the remote directory
4. ``rclone lsf`` the remote directory and delete backups beyond the
   retention window (best effort, one file at a time)
5. Always delete the local artifact
6. Log the cycle duration

A failure in steps 1-4 aborts the cycle but never escapes ``run()``: the
scheduler will try again on the next trigger.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from backup_service.core.exceptions import BackupError
from backup_service.infra.process import CommandRunner, ShellCommandRunner
from backup_service.tasks.backup.commands import (
    build_delete_command,
    build_dump_command,
    build_list_command,
    build_upload_command,
)
from backup_service.tasks.backup.retention import plan_prune

if TYPE_CHECKING:
    from backup_service.core.settings import BackupSettings

logger = logging.getLogger(__name__)


class RunStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(slots=True)
class BackupRunResult:
    """Summary of one pipeline run."""

    artifact: str
    local_path: Path
    started_at: datetime
    status: RunStatus = RunStatus.FAILED
    uploaded: bool = False
    deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed_deletions: list[str] = field(default_factory=list)
    local_removed: bool = False
    error: str | None = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": str(self.status),
            "artifact": self.artifact,
            "local_path": str(self.local_path),
            "started_at": self.started_at.isoformat(),
            "uploaded": self.uploaded,
            "deleted": list(self.deleted),
            "skipped": list(self.skipped),
            "failed_deletions": list(self.failed_deletions),
            "local_removed": self.local_removed,
            "error": self.error,
            "duration_seconds": round(self.duration_seconds, 2),
        }


def format_timestamp(moment: datetime) -> str:
    """Filesystem-safe ISO-8601 timestamp.

    ``2024-05-01T06:00:00.123Z`` becomes ``2024-05-01T06-00-00-123Z``.
    """
    iso = (
        moment.astimezone(UTC)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )
    return iso.replace(":", "-").replace(".", "-")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BackupPipeline:
    """Run backup cycles for one database configuration."""

    def __init__(
        self,
        settings: BackupSettings,
        runner: CommandRunner | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the pipeline.

        Args:
            settings: Frozen job configuration.
            runner: Command runner; a ShellCommandRunner masking the DB password by default.
            clock: Source of the artifact timestamp.
        """
        self.settings = settings
        self.runner = runner or ShellCommandRunner(
            shell_executable=settings.shell_executable,
            secrets=settings.secrets,
        )
        self._clock = clock

    async def run(self) -> BackupRunResult:
        """Execute one full backup cycle.

        Returns:
            BackupRunResult describing what happened. Never raises for
            pipeline failures; they are logged and reported in the result.
        """
        started = time.monotonic()
        now = self._clock()
        filename = self.settings.get_backup_filename(format_timestamp(now))
        local_path = self.settings.get_local_path(filename)
        result = BackupRunResult(artifact=filename, local_path=local_path, started_at=now)

        logger.info("=== Starting Backup Task ===", extra={"artifact": filename})

        try:
            await self._execute(local_path, result)
            result.status = RunStatus.SUCCESS
        except BackupError as exc:
            result.error = exc.detail
            logger.error("### BACKUP TASK ERROR ### %s", exc.detail, extra=exc.extra)
        except Exception as exc:
            result.error = str(exc) or exc.__class__.__name__
            logger.exception("### BACKUP TASK ERROR ### Unexpected error during backup")
        finally:
            result.local_removed = self._cleanup_local(local_path)
            result.duration_seconds = time.monotonic() - started
            logger.info(
                "=== Backup Task Completed (Duration: %.2fs) ===",
                result.duration_seconds,
                extra={"status": str(result.status)},
            )

        return result

    async def _execute(self, local_path: Path, result: BackupRunResult) -> None:
        self._ensure_staging_dir()
        await self._dump(local_path)
        await self._upload(local_path)
        result.uploaded = True
        await self._prune(result)

    def _ensure_staging_dir(self) -> None:
        staging = self.settings.local_backup_dir
        try:
            staging.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BackupError(f"Cannot create local backup directory {staging}: {exc}") from exc
        logger.info("Local backup directory ready: %s", staging)

    async def _dump(self, local_path: Path) -> None:
        command = build_dump_command(self.settings, local_path)
        outcome = await self.runner.run(command)
        if not outcome.succeeded:
            raise BackupError("Failed mysqldump/gzip", result=outcome)
        logger.info("Backup created and compressed: %s", local_path)

    async def _upload(self, local_path: Path) -> None:
        command = build_upload_command(self.settings, local_path)
        outcome = await self.runner.run(command)
        # Exit status is the only success signal; the uploaded object is not verified
        if not outcome.succeeded:
            raise BackupError("rclone copy failed", result=outcome)
        logger.info(
            "Backup uploaded",
            extra={"destination": self.settings.remote_destination},
        )

    async def _prune(self, result: BackupRunResult) -> None:
        keep = self.settings.keep_backups
        logger.info("Cleaning up old remote backups (keeping %d)", keep)

        outcome = await self.runner.run(build_list_command(self.settings))
        if not outcome.succeeded:
            raise BackupError("rclone lsf failed to list remote backups", result=outcome)

        plan = plan_prune(outcome.stdout_lines, keep, self.settings.backup_prefix)
        result.skipped = plan.skipped

        if not plan.candidates:
            logger.info("There are no old backups to delete")
            return

        logger.info("%d old backups will be deleted", len(plan.to_delete))
        for name in plan.to_delete:
            deleted = await self.runner.run(build_delete_command(self.settings, name))
            if deleted.succeeded:
                result.deleted.append(name)
            else:
                # Independent deletions: keep going
                logger.error(
                    "Failed to delete remote backup %s",
                    name,
                    extra={"returncode": deleted.returncode},
                )
                result.failed_deletions.append(name)

        logger.info(
            "Remote cleanup complete",
            extra={
                "deleted": len(result.deleted),
                "failed": len(result.failed_deletions),
                "skipped": len(result.skipped),
            },
        )

    def _cleanup_local(self, local_path: Path) -> bool:
        """Delete the local artifact; absence is not an error.

        Returns:
            True if the file is gone afterwards.
        """
        logger.info("Cleaning local file: %s", local_path)
        try:
            local_path.unlink()
        except FileNotFoundError:
            logger.info("Local file not found to delete (possibly never created)")
            return True
        except OSError as exc:
            logger.error(
                "Error deleting local file: %s",
                local_path,
                extra={"error": str(exc)},
            )
            return False
        logger.info("Local file deleted")
        return True
