"""Custom exception classes for the backup service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from backup_service.infra.process import CommandResult


class BackupServiceError(Exception):
    """Base backup service exception.

    All custom exceptions should inherit from this class.

    Attributes:
        detail: Human-readable error message.
        extra: Additional context-specific information about the error.
    """

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        """Initialize backup service exception.

        Args:
            detail: Human-readable error message.
            extra: Additional context about the error.
        """
        self.detail = detail
        self.extra = extra or {}
        super().__init__(detail)


class ConfigurationError(BackupServiceError):
    """Required configuration is missing or invalid.

    Fatal: raised before the scheduler is armed and turned into a non-zero
    process exit by the CLI.
    """


class ScheduleError(ConfigurationError):
    """The cron schedule expression or its timezone cannot be parsed."""

    def __init__(self, expression: str, reason: str, timezone: str | None = None) -> None:
        self.expression = expression
        self.timezone = timezone
        super().__init__(
            f"Invalid schedule {expression!r}: {reason}",
            extra={"expression": expression, "timezone": timezone},
        )


class BackupError(BackupServiceError):
    """A backup pipeline step failed.

    Aborts the current run only. Carries the failing command result, when
    there is one. Only the exit status goes into ``extra``: the runner has
    already logged the command output with secrets masked.
    """

    def __init__(self, detail: str, result: CommandResult | None = None) -> None:
        self.result = result
        extra: dict[str, Any] = {}
        if result is not None:
            extra = {"returncode": result.returncode, "error": result.error}
        super().__init__(detail, extra=extra)
