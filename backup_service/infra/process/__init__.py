"""External process execution."""

from backup_service.infra.process.runner import (
    CommandResult,
    CommandRunner,
    ShellCommandRunner,
    mask_secrets,
)

__all__ = [
    "CommandResult",
    "CommandRunner",
    "ShellCommandRunner",
    "mask_secrets",
]
