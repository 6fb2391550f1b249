"""Shell command execution for external backup tools.

The pipeline never spawns processes itself; it talks to a ``CommandRunner``.
``ShellCommandRunner`` is the production implementation. Tests substitute a
scripted runner that returns canned ``CommandResult`` values.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

MASK = "***"


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of one external command.

    ``returncode`` is None when the process could not be started at all; in
    that case ``error`` describes why.
    """

    command: str
    stdout: str = ""
    stderr: str = ""
    returncode: int | None = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0 and self.error is None

    @property
    def stdout_lines(self) -> list[str]:
        """Non-empty stdout lines with surrounding whitespace removed."""
        return [line.strip() for line in self.stdout.splitlines() if line.strip()]


@runtime_checkable
class CommandRunner(Protocol):
    """Executes a shell command line and reports the outcome without raising."""

    async def run(self, command: str) -> CommandResult: ...


def mask_secrets(text: str, secrets: Iterable[str]) -> str:
    """Replace every occurrence of each secret in ``text`` with ``***``."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, MASK)
    return text


class ShellCommandRunner:
    """Run commands through the platform shell with asyncio subprocesses.

    Non-zero exits and spawn failures are reported through the returned
    ``CommandResult``; nothing is raised. The awaiting coroutine is suspended
    until the process exits. No timeout is applied.
    """

    def __init__(
        self,
        *,
        shell_executable: str | None = None,
        secrets: Iterable[str] = (),
    ) -> None:
        """Initialize the runner.

        Args:
            shell_executable: Shell binary to use instead of ``/bin/sh``.
            secrets: Values masked in every log line this runner emits.
        """
        self.shell_executable = shell_executable
        self.secrets = tuple(s for s in secrets if s)

    def _mask(self, text: str) -> str:
        return mask_secrets(text, self.secrets)

    async def run(self, command: str) -> CommandResult:
        """Execute ``command`` and capture its output.

        Args:
            command: Complete shell command line; callers quote arguments.

        Returns:
            CommandResult with decoded stdout/stderr and the exit status.
        """
        display = self._mask(command)
        logger.info("Running: %s", display)

        try:
            proc = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                executable=self.shell_executable,
            )
            stdout_bytes, stderr_bytes = await proc.communicate()
        except OSError as exc:
            logger.error(
                "Error running command: %s",
                display,
                extra={"error": self._mask(str(exc))},
            )
            return CommandResult(command=command, returncode=None, error=str(exc))

        stdout = stdout_bytes.decode(errors="replace") if stdout_bytes else ""
        stderr = stderr_bytes.decode(errors="replace") if stderr_bytes else ""
        returncode = proc.returncode

        if returncode == 0:
            if stderr.strip():
                # rclone --progress and mysqldump warnings both land on stderr
                logger.warning("Stderr: %s", self._mask(stderr.strip()))
            if stdout.strip():
                logger.info("Stdout: %s", self._mask(stdout.strip()))
            return CommandResult(
                command=command, stdout=stdout, stderr=stderr, returncode=returncode
            )

        error = f"Command exited with status {returncode}"
        logger.error(
            "Error running command: %s",
            display,
            extra={"returncode": returncode, "error": error},
        )
        if stderr.strip():
            logger.error("Stderr: %s", self._mask(stderr.strip()))
        if stdout.strip():
            logger.error("Stdout: %s", self._mask(stdout.strip()))
        return CommandResult(
            command=command,
            stdout=stdout,
            stderr=stderr,
            returncode=returncode,
            error=error,
        )
