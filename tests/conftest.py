"""Pytest configuration and shared fixtures.

Organization:
    - Environment isolation: every test starts from an empty configuration
    - Settings fixtures: a complete BackupSettings built from init kwargs
    - Command runner fixtures: a scripted runner that never spawns processes
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import pytest

from backup_service.core.settings import BackupSettings, clear_all_caches
from backup_service.infra.process import CommandResult

SETTINGS_ENV_VARS = (
    "DB_USER",
    "DB_PASS",
    "DB_NAME",
    "RCLONE_REMOTE",
    "GDRIVE_BACKUP_DIR",
    "LOCAL_BACKUP_DIR",
    "KEEP_BACKUPS",
    "CRON_SCHEDULE",
    "CRON_TIMEZONE",
    "RUN_ON_STARTUP",
    "MYSQLDUMP_PATH",
    "GZIP_PATH",
    "RCLONE_PATH",
    "RCLONE_PROGRESS",
    "SHELL_EXECUTABLE",
    "BACKUP_PREFIX",
    "BACKUP_CONFIG_DIR",
    "LOG_LEVEL",
    "LOG_JSON",
    "LOG_FILE_PATH",
    "LOG_CONFIG_DIR",
)

FIXED_NOW = datetime(2024, 5, 1, 6, 0, 0, 123000, tzinfo=UTC)
FIXED_TIMESTAMP = "2024-05-01T06-00-00-123Z"


# ============================================================================
# Environment isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run each test in an empty directory with no backup settings in the env.

    Keeps a developer's .env file or conf/ directory from leaking into tests.
    """
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def required_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Set the three required settings in the environment.

    Returns:
        The local staging directory.
    """
    staging = tmp_path / "staging"
    monkeypatch.setenv("RCLONE_REMOTE", "gdrive")
    monkeypatch.setenv("GDRIVE_BACKUP_DIR", "backups/mysql")
    monkeypatch.setenv("LOCAL_BACKUP_DIR", str(staging))
    return staging


# ============================================================================
# Settings fixtures
# ============================================================================


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., BackupSettings]:
    """Factory for BackupSettings with the required fields filled in.

    Example:
        def test_something(make_settings):
            settings = make_settings(db_name="shop", keep_backups=3)
    """

    def _make(**overrides: object) -> BackupSettings:
        values: dict[str, object] = {
            "rclone_remote": "gdrive",
            "gdrive_backup_dir": "backups/mysql",
            "local_backup_dir": tmp_path / "staging",
        }
        values.update(overrides)
        return BackupSettings(**values)

    return _make


@pytest.fixture
def backup_settings(make_settings: Callable[..., BackupSettings]) -> BackupSettings:
    """Settings for the ``shop`` database keeping 3 remote backups."""
    return make_settings(db_user="backup", db_pass="s3cret", db_name="shop", keep_backups=3)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock returning 2024-05-01T06:00:00.123Z."""
    return lambda: FIXED_NOW


# ============================================================================
# Command runner fixtures
# ============================================================================


@dataclass
class ScriptedResponse:
    fragment: str
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    effect: Callable[[str], None] | None = None


class FakeCommandRunner:
    """CommandRunner returning scripted results by command substring.

    Unmatched commands succeed with empty output. Every command is recorded
    in ``commands`` in execution order.
    """

    def __init__(self) -> None:
        self.commands: list[str] = []
        self._responses: list[ScriptedResponse] = []

    def on(
        self,
        fragment: str,
        *,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        effect: Callable[[str], None] | None = None,
    ) -> FakeCommandRunner:
        self._responses.append(ScriptedResponse(fragment, returncode, stdout, stderr, effect))
        return self

    def matching(self, fragment: str) -> list[str]:
        return [command for command in self.commands if fragment in command]

    async def run(self, command: str) -> CommandResult:
        self.commands.append(command)
        for response in self._responses:
            if response.fragment in command:
                if response.effect is not None:
                    response.effect(command)
                return CommandResult(
                    command=command,
                    stdout=response.stdout,
                    stderr=response.stderr,
                    returncode=response.returncode,
                    error=None if response.returncode == 0 else f"exit {response.returncode}",
                )
        return CommandResult(command=command)


@pytest.fixture
def fake_runner() -> FakeCommandRunner:
    """Scripted command runner; see FakeCommandRunner."""
    return FakeCommandRunner()
