"""Unit tests for backup and logging settings."""
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from backup_service.core.exceptions import ConfigurationError
from backup_service.core.settings import (
    BackupSettings,
    LoggingSettings,
    get_backup_settings,
    load_backup_settings,
)
from backup_service.core.settings.yaml_sources import create_backup_yaml_source


@pytest.mark.unit
class TestRequiredSettings:
    """Missing required settings are a configuration error."""

    def test_all_required_missing(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_backup_settings()

        problems = exc_info.value.extra["problems"]
        assert "RCLONE_REMOTE: required setting is missing" in problems
        assert "GDRIVE_BACKUP_DIR: required setting is missing" in problems
        assert "LOCAL_BACKUP_DIR: required setting is missing" in problems

    @pytest.mark.parametrize("missing", ["RCLONE_REMOTE", "GDRIVE_BACKUP_DIR", "LOCAL_BACKUP_DIR"])
    def test_each_required_setting(self, required_env, monkeypatch, missing):
        monkeypatch.delenv(missing)

        with pytest.raises(ConfigurationError) as exc_info:
            load_backup_settings()

        assert exc_info.value.extra["problems"] == [f"{missing}: required setting is missing"]

    def test_empty_value_counts_as_missing(self, required_env, monkeypatch):
        monkeypatch.setenv("RCLONE_REMOTE", "")

        with pytest.raises(ConfigurationError):
            load_backup_settings()

    def test_negative_keep_backups_rejected(self, required_env, monkeypatch):
        monkeypatch.setenv("KEEP_BACKUPS", "-1")

        with pytest.raises(ConfigurationError) as exc_info:
            load_backup_settings()

        assert exc_info.value.extra["problems"][0].startswith("KEEP_BACKUPS:")


@pytest.mark.unit
class TestBackupSettingsFromEnvironment:
    """Environment variables map onto BackupSettings."""

    def test_defaults(self, required_env):
        settings = get_backup_settings()

        assert settings.rclone_remote == "gdrive"
        assert settings.gdrive_backup_dir == "backups/mysql"
        assert settings.local_backup_dir == required_env
        assert settings.keep_backups == 8
        assert settings.cron_schedule == "0 6 * * *"
        assert settings.cron_timezone is None
        assert settings.run_on_startup is True
        assert settings.db_user is None
        assert settings.db_pass is None
        assert settings.db_name is None

    def test_optional_values(self, required_env, monkeypatch):
        monkeypatch.setenv("DB_USER", "root")
        monkeypatch.setenv("DB_PASS", "hunter2")
        monkeypatch.setenv("DB_NAME", "shop")
        monkeypatch.setenv("KEEP_BACKUPS", "3")
        monkeypatch.setenv("CRON_SCHEDULE", "30 2 * * 1")
        monkeypatch.setenv("CRON_TIMEZONE", "Europe/Madrid")

        settings = load_backup_settings()

        assert settings.db_user == "root"
        assert settings.db_pass.get_secret_value() == "hunter2"
        assert settings.db_name == "shop"
        assert settings.keep_backups == 3
        assert settings.cron_schedule == "30 2 * * 1"
        assert settings.cron_timezone == "Europe/Madrid"

    def test_keep_backups_inline_comment(self, required_env, monkeypatch):
        monkeypatch.setenv("KEEP_BACKUPS", "5  # five weeks")

        assert load_backup_settings().keep_backups == 5

    def test_keep_backups_zero_allowed(self, required_env, monkeypatch):
        monkeypatch.setenv("KEEP_BACKUPS", "0")

        assert load_backup_settings().keep_backups == 0

    def test_dotenv_file(self, tmp_path):
        Path(".env").write_text(
            "RCLONE_REMOTE=drive\n"
            "GDRIVE_BACKUP_DIR=db\n"
            f"LOCAL_BACKUP_DIR={tmp_path / 'local'}\n"
            "KEEP_BACKUPS=4\n"
        )

        settings = load_backup_settings()

        assert settings.rclone_remote == "drive"
        assert settings.keep_backups == 4

    def test_settings_are_cached(self, required_env):
        assert get_backup_settings() is get_backup_settings()


@pytest.mark.unit
class TestBackupSettingsNormalization:
    """Values are normalized so command building stays simple."""

    def test_remote_colon_stripped(self, make_settings):
        settings = make_settings(rclone_remote="gdrive:", gdrive_backup_dir="backups/mysql/")

        assert settings.remote_destination == "gdrive:backups/mysql/"

    def test_remote_path(self, make_settings):
        settings = make_settings()

        assert settings.get_remote_path("backup_x.sql.gz") == "gdrive:backups/mysql/backup_x.sql.gz"

    def test_blank_db_name_means_all_databases(self, make_settings):
        settings = make_settings(db_name="   ")

        assert settings.db_name is None
        assert settings.database_identifier == "all-databases"

    def test_blank_password_is_unset(self, make_settings):
        assert make_settings(db_pass=" ").db_pass is None

    def test_schedule_whitespace_collapsed(self, make_settings):
        assert make_settings(cron_schedule="  0  6 * *  * ").cron_schedule == "0 6 * * *"

    def test_backup_filename(self, make_settings):
        settings = make_settings(db_name="shop")

        assert (
            settings.get_backup_filename("2024-05-01T06-00-00-123Z")
            == "backup_shop_2024-05-01T06-00-00-123Z.sql.gz"
        )

    def test_backup_filename_all_databases(self, make_settings):
        filename = make_settings().get_backup_filename("ts")

        assert filename == "backup_all-databases_ts.sql.gz"

    def test_secrets(self, make_settings):
        assert make_settings().secrets == []
        assert make_settings(db_pass="pw").secrets == ["pw"]

    def test_settings_frozen(self, make_settings):
        settings = make_settings()

        with pytest.raises(ValidationError):
            settings.keep_backups = 1


@pytest.mark.unit
class TestYamlSources:
    """conf/backup.yaml and conf/backup.d/*.yaml feed BackupSettings."""

    def test_yaml_file(self, tmp_path):
        conf = Path("conf")
        conf.mkdir()
        (conf / "backup.yaml").write_text(
            "rclone_remote: s3\n"
            "gdrive_backup_dir: nightly\n"
            f"local_backup_dir: {tmp_path / 'yaml-staging'}\n"
            "keep_backups: 12\n"
        )

        settings = BackupSettings()

        assert settings.rclone_remote == "s3"
        assert settings.keep_backups == 12

    def test_confd_overrides_in_order(self, tmp_path, monkeypatch):
        conf = tmp_path / "etc-backup"
        (conf / "backup.d").mkdir(parents=True)
        (conf / "backup.yaml").write_text(
            "rclone_remote: s3\ngdrive_backup_dir: nightly\nlocal_backup_dir: /tmp/b\n"
        )
        (conf / "backup.d" / "10-retention.yaml").write_text("keep_backups: 20\n")
        (conf / "backup.d" / "20-retention.yaml").write_text("keep_backups: 30\n")
        monkeypatch.setenv("BACKUP_CONFIG_DIR", str(conf))

        settings = BackupSettings()

        assert settings.gdrive_backup_dir == "nightly"
        assert settings.keep_backups == 30

    def test_yaml_takes_precedence_over_env(self, required_env, monkeypatch):
        monkeypatch.setenv("KEEP_BACKUPS", "2")
        Path("conf").mkdir()
        Path("conf/backup.yaml").write_text("keep_backups: 9\n")

        assert BackupSettings().keep_backups == 9

    def test_discovery_order(self, tmp_path, monkeypatch):
        conf = tmp_path / "conf"
        (conf / "backup.d").mkdir(parents=True)
        (conf / "backup.yaml").write_text("keep_backups: 1\n")
        (conf / "backup.d" / "b.yaml").write_text("keep_backups: 3\n")
        (conf / "backup.d" / "a.yml").write_text("keep_backups: 2\n")
        monkeypatch.setenv("BACKUP_CONFIG_DIR", str(conf))

        source = create_backup_yaml_source(BackupSettings)

        assert source.yaml_files == [
            conf / "backup.yaml",
            conf / "backup.d" / "a.yml",
            conf / "backup.d" / "b.yaml",
        ]


@pytest.mark.unit
class TestLoggingSettings:
    """Test suite for LoggingSettings."""

    def test_defaults(self):
        settings = LoggingSettings()

        assert settings.level == "INFO"
        assert settings.json_logs is False
        assert settings.file_path is None
        assert settings.level_int == 20

    def test_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_JSON", "true")
        monkeypatch.setenv("LOG_FILE_PATH", str(tmp_path / "backup.log"))

        settings = LoggingSettings()

        assert settings.level == "DEBUG"
        assert settings.json_logs is True
        assert settings.file_path == tmp_path / "backup.log"

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")

    def test_to_logging_kwargs(self):
        kwargs = LoggingSettings(json_logs=True).to_logging_kwargs()

        assert kwargs["json_logs"] is True
        assert kwargs["log_level"] == "INFO"
        assert kwargs["file_path"] is None
