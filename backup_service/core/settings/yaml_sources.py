"""YAML config source with conf.d directory support.

Extends pydantic-settings ``YamlConfigSettingsSource`` so a deployment can
ship its settings as files instead of environment variables:

- ``conf/backup.yaml``       base configuration
- ``conf/backup.d/*.yaml``   overrides, applied in alphabetical order

The ``conf`` base directory can be moved per settings domain with an
environment variable (``BACKUP_CONFIG_DIR``, ``LOG_CONFIG_DIR``).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic_settings import YamlConfigSettingsSource

if TYPE_CHECKING:
    from pydantic_settings import BaseSettings


class ConfDYamlConfigSettingsSource(YamlConfigSettingsSource):
    """YAML settings source reading a main file plus a conf.d directory."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: str,
        confd_dir: str | None,
        config_dir_env: str,
        base_dir: str = "conf",
        yaml_file_encoding: str | None = "utf-8",
    ) -> None:
        """Initialize the conf.d YAML source.

        Args:
            settings_cls: The settings class being configured.
            yaml_file: Main YAML file name (e.g., "backup.yaml").
            confd_dir: conf.d subdirectory name (e.g., "backup.d"), or None to disable.
            config_dir_env: Environment variable overriding the base directory.
            base_dir: Default base directory for config files.
            yaml_file_encoding: File encoding for YAML files.
        """
        self.config_dir = Path(os.getenv(config_dir_env, base_dir))
        self._yaml_files = self._discover(yaml_file, confd_dir)

        super().__init__(
            settings_cls=settings_cls,
            yaml_file=self._yaml_files or None,
            yaml_file_encoding=yaml_file_encoding,
        )

    def _discover(self, yaml_file: str, confd_dir: str | None) -> list[Path]:
        files: list[Path] = []

        main_file = self.config_dir / yaml_file
        if main_file.is_file():
            files.append(main_file)

        if confd_dir:
            confd_path = self.config_dir / confd_dir
            if confd_path.is_dir():
                files.extend(
                    sorted(
                        path
                        for path in confd_path.iterdir()
                        if path.suffix in {".yaml", ".yml", ".json"}
                    )
                )
        return files

    @property
    def yaml_files(self) -> list[Path]:
        """Files that will be merged, in precedence order (last wins)."""
        return list(self._yaml_files)

    def __repr__(self) -> str:
        files_str = ", ".join(str(f) for f in self._yaml_files)
        return f"{self.__class__.__name__}(yaml_files=[{files_str}])"


def create_backup_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """Create YAML source for BackupSettings.

    Loads from ``conf/backup.yaml`` and ``conf/backup.d/*.yaml``.
    Override directory with: BACKUP_CONFIG_DIR=/custom/path
    """
    return ConfDYamlConfigSettingsSource(
        settings_cls,
        yaml_file="backup.yaml",
        confd_dir="backup.d",
        config_dir_env="BACKUP_CONFIG_DIR",
    )


def create_logging_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """Create YAML source for LoggingSettings.

    Loads from ``conf/logging.yaml`` and ``conf/logging.d/*.yaml``.
    Override directory with: LOG_CONFIG_DIR=/custom/path
    """
    return ConfDYamlConfigSettingsSource(
        settings_cls,
        yaml_file="logging.yaml",
        confd_dir="logging.d",
        config_dir_env="LOG_CONFIG_DIR",
    )
