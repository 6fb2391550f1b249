"""Database backup tasks.

- mysqldump piped through gzip into a local staging file
- rclone upload to the configured remote
- Remote retention window pruning
- Local artifact cleanup after every run
"""

from __future__ import annotations

from .commands import (
    build_delete_command,
    build_dump_command,
    build_list_command,
    build_upload_command,
)
from .pipeline import BackupPipeline, BackupRunResult, RunStatus, format_timestamp
from .retention import PrunePlan, plan_prune

__all__ = [
    "BackupPipeline",
    "BackupRunResult",
    "PrunePlan",
    "RunStatus",
    "build_delete_command",
    "build_dump_command",
    "build_list_command",
    "build_upload_command",
    "format_timestamp",
    "plan_prune",
]
