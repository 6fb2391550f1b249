"""Backup job execution.

- backup/: the dump → upload → prune → cleanup pipeline
- scheduler.py: cron trigger plus serialized run queue
"""

from __future__ import annotations
