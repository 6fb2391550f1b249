"""APScheduler integration for the recurring backup job.

APScheduler fires a cron trigger; each firing only enqueues a run request and
returns. A single worker task drains the queue and awaits the pipeline, so
backup runs never overlap:

    CronTrigger → request_run() → asyncio.Queue(maxsize=1) → worker → BackupPipeline.run()

While a run is in progress one further request may wait in the queue; any
trigger beyond that is dropped with a warning (the pending run will produce
a fresh backup anyway).
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import signal
from datetime import datetime
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from backup_service.core.exceptions import ScheduleError

if TYPE_CHECKING:
    from backup_service.core.settings import BackupSettings
    from backup_service.tasks.backup import BackupPipeline, BackupRunResult

logger = logging.getLogger(__name__)

JOB_ID = "database_backup"

# Cron numbering: 0 and 7 are Sunday. APScheduler numbers Monday as 0, so
# numeric weekdays are rewritten to names before building the trigger.
_WEEKDAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun")
_NUMERIC_WEEKDAY = re.compile(r"^(\*|\d+)(?:-(\d+))?(?:/(\d+))?$")


def _translate_day_of_week(field: str) -> str:
    if field in {"*", "?"}:
        return "*"

    names: list[str] = []
    for part in field.split(","):
        match = _NUMERIC_WEEKDAY.match(part)
        if match is None:
            # Names (mon-fri) and anything else go to APScheduler untouched
            names.append(part)
            continue

        start_str, end_str, step_str = match.groups()
        step = int(step_str) if step_str else 1
        if step < 1:
            raise ValueError(f"invalid step in day of week: {part!r}")
        if start_str == "*":
            start, end = 0, 6
        else:
            start = int(start_str)
            end = int(end_str) if end_str else (6 if step_str else start)
        if not (0 <= start <= 7 and 0 <= end <= 7) or start > end:
            raise ValueError(f"invalid day of week: {part!r}")

        for day in range(start, end + 1, step):
            name = _WEEKDAY_NAMES[day]
            if name not in names:
                names.append(name)

    return ",".join(names)


def _resolve_timezone(expression: str, name: str | None) -> ZoneInfo | None:
    if name is None:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ScheduleError(expression, f"unknown timezone {name!r}", timezone=name) from exc


def build_cron_trigger(expression: str, timezone: str | None = None) -> CronTrigger:
    """Parse a cron expression into an APScheduler CronTrigger.

    Accepts the classic five fields (minute hour day month day-of-week) or six
    fields with a leading seconds field.

    Raises:
        ScheduleError: If the expression or the timezone is invalid.
    """
    tz = _resolve_timezone(expression, timezone)
    fields = expression.split()
    if len(fields) == 5:
        second = "0"
        minute, hour, day, month, day_of_week = fields
    elif len(fields) == 6:
        second, minute, hour, day, month, day_of_week = fields
    else:
        raise ScheduleError(
            expression,
            f"expected 5 or 6 fields, got {len(fields)}",
            timezone=timezone,
        )

    try:
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=_translate_day_of_week(day_of_week),
            timezone=tz,
        )
    except (ValueError, TypeError) as exc:
        raise ScheduleError(expression, str(exc), timezone=timezone) from exc


def next_fire_times(
    trigger: CronTrigger,
    count: int,
    now: datetime | None = None,
) -> list[datetime]:
    """Return the next ``count`` times the trigger would fire after ``now``."""
    current = now or datetime.now(trigger.timezone)
    times: list[datetime] = []
    previous: datetime | None = None
    for _ in range(count):
        fire = trigger.get_next_fire_time(previous, current)
        if fire is None:
            break
        times.append(fire)
        previous = current = fire
    return times


class BackupScheduler:
    """Trigger the backup pipeline on a cron schedule and once at startup."""

    def __init__(
        self,
        settings: BackupSettings,
        pipeline: BackupPipeline,
        *,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        """Validate the schedule and prepare the worker queue.

        Raises:
            ScheduleError: If the configured cron expression or timezone is invalid.
        """
        self.settings = settings
        self.pipeline = pipeline
        self.trigger = build_cron_trigger(settings.cron_schedule, settings.cron_timezone)
        self.scheduler = scheduler or AsyncIOScheduler(
            job_defaults={
                "coalesce": True,  # Combine multiple pending executions into one
                "misfire_grace_time": 60,
            },
        )
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=1)
        self._worker_task: asyncio.Task[None] | None = None
        self.current_run: str | None = None
        self.last_result: BackupRunResult | None = None

    @property
    def running(self) -> bool:
        return self._worker_task is not None and not self._worker_task.done()

    def request_run(self, reason: str) -> bool:
        """Enqueue a pipeline run without waiting for it.

        Returns:
            False if a run was already pending and this request was dropped.
        """
        try:
            self._queue.put_nowait(reason)
        except asyncio.QueueFull:
            logger.warning(
                "A backup run is already pending; dropping %s trigger",
                reason,
                extra={"current_run": self.current_run},
            )
            return False
        logger.info("*** Backup task queued (%s) ***", reason)
        return True

    async def _on_trigger(self) -> None:
        self.request_run("scheduled")

    async def _worker(self) -> None:
        while True:
            reason = await self._queue.get()
            self.current_run = reason
            try:
                self.last_result = await self.pipeline.run()
            except Exception:
                # BackupPipeline.run() reports its own failures; keep the worker alive
                logger.exception("Backup run crashed", extra={"trigger": reason})
            finally:
                self.current_run = None
                self._queue.task_done()

    async def start(self) -> None:
        """Start the worker, arm the cron trigger and queue the startup run."""
        if self.running:
            logger.warning("Backup scheduler is already running")
            return

        self._worker_task = asyncio.create_task(self._worker(), name="backup-worker")

        self.scheduler.add_job(
            func=self._on_trigger,
            trigger=self.trigger,
            id=JOB_ID,
            name="Database backup",
            replace_existing=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()

        tz_note = f" in time zone {self.settings.cron_timezone}" if self.settings.cron_timezone else ""
        logger.info(
            "Scheduling backups with schedule '%s'%s",
            self.settings.cron_schedule,
            tz_note,
            extra={"next_run_time": self.get_job_status().get("next_run_time")},
        )

        if self.settings.run_on_startup:
            logger.info("Running an initial backup now")
            self.request_run("startup")

    async def stop(self) -> None:
        """Stop the scheduler and the worker.

        An in-flight run is cancelled; the pipeline still removes its local artifact.
        """
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

        if self._worker_task is not None:
            self._worker_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker_task
            self._worker_task = None
        logger.info("Backup scheduler stopped")

    async def wait_idle(self) -> None:
        """Wait until every queued run has finished."""
        await self._queue.join()

    async def serve_forever(self, stop_event: asyncio.Event | None = None) -> None:
        """Run until SIGINT/SIGTERM (or ``stop_event``) and then shut down."""
        stop = stop_event or asyncio.Event()
        loop = asyncio.get_running_loop()
        installed: list[signal.Signals] = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop.set)
            except (NotImplementedError, RuntimeError):
                continue
            installed.append(sig)

        await self.start()
        logger.info("The task scheduler is active. Waiting for the next scheduled run.")
        try:
            await stop.wait()
            logger.info("Shutdown requested")
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            await self.stop()

    def get_job_status(self) -> dict[str, Any]:
        """Get status of the backup job.

        Returns:
            Job information dictionary, empty if the job is not registered.
        """
        job = self.scheduler.get_job(JOB_ID)
        if job is None:
            return {}
        next_run = getattr(job, "next_run_time", None)
        return {
            "id": job.id,
            "name": job.name,
            "next_run_time": next_run.isoformat() if isinstance(next_run, datetime) else None,
            "trigger": str(job.trigger),
            "current_run": self.current_run,
            "pending": self._queue.qsize(),
        }

    def upcoming(self, count: int = 5) -> list[datetime]:
        return next_fire_times(self.trigger, count)


__all__ = [
    "JOB_ID",
    "BackupScheduler",
    "build_cron_trigger",
    "next_fire_times",
]
