"""Logging configuration setup.

Uses:
- dictConfig for the root logger level and formatters
- QueueHandler + QueueListener so subprocess output logging never blocks
  the event loop on slow disks or pipes
- All handlers on the root logger (child loggers propagate)
- Text output for humans by default, JSONL for log collectors
"""

from __future__ import annotations

import atexit
import logging
import logging.config
import time
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from backup_service.infra.logging.formatters import ExtraTextFormatter, JSONFormatter

if TYPE_CHECKING:
    from backup_service.core.settings.logs import LoggingSettings

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Global queue and listener for async logging
_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_atexit_registered = False
_LOGGING_INITIALIZED = False
logger = logging.getLogger(__name__)


def complete(max_wait: float = 5.0) -> None:
    """Wait for all queued log records to be processed.

    Blocks until the queue drains or ``max_wait`` seconds pass. Call before
    exiting to make sure the last records of a backup run reach the handlers.
    """
    if _log_queue is None or _listener is None:
        return

    start = time.monotonic()
    while not _log_queue.empty() and (time.monotonic() - start) < max_wait:
        time.sleep(0.01)

    # Give the listener a moment to write the final record
    time.sleep(0.05)


def shutdown() -> None:
    """Flush pending records and stop the QueueListener.

    Registered with ``atexit`` on first configuration.
    """
    global _log_queue, _listener

    if _listener is not None:
        complete()
        _listener.stop()
        for handler in _listener.handlers:
            handler.close()
        _listener = None

    _log_queue = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from backup_service.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), **configure_kwargs}

    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    service_name: str = "backup-service",
    json_logs: bool = False,
    console_enabled: bool = True,
    file_path: str | Path | None = None,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    capture_warnings: bool = True,
    **kwargs: Any,
) -> None:
    """Configure logging with dictConfig and the QueueHandler pattern.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Static ``service`` field added to JSON records.
        json_logs: Emit JSON Lines instead of text.
        console_enabled: Enable console/stderr logging.
        file_path: Path to log file. None disables file logging.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated log files to keep.
        capture_warnings: Forward Python warnings to logging system.
        **kwargs: Ignored; logged at DEBUG so typos are visible.

    Example:
        from backup_service.core.settings import get_logging_settings

        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    global _log_queue, _listener, _atexit_registered

    # Replace any previous listener so reconfiguration does not duplicate output
    if _listener is not None:
        shutdown()

    logging.captureWarnings(capture_warnings)

    path = Path(file_path) if file_path else None
    if path:
        path.parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {
                "level": log_level.upper(),
                "handlers": [],  # QueueHandler added below
            },
        }
    )

    handlers: list[logging.Handler] = []
    formatter = _build_formatter(json_logs=json_logs, service_name=service_name)

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if path:
        file_handler = RotatingFileHandler(
            path,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        logging.getLogger().addHandler(logging.NullHandler())
        return

    _log_queue = Queue()
    _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
    _listener.start()
    if not _atexit_registered:
        atexit.register(shutdown)
        _atexit_registered = True

    logging.getLogger().addHandler(QueueHandler(_log_queue))

    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs)))


def _build_formatter(json_logs: bool, service_name: str) -> logging.Formatter:
    if json_logs:
        return JSONFormatter(
            fmt_keys={"level": "levelname", "logger": "name", "message": "message"},
            static={"service": service_name},
        )
    return ExtraTextFormatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATEFMT)
