"""
Structured logging setup for all modules.

Every record is one JSON object on stdout (and in a rotating file when LOG_DIR
is set). The active job's id is attached automatically inside job_context().
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Iterator, List, Optional
from uuid import UUID

from reelsmith.shared.config import Settings, settings

LOG_FILE_NAME = "reelsmith.log"
LOG_FILE_MAX_BYTES = 100 * 1024 * 1024
LOG_FILE_BACKUPS = 5

job_id_context: ContextVar[Optional[UUID]] = ContextVar("job_id", default=None)

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _json_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    # UUIDs, paths and command lists stay readable as one string
    return str(value)


class JSONFormatter(logging.Formatter):
    """Render a record and its extra fields as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }

        job_id = job_id_context.get()
        if job_id is not None:
            entry["job_id"] = str(job_id)

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            entry[key] = _json_value(value)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def build_handlers(config: Settings) -> List[logging.Handler]:
    """Console handler always; a rotating file handler when config.log_dir is set."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_dir is not None:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            config.log_dir / LOG_FILE_NAME,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS
        ))
    for handler in handlers:
        handler.setFormatter(JSONFormatter())
    return handlers


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (e.g., "slideshow.executor")

    Returns:
        Logger configured from the process-wide settings (handlers added once)
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.getLevelName(settings.log_level.upper()))
    for handler in build_handlers(settings):
        logger.addHandler(handler)
    return logger


@contextmanager
def job_context(job_id: Optional[UUID]) -> Iterator[Optional[UUID]]:
    """
    Attach job_id to every record logged inside the block.

    The previous value is restored on exit, so nested or concurrent jobs
    never see each other's id.
    """
    token = job_id_context.set(job_id)
    try:
        yield job_id
    finally:
        job_id_context.reset(token)


def get_job_id() -> Optional[UUID]:
    """Get current job_id from context."""
    return job_id_context.get()
