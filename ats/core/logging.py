"""Structured logging configuration.

Configures the root logger with a structured format including timestamp,
level, and module name.  Context passed through ``extra={...}`` (job ids,
snapshot paths, error messages) is appended to the line as ``key=value``
pairs.  The log level is controlled by ``settings.LOG_LEVEL``.
"""

import logging
import sys

from ats.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# supabase-py talks through httpx; its request lines are noise at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "uvicorn.access")

_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class ContextFormatter(logging.Formatter):
    """Formatter that renders ``extra`` fields after the message."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{line} | {pairs}"


def setup_logging(level: str | None = None) -> None:
    """Configure structured logging for the application.

    Sets the root logger level from *level* (default ``settings.LOG_LEVEL``)
    and installs a single ``StreamHandler`` writing to *stdout*.
    """
    name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, name, logging.INFO)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(ContextFormatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))

    root = logging.getLogger()
    root.setLevel(log_level)

    # Replace rather than stack handlers on repeated calls
    root.handlers.clear()
    root.addHandler(handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)
