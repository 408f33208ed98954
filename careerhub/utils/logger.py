"""
Logging setup for the CareerHub app.

Every record carries the HTTP method and path of the request it was logged
from (``-`` outside a request), so backend, cache and monitor messages can
be traced to the route that caused them.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from flask import has_request_context, request


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_line)s] %(message)s"

# Third-party loggers that drown the app's own messages at DEBUG
QUIET_LOGGERS = ("urllib3", "fontTools", "PIL")


class RequestContextFilter(logging.Filter):
    """Attach ``request_line`` ("GET /api/jobs") to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_line = f"{request.method} {request.path}"
        else:
            record.request_line = "-"
        return True


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """
    Configure the root logger for the web app.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path; rotated at ``max_bytes``
        format_string: Optional custom format string
        max_bytes: Size at which the log file rolls over
        backup_count: Rotated files to keep

    Raises:
        ValueError: If ``level`` is not a logging level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        )

    context = RequestContextFilter()
    for handler in handlers:
        handler.addFilter(context)

    logging.basicConfig(
        level=numeric_level,
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers,
        force=True
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; call with ``__name__``."""
    return logging.getLogger(name)
