"""Request-aware logging service.

Console output plus a persistent server log. Every record is stamped with
the id of the HTTP request that produced it, so the lines of one chat turn
(model calls, tool calls, engine requests) can be followed together.

Log structure:
    ~/.automation-console/logs/
    └── server.log
"""

import logging
import sys
from contextvars import ContextVar
from typing import Optional

from automation_console.app.config import LOGS_DIR

# Context variable for request-aware logging
_current_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(request_id)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def ensure_log_dirs() -> None:
    """Create log directories if they don't exist."""
    LOGS_DIR.mkdir(parents=True, exist_ok=True)


class RequestContextFilter(logging.Filter):
    """Attach the current request id (or ``-``) to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _current_request_id.get() or "-"
        return True


class RequestLogger:
    """Context manager for request-scoped logging."""

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id
        self._token = None

    def __enter__(self) -> "RequestLogger":
        if self.request_id:
            self._token = _current_request_id.set(self.request_id)
        return self

    def __exit__(self, *args) -> None:
        if self._token:
            _current_request_id.reset(self._token)


def setup_logging(level: int = logging.INFO, log_to_file: bool = True) -> None:
    """Configure logging with console and server file output.

    Call this once at application startup.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    context_filter = RequestContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.addFilter(context_filter)
    console_handler.setFormatter(
        logging.Formatter("%(levelname)-7s | %(request_id)s | %(name)s - %(message)s")
    )
    root_logger.addHandler(console_handler)

    if log_to_file:
        ensure_log_dirs()
        file_handler = logging.FileHandler(LOGS_DIR / "server.log", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.addFilter(context_filter)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    for noisy in ("httpx", "httpcore", "uvicorn.access", "googleapiclient", "anthropic", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.info(f"Logging initialized. Logs dir: {LOGS_DIR if log_to_file else '(console only)'}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
