"""Structured logging for tabular-compare.

structlog renders every event to a plain string which is handed to the
standard library. The console gets it through a Rich handler on stderr; an
optional log file gets one JSON document per line.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

import structlog
from rich.console import Console
from rich.logging import RichHandler
from structlog.typing import EventDict, WrappedLogger

from tabular_compare import __version__

APP_NAME = "tabular-compare"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp each event with the application name and version."""
    event_dict["app"] = APP_NAME
    event_dict["version"] = __version__
    return event_dict


def _level_number(name: str | None, fallback: int) -> int:
    if not name:
        return fallback
    return logging.getLevelName(name.upper()) if name.upper() in LOG_LEVELS else fallback


class JSONFileFormatter(logging.Formatter):
    """Writes each record as a single JSON line.

    The message is the text structlog already rendered, minus any colour codes.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": _ANSI_ESCAPE.sub("", record.getMessage()),
            "app": APP_NAME,
            "version": __version__,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _console_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    return handler


def _file_handler(log_file: str, level: int, log_format: str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path)
    handler.setLevel(level)
    handler.setFormatter(
        JSONFileFormatter() if log_format == "json" else logging.Formatter("%(message)s")
    )
    return handler


def configure_logging(
    level: str = "WARNING",
    log_format: str = "json",
    log_file: str | None = None,
    file_level: str | None = None,
) -> None:
    """Set up structlog and the console and file handlers.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Console level name
        log_format: 'json' or 'console', applies to the log file only
        log_file: Where to write the log file, if anywhere
        file_level: File level name (DEBUG if not given)
    """
    console_level = _level_number(level, logging.WARNING)
    file_log_level = _level_number(file_level, logging.DEBUG)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    root.addHandler(_console_handler(console_level))
    threshold = console_level
    if log_file:
        root.addHandler(_file_handler(log_file, file_log_level, log_format))
        threshold = min(console_level, file_log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            add_app_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            # Rich colours the console; the renderer stays plain
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, usually named after the calling module."""
    return structlog.get_logger(name)


def log_comparison_summary(
    logger: structlog.stdlib.BoundLogger,
    status_counts: dict[str, int],
    **extra: Any,
) -> None:
    """Log the per-status node counts of a finished comparison.

    Args:
        logger: Logger to write to
        status_counts: Number of nodes per status name
        **extra: Further key/value context
    """
    total = sum(status_counts.values())
    logger.info(
        "comparison_summary",
        total=total,
        differences=total - status_counts.get("SameDefinition", 0),
        **status_counts,
        **extra,
    )


def log_error(
    logger: structlog.stdlib.BoundLogger,
    error: Exception,
    context: str,
    **extra: Any,
) -> None:
    """Log an exception together with where it happened."""
    logger.error(
        "error_occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        context=context,
        exc_info=True,
        **extra,
    )
