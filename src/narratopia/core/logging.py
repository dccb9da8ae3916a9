# src/narratopia/core/logging.py
"""Logging helpers for Narratopia."""

import json
import logging
import sys

from rich.logging import RichHandler

from narratopia.config import config

_LOGGING_INITIALIZED = False

# Attributes every LogRecord carries; anything else was passed via ``extra=``.
_RESERVED_ATTRS = frozenset(
    {
        "args",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            # Avoid non-serializable objects
            try:
                json.dumps(value)
                data[key] = value
            except (TypeError, ValueError):
                data[key] = str(value)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def _plain_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    return handler


def init_logging(
    level: str | None = None,
    format: str | None = None,
    include_trace: bool | None = None,
) -> None:
    """
    Initialize global logging configuration for Narratopia.

    Defaults come from the ``system`` config section:
      - NARRATOPIA_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR|CRITICAL (default INFO)
      - NARRATOPIA_LOG_FORMAT: plain|rich|json (default rich)
      - NARRATOPIA_LOG_INCLUDE_TRACE: bool (default False)
    """
    global _LOGGING_INITIALIZED
    if _LOGGING_INITIALIZED:
        return

    resolved_level = (level or config.system.log_level or "INFO").upper()
    resolved_format = (format or config.system.log_format or "rich").lower()
    resolved_include_trace = (
        include_trace if include_trace is not None else config.system.log_include_trace
    )

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = level_map.get(resolved_level, logging.INFO)

    # Root logger cleanup
    root = logging.getLogger()
    root.setLevel(log_level)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler: logging.Handler
    if resolved_format == "json":
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(JsonFormatter())
    elif resolved_format == "rich":
        handler = RichHandler(
            level=log_level,
            rich_tracebacks=resolved_include_trace,
            show_time=True,
            show_level=True,
            show_path=False,
            markup=False,
        )
        # RichHandler shows time/level itself
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        resolved_format = "plain"
        handler = _plain_handler(log_level)

    root.addHandler(handler)

    # Reduce noisy libraries if needed
    for noisy in ("uvicorn", "asyncio", "sqlalchemy.engine", "alembic"):
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

    from narratopia import __version__

    logging.getLogger("narratopia.start").info(
        "Initializing logging | version=%s level=%s format=%s include_trace=%s",
        __version__,
        resolved_level,
        resolved_format,
        str(resolved_include_trace),
    )

    _LOGGING_INITIALIZED = True


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger with the provided name, or the package logger if None.
    """
    return logging.getLogger(name or "narratopia")


__all__ = ["JsonFormatter", "init_logging", "get_logger"]
