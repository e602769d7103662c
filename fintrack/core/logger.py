import json
import logging
import os
from collections import OrderedDict
from logging import Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog

from .constants import UNLOGGED_PATHS


def default_formatter(fmt: Optional[str] = None) -> logging.Formatter:
    """Returns a logging formatter with a default format if none is specified."""
    default_fmt = "[%(asctime)s] %(levelname)s: %(name)s: %(message)s"
    return logging.Formatter(fmt or default_fmt)


class RequestFilter(logging.Filter):
    """Filter to drop request logs for noisy paths (docs, favicon, OpenAPI schema)."""

    def __init__(self, ignored_paths=None):
        super().__init__()
        self.ignored_paths = set(ignored_paths) if ignored_paths is not None else set(UNLOGGED_PATHS)

    def filter(self, record: logging.LogRecord) -> bool:
        """Return False for request logs whose ``path`` is ignored.

        structlog hands the handler a rendered JSON line, so the path is read
        back out of the message. Plain-text records fall back to a ``path``
        passed through ``extra``; anything else passes through.
        """
        path = getattr(record, "path", None)
        if path is None:
            try:
                log_dict = json.loads(record.getMessage())
            except (TypeError, ValueError):
                log_dict = None
            if isinstance(log_dict, dict):
                path = log_dict.get("path")
        return not (isinstance(path, str) and path in self.ignored_paths)


def setup_logger(
    name: str = "fintrack",
    *,
    log_dir: Optional[str | Path] = None,
    logger_level: int | str = logging.DEBUG,
    stream_level: int | str = logging.ERROR,
    add_stream_handler: bool = True,
    file_level: int | str = logging.DEBUG,
    add_file_handler: bool = True,
    propagate: bool = False,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    use_structlog: bool = False,
    structlog_json: bool = True,
    structlog_bind: Optional[dict] = None,
) -> Logger | structlog.stdlib.BoundLogger:
    """Configure and initialize logging for FinTrack components.

    Sets up a rotating file handler and a console handler on the given logger.
    The log file defaults to ~/.cache/fintrack/logs/{name}.log.

    Args:
        name: Logger name, defaults to "fintrack".
        log_dir: Custom directory for the log file.
        logger_level: Overall logger level.
        stream_level: StreamHandler level.
        add_stream_handler: Whether to add a stream handler.
        file_level: FileHandler level.
        add_file_handler: Whether to add a file handler.
        propagate: Whether the logger should propagate messages to ancestor loggers.
        max_bytes: Maximum size in bytes before rotating the log file.
        backup_count: Number of backup files to retain.
        use_structlog: If True, configure and return a structlog BoundLogger.
        structlog_json: If True, render JSON; otherwise use the console renderer.
        structlog_bind: Fields to bind on the returned structlog logger.

    Returns:
        Logger | structlog.stdlib.BoundLogger: Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(logger_level)
    logger.propagate = propagate

    log_dir = os.path.expanduser(str(log_dir or "~/.cache/fintrack/logs"))
    log_file_path = os.path.join(log_dir, f"{name}.log")

    if add_file_handler:
        os.makedirs(Path(log_file_path).parent, exist_ok=True)

    # structlog renders the full line itself
    formatter = logging.Formatter("%(message)s") if use_structlog else default_formatter()

    if add_stream_handler:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(stream_level)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if add_file_handler:
        file_handler = RotatingFileHandler(
            filename=log_file_path, maxBytes=max_bytes, backupCount=backup_count, mode="a"
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(RequestFilter())
        logger.addHandler(file_handler)

    if not use_structlog:
        return logger

    renderer = structlog.processors.JSONRenderer() if structlog_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _enforce_key_order_processor(
                [
                    "timestamp",
                    "event",
                    "service",
                    "request_id",
                    "method",
                    "path",
                    "status_code",
                    "duration_ms",
                    "level",
                    "logger",
                ]
            ),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    bound_logger = structlog.get_logger(name)
    if structlog_bind:
        bound_logger = bound_logger.bind(**structlog_bind)
    return bound_logger


def _enforce_key_order_processor(key_order: list[str]):
    def _processor(_logger, _method_name, event_dict):
        ordered = OrderedDict()
        for key in key_order:
            if key in event_dict:
                ordered[key] = event_dict.pop(key)
        for k in sorted(event_dict.keys()):
            ordered[k] = event_dict[k]
        return ordered

    return _processor


def get_logger(name: str | None = "fintrack", **kwargs) -> Logger | structlog.stdlib.BoundLogger:
    """
    Create or retrieve a named logger under the "fintrack" namespace.

    Example:
        .. code-block:: python

            from fintrack.core.logger import get_logger

            logger = get_logger("repositories.goal", use_structlog=True)
            logger.info("Goal progress rejected", goal_id="665f...", reason="exceeds target")
    """
    if not name:
        name = "fintrack"
    full_name = name if name.startswith("fintrack") else f"fintrack.{name}"
    kwargs.setdefault("propagate", True)
    return setup_logger(full_name, **kwargs)
