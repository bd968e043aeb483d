"""
Logging utilities for the asset publisher.

Provides structured logging with entry/exit decorators, JSON formatting,
per-run identifiers, and consistent formatting across the publish pipeline.

Features:
    - Structured JSON logging for CI environments (LOG_FORMAT=json)
    - Run ID tracking across one publish run
    - Entry/exit decorators with timing (sync and async functions)
    - Colorized console output via coloredlogs

Example usage:
    >>> from asset_publisher.utils.logging import get_logger, set_run_id
    >>>
    >>> logger = get_logger(__name__)
    >>> set_run_id("build-1024")
    >>> logger.info("Publishing assets", extra={"asset_count": 12})
"""

import functools
import inspect
import json
import logging
import os
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, TypeVar, cast

import coloredlogs

F = TypeVar("F", bound=Callable[..., Any])

# Run ID for the publish run currently executing in this context
_run_id: ContextVar[Optional[str]] = ContextVar("run_id", default=None)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else came in via ``extra``
_RESERVED_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    ]
)


# ============================================================================
# Run ID Management
# ============================================================================

def get_run_id() -> str:
    """
    Get current run ID or generate a new one.

    Returns:
        Current run ID (a short UUID if none was set)
    """
    run_id = _run_id.get()
    if run_id is None:
        run_id = uuid.uuid4().hex[:12]
        _run_id.set(run_id)
    return run_id


def set_run_id(run_id: str) -> None:
    """Set the run ID for the current context."""
    _run_id.set(run_id)


def clear_run_id() -> None:
    """Clear the run ID for the current context."""
    _run_id.set(None)


# ============================================================================
# JSON Formatter
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Example output:
        {
            "timestamp": "2026-10-19T10:30:15.123456+00:00",
            "level": "INFO",
            "logger": "asset_publisher.publisher.publisher",
            "message": "Upload successful 1/3: static/app/main.js",
            "run_id": "1f2e3d4c5b6a",
            "extra": {"remote_key": "static/app/main.js"}
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": get_run_id(),
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", enable_colors: bool = True) -> None:
    """
    Configure global logging settings.

    Uses structured JSON when the LOG_FORMAT environment variable is "json",
    colorized text via coloredlogs otherwise.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_colors: Whether to colorize console output

    Example:
        >>> setup_logging(level="DEBUG")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    json_output = os.getenv("LOG_FORMAT", "text").lower() == "json"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    if json_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(console_handler)
    elif enable_colors:
        coloredlogs.install(
            level=log_level,
            fmt=LOG_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            logger=root_logger,
        )
    else:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(
            logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        )
        root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def _format_arguments(func: Callable[..., Any], args: Any, kwargs: Any) -> str:
    arg_names = func.__code__.co_varnames[: func.__code__.co_argcount]
    args_repr = [f"{name}={value!r}" for name, value in zip(arg_names, args)]
    kwargs_repr = [f"{key}={value!r}" for key, value in kwargs.items()]
    return ", ".join(args_repr + kwargs_repr)


def log_function_call(func: F) -> F:
    """
    Decorator that logs function entry, exit and errors at DEBUG level.

    Works for both plain functions and coroutine functions. Exceptions are
    logged with their type and re-raised unchanged.

    Example:
        >>> @log_function_call
        ... def compute(prefix: str, name: str) -> str:
        ...     return f"{prefix}/{name}"
    """
    logger = get_logger(func.__module__)

    def _enter(args: Any, kwargs: Any) -> datetime:
        logger.debug(
            f"ENTER {func.__name__}",
            extra={
                "function": func.__name__,
                "arguments": _format_arguments(func, args, kwargs),
                "event": "function_entry",
            },
        )
        return datetime.now()

    def _exit(start_time: datetime, result: Any) -> None:
        execution_time = (datetime.now() - start_time).total_seconds()
        logger.debug(
            f"EXIT {func.__name__} -> {result!r}",
            extra={
                "function": func.__name__,
                "duration_seconds": execution_time,
                "event": "function_exit",
                "status": "success",
            },
        )

    def _error(start_time: datetime, error: Exception) -> None:
        execution_time = (datetime.now() - start_time).total_seconds()
        logger.debug(
            f"ERROR {func.__name__} raised {type(error).__name__}: {error}",
            extra={
                "function": func.__name__,
                "duration_seconds": execution_time,
                "event": "function_error",
                "status": "error",
                "error_type": type(error).__name__,
            },
        )

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = _enter(args, kwargs)
            try:
                result = await func(*args, **kwargs)
            except Exception as error:
                _error(start_time, error)
                raise
            _exit(start_time, result)
            return result

        return cast(F, async_wrapper)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = _enter(args, kwargs)
        try:
            result = func(*args, **kwargs)
        except Exception as error:
            _error(start_time, error)
            raise
        _exit(start_time, result)
        return result

    return cast(F, wrapper)
