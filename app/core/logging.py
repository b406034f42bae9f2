"""
Logging configuration for QuizBoard Backend
Readable console output in development, JSON lines in production and log files
"""

import functools
import inspect
import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from typing import Optional

from app.core.config import settings

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = set(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

# Libraries that are chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "redis")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, including any ``extra`` fields"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
            "environment": settings.ENVIRONMENT,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if settings.is_production():
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=settings.LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _file_handler(path: str) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> None:
    """
    Configure the root logger from settings

    Replaces any handlers already installed, so calling it twice is harmless.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    handlers = [_console_handler()]
    if settings.LOG_FILE:
        handlers.append(_file_handler(settings.LOG_FILE))
    root.handlers = handlers

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if settings.DEBUG else logging.WARNING)

    root.info(
        "Logging configured",
        extra={"log_level": settings.LOG_LEVEL, "log_file": settings.LOG_FILE},
    )


def log_execution_time(logger: Optional[logging.Logger] = None):
    """
    Decorator that logs how long a call took, at debug level

    Works on plain and async functions. Exceptions propagate unchanged.

    Args:
        logger: Logger to write to; defaults to the wrapped function's module logger
    """

    def decorator(func):
        log = logger or logging.getLogger(func.__module__)

        def report(started: float, error: Optional[Exception] = None) -> None:
            elapsed = round(time.perf_counter() - started, 4)
            if error is None:
                log.debug(f"Function {func.__name__} executed successfully", extra={"execution_time": elapsed})
            else:
                log.debug(
                    f"Function {func.__name__} failed",
                    extra={"execution_time": elapsed, "error": str(error)},
                )

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    report(started, e)
                    raise
                report(started)
                return result

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                report(started, e)
                raise
            report(started)
            return result

        return wrapper

    return decorator
