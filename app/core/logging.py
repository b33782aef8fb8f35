"""
app/core/logging.py

Purpose: Logging configuration

- JSON lines in production, colored single lines in development
- Per-request context (request_id, user_id, ...) carried in a ContextVar,
  so it stays with its own request across awaits
- Phone numbers are masked before they reach any handler
"""

import logging
import sys
import json
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from app.core.config import settings


# Record attributes copied into the log output when present
CONTEXT_FIELDS = ("request_id", "user_id", "role", "document_id", "file_name", "phone_number")

_log_context: ContextVar[Dict[str, Any]] = ContextVar("docportal_log_context", default={})


def mask_phone_number(phone_number: Optional[str]) -> str:
    """
    Keeps the country prefix and last 4 digits: +15551234567 -> +1******4567
    """
    if not phone_number:
        return ""
    if len(phone_number) <= 6:
        return "*" * len(phone_number)
    return f"{phone_number[:2]}{'*' * (len(phone_number) - 6)}{phone_number[-4:]}"


class ContextFilter(logging.Filter):
    """
    Copies the current request's context onto each record and masks
    phone numbers. Values passed via extra= win over the context.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)

        phone_number = getattr(record, "phone_number", None)
        if phone_number:
            record.phone_number = mask_phone_number(str(phone_number))

        return True


def _context_of(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line for log aggregation in production.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context_of(record),
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["error"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "stack": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str, ensure_ascii=False)


class DevelopmentFormatter(logging.Formatter):
    """
    Human-readable formatter for development environment.
    """

    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        message = f"{color}[{timestamp}] {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        context = _context_of(record)
        if context:
            message += " [" + ", ".join(f"{key}={value}" for key, value in context.items()) + "]"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


def setup_logging():
    """
    Configures application-wide logging with appropriate formatters.
    Uses JSON format in production, human-readable in development.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if settings.is_production else DevelopmentFormatter())
    handler.addFilter(ContextFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Set third-party loggers to WARNING to reduce noise
    for noisy in ("motor", "pymongo", "multipart", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = get_logger("core.logging")
    logger.info(f"Logging configured ({settings.ENVIRONMENT}, level={settings.LOG_LEVEL})")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger under the "docportal" namespace
    """
    return logging.getLogger(f"docportal.{name}")


class LogContext:
    """
    Adds fields to every log line written inside the block, including
    lines written by code it awaits.

    Usage:
        with LogContext(request_id=request_id):
            response = await call_next(request)
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self._token = None

    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
