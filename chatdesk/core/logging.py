"""Structured logging configuration for chatdesk."""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Context variable for request ID tracking
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName",
        "relativeCreated", "thread", "threadName", "exc_info",
        "exc_text", "stack_info", "request_id", "event_type", "taskName",
    }
)


class SensitiveDataFilter(logging.Filter):
    """Redact upstream credentials before they reach a handler."""

    SENSITIVE_KEYS = {
        "api_key",
        "api-key",
        "apikey",
        "chat_api_key",
        "authorization",
        "token",
        "secret",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._sanitize(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = self._sanitize(record.args)
            else:
                record.args = tuple(self._sanitize(arg) for arg in record.args)
        return True

    def _sanitize(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {
                k: "***REDACTED***"
                if isinstance(k, str) and k.lower() in self.SENSITIVE_KEYS
                else self._sanitize(v)
                for k, v in obj.items()
            }
        if isinstance(obj, (list, tuple)):
            return type(obj)(self._sanitize(item) for item in obj)
        if isinstance(obj, str) and "=" in obj:
            key, _, _ = obj.partition("=")
            if key.strip().lower() in self.SENSITIVE_KEYS:
                return f"{key}=***REDACTED***"
        return obj


class StructuredFormatter(logging.Formatter):
    """Text formatter that always carries request id and event type."""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_var.get() or "-"
        if not hasattr(record, "event_type"):
            record.event_type = "general"
        return super().format(record)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for production log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "request_id": request_id_var.get() or "-",
            "event_type": getattr(record, "event_type", "general"),
        }

        # Extra fields passed via ``extra=``
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    json_logs: bool = False,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Whether to output logs in JSON format (for production)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.addFilter(SensitiveDataFilter())

    if json_logs:
        console_handler.setFormatter(JsonFormatter())
    else:
        console_handler.setFormatter(
            StructuredFormatter(
                "%(asctime)s | %(levelname)-8s | %(request_id)s | "
                "%(name)s:%(funcName)s:%(lineno)d | %(message)s"
            )
        )

    root_logger.addHandler(console_handler)

    # Quieten chatty libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


def log_error(
    logger: logging.Logger,
    message: str,
    error: Exception | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    """
    Log an error with stack trace and context.

    Args:
        logger: Logger instance
        message: Error message
        error: Exception instance (optional)
        extra: Additional context data (optional)
    """
    extra_data = dict(extra or {})
    extra_data["event_type"] = extra_data.get("event_type", "error")

    if error is not None:
        logger.error(f"{message}: {error}", exc_info=error, extra=extra_data)
    else:
        logger.error(message, extra=extra_data)


def set_request_id(request_id: str) -> None:
    """Set request ID for the current context."""
    request_id_var.set(request_id)


def get_request_id() -> str | None:
    """Get request ID from the current context."""
    return request_id_var.get()


def clear_request_id() -> None:
    """Clear request ID from the current context."""
    request_id_var.set(None)
