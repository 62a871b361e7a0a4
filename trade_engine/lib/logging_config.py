"""
Structured logging with correlation ID support.

Log records are emitted as JSON lines carrying the request correlation ID,
so a single query can be traced from the HTTP layer down to the store.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Async-safe and thread-safe
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "urllib3", "asyncio")


def get_correlation_id() -> str:
    """Return the current correlation ID, creating one if unset."""
    cid = correlation_id_var.get()
    if cid is None:
        cid = str(uuid.uuid4())
        correlation_id_var.set(cid)
    return cid


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    correlation_id_var.set(None)


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def __init__(self, service_name: str = "trade-engine"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        correlation_id = correlation_id_var.get()
        if correlation_id:
            entry["correlation_id"] = correlation_id

        entry["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            entry["extra"] = record.extra_fields

        return json.dumps(entry, default=str)


class CorrelationFilter(logging.Filter):
    """Populate ``record.correlation_id`` for the plain-text formatter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id_var.get() or "-"
        return True


class CorrelationLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches the correlation ID and bound context."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple[str, Dict[str, Any]]:
        extra = kwargs.get("extra", {})

        correlation_id = correlation_id_var.get()
        if correlation_id:
            extra["correlation_id"] = correlation_id

        if self.extra:
            extra.update(self.extra)

        extra["extra_fields"] = {k: v for k, v in extra.items() if k != "extra_fields"}
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, **extra: Any) -> CorrelationLoggerAdapter:
    """Get a logger that includes the correlation ID and ``extra`` in every record.

    Args:
        name: Logger name (typically __name__)
        **extra: Context bound to all messages from this logger
    """
    return CorrelationLoggerAdapter(logging.getLogger(name), extra)


def configure_logging(
    level: int = logging.INFO,
    service_name: str = "trade-engine",
    json_format: bool = True,
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level: Logging level
        service_name: Service name written into every JSON record
        json_format: JSON lines for production, readable text for development
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if json_format:
        formatter = StructuredFormatter(service_name=service_name)
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | [%(correlation_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.addFilter(CorrelationFilter())

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """Log ``message`` with ad-hoc structured fields."""
    extra: Dict[str, Any] = {"extra_fields": context}
    correlation_id = correlation_id_var.get()
    if correlation_id:
        extra["correlation_id"] = correlation_id
    logger.log(level, message, extra=extra)
