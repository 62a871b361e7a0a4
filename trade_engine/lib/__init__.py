"""
Shared library utilities.

- logging_config: structured JSON logging with request correlation IDs
"""

from trade_engine.lib.logging_config import (
    configure_logging,
    get_correlation_id,
    get_logger,
    log_with_context,
)

__all__ = [
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "log_with_context",
]
