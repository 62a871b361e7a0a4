"""
Correlation ID middleware for FastAPI.

Reads the caller's correlation ID (or creates one), exposes it to logging for
the lifetime of the request, and echoes it back in the response headers.
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from trade_engine.lib.logging_config import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Tag every request with a correlation ID and log its timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER)
            or request.headers.get(REQUEST_ID_HEADER)
            or str(uuid.uuid4())
        )
        set_correlation_id(correlation_id)

        start = time.perf_counter()
        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "query": str(request.query_params),
                },
            },
        )

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                f"Request completed: {request.method} {request.url.path} "
                f"- {response.status_code} ({duration_ms:.2f}ms)",
                extra={
                    "extra_fields": {
                        "status_code": response.status_code,
                        "duration_ms": round(duration_ms, 2),
                    },
                },
            )
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response

        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)",
                exc_info=True,
            )
            raise

        finally:
            clear_correlation_id()
