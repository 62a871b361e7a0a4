"""
API key authentication.

Caller identity is established here, before a request reaches the query
engine; the engine itself never re-checks it.

Keys are accepted from:
1. X-API-Key header (preferred)
2. Authorization: Bearer <key> header

Environment Variables:
- TRADE_API_KEY: key required for data endpoints
- TRADE_AUTH_DISABLED: set to "true" to disable auth (dev only)
"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from trade_engine.config import ServiceConfig

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
api_key_bearer = APIKeyHeader(name="Authorization", auto_error=False)


def constant_time_compare(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def extract_api_key(
    header_key: Optional[str] = None,
    bearer_header: Optional[str] = None,
) -> Optional[str]:
    """Pick the API key from the X-API-Key header, then the Bearer header."""
    if header_key:
        return header_key
    if bearer_header:
        if bearer_header.lower().startswith("bearer "):
            return bearer_header[7:].strip()
        return bearer_header.strip()
    return None


async def get_api_key(
    header_key: Optional[str] = Security(api_key_header),
    bearer_header: Optional[str] = Security(api_key_bearer),
) -> Optional[str]:
    return extract_api_key(header_key, bearer_header)


async def require_api_key(
    request: Request,
    api_key: Optional[str] = Depends(get_api_key),
) -> str:
    """FastAPI dependency rejecting requests without a valid API key.

    Raises HTTPException 401 when the key is missing or wrong.
    """
    config: ServiceConfig = request.app.state.config

    if config.auth_disabled:
        return "auth_disabled"

    if not config.api_key:
        logger.error("TRADE_API_KEY is not configured; rejecting request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Service API key is not configured.",
        )

    if not api_key:
        logger.warning(
            "API request without authentication",
            extra={"extra_fields": {"path": request.url.path, "method": request.method}},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required. Provide via X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not constant_time_compare(api_key, config.api_key):
        logger.warning(
            "Invalid API key provided",
            extra={"extra_fields": {"path": request.url.path, "key_prefix": api_key[:4] + "***"}},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key
