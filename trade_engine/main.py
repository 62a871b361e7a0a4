"""
Trade Query Service

FastAPI service exposing filtered trade listings, politician/stock search and
portfolio concentration over disclosed congressional and insider trades.

Run with:
    uvicorn --factory trade_engine.main:create_app
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trade_engine.config import ServiceConfig
from trade_engine.errors import TradeEngineError, UpstreamUnavailable, ValidationError
from trade_engine.lib.logging_config import configure_logging, get_correlation_id
from trade_engine.middleware.auth import require_api_key
from trade_engine.middleware.correlation import CorrelationMiddleware
from trade_engine.routes import analytics, health, search, trades
from trade_engine.store.base import TradeStore
from trade_engine.store.memory import InMemoryTradeStore

logger = logging.getLogger(__name__)


def build_store(config: ServiceConfig) -> TradeStore:
    """Instantiate the configured store backend."""
    if config.store_backend == "memory":
        logger.warning("Using empty in-memory trade store")
        return InMemoryTradeStore()

    from trade_engine.store.supabase_store import SupabaseTradeStore

    return SupabaseTradeStore.from_config(config.supabase)


async def handle_engine_error(request: Request, exc: TradeEngineError) -> JSONResponse:
    """Map engine errors onto JSON responses."""
    if isinstance(exc, UpstreamUnavailable):
        logger.error(f"{request.method} {request.url.path}: {exc}")
    elif isinstance(exc, ValidationError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc}")

    body = exc.to_dict()
    body["correlation_id"] = get_correlation_id()
    return JSONResponse(status_code=exc.status_code, content=body)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting Trade Query Service (store={app.state.config.store_backend})")
    yield
    logger.info("Shutting down Trade Query Service")


def create_app(
    config: Optional[ServiceConfig] = None,
    store: Optional[TradeStore] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Service configuration; read from the environment when omitted
        store: Trade store; built from ``config`` when omitted
    """
    config = config or ServiceConfig.from_env()
    configure_logging(level=config.log_level, service_name="trade-engine", json_format=config.log_json)

    app = FastAPI(
        title="Trade Query Service",
        description="Search, filter and analyse disclosed congressional and insider trades",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.store = store if store is not None else build_store(config)

    app.add_middleware(CorrelationMiddleware)
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_methods=["GET"],
            allow_headers=["*"],
        )

    app.add_exception_handler(TradeEngineError, handle_engine_error)

    protected = [Depends(require_api_key)]
    app.include_router(health.router, tags=["health"])
    app.include_router(trades.router, prefix="/trades", tags=["trades"], dependencies=protected)
    app.include_router(search.router, prefix="/search", tags=["search"], dependencies=protected)
    app.include_router(
        analytics.router, prefix="/analytics", tags=["analytics"], dependencies=protected
    )

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": "trade-query",
            "status": "running",
            "endpoints": {
                "health": "/health",
                "trades": "GET /trades",
                "trade_summary": "GET /trades/summary",
                "trader_trades": "GET /trades/trader/{trader_id}",
                "stock_trades": "GET /trades/stock/{symbol}",
                "search": "GET /search?q=&type=&limit=",
                "suggestions": "GET /search/suggestions?q=",
                "portfolio": "GET /analytics/portfolio/{trader_id}",
            },
        }

    return app


def main() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "trade_engine.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
