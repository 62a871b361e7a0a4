"""Request-scoped dependencies shared by the routers."""

from fastapi import Request

from trade_engine.config import ServiceConfig
from trade_engine.store.base import TradeStore


def get_store(request: Request) -> TradeStore:
    return request.app.state.store


def get_config(request: Request) -> ServiceConfig:
    return request.app.state.config
