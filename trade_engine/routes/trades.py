"""Trade listing endpoints."""

import logging

from fastapi import APIRouter, Depends, Request

from trade_engine.config import ServiceConfig
from trade_engine.models import TraderType
from trade_engine.routes.deps import get_config, get_store
from trade_engine.routes.schemas import (
    StockTradesResponse,
    TradePageResponse,
    TradeSummaryResponse,
    TraderTradesResponse,
)
from trade_engine.services import EntityResolver, TradeQueryPlanner, parse_filters, parse_sort
from trade_engine.services.filters import parse_enum, parse_symbol, parse_trader_id
from trade_engine.store.base import TradeStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _enriched_page(store: TradeStore, page):
    page.enriched = EntityResolver(store).resolve(page.trades)
    return page.to_dict()


@router.get("", response_model=TradePageResponse)
def list_trades(
    request: Request,
    store: TradeStore = Depends(get_store),
    config: ServiceConfig = Depends(get_config),
):
    """
    List trades matching the query filters.

    Filters: startDate, endDate, transactionType, minValue, maxValue, symbol,
    traderId, traderType. Paging: page, limit (1-100). Sorting: sortBy,
    sortOrder.
    """
    params = dict(request.query_params)
    spec = parse_filters(params, default_limit=config.default_page_size)
    sort_field, sort_direction = parse_sort(params)

    page = TradeQueryPlanner(store).query(spec, sort_field, sort_direction)
    return _enriched_page(store, page)


@router.get("/summary", response_model=TradeSummaryResponse)
def trade_summary(
    request: Request,
    store: TradeStore = Depends(get_store),
    config: ServiceConfig = Depends(get_config),
):
    """Aggregate statistics over every trade matching the filters."""
    spec = parse_filters(dict(request.query_params), default_limit=config.default_page_size)
    return TradeQueryPlanner(store).summarize(spec).to_dict()


@router.get("/trader/{trader_id}", response_model=TraderTradesResponse)
def trader_trades(
    trader_id: str,
    request: Request,
    store: TradeStore = Depends(get_store),
    config: ServiceConfig = Depends(get_config),
):
    """Trades of one congressional member or corporate insider."""
    params = dict(request.query_params)
    trader_id = parse_trader_id("traderId", trader_id)
    trader_type = parse_enum("traderType", params.pop("traderType", "congressional"), TraderType)
    params.pop("traderId", None)

    spec = parse_filters(params, default_limit=config.default_page_size)
    sort_field, sort_direction = parse_sort(params)

    trader, page = TradeQueryPlanner(store).trader_trades(
        trader_id, trader_type, spec, sort_field, sort_direction
    )
    result = _enriched_page(store, page)
    result["trader"] = trader.to_dict()
    return result


@router.get("/stock/{symbol}", response_model=StockTradesResponse)
def stock_trades(
    symbol: str,
    request: Request,
    store: TradeStore = Depends(get_store),
    config: ServiceConfig = Depends(get_config),
):
    """Trades in one stock; the symbol is case-insensitive."""
    params = dict(request.query_params)
    params.pop("symbol", None)
    params.pop("tickerSymbol", None)
    symbol = parse_symbol("symbol", symbol)

    spec = parse_filters(params, default_limit=config.default_page_size)
    sort_field, sort_direction = parse_sort(params)

    stock, page = TradeQueryPlanner(store).stock_trades(symbol, spec, sort_field, sort_direction)
    result = _enriched_page(store, page)
    result["stock"] = stock.to_dict()
    return result
