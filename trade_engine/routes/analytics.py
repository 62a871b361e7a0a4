"""Portfolio analytics endpoints."""

import logging

from fastapi import APIRouter, Depends

from trade_engine.models import Timeframe, TraderType
from trade_engine.routes.deps import get_store
from trade_engine.routes.schemas import PortfolioResponse
from trade_engine.services import ConcentrationCalculator, find_trader
from trade_engine.services.filters import parse_enum, parse_trader_id
from trade_engine.store.base import TradeStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/portfolio/{trader_id}", response_model=PortfolioResponse)
def portfolio_concentration(
    trader_id: str,
    traderType: str = "congressional",
    timeframe: str = "year",
    store: TradeStore = Depends(get_store),
):
    """
    Percentage-of-portfolio breakdown for one trader.

    Percentages are each symbol's share of the trader's total absolute trade
    value. An existing trader with no trades gets an empty holdings list; an
    unknown trader id is a 404.

    Only trades from the last month, quarter or year count, or every trade
    with `timeframe=all`. Holdings are also grouped by sector.
    """
    trader_id = parse_trader_id("traderId", trader_id)
    trader_type = parse_enum("traderType", traderType, TraderType)
    window = parse_enum("timeframe", timeframe, Timeframe)

    trader = find_trader(store, trader_id, trader_type)
    result = ConcentrationCalculator(store).concentrate(
        trader_id, trader_type, trader_known=trader is not None, timeframe=window
    )

    body = result.to_dict()
    body["traderName"] = trader.name
    return body
