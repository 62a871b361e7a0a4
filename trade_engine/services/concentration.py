"""
Portfolio Concentration Calculator

Aggregates one trader's trades into per-symbol holdings.

For each symbol:
    net_position_value  buys add the estimated value, sells subtract it,
                        exchanges leave it unchanged
    absolute_value      sum of |estimated value| over every valued trade
    position_percentage 100 * absolute_value / total absolute value

Percentages are computed in full precision and only rounded when rendered.
Trades without an estimated value still count towards transaction_count.
Holdings are ordered by percentage descending, then symbol ascending.

Holdings are also rolled up by the sector of their stock, and the trade set
can be limited to a month, quarter or year ending today.

The calculator only sees trade records, so whether the trader exists is
supplied by the caller.
"""

from calendar import monthrange
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List, Optional

from trade_engine.errors import NotFoundError
from trade_engine.lib.logging_config import get_logger
from trade_engine.models import (
    ConcentrationRisk,
    FilterSpec,
    PortfolioConcentration,
    PortfolioHolding,
    SectorAllocation,
    Timeframe,
    Trade,
    TraderType,
    TransactionType,
)
from trade_engine.store.base import TradeStore, store_call

logger = get_logger(__name__, component="concentration")

TOP_N = 5

UNKNOWN_SECTOR = "Unknown"

_TIMEFRAME_MONTHS = {
    Timeframe.MONTH: 1,
    Timeframe.QUARTER: 3,
    Timeframe.YEAR: 12,
}

_SIGN = {
    TransactionType.BUY: 1,
    TransactionType.SELL: -1,
    TransactionType.EXCHANGE: 0,
}


def aggregate_holdings(trades: Iterable[Trade]) -> List[PortfolioHolding]:
    """Group trades by symbol and compute ordered holdings."""
    by_symbol: Dict[str, PortfolioHolding] = OrderedDict()

    for trade in trades:
        symbol = trade.ticker_symbol.upper()
        holding = by_symbol.get(symbol)
        if holding is None:
            holding = PortfolioHolding(
                symbol=symbol,
                net_position_value=0.0,
                absolute_value=0.0,
                transaction_count=0,
                latest_transaction=None,
            )
            by_symbol[symbol] = holding

        holding.transaction_count += 1
        if holding.latest_transaction is None or trade.transaction_date > holding.latest_transaction:
            holding.latest_transaction = trade.transaction_date

        if trade.estimated_value is None:
            continue
        holding.net_position_value += _SIGN[trade.transaction_type] * trade.estimated_value
        holding.absolute_value += abs(trade.estimated_value)

    holdings = list(by_symbol.values())
    total = sum(h.absolute_value for h in holdings)
    for holding in holdings:
        holding.position_percentage = 100.0 * holding.absolute_value / total if total > 0 else 0.0

    holdings.sort(key=lambda h: (-h.position_percentage, h.symbol))
    return holdings


def concentration_risk(holdings: List[PortfolioHolding]) -> ConcentrationRisk:
    """Herfindahl index and top-position metrics over ordered holdings."""
    total = sum(h.absolute_value for h in holdings)
    if not holdings or total <= 0:
        return ConcentrationRisk()

    weights = [h.absolute_value / total for h in holdings]
    hhi = sum(w * w for w in weights)
    largest = weights[0] * 100
    top_n = sum(weights[:TOP_N]) * 100

    return ConcentrationRisk(
        herfindahl_index=hhi,
        diversification_ratio=max(0.0, 100 - hhi * 100),
        largest_position=largest,
        top5_concentration=top_n,
        concentration_score=min(100.0, max(0.0, largest + top_n / 2)),
    )


def _months_back(today: date, months: int) -> date:
    """Same day ``months`` earlier, clamped to the end of shorter months."""
    index = today.year * 12 + today.month - 1 - months
    year, month = divmod(index, 12)
    return date(year, month + 1, min(today.day, monthrange(year, month + 1)[1]))


def timeframe_start(timeframe: Timeframe, today: date) -> Optional[date]:
    """First day included in ``timeframe``; None for the whole history."""
    months = _TIMEFRAME_MONTHS.get(timeframe)
    if months is None:
        return None
    return _months_back(today, months)


def sector_distribution(holdings: List[PortfolioHolding]) -> List[SectorAllocation]:
    """Absolute value per sector, largest first; unknown sectors pool under 'Unknown'."""
    totals: Dict[str, float] = OrderedDict()
    counts: Dict[str, int] = {}
    for holding in holdings:
        sector = holding.sector or UNKNOWN_SECTOR
        totals[sector] = totals.get(sector, 0.0) + holding.absolute_value
        counts[sector] = counts.get(sector, 0) + 1

    grand_total = sum(totals.values())
    sectors = [
        SectorAllocation(
            sector=sector,
            value=value,
            percentage=100.0 * value / grand_total if grand_total > 0 else 0.0,
            position_count=counts[sector],
        )
        for sector, value in totals.items()
    ]
    sectors.sort(key=lambda s: (-s.value, s.sector))
    return sectors


class ConcentrationCalculator:
    """Percentage-of-portfolio breakdown for a single trader."""

    def __init__(self, store: TradeStore):
        self.store = store

    def concentrate(
        self,
        trader_id: str,
        trader_type: TraderType = TraderType.CONGRESSIONAL,
        trader_known: bool = True,
        timeframe: Timeframe = Timeframe.ALL,
        today: Optional[date] = None,
    ) -> PortfolioConcentration:
        """Compute the trader's holdings.

        Args:
            trader_id: Id of the trader
            trader_type: Variant the id belongs to
            trader_known: Whether the caller found the trader in reference data
            timeframe: Only trades dated within this window ending ``today`` count
            today: End of the window; defaults to the current date

        Returns:
            PortfolioConcentration, with empty holdings when the trader has no trades

        Raises:
            NotFoundError: If ``trader_known`` is False
            UpstreamUnavailable: If the store fails
        """
        if not trader_known:
            raise NotFoundError("Trader", trader_id)

        today = today or date.today()
        start = timeframe_start(timeframe, today)
        spec = FilterSpec(
            trader_id=trader_id,
            trader_type=trader_type,
            start_date=start,
            end_date=today if start is not None else None,
        )
        trades: List[Trade] = store_call("fetch_all_trades", self.store.fetch_all_trades, spec)

        holdings = aggregate_holdings(trades)
        if holdings:
            stocks = store_call("get_stocks", self.store.get_stocks, [h.symbol for h in holdings])
            for holding in holdings:
                stock = stocks.get(holding.symbol)
                if stock is not None:
                    holding.company_name = stock.company_name
                    holding.sector = stock.sector

        total = sum(h.absolute_value for h in holdings)
        logger.info(
            f"Concentration for {trader_type.value} trader {trader_id} ({timeframe.value}): "
            f"{len(trades)} trades across {len(holdings)} symbols"
        )
        return PortfolioConcentration(
            trader_id=trader_id,
            trader_type=trader_type,
            timeframe=timeframe,
            holdings=holdings,
            sector_distribution=sector_distribution(holdings),
            total_absolute_value=total,
            risk=concentration_risk(holdings),
        )
