"""
Trade Query Planner

Runs a validated FilterSpec against the trade store and returns one page of
trades plus the size of the whole filtered set.

Cost per query is one filtered page fetch and one count. Ordering is the
requested sort key with the trade id as tie-break, so repeated calls against
unchanged data page identically.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from trade_engine.errors import NotFoundError
from trade_engine.lib.logging_config import log_with_context
from trade_engine.models import (
    EnrichedTrade,
    FilterSpec,
    SortDirection,
    SortField,
    Stock,
    Trade,
    Trader,
    TraderType,
    TradeSummary,
    TransactionType,
)
from trade_engine.services.entity_resolver import find_trader
from trade_engine.store.base import TradeStore, store_call

logger = logging.getLogger(__name__)


@dataclass
class TradePage:
    """One page of a filtered, sorted trade set."""

    trades: List[Trade]
    total: int
    page: int
    limit: int
    enriched: Optional[List[EnrichedTrade]] = field(default=None, repr=False)

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def has_more(self) -> bool:
        return self.page < self.pages

    def to_dict(self) -> Dict[str, Any]:
        if self.enriched is not None:
            data = [e.to_dict() for e in self.enriched]
        else:
            data = [t.to_dict() for t in self.trades]
        return {
            "data": data,
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "pages": self.pages,
            },
        }


def summarize_trades(trades: List[Trade]) -> TradeSummary:
    """Aggregate statistics over a list of trades."""
    if not trades:
        return TradeSummary()

    values = [t.estimated_value for t in trades if t.estimated_value is not None]
    total_value = sum(values)
    dates = [t.transaction_date for t in trades]

    return TradeSummary(
        total_trades=len(trades),
        total_value=total_value,
        avg_value=total_value / len(values) if values else 0.0,
        buy_count=sum(1 for t in trades if t.transaction_type is TransactionType.BUY),
        sell_count=sum(1 for t in trades if t.transaction_type is TransactionType.SELL),
        exchange_count=sum(1 for t in trades if t.transaction_type is TransactionType.EXCHANGE),
        unique_traders=len({(t.trader_type, t.trader_id) for t in trades}),
        unique_stocks=len({t.ticker_symbol for t in trades}),
        earliest=min(dates),
        latest=max(dates),
    )


class TradeQueryPlanner:
    """Filtered, sorted, paginated access to trades."""

    def __init__(self, store: TradeStore):
        self.store = store

    def query(
        self,
        spec: FilterSpec,
        sort_field: SortField = SortField.TRANSACTION_DATE,
        sort_direction: SortDirection = SortDirection.DESC,
    ) -> TradePage:
        """Return page ``spec.page`` of the trades matching ``spec``.

        A filter that matches nothing yields an empty page with total 0.

        Raises:
            UpstreamUnavailable: If the store fails
        """
        total = store_call("count_trades", self.store.count_trades, spec)

        trades: List[Trade] = []
        if spec.offset < total:
            trades = store_call(
                "find_trades",
                self.store.find_trades,
                spec,
                sort_field,
                sort_direction,
                spec.offset,
                spec.limit,
            )

        log_with_context(
            logger,
            logging.DEBUG,
            "Trade query executed",
            page=spec.page,
            limit=spec.limit,
            sort=f"{sort_field.value} {sort_direction.value}",
            returned=len(trades),
            total=total,
        )
        return TradePage(trades=trades, total=total, page=spec.page, limit=spec.limit)

    def summarize(self, spec: FilterSpec) -> TradeSummary:
        """Summary statistics over every trade matching ``spec``; pagination is ignored."""
        trades = store_call("fetch_all_trades", self.store.fetch_all_trades, spec)
        return summarize_trades(trades)

    def trader_trades(
        self,
        trader_id: str,
        trader_type: TraderType,
        spec: FilterSpec,
        sort_field: SortField = SortField.TRANSACTION_DATE,
        sort_direction: SortDirection = SortDirection.DESC,
    ) -> Tuple[Trader, TradePage]:
        """Trades of one existing trader.

        Raises:
            NotFoundError: If no trader of ``trader_type`` has ``trader_id``
        """
        trader = find_trader(self.store, trader_id, trader_type)
        if trader is None:
            raise NotFoundError("Trader", trader_id)

        scoped = replace(spec, trader_id=trader_id, trader_type=trader_type)
        return trader, self.query(scoped, sort_field, sort_direction)

    def stock_trades(
        self,
        symbol: str,
        spec: FilterSpec,
        sort_field: SortField = SortField.TRANSACTION_DATE,
        sort_direction: SortDirection = SortDirection.DESC,
    ) -> Tuple[Stock, TradePage]:
        """Trades in one existing stock.

        Raises:
            NotFoundError: If the symbol is unknown
        """
        symbol = symbol.strip().upper()
        stock = store_call("get_stocks", self.store.get_stocks, [symbol]).get(symbol)
        if stock is None:
            raise NotFoundError("Stock", symbol)

        scoped = replace(spec, ticker_symbol=symbol)
        return stock, self.query(scoped, sort_field, sort_direction)
