"""
Entity Resolver

Attaches trader and stock reference data to a page of trades using one batch
lookup per trader variant and one for stocks, regardless of page size.

The trader variant is read from ``trade.trader_type``. A trade whose trader or
stock is missing from reference data is returned with that field left empty.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from trade_engine.models import EnrichedTrade, Stock, Trade, Trader, TraderType
from trade_engine.store.base import TradeStore, store_call

logger = logging.getLogger(__name__)


def lookup_traders(
    store: TradeStore, ids_by_type: Dict[TraderType, Set[str]]
) -> Dict[TraderType, Dict[str, Trader]]:
    """Fetch traders for each variant in a single call per variant."""
    found: Dict[TraderType, Dict[str, Trader]] = {}
    for trader_type, ids in ids_by_type.items():
        if not ids:
            continue
        if trader_type is TraderType.CONGRESSIONAL:
            found[trader_type] = store_call(
                "get_congressional_members", store.get_congressional_members, ids
            )
        else:
            found[trader_type] = store_call(
                "get_corporate_insiders", store.get_corporate_insiders, ids
            )
    return found


def find_trader(store: TradeStore, trader_id: str, trader_type: TraderType) -> Optional[Trader]:
    """Look up a single trader of a known variant; None when absent."""
    return lookup_traders(store, {trader_type: {trader_id}}).get(trader_type, {}).get(trader_id)


class EntityResolver:
    """Batch enrichment of trades with trader and stock objects."""

    def __init__(self, store: TradeStore):
        self.store = store

    def resolve(self, trades: Iterable[Trade]) -> List[EnrichedTrade]:
        trades = list(trades)
        if not trades:
            return []

        ids_by_type: Dict[TraderType, Set[str]] = defaultdict(set)
        symbols: Set[str] = set()
        for trade in trades:
            ids_by_type[trade.trader_type].add(trade.trader_id)
            symbols.add(trade.ticker_symbol.upper())

        traders = lookup_traders(self.store, ids_by_type)
        stocks: Dict[str, Stock] = store_call("get_stocks", self.store.get_stocks, symbols)

        enriched = []
        missing = 0
        for trade in trades:
            trader = traders.get(trade.trader_type, {}).get(trade.trader_id)
            stock = stocks.get(trade.ticker_symbol.upper())
            if trader is None or stock is None:
                missing += 1
            enriched.append(EnrichedTrade(trade=trade, trader=trader, stock=stock))

        if missing:
            logger.warning(f"{missing} of {len(trades)} trades reference unknown traders or stocks")
        return enriched
