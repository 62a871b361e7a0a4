"""
In-memory TradeStore used by tests and local development.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from trade_engine.models import (
    CongressionalMember,
    CorporateInsider,
    FilterSpec,
    SortDirection,
    SortField,
    Stock,
    Trade,
)
from trade_engine.store.base import TradeStore

logger = logging.getLogger(__name__)

_SORT_ATTRS = {
    SortField.TRANSACTION_DATE: "transaction_date",
    SortField.FILING_DATE: "filing_date",
    SortField.ESTIMATED_VALUE: "estimated_value",
}


class InMemoryTradeStore(TradeStore):
    """TradeStore over plain Python lists.

    Each call works on a snapshot of the lists taken at call time.
    """

    def __init__(
        self,
        trades: Optional[Iterable[Trade]] = None,
        members: Optional[Iterable[CongressionalMember]] = None,
        insiders: Optional[Iterable[CorporateInsider]] = None,
        stocks: Optional[Iterable[Stock]] = None,
    ):
        self._trades: List[Trade] = list(trades or [])
        self._members: Dict[str, CongressionalMember] = {m.id: m for m in members or []}
        self._insiders: Dict[str, CorporateInsider] = {i.id: i for i in insiders or []}
        self._stocks: Dict[str, Stock] = {s.symbol: s for s in stocks or []}

    def _filtered(self, spec: FilterSpec) -> List[Trade]:
        return [t for t in list(self._trades) if spec.matches(t)]

    @staticmethod
    def _sort_key(trade: Trade, attr: str) -> Tuple[int, Any, str]:
        value = getattr(trade, attr)
        # Missing values order as larger than any present value
        if value is None:
            return (1, 0, trade.id)
        return (0, value, trade.id)

    def find_trades(
        self,
        spec: FilterSpec,
        sort_field: SortField,
        sort_direction: SortDirection,
        offset: int,
        limit: int,
    ) -> List[Trade]:
        attr = _SORT_ATTRS[sort_field]
        descending = sort_direction is SortDirection.DESC
        rows = sorted(
            self._filtered(spec),
            key=lambda t: self._sort_key(t, attr),
            reverse=descending,
        )
        return rows[offset:offset + limit]

    def count_trades(self, spec: FilterSpec) -> int:
        return len(self._filtered(spec))

    def fetch_all_trades(self, spec: FilterSpec) -> List[Trade]:
        return self._filtered(spec)

    def get_congressional_members(self, ids: Iterable[str]) -> Dict[str, CongressionalMember]:
        return {i: self._members[i] for i in set(ids) if i in self._members}

    def get_corporate_insiders(self, ids: Iterable[str]) -> Dict[str, CorporateInsider]:
        return {i: self._insiders[i] for i in set(ids) if i in self._insiders}

    def get_stocks(self, symbols: Iterable[str]) -> Dict[str, Stock]:
        wanted = {s.upper() for s in symbols}
        return {s: self._stocks[s] for s in wanted if s in self._stocks}

    def search_politicians(self, text: str, limit: int) -> List[CongressionalMember]:
        hits = [m for m in self._members.values() if m.matches(text)]
        hits.sort(key=lambda m: m.name.lower())
        return hits[:limit]

    def search_stocks(self, text: str, limit: int) -> List[Stock]:
        hits = [s for s in self._stocks.values() if s.matches(text)]
        hits.sort(key=lambda s: s.symbol)
        return hits[:limit]
