"""
Search Ranker

Suggestion search over politicians and stocks. Each kind is matched and
ranked on its own; ``kind=all`` returns both lists side by side with
politicians first, with no cross-kind scoring.

Ranking within a kind:
    Stocks: exact symbol, symbol prefix, company-name prefix, other
        substring; ties broken by symbol.
    Politicians: name prefix (or word prefix), other substring; ties broken
        by name.

Queries shorter than two characters return nothing without touching the
store.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from trade_engine.errors import ValidationError
from trade_engine.models import CongressionalMember, SearchKind, Stock
from trade_engine.store.base import TradeStore, store_call

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 100
MAX_SEARCH_LIMIT = 100

# Candidates pulled per kind before ranking, as a multiple of the limit
CANDIDATE_FACTOR = 5
MIN_CANDIDATES = 50


@dataclass
class SearchResults:
    query: str
    politicians: List[CongressionalMember] = field(default_factory=list)
    stocks: List[Stock] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "politicians": {"items": [p.to_dict() for p in self.politicians]},
            "stocks": {"items": [s.to_dict() for s in self.stocks]},
            "total": len(self.politicians) + len(self.stocks),
        }

    def suggestions(self) -> List[str]:
        return [p.display_name for p in self.politicians] + [s.display_name for s in self.stocks]


def stock_rank(stock: Stock, needle: str) -> int:
    symbol = stock.symbol.lower()
    company = stock.company_name.lower()
    if symbol == needle:
        return 0
    if symbol.startswith(needle):
        return 1
    if company.startswith(needle):
        return 2
    return 3


def politician_rank(member: CongressionalMember, needle: str) -> int:
    name = member.name.lower()
    if name.startswith(needle):
        return 0
    if any(part.startswith(needle) for part in name.split()):
        return 1
    return 2


class SearchRanker:
    """Ranked politician and stock suggestions for free text."""

    def __init__(self, store: TradeStore):
        self.store = store

    def search(self, text: str, kind: SearchKind = SearchKind.ALL, limit: int = 10) -> SearchResults:
        """Return at most ``limit`` ranked matches per requested kind.

        Raises:
            ValidationError: If ``limit`` is outside 1..100
            UpstreamUnavailable: If the store fails
        """
        if limit < 1 or limit > MAX_SEARCH_LIMIT:
            raise ValidationError("limit", f"must be between 1 and {MAX_SEARCH_LIMIT}", limit)

        query = (text or "").strip()[:MAX_QUERY_LENGTH]
        results = SearchResults(query=query)
        if len(query) < MIN_QUERY_LENGTH:
            return results

        needle = query.lower()
        candidates = max(limit * CANDIDATE_FACTOR, MIN_CANDIDATES)

        if kind in (SearchKind.POLITICIAN, SearchKind.ALL):
            results.politicians = self._rank_politicians(query, needle, candidates, limit)
        if kind in (SearchKind.STOCK, SearchKind.ALL):
            results.stocks = self._rank_stocks(query, needle, candidates, limit)

        logger.debug(
            f"Search '{query}' kind={kind.value}: "
            f"{len(results.politicians)} politicians, {len(results.stocks)} stocks"
        )
        return results

    def _rank_politicians(
        self, query: str, needle: str, candidates: int, limit: int
    ) -> List[CongressionalMember]:
        found = store_call("search_politicians", self.store.search_politicians, query, candidates)
        hits = [m for m in found if m.matches(needle)]
        hits.sort(key=lambda m: (politician_rank(m, needle), m.name.lower(), m.id))
        return hits[:limit]

    def _rank_stocks(self, query: str, needle: str, candidates: int, limit: int) -> List[Stock]:
        found = {
            s.symbol: s
            for s in store_call("search_stocks", self.store.search_stocks, query, candidates)
        }
        # The candidate window is bounded, so pull an exact symbol hit explicitly
        exact = store_call("get_stocks", self.store.get_stocks, [query.upper()])
        found.update(exact)

        hits = [s for s in found.values() if s.matches(needle)]
        hits.sort(key=lambda s: (stock_rank(s, needle), s.symbol))
        return hits[:limit]
