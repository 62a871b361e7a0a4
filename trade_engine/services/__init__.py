"""
Query and analytics services.

- parse_filters / parse_sort: raw parameters to FilterSpec and sort order
- TradeQueryPlanner: filtered, sorted, paginated trade pages
- EntityResolver: batch trader/stock enrichment
- SearchRanker: politician and stock suggestions
- ConcentrationCalculator: per-symbol portfolio breakdown
"""

from trade_engine.services.concentration import ConcentrationCalculator
from trade_engine.services.entity_resolver import EntityResolver, find_trader
from trade_engine.services.filters import parse_filters, parse_pagination, parse_sort
from trade_engine.services.search import SearchRanker, SearchResults
from trade_engine.services.trade_query import TradePage, TradeQueryPlanner

__all__ = [
    "ConcentrationCalculator",
    "EntityResolver",
    "find_trader",
    "parse_filters",
    "parse_pagination",
    "parse_sort",
    "SearchRanker",
    "SearchResults",
    "TradePage",
    "TradeQueryPlanner",
]
