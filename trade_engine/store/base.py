"""
Trade store boundary.

The engine never talks to a database directly. It is handed a TradeStore and
treats every call as one synchronous round trip. Implementations raise
UpstreamUnavailable when the backing service fails; they never return an
empty result in place of an error.

Usage:
    from trade_engine.store import InMemoryTradeStore

    store = InMemoryTradeStore(trades=[...], members=[...], stocks=[...])
    planner = TradeQueryPlanner(store)
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, TypeVar

from trade_engine.errors import TradeEngineError, UpstreamUnavailable
from trade_engine.models import (
    CongressionalMember,
    CorporateInsider,
    FilterSpec,
    SortDirection,
    SortField,
    Stock,
    Trade,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def store_call(operation: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Invoke a store method, surfacing unexpected failures as UpstreamUnavailable.

    Engine errors raised by the store pass through unchanged.
    """
    try:
        return fn(*args, **kwargs)
    except TradeEngineError:
        raise
    except Exception as e:
        logger.error(f"Trade store call {operation} failed: {type(e).__name__}: {e}")
        raise UpstreamUnavailable(operation, str(e)) from e


class TradeStore(ABC):
    """Read-only access to trades and their reference data."""

    @abstractmethod
    def find_trades(
        self,
        spec: FilterSpec,
        sort_field: SortField,
        sort_direction: SortDirection,
        offset: int,
        limit: int,
    ) -> List[Trade]:
        """Return one page of trades matching every predicate in ``spec``.

        Rows are ordered by ``sort_field`` then by trade id, both in
        ``sort_direction``. Missing sort values order as larger than any
        present value.
        """

    @abstractmethod
    def count_trades(self, spec: FilterSpec) -> int:
        """Count trades matching ``spec``, ignoring its page and limit."""

    @abstractmethod
    def fetch_all_trades(self, spec: FilterSpec) -> List[Trade]:
        """Every trade matching ``spec``, unpaginated, in no particular order."""

    @abstractmethod
    def get_congressional_members(self, ids: Iterable[str]) -> Dict[str, CongressionalMember]:
        """Batch lookup keyed by id. Unknown ids are absent from the result."""

    @abstractmethod
    def get_corporate_insiders(self, ids: Iterable[str]) -> Dict[str, CorporateInsider]:
        """Batch lookup keyed by id. Unknown ids are absent from the result."""

    @abstractmethod
    def get_stocks(self, symbols: Iterable[str]) -> Dict[str, Stock]:
        """Batch lookup keyed by uppercase symbol."""

    @abstractmethod
    def search_politicians(self, text: str, limit: int) -> List[CongressionalMember]:
        """Candidate members whose name, state or party tag contains ``text``."""

    @abstractmethod
    def search_stocks(self, text: str, limit: int) -> List[Stock]:
        """Candidate stocks whose symbol or company name contains ``text``."""
