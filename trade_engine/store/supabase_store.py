"""
Supabase-backed TradeStore.

Reads the ``stock_trades``, ``congressional_members``, ``corporate_insiders``
and ``stock_tickers`` tables written by the ingestion job. Every client
failure is re-raised as UpstreamUnavailable with the original exception
chained.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from supabase import Client, create_client

from trade_engine.config import SupabaseConfig
from trade_engine.errors import UpstreamUnavailable
from trade_engine.models import (
    CongressionalMember,
    CorporateInsider,
    FilterSpec,
    SortDirection,
    SortField,
    Stock,
    Trade,
    TraderType,
    TransactionType,
)
from trade_engine.store.base import TradeStore

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    SortField.TRANSACTION_DATE: "transaction_date",
    SortField.FILING_DATE: "filing_date",
    SortField.ESTIMATED_VALUE: "estimated_value",
}

# Supabase caps a single response at 1000 rows
FETCH_PAGE_SIZE = 1000

# Characters with meaning inside a PostgREST or=() filter
_FILTER_UNSAFE = re.compile(r"[,()%*\\\"]")
_PARTY_TAG = re.compile(r"^([A-Za-z])-([A-Za-z]{0,2})$")

PARTY_BY_INITIAL = {
    "D": "democratic",
    "R": "republican",
    "I": "independent",
    "O": "other",
}


def get_supabase(config: SupabaseConfig) -> Client:
    """Create a Supabase client from configuration."""
    return create_client(config.url, config.key)


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def trade_from_row(row: Dict[str, Any]) -> Trade:
    return Trade(
        id=str(row["id"]),
        trader_type=TraderType(row["trader_type"]),
        trader_id=str(row["trader_id"]),
        ticker_symbol=str(row["ticker_symbol"]).upper(),
        transaction_date=_parse_date(row["transaction_date"]),
        transaction_type=TransactionType(row["transaction_type"]),
        amount_range=row.get("amount_range"),
        estimated_value=_parse_float(row.get("estimated_value")),
        quantity=row.get("quantity"),
        filing_date=_parse_date(row.get("filing_date")),
    )


def member_from_row(row: Dict[str, Any]) -> CongressionalMember:
    return CongressionalMember(
        id=str(row["id"]),
        name=row["name"],
        position=row["position"],
        state_code=row["state_code"],
        party=row.get("party_affiliation"),
        district=row.get("district"),
        office_start_date=_parse_date(row.get("office_start_date")),
        office_end_date=_parse_date(row.get("office_end_date")),
    )


def insider_from_row(row: Dict[str, Any]) -> CorporateInsider:
    return CorporateInsider(
        id=str(row["id"]),
        name=row["name"],
        company_name=row["company_name"],
        title=row.get("position"),
        ticker_symbol=row.get("ticker_symbol"),
    )


def stock_from_row(row: Dict[str, Any]) -> Stock:
    return Stock(
        symbol=row["symbol"],
        company_name=row["company_name"],
        sector=row.get("sector"),
        industry=row.get("industry"),
        market_cap=row.get("market_cap"),
        last_price=_parse_float(row.get("last_price")),
        last_updated=_parse_datetime(row.get("last_updated")),
    )


def sanitize_search_text(text: str) -> str:
    """Strip characters that would break a PostgREST filter expression."""
    return _FILTER_UNSAFE.sub("", text).strip()


class SupabaseTradeStore(TradeStore):
    """TradeStore backed by the Supabase REST API."""

    def __init__(self, client: Client, config: SupabaseConfig):
        self.client = client
        self.config = config

    @classmethod
    def from_config(cls, config: SupabaseConfig) -> "SupabaseTradeStore":
        return cls(get_supabase(config), config)

    def _execute(self, operation: str, query):
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"Supabase {operation} failed: {e}")
            raise UpstreamUnavailable(operation, str(e)) from e

    def _apply_filters(self, query, spec: FilterSpec):
        if spec.start_date is not None:
            query = query.gte("transaction_date", spec.start_date.isoformat())
        if spec.end_date is not None:
            query = query.lte("transaction_date", spec.end_date.isoformat())
        if spec.transaction_type is not None:
            query = query.eq("transaction_type", spec.transaction_type.value)
        if spec.min_value is not None:
            query = query.gte("estimated_value", spec.min_value)
        if spec.max_value is not None:
            query = query.lte("estimated_value", spec.max_value)
        if spec.ticker_symbol is not None:
            query = query.eq("ticker_symbol", spec.ticker_symbol)
        if spec.trader_id is not None:
            query = query.eq("trader_id", spec.trader_id)
        if spec.trader_type is not None:
            query = query.eq("trader_type", spec.trader_type.value)
        return query

    def find_trades(
        self,
        spec: FilterSpec,
        sort_field: SortField,
        sort_direction: SortDirection,
        offset: int,
        limit: int,
    ) -> List[Trade]:
        desc = sort_direction is SortDirection.DESC
        query = self._apply_filters(
            self.client.table(self.config.trades_table).select("*"), spec
        )
        query = (
            query.order(SORT_COLUMNS[sort_field], desc=desc)
            .order("id", desc=desc)
            .range(offset, offset + limit - 1)
        )
        response = self._execute("find_trades", query)
        return [trade_from_row(row) for row in response.data or []]

    def count_trades(self, spec: FilterSpec) -> int:
        query = self._apply_filters(
            self.client.table(self.config.trades_table).select("id", count="exact"), spec
        ).limit(1)
        response = self._execute("count_trades", query)
        return response.count or 0

    def fetch_all_trades(self, spec: FilterSpec) -> List[Trade]:
        trades: List[Trade] = []
        offset = 0
        while True:
            query = self._apply_filters(
                self.client.table(self.config.trades_table).select("*"), spec
            ).order("id").range(offset, offset + FETCH_PAGE_SIZE - 1)
            response = self._execute("fetch_all_trades", query)
            rows = response.data or []
            trades.extend(trade_from_row(row) for row in rows)
            if len(rows) < FETCH_PAGE_SIZE:
                break
            offset += FETCH_PAGE_SIZE
        return trades

    def get_congressional_members(self, ids: Iterable[str]) -> Dict[str, CongressionalMember]:
        wanted = sorted(set(ids))
        if not wanted:
            return {}
        query = self.client.table(self.config.members_table).select("*").in_("id", wanted)
        response = self._execute("get_congressional_members", query)
        return {str(row["id"]): member_from_row(row) for row in response.data or []}

    def get_corporate_insiders(self, ids: Iterable[str]) -> Dict[str, CorporateInsider]:
        wanted = sorted(set(ids))
        if not wanted:
            return {}
        query = self.client.table(self.config.insiders_table).select("*").in_("id", wanted)
        response = self._execute("get_corporate_insiders", query)
        return {str(row["id"]): insider_from_row(row) for row in response.data or []}

    def get_stocks(self, symbols: Iterable[str]) -> Dict[str, Stock]:
        wanted = sorted({s.upper() for s in symbols})
        if not wanted:
            return {}
        query = self.client.table(self.config.stocks_table).select("*").in_("symbol", wanted)
        response = self._execute("get_stocks", query)
        stocks = (stock_from_row(row) for row in response.data or [])
        return {s.symbol: s for s in stocks}

    def search_politicians(self, text: str, limit: int) -> List[CongressionalMember]:
        clean = sanitize_search_text(text)
        if not clean:
            return []
        conditions = [f"name.ilike.%{clean}%", f"state_code.ilike.%{clean}%"]

        tag = _PARTY_TAG.match(clean)
        if tag and tag.group(1).upper() in PARTY_BY_INITIAL:
            # Prefix of a "D-CA" style display tag
            party = PARTY_BY_INITIAL[tag.group(1).upper()]
            state = tag.group(2).upper()
            conditions.append(f"and(party_affiliation.eq.{party},state_code.ilike.{state}%)")

        query = (
            self.client.table(self.config.members_table)
            .select("*")
            .or_(",".join(conditions))
            .order("name")
            .limit(limit)
        )
        response = self._execute("search_politicians", query)
        return [member_from_row(row) for row in response.data or []]

    def search_stocks(self, text: str, limit: int) -> List[Stock]:
        clean = sanitize_search_text(text)
        if not clean:
            return []
        query = (
            self.client.table(self.config.stocks_table)
            .select("*")
            .or_(f"symbol.ilike.%{clean}%,company_name.ilike.%{clean}%")
            .order("symbol")
            .limit(limit)
        )
        response = self._execute("search_stocks", query)
        return [stock_from_row(row) for row in response.data or []]
