"""
Data models for disclosed securities trades.

Trade, Trader and Stock records are reference data owned by the ingestion
job; the engine only reads them. FilterSpec and PortfolioHolding are built
per request.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class TransactionType(Enum):
    """Types of disclosed transactions"""

    BUY = "buy"
    SELL = "sell"
    EXCHANGE = "exchange"


class TraderType(Enum):
    """Discriminator for the trader variants"""

    CONGRESSIONAL = "congressional"
    CORPORATE = "corporate"


class SortField(Enum):
    """Trade fields a result page can be ordered by"""

    TRANSACTION_DATE = "transactionDate"
    FILING_DATE = "filingDate"
    ESTIMATED_VALUE = "estimatedValue"


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


class SearchKind(Enum):
    POLITICIAN = "politician"
    STOCK = "stock"
    ALL = "all"


class Timeframe(Enum):
    """Look-back window for portfolio analytics"""

    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    ALL = "all"


def _iso(value: Optional[Union[date, datetime]]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class Trade:
    """Individual disclosed trade"""

    id: str
    trader_type: TraderType
    trader_id: str
    ticker_symbol: str
    transaction_date: date
    transaction_type: TransactionType
    amount_range: Optional[str] = None
    estimated_value: Optional[float] = None
    quantity: Optional[int] = None
    filing_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "traderType": self.trader_type.value,
            "traderId": self.trader_id,
            "tickerSymbol": self.ticker_symbol,
            "transactionDate": _iso(self.transaction_date),
            "transactionType": self.transaction_type.value,
            "amountRange": self.amount_range,
            "estimatedValue": self.estimated_value,
            "quantity": self.quantity,
            "filingDate": _iso(self.filing_date),
        }


@dataclass(frozen=True)
class CongressionalMember:
    """Senator or representative"""

    id: str
    name: str
    position: str  # "senator" or "representative"
    state_code: str
    party: Optional[str] = None
    district: Optional[int] = None
    office_start_date: Optional[date] = None
    office_end_date: Optional[date] = None

    trader_type = TraderType.CONGRESSIONAL

    @property
    def party_initial(self) -> Optional[str]:
        return self.party[0].upper() if self.party else None

    @property
    def display_name(self) -> str:
        """Name as shown in suggestion lists, e.g. 'Nancy Pelosi (D-CA)'."""
        if self.party_initial:
            return f"{self.name} ({self.party_initial}-{self.state_code})"
        return f"{self.name} ({self.state_code})"

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match on name, state code and party tag."""
        needle = needle.lower()
        if needle in self.name.lower() or needle in self.state_code.lower():
            return True
        if self.party_initial:
            return needle in f"{self.party_initial}-{self.state_code}".lower()
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "traderType": self.trader_type.value,
            "name": self.name,
            "position": self.position,
            "stateCode": self.state_code,
            "district": self.district,
            "partyAffiliation": self.party,
            "officeStartDate": _iso(self.office_start_date),
            "officeEndDate": _iso(self.office_end_date),
        }


@dataclass(frozen=True)
class CorporateInsider:
    """Officer, director or major holder of a listed company"""

    id: str
    name: str
    company_name: str
    title: Optional[str] = None
    ticker_symbol: Optional[str] = None

    trader_type = TraderType.CORPORATE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "traderType": self.trader_type.value,
            "name": self.name,
            "companyName": self.company_name,
            "title": self.title,
            "tickerSymbol": self.ticker_symbol,
        }


Trader = Union[CongressionalMember, CorporateInsider]


@dataclass(frozen=True)
class Stock:
    """Listed security keyed by its uppercase symbol"""

    symbol: str
    company_name: str
    sector: Optional[str] = None
    industry: Optional[str] = None
    market_cap: Optional[int] = None
    last_price: Optional[float] = None
    last_updated: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "symbol", self.symbol.strip().upper())

    @property
    def display_name(self) -> str:
        return f"{self.symbol} - {self.company_name}"

    def matches(self, needle: str) -> bool:
        needle = needle.lower()
        return needle in self.symbol.lower() or needle in self.company_name.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "companyName": self.company_name,
            "sector": self.sector,
            "industry": self.industry,
            "marketCap": self.market_cap,
            "lastPrice": self.last_price,
            "lastUpdated": _iso(self.last_updated),
        }


@dataclass(frozen=True)
class FilterSpec:
    """Validated, immutable set of trade query constraints."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    transaction_type: Optional[TransactionType] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    ticker_symbol: Optional[str] = None
    trader_id: Optional[str] = None
    trader_type: Optional[TraderType] = None
    page: int = 1
    limit: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def matches(self, trade: Trade) -> bool:
        """Conjunctive predicate check used by in-memory stores."""
        if self.start_date is not None and trade.transaction_date < self.start_date:
            return False
        if self.end_date is not None and trade.transaction_date > self.end_date:
            return False
        if self.transaction_type is not None and trade.transaction_type != self.transaction_type:
            return False
        if self.min_value is not None or self.max_value is not None:
            # Value predicates exclude trades with no estimate
            if trade.estimated_value is None:
                return False
            if self.min_value is not None and trade.estimated_value < self.min_value:
                return False
            if self.max_value is not None and trade.estimated_value > self.max_value:
                return False
        if self.ticker_symbol is not None and trade.ticker_symbol.upper() != self.ticker_symbol:
            return False
        if self.trader_id is not None and trade.trader_id != self.trader_id:
            return False
        if self.trader_type is not None and trade.trader_type != self.trader_type:
            return False
        return True


@dataclass
class EnrichedTrade:
    """A trade with its trader and stock attached where known."""

    trade: Trade
    trader: Optional[Trader] = None
    stock: Optional[Stock] = None

    def to_dict(self) -> Dict[str, Any]:
        data = self.trade.to_dict()
        data["trader"] = self.trader.to_dict() if self.trader is not None else None
        data["stock"] = self.stock.to_dict() if self.stock is not None else None
        return data


@dataclass
class TradeSummary:
    """Aggregate statistics over a filtered trade set"""

    total_trades: int = 0
    total_value: float = 0.0
    avg_value: float = 0.0
    buy_count: int = 0
    sell_count: int = 0
    exchange_count: int = 0
    unique_traders: int = 0
    unique_stocks: int = 0
    earliest: Optional[date] = None
    latest: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalTrades": self.total_trades,
            "totalValue": round(self.total_value, 2),
            "avgValue": round(self.avg_value, 2),
            "buyCount": self.buy_count,
            "sellCount": self.sell_count,
            "exchangeCount": self.exchange_count,
            "uniqueTraders": self.unique_traders,
            "uniqueStocks": self.unique_stocks,
            "dateRange": {"earliest": _iso(self.earliest), "latest": _iso(self.latest)},
        }


@dataclass
class PortfolioHolding:
    """Per-symbol aggregate of one trader's trades."""

    symbol: str
    net_position_value: float
    absolute_value: float
    transaction_count: int
    latest_transaction: Optional[date]
    position_percentage: float = 0.0
    company_name: Optional[str] = None
    sector: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "companyName": self.company_name or self.symbol,
            "sector": self.sector,
            "netPositionValue": round(self.net_position_value, 2),
            "positionPercentage": round(self.position_percentage, 2),
            "transactionCount": self.transaction_count,
            "latestTransaction": _iso(self.latest_transaction),
        }


@dataclass
class ConcentrationRisk:
    """Concentration metrics derived from a list of holdings"""

    herfindahl_index: float = 0.0
    diversification_ratio: float = 0.0
    largest_position: float = 0.0
    top5_concentration: float = 0.0
    concentration_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "herfindahlIndex": round(self.herfindahl_index, 4),
            "diversificationRatio": round(self.diversification_ratio, 2),
            "largestPosition": round(self.largest_position, 2),
            "top5Concentration": round(self.top5_concentration, 2),
            "concentrationScore": round(self.concentration_score, 2),
        }


@dataclass
class SectorAllocation:
    """Share of a portfolio's absolute value held in one sector."""

    sector: str
    value: float
    percentage: float
    position_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sector": self.sector,
            "value": round(self.value, 2),
            "percentage": round(self.percentage, 2),
            "positionCount": self.position_count,
        }


@dataclass
class PortfolioConcentration:
    trader_id: str
    trader_type: TraderType
    timeframe: Timeframe = Timeframe.ALL
    holdings: List[PortfolioHolding] = field(default_factory=list)
    sector_distribution: List[SectorAllocation] = field(default_factory=list)
    total_absolute_value: float = 0.0
    risk: ConcentrationRisk = field(default_factory=ConcentrationRisk)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "traderId": self.trader_id,
            "traderType": self.trader_type.value,
            "timeframe": self.timeframe.value,
            "totalValue": round(self.total_absolute_value, 2),
            "holdings": [h.to_dict() for h in self.holdings],
            "sectorDistribution": [s.to_dict() for s in self.sector_distribution],
            "riskMetrics": self.risk.to_dict(),
        }
