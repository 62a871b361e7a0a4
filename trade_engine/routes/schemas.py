"""
Response models for the HTTP API.

Field names follow the camelCase JSON shape consumed by the web client.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Trades
# ============================================================================

class PaginationInfo(BaseModel):
    page: int = Field(..., description="1-based page number")
    limit: int = Field(..., description="Page size (1-100)")
    total: int = Field(..., description="Trades matching the filters, across all pages")
    pages: int = Field(..., description="ceil(total / limit)")


class TradeOut(BaseModel):
    """A disclosed trade with its trader and stock attached when known."""
    id: str
    traderType: str
    traderId: str
    tickerSymbol: str
    transactionDate: str
    transactionType: str
    amountRange: Optional[str] = None
    estimatedValue: Optional[float] = None
    quantity: Optional[int] = None
    filingDate: Optional[str] = None
    trader: Optional[Dict[str, Any]] = Field(None, description="Congressional or corporate trader fields")
    stock: Optional[Dict[str, Any]] = None


class TradePageResponse(BaseModel):
    data: List[TradeOut]
    pagination: PaginationInfo


class TraderTradesResponse(TradePageResponse):
    trader: Dict[str, Any]


class StockTradesResponse(TradePageResponse):
    stock: Dict[str, Any]


class DateRange(BaseModel):
    earliest: Optional[str] = None
    latest: Optional[str] = None


class TradeSummaryResponse(BaseModel):
    totalTrades: int
    totalValue: float
    avgValue: float
    buyCount: int
    sellCount: int
    exchangeCount: int
    uniqueTraders: int
    uniqueStocks: int
    dateRange: DateRange


# ============================================================================
# Search
# ============================================================================

class SearchItems(BaseModel):
    items: List[Dict[str, Any]]


class SearchResponse(BaseModel):
    query: str
    politicians: SearchItems
    stocks: SearchItems
    total: int = Field(..., description="Combined number of returned items")


class SuggestionsResponse(BaseModel):
    query: str
    suggestions: List[str]


# ============================================================================
# Analytics
# ============================================================================

class HoldingOut(BaseModel):
    symbol: str
    companyName: str
    sector: Optional[str] = None
    netPositionValue: float = Field(..., description="Buys minus sells")
    positionPercentage: float = Field(..., description="Share of total absolute trade value")
    transactionCount: int
    latestTransaction: Optional[str] = None


class SectorAllocationOut(BaseModel):
    sector: str
    value: float = Field(..., description="Absolute trade value in the sector")
    percentage: float
    positionCount: int = Field(..., description="Symbols held in the sector")


class RiskMetrics(BaseModel):
    herfindahlIndex: float
    diversificationRatio: float
    largestPosition: float
    top5Concentration: float
    concentrationScore: float


class PortfolioResponse(BaseModel):
    traderId: str
    traderType: str
    traderName: str
    timeframe: str = Field(..., description="month, quarter, year or all")
    totalValue: float
    holdings: List[HoldingOut]
    sectorDistribution: List[SectorAllocationOut]
    riskMetrics: RiskMetrics
