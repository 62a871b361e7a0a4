"""
Pytest fixtures for the trade query engine tests.

Provides sample reference data, an in-memory store, a mock Supabase client
and a FastAPI test client.
"""

import pytest
from datetime import date
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from trade_engine.config import ServiceConfig
from trade_engine.main import create_app
from trade_engine.models import (
    CongressionalMember,
    CorporateInsider,
    Stock,
    Trade,
    TraderType,
    TransactionType,
)
from trade_engine.store.memory import InMemoryTradeStore


# =============================================================================
# Identifiers
# =============================================================================

PELOSI_ID = "0b8a3c1e-5d1f-4a52-9e0e-3f6c2a7d9b01"
APPLE_ID = "1c9b4d2f-6e2a-4b63-8f1f-4a7d3b8e0c12"
TUBERVILLE_ID = "2dac5e3a-7f3b-4c74-9a2a-5b8e4c9f1d23"
COOK_ID = "3ebd6f4b-8a4c-4d85-8b3b-6c9f5da02e34"
IDLE_MEMBER_ID = "4fce7a5c-9b5d-4e96-9c4c-7da06eb13f45"
UNKNOWN_ID = "5adf8b6d-0c6e-4fa7-8d5d-8eb17fc24a56"


def make_trade(
    trade_id: str,
    trader_id: str = PELOSI_ID,
    symbol: str = "AAPL",
    day: date = date(2024, 1, 15),
    kind: TransactionType = TransactionType.BUY,
    value=15000.0,
    trader_type: TraderType = TraderType.CONGRESSIONAL,
    filing_date=None,
) -> Trade:
    return Trade(
        id=trade_id,
        trader_type=trader_type,
        trader_id=trader_id,
        ticker_symbol=symbol,
        transaction_date=day,
        transaction_type=kind,
        amount_range="$1,001 - $15,000",
        estimated_value=value,
        filing_date=filing_date,
    )


# =============================================================================
# Reference Data Fixtures
# =============================================================================

@pytest.fixture
def sample_members():
    """Congressional members, including one with no trades."""
    return [
        CongressionalMember(
            id=PELOSI_ID,
            name="Nancy Pelosi",
            position="representative",
            state_code="CA",
            party="democratic",
            district=11,
        ),
        CongressionalMember(
            id=APPLE_ID,
            name="Aaron Apple",
            position="representative",
            state_code="OH",
            party="republican",
            district=4,
        ),
        CongressionalMember(
            id=TUBERVILLE_ID,
            name="Tommy Tuberville",
            position="senator",
            state_code="AL",
            party="republican",
        ),
        CongressionalMember(
            id=IDLE_MEMBER_ID,
            name="Idle Member",
            position="senator",
            state_code="VT",
            party="independent",
        ),
    ]


@pytest.fixture
def sample_insiders():
    return [
        CorporateInsider(
            id=COOK_ID,
            name="Timothy Cook",
            company_name="Apple Inc.",
            title="CEO",
            ticker_symbol="AAPL",
        ),
    ]


@pytest.fixture
def sample_stocks():
    return [
        Stock(symbol="AAPL", company_name="Apple Inc.", sector="Technology", last_price=190.5),
        Stock(symbol="AAP", company_name="Advance Auto Parts", sector="Consumer Cyclical"),
        Stock(symbol="MSFT", company_name="Microsoft Corporation", sector="Technology"),
        Stock(symbol="NVDA", company_name="NVIDIA Corporation", sector="Technology"),
        Stock(symbol="BRK.B", company_name="Berkshire Hathaway Inc.", sector="Financial Services"),
    ]


@pytest.fixture
def sample_trades():
    """Nine trades across three traders; two share a date to exercise tie-breaks."""
    return [
        make_trade("t-001", PELOSI_ID, "AAPL", date(2024, 1, 15), TransactionType.BUY, 80000.0),
        make_trade("t-002", PELOSI_ID, "MSFT", date(2024, 2, 1), TransactionType.BUY, 20000.0),
        make_trade("t-003", PELOSI_ID, "NVDA", date(2024, 3, 10), TransactionType.SELL, 50000.0,
                   filing_date=date(2024, 4, 1)),
        make_trade("t-004", TUBERVILLE_ID, "AAPL", date(2024, 3, 10), TransactionType.SELL, 8000.0,
                   filing_date=date(2024, 3, 20)),
        make_trade("t-005", TUBERVILLE_ID, "MSFT", date(2024, 3, 10), TransactionType.BUY, 32500.0),
        make_trade("t-006", TUBERVILLE_ID, "BRK.B", date(2023, 12, 1), TransactionType.EXCHANGE, None),
        make_trade("t-007", COOK_ID, "AAPL", date(2024, 5, 2), TransactionType.SELL, 1_000_000.0,
                   trader_type=TraderType.CORPORATE),
        make_trade("t-008", PELOSI_ID, "GONE", date(2024, 4, 4), TransactionType.BUY, 1000.0),
        make_trade("t-009", UNKNOWN_ID, "AAPL", date(2024, 4, 5), TransactionType.BUY, 2000.0),
    ]


@pytest.fixture
def memory_store(sample_trades, sample_members, sample_insiders, sample_stocks):
    """In-memory store over the sample data."""
    return InMemoryTradeStore(
        trades=sample_trades,
        members=sample_members,
        insiders=sample_insiders,
        stocks=sample_stocks,
    )


@pytest.fixture
def failing_store():
    """Store whose every call fails like an unreachable backend."""
    store = MagicMock(spec=InMemoryTradeStore)
    for name in (
        "find_trades",
        "count_trades",
        "fetch_all_trades",
        "get_congressional_members",
        "get_corporate_insiders",
        "get_stocks",
        "search_politicians",
        "search_stocks",
    ):
        getattr(store, name).side_effect = ConnectionError("connection refused")
    return store


# =============================================================================
# Mock Supabase Client Fixtures
# =============================================================================

@pytest.fixture
def mock_supabase():
    """Mock Supabase client whose query builder chains back onto itself."""
    client = MagicMock()
    query = MagicMock()
    for method in ("select", "eq", "gte", "lte", "in_", "or_", "order", "range", "limit"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=[], count=0)
    client.table.return_value = query
    client.query = query
    return client


# =============================================================================
# HTTP Fixtures
# =============================================================================

@pytest.fixture
def test_config():
    return ServiceConfig.for_testing()


@pytest.fixture
def client(test_config, memory_store):
    """Test client over the sample data with auth disabled."""
    app = create_app(config=test_config, store=memory_store)
    return TestClient(app)
