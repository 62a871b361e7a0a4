"""
Tests for trade enrichment (trade_engine/services/entity_resolver.py).
"""

import logging

import pytest
from unittest.mock import MagicMock

from trade_engine.errors import UpstreamUnavailable
from trade_engine.models import CongressionalMember, CorporateInsider, TraderType
from trade_engine.services.entity_resolver import EntityResolver, find_trader

from conftest import COOK_ID, PELOSI_ID, TUBERVILLE_ID, UNKNOWN_ID


@pytest.fixture
def spy_store(memory_store):
    """Memory store wrapped so calls can be counted."""
    return MagicMock(wraps=memory_store)


class TestEntityResolver:
    """Tests for EntityResolver.resolve."""

    def test_one_batch_call_per_kind(self, spy_store, sample_trades):
        """A page of mixed trades costs one lookup per trader variant plus one for stocks."""
        EntityResolver(spy_store).resolve(sample_trades)

        spy_store.get_congressional_members.assert_called_once()
        spy_store.get_corporate_insiders.assert_called_once()
        spy_store.get_stocks.assert_called_once()

        member_ids = set(spy_store.get_congressional_members.call_args.args[0])
        assert member_ids == {PELOSI_ID, TUBERVILLE_ID, UNKNOWN_ID}
        assert set(spy_store.get_corporate_insiders.call_args.args[0]) == {COOK_ID}
        assert set(spy_store.get_stocks.call_args.args[0]) == {"AAPL", "MSFT", "NVDA", "BRK.B", "GONE"}

    def test_skips_variant_with_no_trades(self, spy_store, sample_trades):
        congressional_only = [t for t in sample_trades if t.trader_type is TraderType.CONGRESSIONAL]
        EntityResolver(spy_store).resolve(congressional_only)

        spy_store.get_corporate_insiders.assert_not_called()

    def test_preserves_order(self, memory_store, sample_trades):
        enriched = EntityResolver(memory_store).resolve(sample_trades)
        assert [e.trade.id for e in enriched] == [t.id for t in sample_trades]

    def test_attaches_correct_variant(self, memory_store, sample_trades):
        by_id = {e.trade.id: e for e in EntityResolver(memory_store).resolve(sample_trades)}

        assert isinstance(by_id["t-001"].trader, CongressionalMember)
        assert by_id["t-001"].trader.name == "Nancy Pelosi"
        assert isinstance(by_id["t-007"].trader, CorporateInsider)
        assert by_id["t-007"].trader.title == "CEO"
        assert by_id["t-001"].stock.company_name == "Apple Inc."

    def test_missing_references_left_empty(self, memory_store, sample_trades, caplog):
        """Unknown trader or stock leaves the field empty and is logged."""
        with caplog.at_level(logging.WARNING, logger="trade_engine.services.entity_resolver"):
            by_id = {e.trade.id: e for e in EntityResolver(memory_store).resolve(sample_trades)}

        assert by_id["t-008"].trader is not None
        assert by_id["t-008"].stock is None
        assert by_id["t-009"].trader is None
        assert by_id["t-009"].stock is not None
        assert "2 of 9 trades" in caplog.text

    def test_to_dict_includes_nested_objects(self, memory_store, sample_trades):
        enriched = EntityResolver(memory_store).resolve(sample_trades[:1])
        data = enriched[0].to_dict()

        assert data["trader"]["traderType"] == "congressional"
        assert data["trader"]["stateCode"] == "CA"
        assert data["stock"]["symbol"] == "AAPL"

    def test_empty_input_makes_no_calls(self, spy_store):
        assert EntityResolver(spy_store).resolve([]) == []
        spy_store.get_stocks.assert_not_called()

    def test_store_failure_propagates(self, failing_store, sample_trades):
        with pytest.raises(UpstreamUnavailable):
            EntityResolver(failing_store).resolve(sample_trades)


class TestFindTrader:
    """Tests for find_trader."""

    def test_found(self, memory_store):
        trader = find_trader(memory_store, COOK_ID, TraderType.CORPORATE)
        assert trader.name == "Timothy Cook"

    def test_missing(self, memory_store):
        assert find_trader(memory_store, UNKNOWN_ID, TraderType.CONGRESSIONAL) is None
