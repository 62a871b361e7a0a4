"""
Trade store implementations.

- TradeStore: abstract read-only boundary the engine depends on
- InMemoryTradeStore: list-backed store for tests and local development
- SupabaseTradeStore: production store over the Supabase REST API
"""

from trade_engine.store.base import TradeStore, store_call
from trade_engine.store.memory import InMemoryTradeStore

__all__ = [
    "TradeStore",
    "store_call",
    "InMemoryTradeStore",
]
