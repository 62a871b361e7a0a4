"""Politician and stock search endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from trade_engine.config import ServiceConfig
from trade_engine.models import SearchKind
from trade_engine.routes.deps import get_config, get_store
from trade_engine.routes.schemas import SearchResponse, SuggestionsResponse
from trade_engine.services import SearchRanker
from trade_engine.services.filters import parse_enum, parse_positive_int
from trade_engine.services.search import MAX_SEARCH_LIMIT
from trade_engine.store.base import TradeStore

router = APIRouter()


def _run_search(store: TradeStore, config: ServiceConfig, q: str, type: str, limit: Optional[str]):
    kind = parse_enum("type", type, SearchKind)
    max_results = config.default_search_limit
    if limit is not None:
        max_results = parse_positive_int("limit", limit, maximum=MAX_SEARCH_LIMIT)
    return SearchRanker(store).search(q, kind, max_results)


@router.get("", response_model=SearchResponse)
def search(
    q: str = "",
    type: str = "all",
    limit: Optional[str] = None,
    store: TradeStore = Depends(get_store),
    config: ServiceConfig = Depends(get_config),
):
    """
    Search politicians and/or stocks.

    - **q**: text to match (at least 2 characters)
    - **type**: politician, stock or all
    - **limit**: maximum results per kind (1-100)
    """
    return _run_search(store, config, q, type, limit).to_dict()


@router.get("/suggestions", response_model=SuggestionsResponse)
def suggestions(
    q: str = "",
    type: str = "all",
    limit: Optional[str] = None,
    store: TradeStore = Depends(get_store),
    config: ServiceConfig = Depends(get_config),
):
    """Display strings for autocomplete, politicians first."""
    results = _run_search(store, config, q, type, limit)
    return {"query": results.query, "suggestions": results.suggestions()}
