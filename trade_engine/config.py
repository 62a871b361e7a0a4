"""
Configuration for the trade query service
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from trade_engine.services.filters import MAX_LIMIT
from trade_engine.services.search import MAX_SEARCH_LIMIT

load_dotenv()


class ConfigurationError(Exception):
    """Raised when required configuration is missing."""
    pass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class SupabaseConfig:
    """Supabase connection settings.

    Required environment variables:
        - SUPABASE_URL: Supabase project URL
        - SUPABASE_SERVICE_KEY (or SUPABASE_ANON_KEY): API key

    Optional:
        - SUPABASE_TRADES_TABLE, SUPABASE_MEMBERS_TABLE,
          SUPABASE_INSIDERS_TABLE, SUPABASE_STOCKS_TABLE
    """

    url: str
    key: str
    trades_table: str = "stock_trades"
    members_table: str = "congressional_members"
    insiders_table: str = "corporate_insiders"
    stocks_table: str = "stock_tickers"

    @classmethod
    def from_env(cls, require_credentials: bool = True) -> "SupabaseConfig":
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_ANON_KEY")

        if require_credentials:
            missing = []
            if not url:
                missing.append("SUPABASE_URL")
            if not key:
                missing.append("SUPABASE_SERVICE_KEY")
            if missing:
                raise ConfigurationError(
                    f"Missing required environment variables: {', '.join(missing)}. "
                    "Please set these in your .env file or environment."
                )

        return cls(
            url=url or "",
            key=key or "",
            trades_table=os.getenv("SUPABASE_TRADES_TABLE", "stock_trades"),
            members_table=os.getenv("SUPABASE_MEMBERS_TABLE", "congressional_members"),
            insiders_table=os.getenv("SUPABASE_INSIDERS_TABLE", "corporate_insiders"),
            stocks_table=os.getenv("SUPABASE_STOCKS_TABLE", "stock_tickers"),
        )


@dataclass
class ServiceConfig:
    """Overall service configuration.

    Example:
        config = ServiceConfig.from_env()

        # Tests and local development, no Supabase needed
        config = ServiceConfig.for_testing()
    """

    store_backend: str = "supabase"  # "supabase" or "memory"
    supabase: Optional[SupabaseConfig] = None

    api_key: Optional[str] = None
    auth_disabled: bool = False

    log_level: int = logging.INFO
    log_json: bool = True

    default_page_size: int = 20
    default_search_limit: int = 10

    cors_origins: list = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Build configuration from environment variables.

        Raises:
            ConfigurationError: If the Supabase backend is selected without credentials,
                or a numeric setting is malformed or out of range
        """
        backend = os.getenv("TRADE_ENGINE_STORE", "supabase").strip().lower()
        if backend not in ("supabase", "memory"):
            raise ConfigurationError(
                f"TRADE_ENGINE_STORE must be 'supabase' or 'memory', got '{backend}'"
            )

        level_name = os.getenv("LOG_LEVEL", "INFO").upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ConfigurationError(f"Unknown LOG_LEVEL: {level_name}")

        try:
            page_size = int(os.getenv("TRADE_DEFAULT_PAGE_SIZE", "20"))
            search_limit = int(os.getenv("TRADE_DEFAULT_SEARCH_LIMIT", "10"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        if not 1 <= page_size <= MAX_LIMIT:
            raise ConfigurationError(
                f"TRADE_DEFAULT_PAGE_SIZE must be between 1 and {MAX_LIMIT}, got {page_size}"
            )
        if not 1 <= search_limit <= MAX_SEARCH_LIMIT:
            raise ConfigurationError(
                f"TRADE_DEFAULT_SEARCH_LIMIT must be between 1 and {MAX_SEARCH_LIMIT}, got {search_limit}"
            )

        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

        return cls(
            store_backend=backend,
            supabase=SupabaseConfig.from_env() if backend == "supabase" else None,
            api_key=os.getenv("TRADE_API_KEY"),
            auth_disabled=_env_bool("TRADE_AUTH_DISABLED"),
            log_level=level,
            log_json=_env_bool("LOG_JSON", default=True),
            default_page_size=page_size,
            default_search_limit=search_limit,
            cors_origins=origins,
        )

    @classmethod
    def for_testing(cls) -> "ServiceConfig":
        """Configuration with the in-memory store and auth disabled."""
        return cls(store_backend="memory", auth_disabled=True, log_json=False)
