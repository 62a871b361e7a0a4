"""
Tests for service configuration (trade_engine/config.py).
"""

import logging

import pytest

from trade_engine.config import ConfigurationError, ServiceConfig, SupabaseConfig


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the config reads."""
    for name in (
        "SUPABASE_URL",
        "SUPABASE_SERVICE_KEY",
        "SUPABASE_ANON_KEY",
        "SUPABASE_TRADES_TABLE",
        "TRADE_ENGINE_STORE",
        "TRADE_API_KEY",
        "TRADE_AUTH_DISABLED",
        "TRADE_DEFAULT_PAGE_SIZE",
        "TRADE_DEFAULT_SEARCH_LIMIT",
        "LOG_LEVEL",
        "LOG_JSON",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSupabaseConfig:
    """Tests for SupabaseConfig.from_env."""

    def test_reads_credentials(self, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://example.supabase.co")
        clean_env.setenv("SUPABASE_SERVICE_KEY", "service-key")

        config = SupabaseConfig.from_env()

        assert config.url == "https://example.supabase.co"
        assert config.key == "service-key"
        assert config.trades_table == "stock_trades"

    def test_anon_key_fallback(self, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://example.supabase.co")
        clean_env.setenv("SUPABASE_ANON_KEY", "anon-key")
        assert SupabaseConfig.from_env().key == "anon-key"

    def test_table_override(self, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://example.supabase.co")
        clean_env.setenv("SUPABASE_SERVICE_KEY", "k")
        clean_env.setenv("SUPABASE_TRADES_TABLE", "trades_v2")
        assert SupabaseConfig.from_env().trades_table == "trades_v2"

    def test_missing_credentials(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            SupabaseConfig.from_env()
        assert "SUPABASE_URL" in str(exc_info.value)
        assert "SUPABASE_SERVICE_KEY" in str(exc_info.value)

    def test_credentials_optional_when_not_required(self, clean_env):
        config = SupabaseConfig.from_env(require_credentials=False)
        assert config.url == ""


class TestServiceConfig:
    """Tests for ServiceConfig.from_env."""

    def test_memory_backend_needs_no_supabase(self, clean_env):
        clean_env.setenv("TRADE_ENGINE_STORE", "memory")

        config = ServiceConfig.from_env()

        assert config.store_backend == "memory"
        assert config.supabase is None
        assert config.default_page_size == 20
        assert config.default_search_limit == 10
        assert config.log_level == logging.INFO
        assert config.log_json is True

    def test_supabase_backend_requires_credentials(self, clean_env):
        with pytest.raises(ConfigurationError):
            ServiceConfig.from_env()

    def test_all_settings(self, clean_env):
        clean_env.setenv("TRADE_ENGINE_STORE", "memory")
        clean_env.setenv("TRADE_API_KEY", "secret")
        clean_env.setenv("TRADE_AUTH_DISABLED", "true")
        clean_env.setenv("TRADE_DEFAULT_PAGE_SIZE", "50")
        clean_env.setenv("TRADE_DEFAULT_SEARCH_LIMIT", "25")
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("LOG_JSON", "false")
        clean_env.setenv("CORS_ORIGINS", "http://localhost:3000, https://app.example.com")

        config = ServiceConfig.from_env()

        assert config.api_key == "secret"
        assert config.auth_disabled is True
        assert config.default_page_size == 50
        assert config.default_search_limit == 25
        assert config.log_level == logging.DEBUG
        assert config.log_json is False
        assert config.cors_origins == ["http://localhost:3000", "https://app.example.com"]

    def test_unknown_backend(self, clean_env):
        clean_env.setenv("TRADE_ENGINE_STORE", "mongo")
        with pytest.raises(ConfigurationError):
            ServiceConfig.from_env()

    def test_unknown_log_level(self, clean_env):
        clean_env.setenv("TRADE_ENGINE_STORE", "memory")
        clean_env.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ConfigurationError):
            ServiceConfig.from_env()

    def test_bad_page_size(self, clean_env):
        clean_env.setenv("TRADE_ENGINE_STORE", "memory")
        clean_env.setenv("TRADE_DEFAULT_PAGE_SIZE", "twenty")
        with pytest.raises(ConfigurationError):
            ServiceConfig.from_env()

    @pytest.mark.parametrize("name,value", [
        ("TRADE_DEFAULT_PAGE_SIZE", "0"),
        ("TRADE_DEFAULT_PAGE_SIZE", "500"),
        ("TRADE_DEFAULT_PAGE_SIZE", "-5"),
        ("TRADE_DEFAULT_SEARCH_LIMIT", "0"),
        ("TRADE_DEFAULT_SEARCH_LIMIT", "101"),
    ])
    def test_default_limits_out_of_range(self, clean_env, name, value):
        """Defaults outside 1-100 fail at startup rather than on the first request."""
        clean_env.setenv("TRADE_ENGINE_STORE", "memory")
        clean_env.setenv(name, value)

        with pytest.raises(ConfigurationError) as exc_info:
            ServiceConfig.from_env()
        assert name in str(exc_info.value)

    def test_default_limits_at_bounds(self, clean_env):
        clean_env.setenv("TRADE_ENGINE_STORE", "memory")
        clean_env.setenv("TRADE_DEFAULT_PAGE_SIZE", "100")
        clean_env.setenv("TRADE_DEFAULT_SEARCH_LIMIT", "1")

        config = ServiceConfig.from_env()

        assert config.default_page_size == 100
        assert config.default_search_limit == 1

    def test_for_testing(self):
        config = ServiceConfig.for_testing()
        assert config.store_backend == "memory"
        assert config.auth_disabled is True
