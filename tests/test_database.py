# ============================================================================
# DATABASE CONFIGURATION TESTS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Tests - Connection string resolution and masking
# PURPOSE: Verify repositories/database.py without a live server
# CREATED: 14 OCT 2026
# ============================================================================
"""
Database Configuration Tests

Run with:
    pytest tests/test_database.py -v
"""

from repositories.database import (
    _pool_sizes,
    get_connection_string,
    mask_connection_string,
)


class TestConnectionString:

    def test_database_url_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/x")
        monkeypatch.setenv("POSTGRES_HOST", "ignored")
        assert get_connection_string() == "postgresql://u:p@db:5432/x"

    def test_components(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("POSTGRES_HOST", "pg")
        monkeypatch.setenv("POSTGRES_PORT", "6543")
        monkeypatch.setenv("POSTGRES_DB", "history")
        monkeypatch.setenv("POSTGRES_USER", "app")
        monkeypatch.setenv("POSTGRES_PASSWORD", "secret")
        monkeypatch.setenv("POSTGRES_SSLMODE", "require")
        assert get_connection_string() == (
            "postgresql://app:secret@pg:6543/history?sslmode=require"
        )


class TestMasking:

    def test_url_credentials_hidden(self):
        masked = mask_connection_string("postgresql://app:secret@pg:5432/history")
        assert masked == "postgresql://***@pg:5432/history"
        assert "secret" not in masked

    def test_keyword_password_hidden(self):
        masked = mask_connection_string("host=pg user=app password=secret")
        assert masked == "host=pg user=app password=***"

    def test_plain_passthrough(self):
        assert mask_connection_string("host=pg dbname=x") == "host=pg dbname=x"


class TestPoolSizes:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LOGO_DB_POOL_MIN", raising=False)
        monkeypatch.delenv("LOGO_DB_POOL_MAX", raising=False)
        assert _pool_sizes() == (1, 5)

    def test_max_never_below_min(self, monkeypatch):
        monkeypatch.setenv("LOGO_DB_POOL_MIN", "4")
        monkeypatch.setenv("LOGO_DB_POOL_MAX", "2")
        assert _pool_sizes() == (4, 4)
