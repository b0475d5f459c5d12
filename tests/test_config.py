"""Tests for core/config.py."""

from dynidp.core.config import Settings


def test_default_settings():
    s = Settings()
    assert s.app_port == 5443
    assert s.log_level == "INFO"
    assert s.local_session_scheme == "Identity.Application"
    assert s.placeholder_authority.startswith("https://")
    assert s.database_url  # non-empty


def test_sync_db_url():
    s = Settings(database_url="postgresql+asyncpg://user:pw@localhost/db")
    assert "+asyncpg" not in s.sync_database_url
    assert "postgresql" in s.sync_database_url
