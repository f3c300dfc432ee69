"""Unit tests for settings and database URL resolution."""

import pytest

from backend.trips.config import Settings
from backend.trips.db.engine import resolve_database_url


def test_postgres_url_switched_to_asyncpg() -> None:
    settings = Settings(database_url="postgresql://u:p@db:5432/trips")
    assert resolve_database_url(settings) == "postgresql+asyncpg://u:p@db:5432/trips"


def test_sqlite_url_unchanged() -> None:
    settings = Settings(database_url="sqlite+aiosqlite:///./trips.db")
    assert resolve_database_url(settings) == "sqlite+aiosqlite:///./trips.db"


def test_placeholder_url_rejected() -> None:
    settings = Settings(database_url=None)
    with pytest.raises(ValueError, match="DATABASE_URL must be set"):
        resolve_database_url(settings)


def test_defaults() -> None:
    settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
    assert settings.default_currency == "CAD"
    assert settings.default_pricing_type == "per_person"
    assert settings.regeneration_lock_ttl_seconds == 60
