import pytest
from pydantic import ValidationError

from app.core.config import AppSettings, CacheTTLs
from app.db.session import normalize_async_dsn


def test_cache_ttls_defaults():
    ttls = AppSettings(_env_file=None).cache_ttls()
    assert ttls == CacheTTLs()
    assert ttls.stock_levels == 60
    assert ttls.summary_metrics == 120
    assert ttls.supplier_detail == 600
    assert ttls.supplier_rankings == 900
    assert ttls.recent_purchases == 30


def test_cache_ttls_from_env(monkeypatch):
    monkeypatch.setenv("CACHE_TTL_STOCK_LEVELS", "15")
    assert AppSettings(_env_file=None).cache_ttls().stock_levels == 15


def test_non_positive_ttl_rejected_by_settings(monkeypatch):
    monkeypatch.setenv("CACHE_TTL_SUMMARY_METRICS", "0")
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None)


def test_non_positive_ttl_rejected_by_cache_ttls():
    with pytest.raises(ValueError):
        CacheTTLs(stock_levels=-1)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("", "sqlite+aiosqlite:///./dashboard.db"),
        ("sqlite:///./x.db", "sqlite+aiosqlite:///./x.db"),
        ('"postgres://u:p@h/db"', "postgresql+psycopg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql+asyncpg://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql+psycopg://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
    ],
)
def test_normalize_async_dsn(raw, expected):
    assert normalize_async_dsn(raw) == expected
