import pytest

from storefinder.settings import Settings


def test_database_url_is_normalised_to_asyncpg():
    settings = Settings(DATABASE_URL="postgres://u:p@db:5432/stores")
    assert settings.async_database_url == "postgresql+asyncpg://u:p@db:5432/stores"

    settings = Settings(DATABASE_URL="postgresql://u:p@db/stores")
    assert settings.async_database_url == "postgresql+asyncpg://u:p@db/stores"


def test_database_url_accepts_legacy_env_name(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DATABASE", "postgresql://legacy/stores")
    assert Settings().async_database_url == "postgresql+asyncpg://legacy/stores"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('["https://a.com","http://localhost:7777"]', ["https://a.com", "http://localhost:7777"]),
        ("https://a.com, http://localhost:7777", ["https://a.com", "http://localhost:7777"]),
        ("", []),
    ],
)
def test_cors_origins_parsing(monkeypatch: pytest.MonkeyPatch, raw: str, expected: list[str]):
    monkeypatch.setenv("CORS_ORIGINS", raw)
    assert Settings().cors_origins == expected


def test_defaults():
    settings = Settings()
    assert settings.stores_page_size == 4
    assert settings.reset_token_ttl_seconds == 3600
    assert settings.near_max_distance_m == 10_000
