import pytest
from valorant_dashboard.config.settings import Settings, DEV_SESSION_SECRET


def test_development_allows_dev_secret():
    settings = Settings(environment="development", session_secret=DEV_SESSION_SECRET)
    assert settings.session_secret == DEV_SESSION_SECRET
    assert settings.is_production is False
    assert settings.cookie_secure is False


def test_production_requires_session_secret():
    with pytest.raises(ValueError, match="SESSION_SECRET"):
        Settings(environment="production", session_secret=DEV_SESSION_SECRET)


def test_production_uses_secure_cookies():
    settings = Settings(environment="Production", session_secret="a-real-secret")
    assert settings.is_production is True
    assert settings.cookie_secure is True


def test_upstream_defaults():
    settings = Settings(upstream_timeout_seconds=15, upstream_max_retries=1)
    assert settings.upstream_timeout_seconds == 15.0
    assert settings.upstream_max_retries == 1
    assert settings.database_url.startswith("sqlite+aiosqlite")
