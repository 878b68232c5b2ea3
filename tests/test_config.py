import pytest

from app.core.config import Settings


def test_jwt_secret_is_required(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_defaults_for_development():
    s = Settings(_env_file=None, JWT_SECRET="s")
    assert s.ACCESS_TOKEN_EXPIRE_MINUTES == 7 * 24 * 60
    assert s.EMAIL_TOKEN_EXPIRE_HOURS == 24
    assert s.STORAGE_BACKEND == "local"
    assert s.smtp_configured is False


def test_production_needs_explicit_urls_and_smtp():
    with pytest.raises(ValueError):
        Settings(_env_file=None, JWT_SECRET="s", ENVIRONMENT="production")

    s = Settings(
        _env_file=None, JWT_SECRET="s", ENVIRONMENT="production",
        FRONTEND_URL="https://app.example.com", BACKEND_URL="https://api.example.com",
        EMAIL_HOST="smtp.example.com", EMAIL_USER="bot", EMAIL_PASS="pw",
    )
    assert s.BACKEND_URL == "https://api.example.com"


def test_azure_storage_needs_credentials():
    with pytest.raises(ValueError):
        Settings(_env_file=None, JWT_SECRET="s", STORAGE_BACKEND="azure")
    with pytest.raises(ValueError):
        Settings(_env_file=None, JWT_SECRET="s", STORAGE_BACKEND="s3")


def test_cors_origins_list():
    s = Settings(_env_file=None, JWT_SECRET="s", CORS_ORIGINS="http://a.test, http://b.test,")
    assert s.cors_origins_list == ["http://a.test", "http://b.test"]
