"""
Unit tests for configuration and logging helpers.
"""

from pathlib import Path

import pytest

from shared.config import Environment, LogLevel, Settings
from shared.logging.logger import _censor_secrets


class TestSettings:
    """Settings load from environment variables with defaults."""

    def test_environment_from_env(self) -> None:
        assert Settings().environment == Environment.TESTING

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PORT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.port == 5000
        assert settings.default_company_id == 1
        assert settings.uploads.root == Path("uploads")
        assert settings.uploads.max_logo_bytes == 5 * 1024 * 1024
        assert settings.uploads.max_document_bytes == 10 * 1024 * 1024

    def test_port_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "8080")

        assert Settings(_env_file=None).port == 8080

    def test_log_level_uppercased(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings(_env_file=None).log_level == LogLevel.DEBUG

    def test_postgres_async_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POSTGRES_HOST", "db")
        monkeypatch.setenv("POSTGRES_PASSWORD", "pw")

        url = Settings(_env_file=None).postgres.async_url

        assert url.startswith("postgresql+asyncpg://")
        assert "pw@db:5432" in url

    def test_redis_url_without_password(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REDIS_PASSWORD", raising=False)

        assert Settings(_env_file=None).redis.url == "redis://localhost:6379/0"

    def test_cors_origins_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")

        assert Settings(_env_file=None).cors.origins_list == ["https://a.example", "https://b.example"]

    def test_clerk_disabled_without_jwks(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CLERK_JWKS_URL", raising=False)

        assert Settings(_env_file=None).clerk.enabled is False


class TestLogCensoring:
    def test_sensitive_keys_redacted(self) -> None:
        event = _censor_secrets(
            None,
            "info",
            {"event": "token_issued", "access_token": "abc", "user_id": 3},
        )

        assert event["event"] == "token_issued"
        assert event["access_token"] == "***REDACTED***"
        assert event["user_id"] == 3

    def test_nested_values_redacted(self) -> None:
        event = _censor_secrets(None, "info", {"event": "x", "payload": {"password": "p", "name": "n"}})

        assert event["payload"] == {"password": "***REDACTED***", "name": "n"}
