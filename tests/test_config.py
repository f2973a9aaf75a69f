from __future__ import annotations

import pytest

from storefront.core.config import AppConfig, AuthConfig, ConfigError, parse_duration


@pytest.mark.parametrize(
    ("raw", "seconds"),
    [("15m", 900), ("1d", 86400), ("3600", 3600), ("2h", 7200), ("1w", 604800)],
)
def test_parse_duration_accepts_unit_suffixes(raw: str, seconds: int) -> None:
    assert parse_duration(raw) == seconds


@pytest.mark.parametrize("raw", ["", "abc", "0", "-5m", "10y"])
def test_parse_duration_rejects_malformed_values(raw: str) -> None:
    with pytest.raises(ConfigError):
        parse_duration(raw)


def test_auth_config_rejects_unsupported_algorithm() -> None:
    with pytest.raises(ConfigError):
        AuthConfig(
            access_token_secret="a",
            refresh_token_secret="b",
            jwt_algorithm="none",
            access_token_ttl_seconds=60,
            refresh_token_ttl_seconds=120,
            admin_bootstrap_email="admin@local",
            admin_bootstrap_full_name="Admin",
        )


def test_from_env_requires_explicit_token_secrets(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("ACCESS_TOKEN_SECRET", raising=False)
    monkeypatch.setenv("REFRESH_TOKEN_SECRET", "refresh")
    monkeypatch.setenv("JWT_ALGORITHM", "HS256")

    with pytest.raises(ConfigError):
        AppConfig.from_env()


def test_from_env_reads_durations_and_origins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ACCESS_TOKEN_SECRET", "access")
    monkeypatch.setenv("REFRESH_TOKEN_SECRET", "refresh")
    monkeypatch.setenv("JWT_ALGORITHM", "hs512")
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRY", "15m")
    monkeypatch.setenv("REFRESH_TOKEN_EXPIRY", "7d")
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://shop.example, ,https://admin.example")
    monkeypatch.setenv("APP_ENV", "Production")

    config = AppConfig.from_env()

    assert config.auth.jwt_algorithm == "HS512"
    assert config.auth.access_token_ttl_seconds == 900
    assert config.auth.refresh_token_ttl_seconds == 7 * 86400
    assert config.security.cors_allowed_origins == [
        "https://shop.example",
        "https://admin.example",
    ]
    assert config.security.is_production
