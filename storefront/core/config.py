"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

SUPPORTED_JWT_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


class ConfigError(ValueError):
    """Raised when required configuration is missing or malformed."""


def parse_duration(value: str) -> int:
    """Convert duration strings like ``15m``, ``1d`` or ``3600`` to seconds."""
    match = _DURATION_RE.match(value or "")
    if match is None:
        raise ConfigError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    seconds = int(amount) * _DURATION_UNITS[unit.lower()]
    if seconds <= 0:
        raise ConfigError(f"Duration must be positive: {value!r}")
    return seconds


def _required(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigError(f"{name} must be set")
    return value


@dataclass(frozen=True)
class AuthConfig:
    """Token signing and admin bootstrap configuration."""

    access_token_secret: str
    refresh_token_secret: str
    jwt_algorithm: str
    access_token_ttl_seconds: int
    refresh_token_ttl_seconds: int
    admin_bootstrap_email: str
    admin_bootstrap_full_name: str

    def __post_init__(self) -> None:
        if self.jwt_algorithm not in SUPPORTED_JWT_ALGORITHMS:
            raise ConfigError(
                f"JWT_ALGORITHM must be one of {sorted(SUPPORTED_JWT_ALGORITHMS)}"
            )
        if not self.access_token_secret or not self.refresh_token_secret:
            raise ConfigError("Token secrets must not be empty")


@dataclass(frozen=True)
class MongoConfig:
    """Document store connection settings."""

    uri: str
    database: str
    timeout_ms: int


@dataclass(frozen=True)
class MediaConfig:
    """Media host credentials and local upload spooling."""

    cloud_name: str
    api_key: str
    api_secret: str
    upload_tmp_dir: str
    upload_max_bytes: int


@dataclass(frozen=True)
class MailConfig:
    """Mail relay settings."""

    api_key: str
    sender: str
    notify_to: str


@dataclass(frozen=True)
class LoggingConfig:
    """Structured logging configuration."""

    level: str


@dataclass(frozen=True)
class SecurityConfig:
    """API perimeter security settings."""

    environment: str
    cors_allowed_origins: list[str]
    request_max_bytes: int

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    auth: AuthConfig
    mongo: MongoConfig
    media: MediaConfig
    mail: MailConfig
    logging: LoggingConfig
    security: SecurityConfig

    @staticmethod
    def from_env() -> "AppConfig":
        """Build app config from process environment."""
        auth = AuthConfig(
            access_token_secret=_required("ACCESS_TOKEN_SECRET"),
            refresh_token_secret=_required("REFRESH_TOKEN_SECRET"),
            jwt_algorithm=_required("JWT_ALGORITHM").upper(),
            access_token_ttl_seconds=parse_duration(
                os.getenv("ACCESS_TOKEN_EXPIRY", "1d")
            ),
            refresh_token_ttl_seconds=parse_duration(
                os.getenv("REFRESH_TOKEN_EXPIRY", "10d")
            ),
            admin_bootstrap_email=os.getenv(
                "ADMIN_BOOTSTRAP_EMAIL", "admin@storefront.local"
            )
            .strip()
            .lower(),
            admin_bootstrap_full_name=os.getenv(
                "ADMIN_BOOTSTRAP_FULL_NAME", "Administrator"
            ).strip()
            or "Administrator",
        )
        mongo = MongoConfig(
            uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017").strip(),
            database=os.getenv("MONGODB_DB", "storefront").strip() or "storefront",
            timeout_ms=int(os.getenv("MONGODB_TIMEOUT_MS", "5000")),
        )
        media = MediaConfig(
            cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME", "").strip(),
            api_key=os.getenv("CLOUDINARY_API_KEY", "").strip(),
            api_secret=os.getenv("CLOUDINARY_API_SECRET", "").strip(),
            upload_tmp_dir=os.getenv("UPLOAD_TMP_DIR", "runtime/uploads").strip()
            or "runtime/uploads",
            upload_max_bytes=int(os.getenv("UPLOAD_MAX_BYTES", str(50 * 1024 * 1024))),
        )
        mail = MailConfig(
            api_key=os.getenv("RESEND_API_KEY", "").strip(),
            sender=os.getenv("MAIL_FROM", "Storefront <noreply@storefront.local>").strip(),
            notify_to=os.getenv("MAIL_NOTIFY_TO", "").strip(),
        )
        cors_allowed_origins = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ALLOWED_ORIGINS",
                "http://localhost:5173,http://localhost:3000",
            ).split(",")
            if origin.strip()
        ]
        security = SecurityConfig(
            environment=os.getenv("APP_ENV", "development").strip().lower()
            or "development",
            cors_allowed_origins=cors_allowed_origins,
            request_max_bytes=int(os.getenv("REQUEST_MAX_BYTES", str(1024 * 1024))),
        )
        log_level = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"

        return AppConfig(
            auth=auth,
            mongo=mongo,
            media=media,
            mail=mail,
            logging=LoggingConfig(level=log_level),
            security=security,
        )
