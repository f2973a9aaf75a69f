"""JWT signing and verification for access and refresh tokens."""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError
from pydantic import ValidationError

from storefront.api.errors import ApiErrorCode, unauthorized
from storefront.auth.models import AccessClaims, TokenPair, UserRecord
from storefront.core.config import AuthConfig


class TokenCodec:
    """Signs and verifies tokens with explicitly configured secrets."""

    def __init__(self, config: AuthConfig) -> None:
        self._config = config

    def encode_access_token(self, user: UserRecord, *, now: int | None = None) -> str:
        issued_at = int(time.time()) if now is None else now
        payload = {
            "sub": user.id,
            "email": user.email,
            "username": user.username,
            "fullName": user.full_name,
            "role": user.role.value,
            "iat": issued_at,
            "exp": issued_at + self._config.access_token_ttl_seconds,
        }
        return jwt.encode(
            payload,
            self._config.access_token_secret,
            algorithm=self._config.jwt_algorithm,
        )

    def encode_refresh_token(self, user: UserRecord, *, now: int | None = None) -> str:
        issued_at = int(time.time()) if now is None else now
        payload = {
            "sub": user.id,
            "iat": issued_at,
            "exp": issued_at + self._config.refresh_token_ttl_seconds,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(
            payload,
            self._config.refresh_token_secret,
            algorithm=self._config.jwt_algorithm,
        )

    def encode_pair(self, user: UserRecord) -> TokenPair:
        now = int(time.time())
        return TokenPair(
            access_token=self.encode_access_token(user, now=now),
            refresh_token=self.encode_refresh_token(user, now=now),
        )

    def decode_access_token(self, token: str) -> AccessClaims:
        """Verify signature and expiry, returning typed access claims."""
        payload = self._decode(
            token,
            self._config.access_token_secret,
            required=["sub", "role", "iat", "exp"],
            label="access",
        )
        try:
            return AccessClaims.model_validate(payload)
        except ValidationError as exc:
            raise unauthorized("Invalid access token") from exc

    def decode_refresh_token(self, token: str) -> str:
        """Verify a refresh token and return its subject id."""
        payload = self._decode(
            token,
            self._config.refresh_token_secret,
            required=["sub", "iat", "exp"],
            label="refresh",
        )
        return str(payload["sub"])

    def _decode(
        self, token: str, secret: str, *, required: list[str], label: str
    ) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self._config.jwt_algorithm],
                options={"require": required},
            )
        except ExpiredSignatureError as exc:
            raise unauthorized(
                f"{label.capitalize()} token expired", ApiErrorCode.AUTH_TOKEN_EXPIRED
            ) from exc
        except InvalidTokenError as exc:
            raise unauthorized(f"Invalid {label} token") from exc
