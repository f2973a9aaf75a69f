"""Credential checks and token lifecycle for principals."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pymongo.errors import PyMongoError

from storefront.api.errors import (
    ApiErrorCode,
    bad_request,
    internal_error,
    not_found,
    unauthorized,
)
from storefront.auth.models import AccessClaims, Role, TokenPair, UserRecord
from storefront.auth.tokens import TokenCodec
from storefront.core.security import verify_password

LOGGER = logging.getLogger(__name__)


class UserRepositoryProtocol(Protocol):
    """Repository methods used by the auth service and role gate."""

    def get_by_id(self, user_id: str) -> UserRecord | None:
        """Return principal by id, or ``None``."""

    def find_by_username_or_email(
        self, *, username: str | None = None, email: str | None = None
    ) -> UserRecord | None:
        """Return principal matching either identifier."""

    def find_admin_by_username(self, username: str) -> UserRecord | None:
        """Return admin principal by username."""

    def create(self, fields: dict[str, Any]) -> UserRecord:
        """Insert principal document."""

    def update_fields(
        self, user_id: str, fields: dict[str, Any], *, unset: tuple[str, ...] = ()
    ) -> UserRecord | None:
        """Patch principal fields and return the updated record."""

    def set_refresh_token(self, user_id: str, token: str | None) -> UserRecord | None:
        """Store or clear the refresh token."""

    def delete(self, user_id: str) -> UserRecord | None:
        """Delete principal and return the removed record."""

    def count(self, *, role: Role | None = None, is_active: bool | None = None) -> int:
        """Count principals by role/active status."""

    def list_page(self, *, skip: int, limit: int) -> list[UserRecord]:
        """List principals newest first."""

    def search(
        self,
        *,
        role: Role | None = None,
        is_active: bool | None = None,
        query: str = "",
    ) -> list[UserRecord]:
        """Search principals by role, status and username/email text."""


class AuthService:
    """Authenticates principals and manages their token pairs."""

    def __init__(self, repo: UserRepositoryProtocol, tokens: TokenCodec) -> None:
        self._repo = repo
        self._tokens = tokens

    def authenticate(
        self, *, username: str | None, email: str | None, password: str
    ) -> UserRecord:
        """Look up principal by username or email and check the password."""
        username = (username or "").strip() or None
        email = (email or "").strip() or None
        if not username and not email:
            raise bad_request("Username or email is required")

        user = self._repo.find_by_username_or_email(username=username, email=email)
        if user is None:
            raise not_found("User does not exist")
        if not verify_password(password, user.password):
            raise unauthorized(
                "Invalid user credentials", ApiErrorCode.AUTH_INVALID_CREDENTIALS
            )
        return user

    def issue_token_pair(self, user: UserRecord) -> TokenPair:
        """Sign a new pair and persist the refresh token on the principal."""
        pair = self._tokens.encode_pair(user)
        try:
            stored = self._repo.set_refresh_token(user.id, pair.refresh_token)
        except PyMongoError as exc:
            LOGGER.exception("refresh_token_persist_failed", extra={"user_id": user.id})
            raise internal_error(
                "Something went wrong while generating access and refresh tokens"
            ) from exc
        if stored is None:
            raise internal_error(
                "Something went wrong while generating access and refresh tokens"
            )
        return pair

    def verify_access_token(self, token: str) -> AccessClaims:
        """Stateless signature and expiry check."""
        return self._tokens.decode_access_token(token)

    def issue_access_token(self, user: UserRecord) -> str:
        """Sign a standalone access token (admin console sessions)."""
        return self._tokens.encode_access_token(user)

    def rotate_refresh_token(self, presented_token: str | None) -> TokenPair:
        """Exchange the currently stored refresh token for a new pair."""
        if not presented_token:
            raise unauthorized("Unauthorized request", ApiErrorCode.AUTH_MISSING_TOKEN)
        user_id = self._tokens.decode_refresh_token(presented_token)
        user = self._repo.get_by_id(user_id)
        if user is None:
            raise unauthorized("Invalid refresh token")
        if user.refresh_token != presented_token:
            LOGGER.warning("refresh_token_replayed", extra={"user_id": user.id})
            raise unauthorized(
                "Refresh token is expired or used", ApiErrorCode.AUTH_TOKEN_REPLAYED
            )
        return self.issue_token_pair(user)

    def revoke_session(self, user_id: str) -> None:
        """Clear the stored refresh token; repeated calls are harmless."""
        self._repo.set_refresh_token(user_id, None)

    def login(
        self, *, username: str | None, email: str | None, password: str
    ) -> tuple[UserRecord, TokenPair]:
        """Authenticate and issue a token pair in one step."""
        user = self.authenticate(username=username, email=email, password=password)
        pair = self.issue_token_pair(user)
        LOGGER.info("user_logged_in", extra={"user_id": user.id})
        return user, pair
