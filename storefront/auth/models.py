"""Pydantic models for the principal and its session tokens."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from storefront.core.documents import CamelModel, MediaAsset, StoredDocument


class Role(StrEnum):
    """Static principal roles."""

    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class UserRecord(StoredDocument):
    """Persisted principal including credential and session fields."""

    username: str
    email: str
    full_name: str
    password: str = Field(default="", repr=False)
    role: Role = Role.USER
    is_active: bool = True
    refresh_token: str | None = Field(default=None, repr=False)
    avatar: MediaAsset | None = None
    cover_image: MediaAsset | None = None
    last_login: datetime | None = None
    last_logout: datetime | None = None

    def to_public(self) -> "UserPublic":
        return UserPublic.model_validate(
            self.model_dump(exclude={"password", "refresh_token"})
        )


class UserPublic(StoredDocument):
    """Principal as rendered to clients."""

    username: str
    email: str
    full_name: str
    role: Role = Role.USER
    is_active: bool = True
    avatar: MediaAsset | None = None
    cover_image: MediaAsset | None = None
    last_login: datetime | None = None
    last_logout: datetime | None = None


class AccessClaims(CamelModel):
    """Decoded access token payload."""

    sub: str
    email: str
    username: str
    full_name: str
    role: Role
    iat: int
    exp: int


class TokenPair(CamelModel):
    """Freshly issued access and refresh tokens."""

    access_token: str
    refresh_token: str


class LoginRequest(CamelModel):
    """Login payload: username or email plus password."""

    username: str | None = None
    email: str | None = None
    password: str = Field(min_length=1)


class RefreshRequest(CamelModel):
    """Refresh payload; the cookie takes precedence when present."""

    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    """Password change payload."""

    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)
    conf_password: str = Field(min_length=1)


class UpdateAccountRequest(CamelModel):
    """Self-service account details update."""

    full_name: str = Field(min_length=1)
    email: str = Field(min_length=3)


class LoginResult(CamelModel):
    """Login response payload."""

    user: UserPublic
    access_token: str
    refresh_token: str
