"""Admin console request and response records."""

from __future__ import annotations

from pydantic import Field

from storefront.auth.models import UserPublic
from storefront.core.documents import CamelModel


class AdminLoginRequest(CamelModel):
    username: str = ""
    password: str = ""


class AdminLoginResult(CamelModel):
    user: UserPublic
    token: str


class RoleChangeRequest(CamelModel):
    """Role assignment; the role string is validated by the service."""

    user_id: str = Field(min_length=1)
    new_role: str = ""


class StatusChangeRequest(CamelModel):
    """Active flag assignment; omitted ``isActive`` toggles."""

    user_id: str = Field(min_length=1)
    is_active: bool | None = None


class AdminUserPatch(CamelModel):
    """Editable profile fields for another principal."""

    full_name: str | None = None
    email: str | None = None
    username: str | None = None


class AdminStats(CamelModel):
    total_users: int
    active_users: int
    inactive_users: int
    moderators: int
    admins: int
    total_products: int
