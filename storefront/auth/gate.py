"""Role-based authorization against the live principal record."""

from __future__ import annotations

from typing import Protocol

from storefront.api.errors import ApiErrorCode, forbidden, unauthorized
from storefront.auth.models import AccessClaims, Role, UserRecord

ADMIN_SELF_SERVICE_PATHS = frozenset(
    {
        "/api/v1/admin/users/status",
        "/api/v1/admin/users/role",
    }
)

ADMIN_ONLY = frozenset({Role.ADMIN})
ADMIN_OR_MODERATOR = frozenset({Role.ADMIN, Role.MODERATOR})


class PrincipalLookup(Protocol):
    def get_by_id(self, user_id: str) -> UserRecord | None:
        """Return principal by id, or ``None``."""


def can_bypass_deactivation(user: UserRecord, path: str) -> bool:
    """Deactivated admins may still reach the status/role endpoints."""
    return user.role is Role.ADMIN and path.rstrip("/") in ADMIN_SELF_SERVICE_PATHS


def ensure_owner(owner_id: str | None, user: UserRecord, message: str) -> None:
    """Raise 403 unless the caller owns the resource or is an admin."""
    if user.role is Role.ADMIN:
        return
    if not owner_id or str(owner_id) != user.id:
        raise forbidden(message)


class RoleGate:
    """Resolves claims to a live principal and enforces role requirements."""

    def __init__(self, repo: PrincipalLookup) -> None:
        self._repo = repo

    def resolve(self, claims: AccessClaims) -> UserRecord:
        """Re-read the principal named by the claims."""
        user = self._repo.get_by_id(claims.sub)
        if user is None:
            raise unauthorized(
                "Invalid access token - user not found",
                ApiErrorCode.AUTH_USER_NOT_FOUND,
            )
        return user

    def authorize(
        self,
        claims: AccessClaims,
        required_roles: frozenset[Role],
        path: str,
    ) -> UserRecord:
        """Return the live principal or raise 401/403."""
        user = self.resolve(claims)
        if user.role not in required_roles:
            allowed = " or ".join(sorted(role.value for role in required_roles))
            raise forbidden(f"Access denied. {allowed} privileges required.")
        if not user.is_active and not can_bypass_deactivation(user, path):
            raise forbidden("Account is deactivated", ApiErrorCode.ACCOUNT_DEACTIVATED)
        return user
