"""FastAPI dependencies that authenticate requests and enforce roles."""

from __future__ import annotations

from fastapi import Request

from storefront.api.errors import ApiErrorCode, unauthorized
from storefront.auth.gate import ADMIN_ONLY, ADMIN_OR_MODERATOR, RoleGate
from storefront.auth.models import UserRecord
from storefront.auth.service import AuthService

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"
ADMIN_COOKIE = "adminToken"


def _extract_bearer_token(authorization: str | None) -> str:
    """Extract bearer token from authorization header value."""
    parts = (authorization or "").strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return ""
    return parts[1].strip()


def extract_user_token(request: Request) -> str:
    return request.cookies.get(ACCESS_COOKIE) or _extract_bearer_token(
        request.headers.get("authorization")
    )


def extract_admin_token(request: Request) -> str:
    return (
        request.cookies.get(ADMIN_COOKIE)
        or _extract_bearer_token(request.headers.get("authorization"))
        or (request.headers.get("x-auth-token") or "").strip()
    )


class AuthDependencies:
    """Callables mounted with ``Depends`` on protected routes."""

    def __init__(self, service: AuthService, gate: RoleGate) -> None:
        self._service = service
        self._gate = gate

    def require_user(self, request: Request) -> UserRecord:
        """Any principal with a valid access token."""
        token = extract_user_token(request)
        if not token:
            raise unauthorized("Not authorized", ApiErrorCode.AUTH_MISSING_TOKEN)
        claims = self._service.verify_access_token(token)
        user = self._gate.resolve(claims)
        request.state.user = user
        return user

    def require_admin(self, request: Request) -> UserRecord:
        """Live role must be admin."""
        return self._authorize(request, ADMIN_ONLY)

    def require_admin_or_moderator(self, request: Request) -> UserRecord:
        """Live role must be admin or moderator."""
        return self._authorize(request, ADMIN_OR_MODERATOR)

    def _authorize(self, request: Request, roles) -> UserRecord:
        token = extract_admin_token(request)
        if not token:
            raise unauthorized(
                "Unauthorized request - no token provided",
                ApiErrorCode.AUTH_MISSING_TOKEN,
            )
        claims = self._service.verify_access_token(token)
        user = self._gate.authorize(claims, roles, request.url.path)
        request.state.user = user
        return user
