"""Admin console operations over principals and catalog statistics."""

from __future__ import annotations

import logging
from typing import Any

from storefront.admin.models import (
    AdminStats,
    AdminUserPatch,
    RoleChangeRequest,
    StatusChangeRequest,
)
from storefront.api.errors import (
    ApiErrorCode,
    bad_request,
    forbidden,
    not_found,
    raise_for_errors,
    unauthorized,
)
from storefront.auth.models import Role, UserRecord
from storefront.auth.service import AuthService, UserRepositoryProtocol
from storefront.core.config import AuthConfig
from storefront.core.documents import is_object_id, utc_now
from storefront.core.pagination import Page, PageRequest, Pagination
from storefront.core.security import hash_password, verify_password
from storefront.products.service import ProductRepositoryProtocol
from storefront.users.models import EMAIL_RE, USERNAME_RE

LOGGER = logging.getLogger(__name__)

LAST_ADMIN_MESSAGE = "At least one active admin must remain"


def validate_user_patch(patch: AdminUserPatch) -> list[str]:
    """Return validation errors for an admin profile edit."""
    supplied = patch.model_dump(exclude_none=True, by_alias=False)
    if not supplied:
        return ["At least one of fullName, email or username is required"]
    errors: list[str] = []
    if patch.full_name is not None and not patch.full_name.strip():
        errors.append("fullName cannot be empty")
    if patch.email is not None and not EMAIL_RE.match(patch.email.strip()):
        errors.append("Email is invalid")
    if patch.username is not None and not USERNAME_RE.match(
        patch.username.strip().lower()
    ):
        errors.append("Username is invalid")
    return errors


def parse_role(value: str) -> Role:
    try:
        return Role((value or "").strip().lower())
    except ValueError as exc:
        allowed = ", ".join(role.value for role in Role)
        raise bad_request(f"Invalid role. Allowed: {allowed}") from exc


class AdminService:
    """Admin session handling and principal management."""

    def __init__(
        self,
        repo: UserRepositoryProtocol,
        products: ProductRepositoryProtocol,
        auth: AuthService,
        config: AuthConfig,
    ) -> None:
        self._repo = repo
        self._products = products
        self._auth = auth
        self._config = config

    def login(self, username: str, password: str) -> tuple[UserRecord, str]:
        """Authenticate an admin, bootstrapping the first one if none exist."""
        username = (username or "").strip().lower()
        if not username or not password:
            raise bad_request("Username and password are required")

        admin = self._repo.find_admin_by_username(username)
        now = utc_now()
        if admin is None:
            if self._repo.count(role=Role.ADMIN) > 0:
                raise unauthorized(
                    "Invalid admin credentials", ApiErrorCode.AUTH_INVALID_CREDENTIALS
                )
            admin = self._repo.create(
                {
                    "username": username,
                    "email": self._config.admin_bootstrap_email,
                    "fullName": self._config.admin_bootstrap_full_name,
                    "password": hash_password(password),
                    "role": Role.ADMIN.value,
                    "isActive": True,
                    "lastLogin": now,
                }
            )
            LOGGER.warning("admin_bootstrapped", extra={"user_id": admin.id})
        else:
            if not verify_password(password, admin.password):
                raise unauthorized(
                    "Invalid admin credentials", ApiErrorCode.AUTH_INVALID_CREDENTIALS
                )
            admin = self._repo.update_fields(
                admin.id, {"isActive": True, "lastLogin": now}
            ) or admin

        token = self._auth.issue_access_token(admin)
        LOGGER.info("admin_logged_in", extra={"user_id": admin.id})
        return admin, token

    def logout(self, admin: UserRecord) -> None:
        """Mark the admin inactive and drop any stored refresh token."""
        self._repo.update_fields(
            admin.id,
            {"isActive": False, "lastLogout": utc_now()},
            unset=("refreshToken",),
        )
        LOGGER.info("admin_logged_out", extra={"user_id": admin.id})

    def list_users(self, page: int | None, limit: int | None) -> Page[UserRecord]:
        request = PageRequest.build(page, limit, default_limit=10)
        items = self._repo.list_page(skip=request.skip, limit=request.limit)
        total = self._repo.count()
        return Page(items=items, pagination=Pagination.from_total(request, total))

    def search_users(
        self, *, role: str | None, is_active: bool | None, query: str
    ) -> list[UserRecord]:
        parsed_role = parse_role(role) if role else None
        return self._repo.search(role=parsed_role, is_active=is_active, query=query)

    def get_user(self, user_id: str) -> UserRecord:
        if not is_object_id(user_id):
            raise bad_request("Invalid user ID")
        user = self._repo.get_by_id(user_id)
        if user is None:
            raise not_found("User not found")
        return user

    def change_role(self, actor: UserRecord, req: RoleChangeRequest) -> UserRecord:
        """Assign a role, refusing self-changes and demoting the last admin."""
        if not is_object_id(req.user_id):
            raise bad_request("Invalid user ID")
        new_role = parse_role(req.new_role)
        if req.user_id == actor.id:
            raise forbidden("You cannot change your own role")

        target = self.get_user(req.user_id)
        if target.role is Role.ADMIN and new_role is not Role.ADMIN:
            self._ensure_not_last_active_admin(target)

        updated = self._repo.update_fields(target.id, {"role": new_role.value})
        if updated is None:
            raise not_found("User not found")
        LOGGER.info(
            "user_role_changed",
            extra={"user_id": actor.id, "resource_id": updated.id},
        )
        return updated

    def change_status(self, actor: UserRecord, req: StatusChangeRequest) -> UserRecord:
        """Set or toggle ``isActive`` on a principal."""
        target = self.get_user(req.user_id)
        is_active = not target.is_active if req.is_active is None else req.is_active
        if target.role is Role.ADMIN and not is_active:
            self._ensure_not_last_active_admin(target)

        updated = self._repo.update_fields(target.id, {"isActive": is_active})
        if updated is None:
            raise not_found("User not found")
        LOGGER.info(
            "user_status_changed",
            extra={"user_id": actor.id, "resource_id": updated.id},
        )
        return updated

    def update_user(self, user_id: str, patch: AdminUserPatch) -> UserRecord:
        target = self.get_user(user_id)
        raise_for_errors(validate_user_patch(patch))
        fields: dict[str, Any] = {}
        if patch.full_name is not None:
            fields["fullName"] = patch.full_name.strip()
        if patch.email is not None:
            fields["email"] = patch.email.strip().lower()
        if patch.username is not None:
            fields["username"] = patch.username.strip().lower()
        updated = self._repo.update_fields(target.id, fields)
        if updated is None:
            raise not_found("User not found")
        return updated

    def delete_user(self, actor: UserRecord, user_id: str) -> None:
        if not is_object_id(user_id):
            raise bad_request(f"Invalid user ID: {user_id}")
        target = self._repo.get_by_id(user_id)
        if target is None:
            raise not_found("User not found")
        if target.role is Role.ADMIN:
            self._ensure_not_last_active_admin(target)
        if self._repo.delete(target.id) is None:
            raise not_found("User not found")
        LOGGER.info(
            "user_deleted", extra={"user_id": actor.id, "resource_id": target.id}
        )

    def stats(self) -> AdminStats:
        return AdminStats(
            total_users=self._repo.count(),
            active_users=self._repo.count(is_active=True),
            inactive_users=self._repo.count(is_active=False),
            moderators=self._repo.count(role=Role.MODERATOR),
            admins=self._repo.count(role=Role.ADMIN),
            total_products=self._products.count({}),
        )

    def _ensure_not_last_active_admin(self, target: UserRecord) -> None:
        if not target.is_active:
            return
        if self._repo.count(role=Role.ADMIN, is_active=True) <= 1:
            raise forbidden(LAST_ADMIN_MESSAGE)
