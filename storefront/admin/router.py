"""Admin console API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from storefront.admin.models import (
    AdminLoginRequest,
    AdminLoginResult,
    AdminStats,
    AdminUserPatch,
    RoleChangeRequest,
    StatusChangeRequest,
)
from storefront.admin.service import AdminService
from storefront.api.contracts import ApiErrorResponse, ApiResponse, HealthResponse, ok
from storefront.api.runtime_routes import HealthProbe
from storefront.auth.cookies import clear_session_cookies, set_session_cookie
from storefront.auth.dependencies import ACCESS_COOKIE, ADMIN_COOKIE, AuthDependencies
from storefront.auth.models import UserPublic, UserRecord
from storefront.core.config import AppConfig
from storefront.core.pagination import Page
from storefront.products.models import ProductStats
from storefront.products.service import ProductService


def create_admin_router(
    service: AdminService,
    products: ProductService,
    deps: AuthDependencies,
    config: AppConfig,
    probe: HealthProbe,
) -> APIRouter:
    """Build the ``/api/v1/admin`` router."""
    router = APIRouter(prefix="/api/v1/admin", tags=["admin"])

    def _public_page(page: Page[UserRecord]) -> Page[UserPublic]:
        return Page(
            items=[user.to_public() for user in page.items],
            pagination=page.pagination,
        )

    @router.post(
        "/login",
        response_model=ApiResponse[AdminLoginResult],
        responses={400: {"model": ApiErrorResponse}, 401: {"model": ApiErrorResponse}},
    )
    def login(
        req: AdminLoginRequest, response: Response
    ) -> ApiResponse[AdminLoginResult]:
        """Admin sign-in; the first sign-in creates the admin account."""
        admin, token = service.login(req.username, req.password)
        for name in (ACCESS_COOKIE, ADMIN_COOKIE):
            set_session_cookie(
                response,
                name,
                token,
                config=config,
                max_age=config.auth.access_token_ttl_seconds,
                same_site="strict",
            )
        return ok(
            AdminLoginResult(user=admin.to_public(), token=token),
            "Admin logged in successfully",
        )

    @router.post("/logout", response_model=ApiResponse[None])
    def logout(
        response: Response, admin: UserRecord = Depends(deps.require_admin)
    ) -> ApiResponse[None]:
        service.logout(admin)
        clear_session_cookies(
            response, ACCESS_COOKIE, ADMIN_COOKIE, config=config, same_site="strict"
        )
        return ok(None, "Admin logged out successfully")

    @router.get("/users", response_model=ApiResponse[Page[UserPublic]])
    def list_users(
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=10, ge=1, le=100),
        _: UserRecord = Depends(deps.require_admin),
    ) -> ApiResponse[Page[UserPublic]]:
        result = service.list_users(page, limit)
        return ok(_public_page(result), "Users fetched successfully")

    @router.get("/users/search", response_model=ApiResponse[list[UserPublic]])
    def search_users(
        role: str | None = Query(default=None),
        is_active: bool | None = Query(default=None, alias="isActive"),
        query: str = Query(default=""),
        _: UserRecord = Depends(deps.require_admin),
    ) -> ApiResponse[list[UserPublic]]:
        users = service.search_users(role=role, is_active=is_active, query=query)
        return ok(
            [user.to_public() for user in users],
            "Filtered users fetched successfully",
        )

    @router.put(
        "/users/role",
        response_model=ApiResponse[UserPublic],
        responses={
            400: {"model": ApiErrorResponse},
            403: {"model": ApiErrorResponse},
            404: {"model": ApiErrorResponse},
        },
    )
    def change_role(
        req: RoleChangeRequest, admin: UserRecord = Depends(deps.require_admin)
    ) -> ApiResponse[UserPublic]:
        updated = service.change_role(admin, req)
        return ok(updated.to_public(), "User role updated successfully")

    @router.put(
        "/users/status",
        response_model=ApiResponse[UserPublic],
        responses={403: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def change_status(
        req: StatusChangeRequest,
        actor: UserRecord = Depends(deps.require_admin_or_moderator),
    ) -> ApiResponse[UserPublic]:
        updated = service.change_status(actor, req)
        state = "Active" if updated.is_active else "Inactive"
        return ok(updated.to_public(), f"User status updated successfully: {state}")

    @router.get("/stats", response_model=ApiResponse[AdminStats])
    def stats(_: UserRecord = Depends(deps.require_admin)) -> ApiResponse[AdminStats]:
        return ok(service.stats(), "Admin statistics fetched successfully")

    @router.get("/products/stats", response_model=ApiResponse[ProductStats])
    def product_stats(
        _: UserRecord = Depends(deps.require_admin),
    ) -> ApiResponse[ProductStats]:
        return ok(products.stats(), "Product statistics fetched successfully")

    @router.get("/health", response_model=ApiResponse[HealthResponse])
    def health() -> ApiResponse[HealthResponse]:
        return ok(probe.snapshot(), "Admin API is running smoothly")

    @router.get(
        "/users/{user_id}",
        response_model=ApiResponse[UserPublic],
        responses={400: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def get_user(
        user_id: str, _: UserRecord = Depends(deps.require_admin)
    ) -> ApiResponse[UserPublic]:
        return ok(service.get_user(user_id).to_public(), "User details fetched successfully")

    @router.patch(
        "/users/{user_id}",
        response_model=ApiResponse[UserPublic],
        responses={400: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def update_user(
        user_id: str,
        patch: AdminUserPatch,
        _: UserRecord = Depends(deps.require_admin),
    ) -> ApiResponse[UserPublic]:
        updated = service.update_user(user_id, patch)
        return ok(updated.to_public(), "User profile updated successfully")

    @router.delete(
        "/users/{user_id}",
        response_model=ApiResponse[None],
        responses={400: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def delete_user(
        user_id: str, admin: UserRecord = Depends(deps.require_admin)
    ) -> ApiResponse[None]:
        service.delete_user(admin, user_id)
        return ok(None, "User deleted successfully")

    return router
