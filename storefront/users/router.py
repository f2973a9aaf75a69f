"""Self-service account API router."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, File, Form, Request, Response, UploadFile

from storefront.api.contracts import ApiErrorResponse, ApiResponse, ok
from storefront.auth.cookies import clear_session_cookies, set_session_cookie
from storefront.auth.dependencies import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    AuthDependencies,
)
from storefront.auth.models import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResult,
    RefreshRequest,
    TokenPair,
    UpdateAccountRequest,
    UserPublic,
    UserRecord,
)
from storefront.core.config import AppConfig
from storefront.core.documents import MediaAsset
from storefront.media.uploader import spool_optional
from storefront.users.models import RegisterRequest
from storefront.users.service import UserService


def create_users_router(
    service: UserService, deps: AuthDependencies, config: AppConfig
) -> APIRouter:
    """Build the ``/api/v1/users`` router."""
    router = APIRouter(prefix="/api/v1/users", tags=["users"])

    def _set_session(response: Response, pair: TokenPair) -> None:
        set_session_cookie(
            response,
            ACCESS_COOKIE,
            pair.access_token,
            config=config,
            max_age=config.auth.access_token_ttl_seconds,
        )
        set_session_cookie(
            response,
            REFRESH_COOKIE,
            pair.refresh_token,
            config=config,
            max_age=config.auth.refresh_token_ttl_seconds,
        )

    @router.post(
        "/register",
        status_code=201,
        response_model=ApiResponse[UserPublic],
        responses={400: {"model": ApiErrorResponse}, 409: {"model": ApiErrorResponse}},
    )
    def register(
        full_name: str = Form(default="", alias="fullName"),
        email: str = Form(default=""),
        username: str = Form(default=""),
        password: str = Form(default=""),
        avatar: UploadFile | None = File(default=None),
        cover_image: UploadFile | None = File(default=None, alias="coverImage"),
    ) -> ApiResponse[UserPublic]:
        """Register a principal with avatar and optional cover image."""
        req = RegisterRequest(
            full_name=full_name, email=email, username=username, password=password
        )
        avatar_path = spool_optional(avatar, config.media)
        cover_path = spool_optional(cover_image, config.media)
        user = service.register(
            req, avatar_path=avatar_path, cover_image_path=cover_path
        )
        return ok(user.to_public(), "User registered successfully", 201)

    @router.post(
        "/login",
        response_model=ApiResponse[LoginResult],
        responses={401: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def login(req: LoginRequest, response: Response) -> ApiResponse[LoginResult]:
        user, pair = service.login(
            username=req.username, email=req.email, password=req.password
        )
        _set_session(response, pair)
        result = LoginResult(
            user=user.to_public(),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        )
        return ok(result, "User logged in successfully")

    @router.post("/logout", response_model=ApiResponse[None])
    def logout(
        response: Response, user: UserRecord = Depends(deps.require_user)
    ) -> ApiResponse[None]:
        service.logout(user)
        clear_session_cookies(response, ACCESS_COOKIE, REFRESH_COOKIE, config=config)
        return ok(None, "Logged out successfully")

    @router.post(
        "/refresh-token",
        response_model=ApiResponse[TokenPair],
        responses={401: {"model": ApiErrorResponse}},
    )
    def refresh_token(
        request: Request,
        response: Response,
        req: RefreshRequest | None = Body(default=None),
    ) -> ApiResponse[TokenPair]:
        """Rotate the refresh token presented by cookie or body."""
        presented = request.cookies.get(REFRESH_COOKIE) or (
            req.refresh_token if req is not None else None
        )
        pair = service.refresh(presented)
        _set_session(response, pair)
        return ok(pair, "Access token refreshed successfully")

    @router.post(
        "/change-password",
        response_model=ApiResponse[None],
        responses={400: {"model": ApiErrorResponse}},
    )
    def change_password(
        req: ChangePasswordRequest, user: UserRecord = Depends(deps.require_user)
    ) -> ApiResponse[None]:
        service.change_password(user, req)
        return ok(None, "Password changed successfully")

    @router.get("/current-user", response_model=ApiResponse[UserPublic])
    def current_user(
        user: UserRecord = Depends(deps.require_user),
    ) -> ApiResponse[UserPublic]:
        return ok(user.to_public(), "User details fetched successfully")

    @router.patch(
        "/update-account",
        response_model=ApiResponse[UserPublic],
        responses={400: {"model": ApiErrorResponse}, 409: {"model": ApiErrorResponse}},
    )
    def update_account(
        req: UpdateAccountRequest, user: UserRecord = Depends(deps.require_user)
    ) -> ApiResponse[UserPublic]:
        updated = service.update_account(user, req)
        return ok(updated.to_public(), "User details updated successfully")

    @router.patch("/avatar", response_model=ApiResponse[MediaAsset])
    def update_avatar(
        avatar: UploadFile | None = File(default=None),
        user: UserRecord = Depends(deps.require_user),
    ) -> ApiResponse[MediaAsset]:
        asset = service.update_avatar(user, spool_optional(avatar, config.media))
        return ok(asset, "Avatar updated successfully")

    @router.patch("/cover-image", response_model=ApiResponse[MediaAsset])
    def update_cover_image(
        cover_image: UploadFile | None = File(default=None, alias="coverImage"),
        user: UserRecord = Depends(deps.require_user),
    ) -> ApiResponse[MediaAsset]:
        asset = service.update_cover_image(
            user, spool_optional(cover_image, config.media)
        )
        return ok(asset, "Cover image updated successfully")

    return router
