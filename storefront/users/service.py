"""Self-service account operations for authenticated principals."""

from __future__ import annotations

import logging
from pathlib import Path

from storefront.api.errors import (
    ApiErrorCode,
    bad_request,
    conflict,
    internal_error,
    not_found,
    raise_for_errors,
)
from storefront.auth.models import (
    ChangePasswordRequest,
    TokenPair,
    UpdateAccountRequest,
    UserRecord,
)
from storefront.auth.service import AuthService, UserRepositoryProtocol
from storefront.core.documents import MediaAsset
from storefront.core.security import hash_password, verify_password
from storefront.media.uploader import MediaUploaderProtocol, remove_local_file
from storefront.users.models import (
    RegisterRequest,
    validate_account_update,
    validate_password_change,
    validate_registration,
)

LOGGER = logging.getLogger(__name__)


class UserService:
    """Registration, session and profile updates for the calling principal."""

    def __init__(
        self,
        repo: UserRepositoryProtocol,
        auth: AuthService,
        media: MediaUploaderProtocol,
    ) -> None:
        self._repo = repo
        self._auth = auth
        self._media = media

    def register(
        self,
        req: RegisterRequest,
        *,
        avatar_path: Path | None,
        cover_image_path: Path | None = None,
    ) -> UserRecord:
        """Create a principal with uploaded avatar and optional cover image."""
        try:
            raise_for_errors(validate_registration(req))
            username = req.username.strip().lower()
            email = req.email.strip().lower()
            if self._repo.find_by_username_or_email(username=username, email=email):
                raise conflict("User already exists with this email or username")
            if avatar_path is None:
                raise bad_request("Avatar is required")

            avatar = self._media.upload(avatar_path, "image")
            if avatar is None:
                raise bad_request(
                    "Could not upload avatar, try again",
                    ApiErrorCode.MEDIA_UPLOAD_FAILED,
                )
            cover_image = (
                self._media.upload(cover_image_path, "image")
                if cover_image_path is not None
                else None
            )
        finally:
            for path in (avatar_path, cover_image_path):
                if path is not None:
                    remove_local_file(path)

        fields = {
            "username": username,
            "email": email,
            "fullName": req.full_name.strip(),
            "password": hash_password(req.password),
            "avatar": avatar.model_dump(exclude_none=True),
        }
        if cover_image is not None:
            fields["coverImage"] = cover_image.model_dump(exclude_none=True)
        user = self._repo.create(fields)
        LOGGER.info("user_registered", extra={"user_id": user.id})
        return user

    def login(
        self, *, username: str | None, email: str | None, password: str
    ) -> tuple[UserRecord, TokenPair]:
        return self._auth.login(username=username, email=email, password=password)

    def logout(self, user: UserRecord) -> None:
        self._auth.revoke_session(user.id)
        LOGGER.info("user_logged_out", extra={"user_id": user.id})

    def refresh(self, presented_token: str | None) -> TokenPair:
        return self._auth.rotate_refresh_token(presented_token)

    def change_password(self, user: UserRecord, req: ChangePasswordRequest) -> None:
        """Replace the password after checking the current one."""
        current = self._require(user.id)
        if not verify_password(req.old_password, current.password):
            raise bad_request("Old password is incorrect")
        raise_for_errors(validate_password_change(req))
        self._repo.update_fields(user.id, {"password": hash_password(req.new_password)})
        LOGGER.info("user_password_changed", extra={"user_id": user.id})

    def update_account(self, user: UserRecord, req: UpdateAccountRequest) -> UserRecord:
        raise_for_errors(validate_account_update(req))
        updated = self._repo.update_fields(
            user.id,
            {"fullName": req.full_name.strip(), "email": req.email.strip().lower()},
        )
        if updated is None:
            raise not_found("User does not exist")
        return updated

    def update_avatar(self, user: UserRecord, local_path: Path | None) -> MediaAsset:
        return self._replace_image(user, local_path, field="avatar", label="avatar")

    def update_cover_image(
        self, user: UserRecord, local_path: Path | None
    ) -> MediaAsset:
        return self._replace_image(
            user, local_path, field="coverImage", label="cover image"
        )

    def _replace_image(
        self, user: UserRecord, local_path: Path | None, *, field: str, label: str
    ) -> MediaAsset:
        """Upload a new image, store it and drop the previous asset."""
        if local_path is None:
            raise bad_request(f"{label.capitalize()} file is missing")
        asset = self._media.upload(local_path, "image")
        if asset is None:
            raise internal_error(
                f"Could not upload {label}, try again",
                ApiErrorCode.MEDIA_UPLOAD_FAILED,
            )
        previous = user.avatar if field == "avatar" else user.cover_image
        updated = self._repo.update_fields(
            user.id, {field: asset.model_dump(exclude_none=True)}
        )
        if updated is None:
            raise not_found("User does not exist")
        if previous is not None and previous.public_id:
            self._media.delete(previous.public_id, "image")
        return asset

    def _require(self, user_id: str) -> UserRecord:
        user = self._repo.get_by_id(user_id)
        if user is None:
            raise not_found("User does not exist")
        return user
