"""Video publishing and owner-scoped maintenance."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from storefront.api.errors import (
    ApiErrorCode,
    bad_request,
    internal_error,
    not_found,
    raise_for_errors,
)
from storefront.auth.gate import ensure_owner
from storefront.auth.models import Role, UserRecord
from storefront.core.documents import is_object_id, to_object_id
from storefront.core.pagination import Page, PageRequest, Pagination
from storefront.media.uploader import MediaUploaderProtocol, remove_local_file
from storefront.videos.models import (
    VideoRecord,
    VideoUpdate,
    validate_new_video,
    validate_video_update,
)

LOGGER = logging.getLogger(__name__)


class VideoRepositoryProtocol(Protocol):
    """Repository methods used by the video and comment services."""

    def create(self, fields: dict[str, Any]) -> VideoRecord:
        """Insert video document."""

    def get_by_id(self, video_id: str) -> VideoRecord | None:
        """Return video by id, or ``None``."""

    def get_with_owner(self, video_id: str) -> VideoRecord | None:
        """Return video with the owner summary joined."""

    def list_published(
        self, *, search: str | None, skip: int, limit: int
    ) -> list[VideoRecord]:
        """List published videos newest first."""

    def count_published(self, *, search: str | None) -> int:
        """Count published videos."""

    def update_fields(self, video_id: str, fields: dict[str, Any]) -> VideoRecord | None:
        """Patch video fields and return the updated record."""

    def delete(self, video_id: str) -> VideoRecord | None:
        """Delete video and return the removed record."""

    def adjust_comment_count(self, video_id: str, delta: int) -> None:
        """Increment or decrement the cached comment count."""


class CommentCleanup(Protocol):
    def delete_for_video(self, video_id: str) -> int:
        """Remove every comment on a video."""


def _require_video_id(video_id: str) -> None:
    if not is_object_id(video_id):
        raise bad_request("Invalid video id")


class VideoService:
    def __init__(
        self,
        repo: VideoRepositoryProtocol,
        comments: CommentCleanup,
        media: MediaUploaderProtocol,
    ) -> None:
        self._repo = repo
        self._comments = comments
        self._media = media

    def list_videos(
        self, *, search: str | None, page: int | None, limit: int | None
    ) -> Page[VideoRecord]:
        request = PageRequest.build(page, limit, default_limit=10)
        items = self._repo.list_published(
            search=search, skip=request.skip, limit=request.limit
        )
        total = self._repo.count_published(search=search)
        return Page(items=items, pagination=Pagination.from_total(request, total))

    def get_video(self, video_id: str, viewer: UserRecord) -> VideoRecord:
        """Return a video; unpublished ones are visible to their owner only."""
        _require_video_id(video_id)
        video = self._repo.get_with_owner(video_id)
        if video is None:
            raise not_found("Video not found")
        if not video.is_published and not _can_see_unpublished(video, viewer):
            raise not_found("Video not found")
        return video

    def create_video(
        self,
        user: UserRecord,
        *,
        title: str,
        description: str,
        video_path: Path | None,
        thumbnail_path: Path | None = None,
    ) -> VideoRecord:
        try:
            raise_for_errors(validate_new_video(title, description))
            if video_path is None:
                raise bad_request("Video file is required")
            video_asset = self._media.upload(video_path, "video")
            if video_asset is None:
                raise internal_error(
                    "Could not upload video, try again",
                    ApiErrorCode.MEDIA_UPLOAD_FAILED,
                )
            thumbnail = (
                self._media.upload(thumbnail_path, "image")
                if thumbnail_path is not None
                else None
            )
        finally:
            for path in (video_path, thumbnail_path):
                if path is not None:
                    remove_local_file(path)

        fields: dict[str, Any] = {
            "videoFile": video_asset.url,
            "videoPublicId": video_asset.public_id,
            "title": title.strip(),
            "description": description.strip(),
            "duration": video_asset.duration or 0,
            "owner": to_object_id(user.id),
        }
        if thumbnail is not None:
            fields["thumbnail"] = thumbnail.url
            fields["thumbnailPublicId"] = thumbnail.public_id
        video = self._repo.create(fields)
        LOGGER.info("video_created", extra={"user_id": user.id, "resource_id": video.id})
        return video

    def publish(self, video_id: str, user: UserRecord) -> VideoRecord:
        video = self._owned_video(video_id, user, "publish")
        return self._set_published(video, True)

    def unpublish(self, video_id: str, user: UserRecord) -> VideoRecord:
        video = self._owned_video(video_id, user, "unpublish")
        if not video.is_published:
            raise bad_request("Video is already unpublished")
        return self._set_published(video, False)

    def update_video(
        self,
        video_id: str,
        user: UserRecord,
        update: VideoUpdate,
        thumbnail_path: Path | None = None,
    ) -> VideoRecord:
        """Edit title/description and optionally replace the thumbnail."""
        try:
            video = self._owned_video(video_id, user, "update")
            raise_for_errors(validate_video_update(update))
            thumbnail = (
                self._media.upload(thumbnail_path, "image")
                if thumbnail_path is not None
                else None
            )
        finally:
            if thumbnail_path is not None:
                remove_local_file(thumbnail_path)

        fields: dict[str, Any] = {}
        if update.title:
            fields["title"] = update.title.strip()
        if update.description:
            fields["description"] = update.description.strip()
        if thumbnail is not None:
            fields["thumbnail"] = thumbnail.url
            fields["thumbnailPublicId"] = thumbnail.public_id
        if not fields:
            return video
        updated = self._repo.update_fields(video.id, fields)
        if updated is None:
            raise not_found("Video not found")
        if thumbnail is not None and video.thumbnail_public_id:
            self._media.delete(video.thumbnail_public_id, "image")
        return updated

    def delete_video(self, video_id: str, user: UserRecord) -> VideoRecord:
        """Delete after the existence and ownership checks pass."""
        video = self._owned_video(video_id, user, "delete")
        removed = self._repo.delete(video.id)
        if removed is None:
            raise not_found("Video not found")
        self._comments.delete_for_video(removed.id)
        if removed.video_public_id:
            self._media.delete(removed.video_public_id, "video")
        if removed.thumbnail_public_id:
            self._media.delete(removed.thumbnail_public_id, "image")
        LOGGER.info(
            "video_deleted", extra={"user_id": user.id, "resource_id": removed.id}
        )
        return removed

    def _owned_video(self, video_id: str, user: UserRecord, action: str) -> VideoRecord:
        _require_video_id(video_id)
        video = self._repo.get_by_id(video_id)
        if video is None:
            raise not_found("Video not found")
        ensure_owner(
            video.owner_id, user, f"You are not authorized to {action} this video"
        )
        return video

    def _set_published(self, video: VideoRecord, published: bool) -> VideoRecord:
        updated = self._repo.update_fields(video.id, {"isPublished": published})
        if updated is None:
            raise not_found("Video not found")
        return updated


def _can_see_unpublished(video: VideoRecord, viewer: UserRecord) -> bool:
    return viewer.role is Role.ADMIN or video.owner_id == viewer.id
