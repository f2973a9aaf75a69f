"""Comment threads attached to videos."""

from __future__ import annotations

import logging
from typing import Protocol

from storefront.api.errors import bad_request, not_found, raise_for_errors
from storefront.auth.gate import ensure_owner
from storefront.auth.models import UserRecord
from storefront.comments.models import (
    CommentPayload,
    CommentRecord,
    comment_sort,
    validate_comment,
)
from storefront.core.documents import is_object_id
from storefront.core.pagination import Page, PageRequest, Pagination
from storefront.videos.service import VideoRepositoryProtocol

LOGGER = logging.getLogger(__name__)


class CommentRepositoryProtocol(Protocol):
    def create(self, *, content: str, owner_id: str, video_id: str) -> CommentRecord:
        """Insert comment document."""

    def get_by_id(self, comment_id: str) -> CommentRecord | None:
        """Return comment by id, or ``None``."""

    def get_with_owner(self, comment_id: str) -> CommentRecord | None:
        """Return comment with the owner summary joined."""

    def list_for_video(
        self, video_id: str, *, sort: dict[str, int], skip: int, limit: int
    ) -> list[CommentRecord]:
        """List a video's comments with owners joined."""

    def count_for_video(self, video_id: str) -> int:
        """Count a video's comments."""

    def update_content(self, comment_id: str, content: str) -> CommentRecord | None:
        """Replace comment text."""

    def delete(self, comment_id: str) -> CommentRecord | None:
        """Delete comment and return the removed record."""

    def delete_for_video(self, video_id: str) -> int:
        """Remove every comment on a video."""


class CommentService:
    def __init__(
        self, repo: CommentRepositoryProtocol, videos: VideoRepositoryProtocol
    ) -> None:
        self._repo = repo
        self._videos = videos

    def list_comments(
        self,
        video_id: str,
        *,
        page: int | None,
        limit: int | None,
        sort_by: str | None,
        sort_order: str | None,
    ) -> Page[CommentRecord]:
        self._require_video(video_id)
        request = PageRequest.build(page, limit, default_limit=10)
        items = self._repo.list_for_video(
            video_id,
            sort=comment_sort(sort_by, sort_order),
            skip=request.skip,
            limit=request.limit,
        )
        total = self._repo.count_for_video(video_id)
        return Page(items=items, pagination=Pagination.from_total(request, total))

    def add_comment(
        self, video_id: str, user: UserRecord, payload: CommentPayload
    ) -> CommentRecord:
        """Create a comment and bump the video's comment counter."""
        if not is_object_id(video_id):
            raise bad_request("Valid video ID is required")
        raise_for_errors(validate_comment(payload))
        self._require_video(video_id)
        comment = self._repo.create(
            content=payload.content.strip(), owner_id=user.id, video_id=video_id
        )
        self._videos.adjust_comment_count(video_id, 1)
        LOGGER.info(
            "comment_added", extra={"user_id": user.id, "resource_id": comment.id}
        )
        return self._repo.get_with_owner(comment.id) or comment

    def update_comment(
        self, comment_id: str, user: UserRecord, payload: CommentPayload
    ) -> CommentRecord:
        comment = self._owned_comment(comment_id, user, "update")
        raise_for_errors(validate_comment(payload))
        updated = self._repo.update_content(comment.id, payload.content.strip())
        if updated is None:
            raise not_found("Comment not found")
        return updated

    def delete_comment(self, comment_id: str, user: UserRecord) -> None:
        comment = self._owned_comment(comment_id, user, "delete")
        removed = self._repo.delete(comment.id)
        if removed is None:
            raise not_found("Comment not found")
        self._videos.adjust_comment_count(removed.video, -1)
        LOGGER.info(
            "comment_deleted", extra={"user_id": user.id, "resource_id": removed.id}
        )

    def _require_video(self, video_id: str) -> None:
        if not is_object_id(video_id):
            raise bad_request("Invalid video ID format")
        if self._videos.get_by_id(video_id) is None:
            raise not_found("Video not found")

    def _owned_comment(
        self, comment_id: str, user: UserRecord, action: str
    ) -> CommentRecord:
        if not is_object_id(comment_id):
            raise bad_request("Invalid comment ID format")
        comment = self._repo.get_by_id(comment_id)
        if comment is None:
            raise not_found("Comment not found")
        ensure_owner(
            comment.owner_id, user, f"You are not authorized to {action} this comment"
        )
        return comment
