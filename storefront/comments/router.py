"""Comment API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from storefront.api.contracts import ApiErrorResponse, ApiResponse, ok
from storefront.auth.dependencies import AuthDependencies
from storefront.auth.models import UserRecord
from storefront.comments.models import CommentPayload, CommentRecord
from storefront.comments.service import CommentService
from storefront.core.pagination import Page

_OWNER_RESPONSES = {
    400: {"model": ApiErrorResponse},
    403: {"model": ApiErrorResponse},
    404: {"model": ApiErrorResponse},
}


def create_comments_router(service: CommentService, deps: AuthDependencies) -> APIRouter:
    """Build the ``/api/v1/comments`` router."""
    router = APIRouter(prefix="/api/v1/comments", tags=["comments"])

    @router.get(
        "/videoComments/{video_id}",
        response_model=ApiResponse[Page[CommentRecord]],
        responses={400: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def list_comments(
        video_id: str,
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=10, ge=1, le=100),
        sort_by: str = Query(default="createdAt", alias="sortBy"),
        sort_order: str = Query(default="desc", alias="sortOrder"),
    ) -> ApiResponse[Page[CommentRecord]]:
        result = service.list_comments(
            video_id, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
        )
        return ok(result, "Comments fetched successfully")

    @router.post(
        "/addComments/{video_id}",
        status_code=201,
        response_model=ApiResponse[CommentRecord],
        responses={400: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def add_comment(
        video_id: str,
        payload: CommentPayload,
        user: UserRecord = Depends(deps.require_user),
    ) -> ApiResponse[CommentRecord]:
        comment = service.add_comment(video_id, user, payload)
        return ok(comment, "Comment added successfully", 201)

    @router.patch(
        "/updateComments/{comment_id}",
        response_model=ApiResponse[CommentRecord],
        responses=_OWNER_RESPONSES,
    )
    def update_comment(
        comment_id: str,
        payload: CommentPayload,
        user: UserRecord = Depends(deps.require_user),
    ) -> ApiResponse[CommentRecord]:
        updated = service.update_comment(comment_id, user, payload)
        return ok(updated, "Comment updated successfully")

    @router.delete(
        "/deleteComments/{comment_id}",
        response_model=ApiResponse[None],
        responses=_OWNER_RESPONSES,
    )
    def delete_comment(
        comment_id: str, user: UserRecord = Depends(deps.require_user)
    ) -> ApiResponse[None]:
        service.delete_comment(comment_id, user)
        return ok(None, "Comment deleted successfully")

    return router
