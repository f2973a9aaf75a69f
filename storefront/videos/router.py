"""Video API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from storefront.api.contracts import ApiErrorResponse, ApiResponse, ok
from storefront.auth.dependencies import AuthDependencies
from storefront.auth.models import UserRecord
from storefront.core.config import AppConfig
from storefront.core.pagination import Page
from storefront.media.uploader import spool_optional
from storefront.videos.models import VideoRecord, VideoUpdate
from storefront.videos.service import VideoService

_OWNER_RESPONSES = {
    400: {"model": ApiErrorResponse},
    403: {"model": ApiErrorResponse},
    404: {"model": ApiErrorResponse},
}


def create_videos_router(
    service: VideoService, deps: AuthDependencies, config: AppConfig
) -> APIRouter:
    """Build the ``/api/v1/videos`` router."""
    router = APIRouter(prefix="/api/v1/videos", tags=["videos"])

    @router.get("/getAllVideos", response_model=ApiResponse[Page[VideoRecord]])
    def list_videos(
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=10, ge=1, le=100),
        search: str | None = Query(default=None),
    ) -> ApiResponse[Page[VideoRecord]]:
        result = service.list_videos(search=search, page=page, limit=limit)
        return ok(result, "Videos fetched successfully")

    @router.get(
        "/getVideoById/{video_id}",
        response_model=ApiResponse[VideoRecord],
        responses={400: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}},
    )
    def get_video(
        video_id: str, user: UserRecord = Depends(deps.require_user)
    ) -> ApiResponse[VideoRecord]:
        return ok(service.get_video(video_id, user), "Video fetched successfully")

    @router.post(
        "/createVideo",
        status_code=201,
        response_model=ApiResponse[VideoRecord],
        responses={400: {"model": ApiErrorResponse}},
    )
    def create_video(
        title: str = Form(default=""),
        description: str = Form(default=""),
        video: UploadFile | None = File(default=None),
        thumbnail: UploadFile | None = File(default=None),
        user: UserRecord = Depends(deps.require_user),
    ) -> ApiResponse[VideoRecord]:
        created = service.create_video(
            user,
            title=title,
            description=description,
            video_path=spool_optional(video, config.media),
            thumbnail_path=spool_optional(thumbnail, config.media),
        )
        return ok(created, "Video created successfully", 201)

    @router.post(
        "/publish/{video_id}",
        response_model=ApiResponse[VideoRecord],
        responses=_OWNER_RESPONSES,
    )
    def publish(
        video_id: str, user: UserRecord = Depends(deps.require_user)
    ) -> ApiResponse[VideoRecord]:
        return ok(service.publish(video_id, user), "Video published successfully")

    @router.post(
        "/unpublish/{video_id}",
        response_model=ApiResponse[VideoRecord],
        responses=_OWNER_RESPONSES,
    )
    def unpublish(
        video_id: str, user: UserRecord = Depends(deps.require_user)
    ) -> ApiResponse[VideoRecord]:
        return ok(service.unpublish(video_id, user), "Video unpublished successfully")

    @router.patch(
        "/updateVideo/{video_id}",
        response_model=ApiResponse[VideoRecord],
        responses=_OWNER_RESPONSES,
    )
    def update_video(
        video_id: str,
        title: str | None = Form(default=None),
        description: str | None = Form(default=None),
        thumbnail: UploadFile | None = File(default=None),
        user: UserRecord = Depends(deps.require_user),
    ) -> ApiResponse[VideoRecord]:
        updated = service.update_video(
            video_id,
            user,
            VideoUpdate(title=title, description=description),
            spool_optional(thumbnail, config.media),
        )
        return ok(updated, "Video updated successfully")

    @router.delete(
        "/deleteVideo/{video_id}",
        response_model=ApiResponse[VideoRecord],
        responses=_OWNER_RESPONSES,
    )
    def delete_video(
        video_id: str, user: UserRecord = Depends(deps.require_user)
    ) -> ApiResponse[VideoRecord]:
        return ok(service.delete_video(video_id, user), "Video deleted successfully")

    return router
