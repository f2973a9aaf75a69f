from __future__ import annotations

from pathlib import Path

import pytest

from storefront.api.errors import ApiError
from storefront.auth.models import Role
from storefront.comments.models import CommentPayload, comment_sort
from storefront.comments.service import CommentService
from storefront.videos.models import VideoUpdate
from storefront.videos.repository import build_video_match
from storefront.videos.service import VideoService
from tests.fakes import (
    MemoryCommentRepository,
    MemoryUserRepository,
    MemoryVideoRepository,
    StubMedia,
    write_upload,
)


def _build():
    users = MemoryUserRepository()
    videos = MemoryVideoRepository(users)
    comments = MemoryCommentRepository()
    media = StubMedia()
    return (
        VideoService(videos, comments, media),
        CommentService(comments, videos),
        users,
        videos,
        comments,
        media,
    )


def test_build_video_match_escapes_search() -> None:
    assert build_video_match(None) == {"isPublished": True}
    assert build_video_match("a+b")["title"]["$regex"] == r"a\+b"


def test_comment_sort_whitelist() -> None:
    assert comment_sort("likes", "ASC") == {"likes": 1}
    assert comment_sort("password", "asc") == {"createdAt": -1}
    assert comment_sort(None, None) == {"createdAt": -1}


def test_create_video_uses_uploaded_duration(tmp_path: Path) -> None:
    service, _comments, users, _videos, _repo, media = _build()
    owner = users.seed("alice")

    video = service.create_video(
        owner,
        title=" Intro ",
        description="First upload",
        video_path=write_upload(tmp_path, "clip.mp4"),
        thumbnail_path=write_upload(tmp_path, "thumb.png"),
    )

    assert video.title == "Intro"
    assert video.duration == 42.0
    assert video.owner_id == owner.id
    assert video.thumbnail is not None
    assert [kind for _, kind in media.uploads] == ["video", "image"]


def test_create_video_rejects_long_description(tmp_path: Path) -> None:
    service, _comments, users, _videos, _repo, media = _build()

    with pytest.raises(ApiError) as exc:
        service.create_video(
            users.seed("alice"),
            title="Intro",
            description="x" * 401,
            video_path=write_upload(tmp_path, "clip.mp4"),
        )

    assert exc.value.status_code == 400
    assert media.uploads == []


def test_only_owner_or_admin_can_modify_video() -> None:
    service, _comments, users, videos, _repo, _media = _build()
    owner = users.seed("alice")
    stranger = users.seed("bob")
    admin = users.seed("root", role=Role.ADMIN)
    video = videos.seed(owner)

    with pytest.raises(ApiError) as exc:
        service.update_video(video.id, stranger, VideoUpdate(title="Hijack"))
    updated = service.update_video(video.id, admin, VideoUpdate(title="Renamed"))

    assert exc.value.status_code == 403
    assert updated.title == "Renamed"


def test_delete_video_checks_existence_before_ownership() -> None:
    service, _comments, users, _videos, _repo, _media = _build()

    with pytest.raises(ApiError) as exc:
        service.delete_video("d" * 24, users.seed("bob"))

    assert exc.value.status_code == 404


def test_delete_video_cascades_comments_and_media() -> None:
    service, comment_service, users, videos, comments, media = _build()
    owner = users.seed("alice")
    video = videos.seed(owner, thumbnailPublicId="thumb-pid")
    comment_service.add_comment(video.id, owner, CommentPayload(content="hi"))

    service.delete_video(video.id, owner)

    assert videos.get_by_id(video.id) is None
    assert comments.count_for_video(video.id) == 0
    assert ("video-pid", "video") in media.deleted
    assert ("thumb-pid", "image") in media.deleted


def test_unpublished_video_visible_to_owner_only() -> None:
    service, _comments, users, videos, _repo, _media = _build()
    owner = users.seed("alice")
    stranger = users.seed("bob")
    video = videos.seed(owner)

    service.unpublish(video.id, owner)
    with pytest.raises(ApiError) as hidden:
        service.get_video(video.id, stranger)
    with pytest.raises(ApiError) as twice:
        service.unpublish(video.id, owner)
    visible = service.get_video(video.id, owner)
    listing = service.list_videos(search=None, page=1, limit=10)

    assert hidden.value.status_code == 404
    assert twice.value.status_code == 400
    assert visible.owner.username == "alice"
    assert listing.items == []


def test_comment_lifecycle_tracks_count_and_ownership() -> None:
    _service, comment_service, users, videos, _repo, _media = _build()
    owner = users.seed("alice")
    stranger = users.seed("bob")
    video = videos.seed(owner)

    comment = comment_service.add_comment(
        video.id, stranger, CommentPayload(content=" nice ")
    )
    with pytest.raises(ApiError) as forbidden:
        comment_service.update_comment(comment.id, owner, CommentPayload(content="x"))
    edited = comment_service.update_comment(
        comment.id, stranger, CommentPayload(content="nicer")
    )
    page = comment_service.list_comments(
        video.id, page=1, limit=10, sort_by=None, sort_order=None
    )

    assert comment.content == "nice"
    assert videos.get_by_id(video.id).comment_count == 1
    assert forbidden.value.status_code == 403
    assert edited.content == "nicer"
    assert page.pagination.total_count == 1

    comment_service.delete_comment(comment.id, stranger)
    assert videos.get_by_id(video.id).comment_count == 0


def test_comments_require_existing_video_and_content() -> None:
    _service, comment_service, users, videos, _repo, _media = _build()
    user = users.seed("alice")
    video = videos.seed(user)

    with pytest.raises(ApiError) as missing:
        comment_service.list_comments(
            "e" * 24, page=None, limit=None, sort_by=None, sort_order=None
        )
    with pytest.raises(ApiError) as empty:
        comment_service.add_comment(video.id, user, CommentPayload(content="  "))
    with pytest.raises(ApiError) as malformed:
        comment_service.add_comment("bad", user, CommentPayload(content="hi"))

    assert missing.value.status_code == 404
    assert empty.value.status_code == 400
    assert malformed.value.status_code == 400
