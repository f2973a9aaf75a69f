"""Video records, owner summaries and payload validation."""

from __future__ import annotations

from pydantic import Field

from storefront.core.documents import CamelModel, MediaAsset, StoredDocument

DESCRIPTION_MAX_LENGTH = 400


class OwnerSummary(CamelModel):
    """Public fields of a principal joined onto videos and comments."""

    id: str = Field(alias="_id")
    username: str = ""
    full_name: str = ""
    avatar: MediaAsset | None = None


def owner_id_of(owner: OwnerSummary | str | None) -> str | None:
    if isinstance(owner, OwnerSummary):
        return owner.id
    return owner


class VideoRecord(StoredDocument):
    video_file: str
    video_public_id: str = ""
    thumbnail: str | None = None
    thumbnail_public_id: str | None = None
    title: str
    description: str = ""
    duration: float = 0
    views: int = 0
    is_published: bool = True
    owner: OwnerSummary | str | None = None
    comment_count: int = 0

    @property
    def owner_id(self) -> str | None:
        return owner_id_of(self.owner)


class VideoUpdate(CamelModel):
    title: str | None = None
    description: str | None = None


def validate_new_video(title: str, description: str) -> list[str]:
    if not title.strip() or not description.strip():
        return ["Title and description are required"]
    return _description_errors(description)


def validate_video_update(update: VideoUpdate) -> list[str]:
    errors: list[str] = []
    if update.title is not None and not update.title.strip():
        errors.append("Title cannot be empty")
    if update.description is not None:
        errors.extend(_description_errors(update.description))
    return errors


def _description_errors(description: str) -> list[str]:
    if len(description.strip()) > DESCRIPTION_MAX_LENGTH:
        return [f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters"]
    return []
