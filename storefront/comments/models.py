"""Comment records and sort options."""

from __future__ import annotations

from pydantic import Field

from storefront.core.documents import CamelModel, StoredDocument
from storefront.videos.models import OwnerSummary, owner_id_of

SORTABLE_FIELDS = ("createdAt", "updatedAt", "likes")


class CommentRecord(StoredDocument):
    content: str
    owner: OwnerSummary | str | None = None
    video: str
    likes: list[str] = Field(default_factory=list)

    @property
    def owner_id(self) -> str | None:
        return owner_id_of(self.owner)


class CommentPayload(CamelModel):
    content: str = ""


def comment_sort(sort_by: str | None, sort_order: str | None) -> dict[str, int]:
    """Whitelisted sort spec; unknown fields fall back to newest first."""
    if sort_by not in SORTABLE_FIELDS:
        return {"createdAt": -1}
    direction = 1 if (sort_order or "").lower() == "asc" else -1
    return {sort_by: direction}


def validate_comment(payload: CommentPayload) -> list[str]:
    if not payload.content.strip():
        return ["Comment content is required"]
    return []
