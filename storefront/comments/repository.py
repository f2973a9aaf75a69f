"""MongoDB repository for video comments."""

from __future__ import annotations

from typing import Any

from pymongo import ReturnDocument
from pymongo.collection import Collection

from storefront.auth.repository import owner_lookup_stages
from storefront.comments.models import CommentRecord
from storefront.core.documents import to_object_id, utc_now


def comment_listing_pipeline(
    video_oid: Any, *, sort: dict[str, int], skip: int, limit: int
) -> list[dict[str, Any]]:
    return [
        {"$match": {"video": video_oid}},
        *owner_lookup_stages("owner"),
        {"$sort": sort},
        {"$skip": skip},
        {"$limit": limit},
    ]


class CommentRepository:
    """Comment persistence over the ``comments`` collection."""

    def __init__(self, collection: Collection) -> None:
        self._comments = collection

    def create(self, *, content: str, owner_id: str, video_id: str) -> CommentRecord:
        now = utc_now()
        doc = {
            "content": content,
            "owner": to_object_id(owner_id),
            "video": to_object_id(video_id),
            "likes": [],
            "createdAt": now,
            "updatedAt": now,
        }
        result = self._comments.insert_one(doc)
        doc["_id"] = result.inserted_id
        return CommentRecord.from_mongo(doc)

    def get_by_id(self, comment_id: str) -> CommentRecord | None:
        oid = to_object_id(comment_id)
        if oid is None:
            return None
        return CommentRecord.from_mongo(self._comments.find_one({"_id": oid}))

    def get_with_owner(self, comment_id: str) -> CommentRecord | None:
        oid = to_object_id(comment_id)
        if oid is None:
            return None
        docs = list(
            self._comments.aggregate(
                [{"$match": {"_id": oid}}, *owner_lookup_stages("owner"), {"$limit": 1}]
            )
        )
        return CommentRecord.from_mongo(docs[0]) if docs else None

    def list_for_video(
        self, video_id: str, *, sort: dict[str, int], skip: int, limit: int
    ) -> list[CommentRecord]:
        oid = to_object_id(video_id)
        if oid is None:
            return []
        cursor = self._comments.aggregate(
            comment_listing_pipeline(oid, sort=sort, skip=skip, limit=limit)
        )
        return [CommentRecord.from_mongo(doc) for doc in cursor]

    def count_for_video(self, video_id: str) -> int:
        oid = to_object_id(video_id)
        if oid is None:
            return 0
        return self._comments.count_documents({"video": oid})

    def update_content(self, comment_id: str, content: str) -> CommentRecord | None:
        oid = to_object_id(comment_id)
        if oid is None:
            return None
        doc = self._comments.find_one_and_update(
            {"_id": oid},
            {"$set": {"content": content, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        return CommentRecord.from_mongo(doc)

    def delete(self, comment_id: str) -> CommentRecord | None:
        oid = to_object_id(comment_id)
        if oid is None:
            return None
        return CommentRecord.from_mongo(self._comments.find_one_and_delete({"_id": oid}))

    def delete_for_video(self, video_id: str) -> int:
        oid = to_object_id(video_id)
        if oid is None:
            return 0
        return self._comments.delete_many({"video": oid}).deleted_count
