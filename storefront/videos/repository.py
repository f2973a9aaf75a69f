"""MongoDB repository for videos."""

from __future__ import annotations

import re
from typing import Any

from pymongo import ReturnDocument
from pymongo.collection import Collection

from storefront.auth.repository import owner_lookup_stages
from storefront.core.documents import to_object_id, utc_now
from storefront.videos.models import VideoRecord


def build_video_match(search: str | None) -> dict[str, Any]:
    """Published videos, optionally filtered by a title substring."""
    match: dict[str, Any] = {"isPublished": True}
    text = (search or "").strip()
    if text:
        match["title"] = {"$regex": re.escape(text), "$options": "i"}
    return match


def video_listing_pipeline(
    match: dict[str, Any], *, skip: int, limit: int
) -> list[dict[str, Any]]:
    return [
        {"$match": match},
        *owner_lookup_stages("owner"),
        {"$sort": {"createdAt": -1}},
        {"$skip": skip},
        {"$limit": limit},
    ]


class VideoRepository:
    """Video persistence over the ``videos`` collection."""

    def __init__(self, collection: Collection) -> None:
        self._videos = collection

    def create(self, fields: dict[str, Any]) -> VideoRecord:
        now = utc_now()
        doc = {
            "duration": 0,
            "views": 0,
            "isPublished": True,
            "commentCount": 0,
            **fields,
            "createdAt": now,
            "updatedAt": now,
        }
        doc["owner"] = to_object_id(doc.get("owner")) or doc.get("owner")
        result = self._videos.insert_one(doc)
        doc["_id"] = result.inserted_id
        return VideoRecord.from_mongo(doc)

    def get_by_id(self, video_id: str) -> VideoRecord | None:
        oid = to_object_id(video_id)
        if oid is None:
            return None
        return VideoRecord.from_mongo(self._videos.find_one({"_id": oid}))

    def get_with_owner(self, video_id: str) -> VideoRecord | None:
        oid = to_object_id(video_id)
        if oid is None:
            return None
        docs = list(
            self._videos.aggregate(
                [{"$match": {"_id": oid}}, *owner_lookup_stages("owner"), {"$limit": 1}]
            )
        )
        return VideoRecord.from_mongo(docs[0]) if docs else None

    def list_published(
        self, *, search: str | None, skip: int, limit: int
    ) -> list[VideoRecord]:
        match = build_video_match(search)
        cursor = self._videos.aggregate(
            video_listing_pipeline(match, skip=skip, limit=limit)
        )
        return [VideoRecord.from_mongo(doc) for doc in cursor]

    def count_published(self, *, search: str | None) -> int:
        return self._videos.count_documents(build_video_match(search))

    def update_fields(self, video_id: str, fields: dict[str, Any]) -> VideoRecord | None:
        oid = to_object_id(video_id)
        if oid is None:
            return None
        doc = self._videos.find_one_and_update(
            {"_id": oid},
            {"$set": {**fields, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        return VideoRecord.from_mongo(doc)

    def delete(self, video_id: str) -> VideoRecord | None:
        oid = to_object_id(video_id)
        if oid is None:
            return None
        return VideoRecord.from_mongo(self._videos.find_one_and_delete({"_id": oid}))

    def adjust_comment_count(self, video_id: str, delta: int) -> None:
        oid = to_object_id(video_id)
        if oid is None:
            return
        self._videos.update_one({"_id": oid}, {"$inc": {"commentCount": delta}})
