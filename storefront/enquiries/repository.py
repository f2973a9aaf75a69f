"""MongoDB repository for enquiries."""

from __future__ import annotations

from typing import Any

from pymongo import ReturnDocument
from pymongo.collection import Collection

from storefront.core.documents import to_object_id, utc_now
from storefront.enquiries.models import EnquiryRecord, EnquiryStatus


class EnquiryRepository:
    """Enquiry persistence over the ``enquiries`` collection."""

    def __init__(self, collection: Collection) -> None:
        self._enquiries = collection

    def create(self, fields: dict[str, Any]) -> EnquiryRecord:
        now = utc_now()
        doc = {
            "status": EnquiryStatus.PENDING.value,
            **fields,
            "createdAt": now,
            "updatedAt": now,
        }
        result = self._enquiries.insert_one(doc)
        doc["_id"] = result.inserted_id
        return EnquiryRecord.from_mongo(doc)

    def get_by_id(self, enquiry_id: str) -> EnquiryRecord | None:
        oid = to_object_id(enquiry_id)
        if oid is None:
            return None
        return EnquiryRecord.from_mongo(self._enquiries.find_one({"_id": oid}))

    def list_page(self, *, skip: int, limit: int) -> list[EnquiryRecord]:
        cursor = self._enquiries.find({}).sort("createdAt", -1).skip(skip).limit(limit)
        return [EnquiryRecord.from_mongo(doc) for doc in cursor]

    def count(self) -> int:
        return self._enquiries.count_documents({})

    def update_fields(
        self, enquiry_id: str, fields: dict[str, Any]
    ) -> EnquiryRecord | None:
        oid = to_object_id(enquiry_id)
        if oid is None:
            return None
        doc = self._enquiries.find_one_and_update(
            {"_id": oid},
            {"$set": {**fields, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        return EnquiryRecord.from_mongo(doc)

    def delete(self, enquiry_id: str) -> EnquiryRecord | None:
        oid = to_object_id(enquiry_id)
        if oid is None:
            return None
        return EnquiryRecord.from_mongo(self._enquiries.find_one_and_delete({"_id": oid}))
