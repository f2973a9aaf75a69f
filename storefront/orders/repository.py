"""MongoDB repository for orders."""

from __future__ import annotations

from typing import Any

from pymongo import ReturnDocument
from pymongo.collection import Collection

from storefront.core.documents import to_object_id, utc_now
from storefront.orders.models import OrderRecord


def order_lookup(order_ref: str) -> dict[str, Any]:
    """Match an order by document id or by its public ``orderId``."""
    oid = to_object_id(order_ref)
    if oid is not None:
        return {"_id": oid}
    return {"orderId": order_ref.strip()}


class OrderRepository:
    """Order persistence over the ``orders`` collection."""

    def __init__(self, collection: Collection) -> None:
        self._orders = collection

    def create(self, fields: dict[str, Any]) -> OrderRecord:
        now = utc_now()
        doc = {**fields, "createdAt": now, "updatedAt": now}
        if "user" in doc:
            doc["user"] = to_object_id(doc["user"]) or doc["user"]
        for item in doc.get("items", []):
            item["product"] = to_object_id(item["product"]) or item["product"]
        result = self._orders.insert_one(doc)
        doc["_id"] = result.inserted_id
        return OrderRecord.from_mongo(doc)

    def get(self, order_ref: str) -> OrderRecord | None:
        return OrderRecord.from_mongo(self._orders.find_one(order_lookup(order_ref)))

    def list_for_user(self, user_id: str) -> list[OrderRecord]:
        oid = to_object_id(user_id)
        if oid is None:
            return []
        cursor = self._orders.find({"user": oid}).sort("createdAt", -1)
        return [OrderRecord.from_mongo(doc) for doc in cursor]

    def list_page(self, *, skip: int, limit: int) -> list[OrderRecord]:
        cursor = self._orders.find({}).sort("createdAt", -1).skip(skip).limit(limit)
        return [OrderRecord.from_mongo(doc) for doc in cursor]

    def count(self) -> int:
        return self._orders.count_documents({})

    def update_fields(self, order_ref: str, fields: dict[str, Any]) -> OrderRecord | None:
        doc = self._orders.find_one_and_update(
            order_lookup(order_ref),
            {"$set": {**fields, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        return OrderRecord.from_mongo(doc)
