"""MongoDB repository and filter builders for catalog products."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from pymongo import ReturnDocument
from pymongo.collection import Collection

from storefront.core.documents import to_object_id, utc_now
from storefront.products.models import ProductRecord

SORTABLE_FIELDS = frozenset(
    {"createdAt", "updatedAt", "price", "bulkPrice", "name", "rating", "totalSales"}
)
DEFAULT_SORT = "-createdAt"


@dataclass(frozen=True)
class ProductFilters:
    """Public catalog filters as received on the query string."""

    category: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    search: str | None = None
    bestseller: bool | None = None
    in_stock: bool | None = None
    tags: list[str] = field(default_factory=list)


def _contains(text: str) -> dict[str, str]:
    return {"$regex": re.escape(text), "$options": "i"}


def build_product_query(filters: ProductFilters) -> dict[str, Any]:
    """Translate catalog filters into a Mongo filter over active products."""
    query: dict[str, Any] = {"isActive": True}
    if filters.category and filters.category.strip():
        query["category"] = _contains(filters.category.strip())

    price: dict[str, float] = {}
    if filters.min_price is not None:
        price["$gte"] = filters.min_price
    if filters.max_price is not None:
        price["$lte"] = filters.max_price
    if price:
        query["price"] = price

    search = (filters.search or "").strip()
    if search:
        pattern = _contains(search)
        query["$or"] = [
            {"name": pattern},
            {"description": pattern},
            {"tags": pattern},
        ]

    if filters.bestseller:
        query["bestseller"] = True
    if filters.in_stock is True:
        query["stockQuantity"] = {"$gt": 0}
    elif filters.in_stock is False:
        query["stockQuantity"] = {"$lte": 0}

    tags = [tag.strip() for tag in filters.tags if tag.strip()]
    if tags:
        query["tags"] = {
            "$in": [re.compile(re.escape(tag), re.IGNORECASE) for tag in tags]
        }
    return query


def parse_sort(value: str | None) -> list[tuple[str, int]]:
    """Parse ``-field`` / ``field`` sort expressions, falling back to newest first."""
    spec: list[tuple[str, int]] = []
    for raw in (value or DEFAULT_SORT).split(","):
        token = raw.strip()
        direction = -1 if token.startswith("-") else 1
        name = token.lstrip("-+")
        if name in SORTABLE_FIELDS:
            spec.append((name, direction))
    return spec or [("createdAt", -1)]


class ProductRepository:
    """Product persistence over the ``products`` collection."""

    def __init__(self, collection: Collection) -> None:
        self._products = collection

    def get_by_id(self, product_id: str) -> ProductRecord | None:
        oid = to_object_id(product_id)
        if oid is None:
            return None
        return ProductRecord.from_mongo(self._products.find_one({"_id": oid}))

    def find_by_name(self, name: str) -> ProductRecord | None:
        """Case-insensitive exact name lookup."""
        pattern = re.compile(f"^{re.escape(name.strip())}$", re.IGNORECASE)
        return ProductRecord.from_mongo(self._products.find_one({"name": pattern}))

    def slug_exists(self, slug: str, *, exclude_id: str | None = None) -> bool:
        query: dict[str, Any] = {"slug": slug}
        oid = to_object_id(exclude_id) if exclude_id else None
        if oid is not None:
            query["_id"] = {"$ne": oid}
        return self._products.count_documents(query, limit=1) > 0

    def create(self, fields: dict[str, Any]) -> ProductRecord:
        now = utc_now()
        doc = {
            "emoji": "📦",
            "bestseller": False,
            "stockQuantity": 0,
            "inStock": False,
            "rating": 4.0,
            "reviewCount": 0,
            "totalSales": 0,
            "isActive": True,
            **fields,
            "createdAt": now,
            "updatedAt": now,
        }
        result = self._products.insert_one(doc)
        doc["_id"] = result.inserted_id
        return ProductRecord.from_mongo(doc)

    def update_fields(
        self, product_id: str, fields: dict[str, Any]
    ) -> ProductRecord | None:
        oid = to_object_id(product_id)
        if oid is None:
            return None
        doc = self._products.find_one_and_update(
            {"_id": oid},
            {"$set": {**fields, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        return ProductRecord.from_mongo(doc)

    def delete(self, product_id: str) -> ProductRecord | None:
        oid = to_object_id(product_id)
        if oid is None:
            return None
        return ProductRecord.from_mongo(self._products.find_one_and_delete({"_id": oid}))

    def list_page(
        self,
        query: dict[str, Any],
        *,
        sort: list[tuple[str, int]],
        skip: int,
        limit: int,
    ) -> list[ProductRecord]:
        cursor = self._products.find(query).sort(sort).skip(skip).limit(limit)
        return [ProductRecord.from_mongo(doc) for doc in cursor]

    def count(self, query: dict[str, Any] | None = None) -> int:
        return self._products.count_documents(query or {})

    def list_by_category(self, category: str) -> list[ProductRecord]:
        cursor = self._products.find(
            {"category": category.strip().lower(), "isActive": True}
        ).sort("createdAt", -1)
        return [ProductRecord.from_mongo(doc) for doc in cursor]

    def decrement_stock(self, product_id: str, quantity: int) -> ProductRecord | None:
        """Apply an unconditional ``$inc`` and refresh the derived flag."""
        oid = to_object_id(product_id)
        if oid is None:
            return None
        doc = self._products.find_one_and_update(
            {"_id": oid},
            {
                "$inc": {"stockQuantity": -quantity, "totalSales": quantity},
                "$set": {"updatedAt": utc_now()},
            },
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            return None
        in_stock = int(doc.get("stockQuantity") or 0) > 0
        if bool(doc.get("inStock")) != in_stock:
            self._products.update_one({"_id": oid}, {"$set": {"inStock": in_stock}})
            doc["inStock"] = in_stock
        return ProductRecord.from_mongo(doc)
