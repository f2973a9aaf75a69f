"""MongoDB repository for principals and their refresh tokens."""

from __future__ import annotations

import re
from typing import Any

from pymongo import ReturnDocument
from pymongo.collection import Collection

from storefront.auth.models import Role, UserRecord
from storefront.core.documents import to_object_id, utc_now


class UserRepository:
    """Principal persistence over the ``users`` collection."""

    def __init__(self, collection: Collection) -> None:
        self._users = collection

    def get_by_id(self, user_id: str) -> UserRecord | None:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return UserRecord.from_mongo(self._users.find_one({"_id": oid}))

    def find_by_username_or_email(
        self, *, username: str | None = None, email: str | None = None
    ) -> UserRecord | None:
        clauses: list[dict[str, Any]] = []
        if username:
            clauses.append({"username": username.strip().lower()})
        if email:
            clauses.append({"email": email.strip().lower()})
        if not clauses:
            return None
        return UserRecord.from_mongo(self._users.find_one({"$or": clauses}))

    def find_admin_by_username(self, username: str) -> UserRecord | None:
        return UserRecord.from_mongo(
            self._users.find_one(
                {"username": username.strip().lower(), "role": Role.ADMIN.value}
            )
        )

    def create(self, fields: dict[str, Any]) -> UserRecord:
        now = utc_now()
        doc = {
            "role": Role.USER.value,
            "isActive": True,
            **fields,
            "createdAt": now,
            "updatedAt": now,
        }
        result = self._users.insert_one(doc)
        doc["_id"] = result.inserted_id
        return UserRecord.from_mongo(doc)

    def update_fields(
        self,
        user_id: str,
        fields: dict[str, Any],
        *,
        unset: tuple[str, ...] = (),
    ) -> UserRecord | None:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        update: dict[str, Any] = {"$set": {**fields, "updatedAt": utc_now()}}
        if unset:
            update["$unset"] = {name: "" for name in unset}
        doc = self._users.find_one_and_update(
            {"_id": oid}, update, return_document=ReturnDocument.AFTER
        )
        return UserRecord.from_mongo(doc)

    def set_refresh_token(self, user_id: str, token: str | None) -> UserRecord | None:
        if token is None:
            return self.update_fields(user_id, {}, unset=("refreshToken",))
        return self.update_fields(user_id, {"refreshToken": token})

    def delete(self, user_id: str) -> UserRecord | None:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return UserRecord.from_mongo(self._users.find_one_and_delete({"_id": oid}))

    def count(self, *, role: Role | None = None, is_active: bool | None = None) -> int:
        query: dict[str, Any] = {}
        if role is not None:
            query["role"] = role.value
        if is_active is not None:
            query["isActive"] = is_active
        return self._users.count_documents(query)

    def list_page(self, *, skip: int, limit: int) -> list[UserRecord]:
        cursor = self._users.find({}).sort("createdAt", -1).skip(skip).limit(limit)
        return [UserRecord.from_mongo(doc) for doc in cursor]

    def search(
        self,
        *,
        role: Role | None = None,
        is_active: bool | None = None,
        query: str = "",
    ) -> list[UserRecord]:
        return [
            UserRecord.from_mongo(doc)
            for doc in self._users.find(build_user_search_query(role, is_active, query))
        ]


def build_user_search_query(
    role: Role | None, is_active: bool | None, query: str
) -> dict[str, Any]:
    """Build the admin user search filter."""
    mongo_query: dict[str, Any] = {}
    if role is not None:
        mongo_query["role"] = role.value
    if is_active is not None:
        mongo_query["isActive"] = is_active
    text = (query or "").strip()
    if text:
        pattern = {"$regex": re.escape(text), "$options": "i"}
        mongo_query["$or"] = [{"username": pattern}, {"email": pattern}]
    return mongo_query


def owner_lookup_stages(local_field: str = "owner") -> list[dict[str, Any]]:
    """Aggregation stages joining a public owner summary onto ``local_field``."""
    return [
        {
            "$lookup": {
                "from": "users",
                "localField": local_field,
                "foreignField": "_id",
                "as": local_field,
                "pipeline": [
                    {"$project": {"username": 1, "fullName": 1, "avatar": 1}}
                ],
            }
        },
        {"$unwind": {"path": f"${local_field}", "preserveNullAndEmptyArrays": True}},
    ]
