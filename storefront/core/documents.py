"""Shared helpers for MongoDB-backed document models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_object_id(value: Any) -> bool:
    """Return whether value has the shape of a 24-hex ObjectId."""
    if isinstance(value, ObjectId):
        return True
    if not isinstance(value, str):
        return False
    return ObjectId.is_valid(value) and len(value) == 24


def to_object_id(value: Any) -> ObjectId | None:
    """Convert value to ObjectId, returning ``None`` for malformed input."""
    if isinstance(value, ObjectId):
        return value
    if not is_object_id(value):
        return None
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def normalize_document(value: Any) -> Any:
    """Recursively convert ObjectId values to strings for model validation."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: normalize_document(item) for key, item in value.items()}
    if isinstance(value, list):
        return [normalize_document(item) for item in value]
    return value


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class StoredDocument(CamelModel):
    """Base model for documents read back from a collection."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
        extra="ignore",
    )

    id: str = Field(alias="_id")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_mongo(cls, doc: dict[str, Any] | None):
        """Validate a raw collection document, or return ``None``."""
        if doc is None:
            return None
        return cls.model_validate(normalize_document(doc))


class MediaAsset(CamelModel):
    """Media host reference stored on documents."""

    url: str
    public_id: str = ""
    duration: float | None = None
