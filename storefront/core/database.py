"""MongoDB client construction and versioned index migrations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collation import Collation
from pymongo.database import Database
from pymongo.errors import PyMongoError

from storefront.core.config import MongoConfig
from storefront.core.logging import current_request_id

LOGGER = logging.getLogger(__name__)

MigrationFn = Callable[[Database], None]


def create_mongo_client(config: MongoConfig) -> MongoClient:
    return MongoClient(
        config.uri,
        serverSelectionTimeoutMS=config.timeout_ms,
        socketTimeoutMS=config.timeout_ms,
        tz_aware=True,
    )


def _migration_01_unique_identities(db: Database) -> None:
    db["users"].create_index("username", unique=True)
    db["users"].create_index("email", unique=True)
    db["users"].create_index([("role", ASCENDING), ("isActive", ASCENDING)])
    db["orders"].create_index("orderId", unique=True)
    db["orders"].create_index([("user", ASCENDING), ("createdAt", DESCENDING)])


def _migration_02_catalog_indexes(db: Database) -> None:
    db["products"].create_index(
        "name",
        unique=True,
        collation=Collation(locale="en", strength=2),
        name="idx_products_name_ci",
    )
    db["products"].create_index("slug", unique=True)
    db["products"].create_index([("category", ASCENDING), ("isActive", ASCENDING)])


def _migration_03_content_indexes(db: Database) -> None:
    db["videos"].create_index([("isPublished", ASCENDING), ("createdAt", DESCENDING)])
    db["videos"].create_index("owner")
    db["comments"].create_index([("video", ASCENDING), ("createdAt", DESCENDING)])
    db["enquiries"].create_index("createdAt")


MIGRATIONS: list[tuple[str, MigrationFn]] = [
    ("01_unique_identities", _migration_01_unique_identities),
    ("02_catalog_indexes", _migration_02_catalog_indexes),
    ("03_content_indexes", _migration_03_content_indexes),
]


def apply_mongo_migrations(
    db: Database, migrations: list[tuple[str, MigrationFn]] | None = None
) -> list[str]:
    """Apply pending migrations in order and return the ids applied."""
    applied: list[str] = []
    migration_collection = db["schema_migrations"]
    try:
        migration_collection.create_index("migration_id", unique=True)
        for migration_id, migration_fn in migrations or MIGRATIONS:
            if migration_collection.find_one({"migration_id": migration_id}):
                continue
            migration_fn(db)
            migration_collection.insert_one(
                {
                    "migration_id": migration_id,
                    "applied_at": datetime.now(timezone.utc),
                    "correlation_id": current_request_id(),
                }
            )
            applied.append(migration_id)
            LOGGER.info("mongo_migration_applied: %s", migration_id)
    except PyMongoError:
        LOGGER.exception("mongo_migrations_failed")
    return applied


def ping(client: Any) -> bool:
    try:
        client.admin.command("ping")
    except PyMongoError:
        LOGGER.exception("mongo_ping_failed")
        return False
    return True
