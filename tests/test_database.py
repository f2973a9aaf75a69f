from __future__ import annotations

from typing import Any

from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from storefront.core.database import MIGRATIONS, apply_mongo_migrations, ping


class _Collection:
    def __init__(self) -> None:
        self.indexes: list[Any] = []
        self.docs: list[dict[str, Any]] = []

    def create_index(self, keys: Any, **options: Any) -> str:
        self.indexes.append((keys, options))
        return str(keys)

    def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        return next(
            (doc for doc in self.docs if all(doc.get(k) == v for k, v in query.items())),
            None,
        )

    def insert_one(self, doc: dict[str, Any]) -> None:
        self.docs.append(doc)


class _Database:
    def __init__(self) -> None:
        self.collections: dict[str, _Collection] = {}

    def __getitem__(self, name: str) -> _Collection:
        return self.collections.setdefault(name, _Collection())


def test_apply_mongo_migrations_is_idempotent() -> None:
    db = _Database()

    first = apply_mongo_migrations(db)
    second = apply_mongo_migrations(db)

    assert first == [migration_id for migration_id, _ in MIGRATIONS]
    assert second == []
    user_indexes = [keys for keys, _ in db["users"].indexes]
    assert "username" in user_indexes
    assert "email" in user_indexes
    name_index = next(
        options for keys, options in db["products"].indexes if keys == "name"
    )
    assert name_index["unique"] is True
    assert name_index["collation"].document["strength"] == 2


def test_apply_mongo_migrations_stops_on_store_error() -> None:
    db = _Database()

    def _failing(_db: Any) -> None:
        raise OperationFailure("index build failed")

    applied = apply_mongo_migrations(
        db, [("01_ok", lambda _db: None), ("02_bad", _failing), ("03_never", _failing)]
    )

    assert applied == ["01_ok"]
    assert [doc["migration_id"] for doc in db["schema_migrations"].docs] == ["01_ok"]


def test_ping_reports_unreachable_store() -> None:
    class _Admin:
        def command(self, name: str) -> dict[str, Any]:
            raise ServerSelectionTimeoutError("no servers")

    class _Client:
        admin = _Admin()

    class _HealthyAdmin:
        def command(self, name: str) -> dict[str, Any]:
            return {"ok": 1}

    class _HealthyClient:
        admin = _HealthyAdmin()

    assert ping(_Client()) is False
    assert ping(_HealthyClient()) is True
