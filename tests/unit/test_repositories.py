"""Unit tests for the repositories over a mocked async pymongo collection."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from errors import ConflictError
from repositories.base import parse_object_id
from repositories.business_repository import (
    ApplicationRepository,
    BusinessProfileRepository,
    OrderRepository,
)
from repositories.indexes import ensure_indexes
from repositories.profile_repository import TeamMemberRepository, UserProfileRepository
from repositories.user_repository import UserRepository
from schemas.models.business import ApplicationDoc, BusinessType

NOW = datetime(2025, 6, 13, 12, 0, tzinfo=timezone.utc)


# ── Helpers ───────────────────────────────────────────────────────────────────


def _collection(find_results=None):
    col = MagicMock()
    col.name = "test_collection"
    col.find_one = AsyncMock(return_value=None)
    col.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    col.find_one_and_update = AsyncMock(return_value=None)
    col.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))

    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=find_results or [])
    col.find.return_value = cursor
    return col


def _profile_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "user_id": "u1",
        "business_name": "Acme LLC",
        "business_type": "LLC",
        "address_line1": "1 Market St",
        "city": "San Francisco",
        "zip_code": "94105",
        "phone": "(555) 123-4567",
        "email": "hello@acme.com",
        "created_at": NOW,
    }
    doc.update(overrides)
    return doc


def _application():
    return ApplicationDoc(
        user_id="u1",
        business_name="Acme LLC",
        business_address="1 Market St",
        business_city="San Francisco",
        business_zip_code="94105",
        business_email="hello@acme.com",
        business_phone="(555) 123-4567",
        business_type=BusinessType.LLC,
        owner_name="Jane Doe",
        owner_phone="(555) 765-4321",
        owner_address="2 Main St",
        owner_email="jane@acme.com",
    )


@pytest.mark.parametrize(
    "value, expected",
    [
        ("507f1f77bcf86cd799439011", ObjectId("507f1f77bcf86cd799439011")),
        ("not-an-id", None),
        (None, None),
    ],
    ids=["valid", "invalid", "none"],
)
def test_parse_object_id(value, expected):
    assert parse_object_id(value) == expected


# ── BaseRepository ────────────────────────────────────────────────────────────


class TestBaseRepository:
    async def test_insert_sets_generated_id(self):
        col = _collection()
        repo = ApplicationRepository(col)
        saved = await repo.insert(_application())
        assert saved.id == col.insert_one.return_value.inserted_id
        inserted = col.insert_one.await_args.args[0]
        assert "_id" not in inserted
        assert inserted["business_type"] == "LLC"

    async def test_find_many_sorts_newest_first(self):
        col = _collection([_profile_doc(), _profile_doc(business_name="Beta")])
        results = await BusinessProfileRepository(col).find_many({"user_id": "u1"})
        assert [p.business_name for p in results] == ["Acme LLC", "Beta"]
        col.find.return_value.sort.assert_called_once_with("created_at", DESCENDING)

    async def test_find_by_id_ignores_malformed_ids(self):
        col = _collection()
        assert await UserProfileRepository(col).find_by_id("nope") is None
        col.find_one.assert_not_awaited()

    async def test_find_owned_scopes_by_user(self):
        col = _collection()
        oid = ObjectId()
        await TeamMemberRepository(col).find_owned(str(oid), "u1")
        col.find_one.assert_awaited_once_with({"_id": oid, "user_id": "u1"})

    async def test_update_fields_returns_updated_model(self):
        col = _collection()
        col.find_one_and_update.return_value = _profile_doc(status="approved")
        updated = await BusinessProfileRepository(col).update_fields(
            {"_id": ObjectId()}, {"status": "approved"}
        )
        assert updated.status == "approved"
        _, kwargs = col.find_one_and_update.call_args
        assert kwargs["return_document"] == ReturnDocument.AFTER

    async def test_errors_propagate(self):
        col = _collection()
        col.find_one.side_effect = ServerSelectionTimeoutError("no server")
        with pytest.raises(ServerSelectionTimeoutError):
            await UserRepository(col).find_by_email("jane@example.com")

    async def test_dump_all_is_json_safe(self):
        doc = _profile_doc()
        rows = await BusinessProfileRepository(_collection([doc])).dump_all()
        assert rows[0]["id"] == str(doc["_id"])
        assert rows[0]["created_at"].startswith("2025-06-13T12:00:00")


# ── Specific repositories ─────────────────────────────────────────────────────


async def test_user_lookup_is_case_insensitive():
    col = _collection()
    await UserRepository(col).find_by_email("  Jane@Example.COM ")
    col.find_one.assert_awaited_once_with({"email": "jane@example.com"})


class TestApplicationDuplicates:
    @pytest.mark.parametrize(
        "key, field",
        [("business_email", "business_email"), ("owner_email", "owner_email")],
    )
    async def test_duplicate_maps_to_field_conflict(self, key, field):
        col = _collection()
        col.insert_one.side_effect = DuplicateKeyError(
            f"E11000 duplicate key error index: {key}_1",
            11000,
            {"keyPattern": {key: 1}},
        )
        with pytest.raises(ConflictError) as exc_info:
            await ApplicationRepository(col).insert(_application())
        assert exc_info.value.field == field
        assert "already registered" in exc_info.value.message

    async def test_unknown_duplicate(self):
        col = _collection()
        col.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key", 11000, {})
        with pytest.raises(ConflictError) as exc_info:
            await ApplicationRepository(col).insert(_application())
        assert exc_info.value.field is None


class TestBusinessProfileRepository:
    async def test_search_builds_escaped_case_insensitive_query(self):
        col = _collection()
        await BusinessProfileRepository(col).search("acme (llc)", status="approved")
        query = col.find.call_args.args[0]
        assert query["status"] == "approved"
        pattern = {"$regex": r"acme\ \(llc\)", "$options": "i"}
        assert query["$or"] == [
            {"business_name": pattern},
            {"email": pattern},
            {"business_type": pattern},
        ]

    async def test_search_without_filters(self):
        col = _collection()
        await BusinessProfileRepository(col).search()
        assert col.find.call_args.args[0] == {}

    async def test_latest_for_user(self):
        col = _collection([_profile_doc()])
        profile = await BusinessProfileRepository(col).find_latest_for_user("u1")
        assert profile.business_name == "Acme LLC"
        col.find.return_value.limit.assert_called_once_with(1)

    async def test_update_document_uses_positional_operator(self):
        col = _collection()
        oid = ObjectId()
        await BusinessProfileRepository(col).update_document(
            str(oid), "doc1", {"status": "ready"}
        )
        query, update = col.find_one_and_update.call_args.args
        assert query == {"_id": oid, "documents.id": "doc1"}
        assert update == {"$set": {"documents.$.status": "ready"}}


async def test_orders_listed_per_user():
    col = _collection()
    await OrderRepository(col).list_for_user("u1")
    col.find.assert_called_once_with({"user_id": "u1"})


ORDER_DOC = {
    "_id": ObjectId(),
    "user_id": "u1",
    "package_name": "Standard LLC",
    "business_type": "LLC",
    "price": 499,
}


@pytest.mark.parametrize("found, expected", [(ORDER_DOC, True), (None, False)], ids=["ordered", "none"])
async def test_has_order(found, expected):
    col = _collection()
    col.find_one = AsyncMock(return_value=found)
    assert await OrderRepository(col).has_order("u1") is expected
    col.find_one.assert_awaited_once_with({"user_id": "u1"})


# ── Indexes ───────────────────────────────────────────────────────────────────


class TestEnsureIndexes:
    async def test_creates_unique_email_indexes(self):
        collections = {}

        def collection(name):
            return collections.setdefault(name, MagicMock(create_index=AsyncMock()))

        db = MagicMock()
        db.__getitem__.side_effect = collection
        await ensure_indexes(db)

        calls = collections["applications"].create_index.await_args_list
        unique = [c.args[0][0][0] for c in calls if c.kwargs.get("unique")]
        assert unique == ["business_email", "owner_email"]

    async def test_failure_is_logged_not_raised(self):
        db = MagicMock()
        db.__getitem__.return_value.create_index = AsyncMock(
            side_effect=ServerSelectionTimeoutError("down")
        )
        await ensure_indexes(db)
