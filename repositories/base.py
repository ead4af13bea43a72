"""
Base repository over one async pymongo collection.

Repositories return document models (never raw dicts) and let PyMongoError
propagate after logging it; the global handler turns it into a 500.
Owner-scoped lookups take both the document id and the owner's user id so a
foreign id behaves exactly like a missing one.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from schemas.models.base import MongoBaseModel
from shared.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T", bound=MongoBaseModel)


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return *value* as an ObjectId, or None when it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


class BaseRepository(Generic[T]):
    model: type[T]

    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    @property
    def collection_name(self) -> str:
        return self._col.name

    def _log_failure(self, operation: str, exc: PyMongoError) -> None:
        log.error(
            "mongo_operation_failed",
            collection=self.collection_name,
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
        )

    async def find_one(self, query: dict) -> Optional[T]:
        try:
            doc = await self._col.find_one(query)
        except PyMongoError as e:
            self._log_failure("find_one", e)
            raise
        return self.model.from_mongo(doc)

    async def find_many(
        self,
        query: dict,
        *,
        sort_field: str = "created_at",
        limit: int = 0,
    ) -> list[T]:
        try:
            cursor = self._col.find(query).sort(sort_field, DESCENDING)
            if limit:
                cursor = cursor.limit(limit)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            self._log_failure("find_many", e)
            raise
        return [self.model.from_mongo(doc) for doc in docs]

    async def find_by_id(self, doc_id: Any) -> Optional[T]:
        oid = parse_object_id(doc_id)
        if oid is None:
            return None
        return await self.find_one({"_id": oid})

    async def find_owned(self, doc_id: Any, user_id: str) -> Optional[T]:
        oid = parse_object_id(doc_id)
        if oid is None:
            return None
        return await self.find_one({"_id": oid, "user_id": user_id})

    async def insert(self, model: T) -> T:
        """Insert *model* and return it with its generated id set."""
        try:
            result = await self._col.insert_one(model.to_mongo())
        except PyMongoError as e:
            self._log_failure("insert_one", e)
            raise
        model.id = result.inserted_id
        return model

    async def update_fields(self, query: dict, fields: dict) -> Optional[T]:
        """``$set`` *fields* on the first match and return the updated document."""
        try:
            doc = await self._col.find_one_and_update(
                query, {"$set": fields}, return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            self._log_failure("find_one_and_update", e)
            raise
        return self.model.from_mongo(doc)

    async def delete_one(self, query: dict) -> bool:
        try:
            result = await self._col.delete_one(query)
        except PyMongoError as e:
            self._log_failure("delete_one", e)
            raise
        return result.deleted_count == 1

    async def dump_all(self) -> list[dict]:
        """Every document as a JSON-safe dict (newest first), for exports."""
        return [m.to_public() for m in await self.find_many({})]
