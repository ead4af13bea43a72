"""
Base model for all MongoDB document models (profiles, applications, orders).

PyObjectId handles the mismatch between BSON ObjectId and Pydantic v2.
MongoBaseModel provides to_mongo() / from_mongo() for round-tripping between
Python objects and raw MongoDB dicts.

Owner references (``user_id``) are plain strings: hosted-auth user ids are
UUIDs, and the local backend hands out stringified ObjectIds.
"""

from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import core_schema


class PyObjectId(ObjectId):
    """BSON ObjectId that Pydantic v2 knows how to validate and serialize."""

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.to_string_ser_schema(),
        )

    @classmethod
    def _validate(cls, v: Any) -> ObjectId:
        if isinstance(v, ObjectId):
            return v
        if isinstance(v, str) and ObjectId.is_valid(v):
            return ObjectId(v)
        raise ValueError(f"Invalid ObjectId: {v!r}")


class MongoBaseModel(BaseModel):
    """
    Base for all document models.

    Stores the MongoDB _id as `id` (PyObjectId). Subclasses add collection-
    specific fields on top. Enum fields are stored by value.

    to_mongo(): converts model to dict suitable for pymongo insert/update
    from_mongo(): converts raw pymongo dict to model instance (returns None
                    gracefully when passed None)
    to_public(): JSON-safe dict with `id` as a string, for API responses
                    and exports
    """

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
    )

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    def to_mongo(self) -> dict:
        """Return a dict ready for MongoDB insertion.

        - `id` becomes `_id` and stays a real ObjectId
        - a None `_id` is dropped so MongoDB can generate it on insert
        """
        data = self.model_dump(exclude={"id"})
        if self.id is not None:
            data["_id"] = ObjectId(self.id)
        return data

    def to_public(self) -> dict:
        data = self.model_dump(mode="json", exclude={"id"})
        return {"id": str(self.id) if self.id is not None else None, **data}

    @classmethod
    def from_mongo(cls, data: Optional[dict]) -> Optional["MongoBaseModel"]:
        """Build a model instance from a raw MongoDB document dict.

        Returns None when data is None (e.g. find_one returns None).
        Missing optional fields are filled with their defaults.
        """
        if data is None:
            return None
        return cls.model_validate(data)
