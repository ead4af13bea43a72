"""
Business formation storage.

ApplicationRepository: `applications`; business and owner emails are
                            unique, so a resubmission surfaces as a
                            ConflictError naming the offending field.
BusinessProfileRepository: `business_profiles`; one per client, searched by
                            the admin dashboard.
OrderRepository: `orders`; package selections.
"""

from __future__ import annotations

import re
from typing import Optional

from pymongo.errors import DuplicateKeyError

from errors import ConflictError
from repositories.base import BaseRepository, parse_object_id
from schemas.models.business import ApplicationDoc, BusinessProfileDoc
from schemas.models.package import OrderDoc
from shared.logging import get_logger

log = get_logger(__name__)

_DUPLICATE_MESSAGES = {
    "business_email": (
        "business_email",
        "This business email is already registered. "
        "Please use a different email address.",
    ),
    "owner_email": (
        "owner_email",
        "This owner email is already registered. "
        "Please use a different email address.",
    ),
}


def _duplicate_conflict(exc: DuplicateKeyError) -> ConflictError:
    key_pattern = (exc.details or {}).get("keyPattern") or {}
    for key, (field, message) in _DUPLICATE_MESSAGES.items():
        if key in key_pattern or key in str(exc):
            return ConflictError(message, field=field)
    return ConflictError(
        "An application with these details already exists. "
        "Please check your information and try again."
    )


class ApplicationRepository(BaseRepository[ApplicationDoc]):
    model = ApplicationDoc

    async def insert(self, model: ApplicationDoc) -> ApplicationDoc:
        try:
            return await super().insert(model)
        except DuplicateKeyError as e:
            conflict = _duplicate_conflict(e)
            log.info("application_duplicate", field=conflict.field)
            raise conflict from e


class BusinessProfileRepository(BaseRepository[BusinessProfileDoc]):
    model = BusinessProfileDoc

    async def find_latest_for_user(self, user_id: str) -> Optional[BusinessProfileDoc]:
        profiles = await self.find_many({"user_id": user_id}, limit=1)
        return profiles[0] if profiles else None

    async def search(
        self, search: str = "", status: Optional[str] = None
    ) -> list[BusinessProfileDoc]:
        """Newest-first listing filtered by status and a case-insensitive
        substring over name, email and business type."""
        query: dict = {}
        if status:
            query["status"] = status
        term = search.strip()
        if term:
            pattern = {"$regex": re.escape(term), "$options": "i"}
            query["$or"] = [
                {"business_name": pattern},
                {"email": pattern},
                {"business_type": pattern},
            ]
        return await self.find_many(query)

    async def update_document(
        self, profile_id: str, doc_id: str, fields: dict
    ) -> Optional[BusinessProfileDoc]:
        oid = parse_object_id(profile_id)
        if oid is None:
            return None
        updates = {f"documents.$.{k}": v for k, v in fields.items()}
        return await self.update_fields({"_id": oid, "documents.id": doc_id}, updates)


class OrderRepository(BaseRepository[OrderDoc]):
    model = OrderDoc

    async def list_for_user(self, user_id: str) -> list[OrderDoc]:
        return await self.find_many({"user_id": user_id})

    async def has_order(self, user_id: str) -> bool:
        return await self.find_one({"user_id": user_id}) is not None
