"""Administrator review of business profiles and their documents."""

from __future__ import annotations

from typing import Optional

from errors import NotFoundError, ValidationError
from repositories.business_repository import BusinessProfileRepository
from schemas.models.business import (
    ApplicationStatus,
    BusinessProfileDoc,
    DocumentStatus,
    FormationDocument,
)
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger

log = get_logger(__name__)

PROFILE_NOT_FOUND = "Business profile not found"


def parse_status_filter(status: Optional[str]) -> Optional[str]:
    """``None``/``"all"`` disable the filter; anything else must be a known status."""
    if not status or status == "all":
        return None
    try:
        return ApplicationStatus(status).value
    except ValueError:
        raise ValidationError(f"Unknown status filter: {status}", field="status")


class AdminService:
    def __init__(
        self, business_profiles: BusinessProfileRepository, clock: Clock = utc_now
    ) -> None:
        self._profiles = business_profiles
        self._clock = clock

    async def list_profiles(
        self, search: str = "", status: Optional[str] = None
    ) -> list[BusinessProfileDoc]:
        return await self._profiles.search(search, parse_status_filter(status))

    async def _get(self, profile_id: str) -> BusinessProfileDoc:
        profile = await self._profiles.find_by_id(profile_id)
        if profile is None:
            raise NotFoundError(PROFILE_NOT_FOUND)
        return profile

    async def update_status(
        self, profile_id: str, status: ApplicationStatus
    ) -> BusinessProfileDoc:
        profile = await self._get(profile_id)
        updated = await self._profiles.update_fields(
            {"_id": profile.id},
            {"status": ApplicationStatus(status).value, "updated_at": self._clock()},
        )
        if updated is None:
            raise NotFoundError(PROFILE_NOT_FOUND)
        log.info(
            "business_profile_status_changed",
            profile_id=profile_id,
            old_status=profile.status,
            new_status=updated.status,
        )
        return updated

    async def documents(self, profile_id: str) -> list[FormationDocument]:
        return (await self._get(profile_id)).documents

    async def mark_document_uploaded(
        self, profile_id: str, document_id: str
    ) -> FormationDocument:
        profile = await self._get(profile_id)
        if not any(doc.id == document_id for doc in profile.documents):
            raise NotFoundError("Document not found")

        now = self._clock()
        updated = await self._profiles.update_document(
            profile_id,
            document_id,
            {"status": DocumentStatus.READY.value, "uploaded_at": now},
        )
        if updated is None:
            raise NotFoundError("Document not found")
        log.info("document_uploaded", profile_id=profile_id, document_id=document_id)
        return next(doc for doc in updated.documents if doc.id == document_id)
