"""
Client dashboard: profile, team members, business profile, documents and
orders.

Everything is scoped to the calling user; ids that belong to someone else
are reported as not found.
"""

from __future__ import annotations

from typing import Optional

from errors import NotFoundError, ValidationError
from repositories.business_repository import BusinessProfileRepository, OrderRepository
from repositories.profile_repository import TeamMemberRepository, UserProfileRepository
from schemas.dto.requests.dashboard import (
    TeamMemberRequest,
    UpdateBusinessRequest,
    UpdateProfileRequest,
)
from schemas.models.business import BusinessProfileDoc, BusinessType, FormationDocument
from schemas.models.package import OrderDoc
from schemas.models.profile import TeamMemberDoc, UserProfileDoc
from services.auth.identity import CurrentUser
from services.onboarding_store import OnboardingStore
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger
from shared.validators import validate_ca_zip_code, validate_email, validate_phone

log = get_logger(__name__)

TEAM_MEMBER_NOT_FOUND = "Team member not found"
BUSINESS_NOT_FOUND = "No business profile found. Please complete the formation form first."


def _check_contact(email: Optional[str], phone: Optional[str]) -> None:
    if email and not validate_email(email.strip()):
        raise ValidationError("Please enter a valid email address", field="email")
    if phone and not validate_phone(phone):
        raise ValidationError("Please enter a valid phone number", field="phone")


class DashboardService:
    def __init__(
        self,
        profiles: UserProfileRepository,
        team_members: TeamMemberRepository,
        business_profiles: BusinessProfileRepository,
        orders: OrderRepository,
        onboarding: OnboardingStore,
        clock: Clock = utc_now,
    ) -> None:
        self._profiles = profiles
        self._team = team_members
        self._businesses = business_profiles
        self._orders = orders
        self._onboarding = onboarding
        self._clock = clock

    async def onboarding_completed(self, user: CurrentUser) -> bool:
        """True once a package is chosen: the key-value marker, else an order
        on record in MongoDB."""
        if await self._onboarding.is_onboarding_complete(user.user_id):
            return True
        return await self._orders.has_order(user.user_id)

    async def list_orders(self, user: CurrentUser) -> list[OrderDoc]:
        return await self._orders.list_for_user(user.user_id)

    # ── Profile ──────────────────────────────────────────────────────────────

    async def get_or_create_profile(self, user: CurrentUser) -> UserProfileDoc:
        profile = await self._profiles.find_by_user(user.user_id)
        if profile is not None:
            return profile

        now = self._clock()
        profile = UserProfileDoc(
            user_id=user.user_id,
            full_name=user.display_name,
            email=user.email,
            created_at=now,
            updated_at=now,
        )
        log.info("user_profile_created", user_id=user.user_id)
        return await self._profiles.insert(profile)

    async def update_profile(
        self, user: CurrentUser, req: UpdateProfileRequest
    ) -> UserProfileDoc:
        _check_contact(req.email, req.phone)
        profile = await self.get_or_create_profile(user)
        fields = req.model_dump(exclude_none=True)
        if not fields:
            return profile
        fields["updated_at"] = self._clock()
        updated = await self._profiles.update_fields({"_id": profile.id}, fields)
        return updated or profile

    # ── Team ─────────────────────────────────────────────────────────────────

    async def list_team(self, user: CurrentUser) -> list[TeamMemberDoc]:
        return await self._team.list_for_user(user.user_id)

    async def add_team_member(
        self, user: CurrentUser, req: Optional[TeamMemberRequest] = None
    ) -> TeamMemberDoc:
        fields = req.model_dump(exclude_none=True) if req else {}
        _check_contact(fields.get("email"), fields.get("phone"))
        now = self._clock()
        member = TeamMemberDoc(user_id=user.user_id, created_at=now, updated_at=now, **fields)
        return await self._team.insert(member)

    async def update_team_member(
        self, user: CurrentUser, member_id: str, req: TeamMemberRequest
    ) -> TeamMemberDoc:
        _check_contact(req.email, req.phone)
        member = await self._team.find_owned(member_id, user.user_id)
        if member is None:
            raise NotFoundError(TEAM_MEMBER_NOT_FOUND)

        fields = req.model_dump(exclude_none=True, mode="json")
        if not fields:
            return member
        fields["updated_at"] = self._clock()
        updated = await self._team.update_fields(
            {"_id": member.id, "user_id": user.user_id}, fields
        )
        if updated is None:
            raise NotFoundError(TEAM_MEMBER_NOT_FOUND)
        return updated

    async def delete_team_member(self, user: CurrentUser, member_id: str) -> None:
        member = await self._team.find_owned(member_id, user.user_id)
        if member is None or not await self._team.delete_one(
            {"_id": member.id, "user_id": user.user_id}
        ):
            raise NotFoundError(TEAM_MEMBER_NOT_FOUND)

    # ── Business ─────────────────────────────────────────────────────────────

    async def get_business(self, user: CurrentUser) -> BusinessProfileDoc:
        profile = await self._businesses.find_latest_for_user(user.user_id)
        if profile is None:
            raise NotFoundError(BUSINESS_NOT_FOUND)
        return profile

    async def update_business(
        self, user: CurrentUser, req: UpdateBusinessRequest
    ) -> BusinessProfileDoc:
        profile = await self.get_business(user)
        fields = req.model_dump(exclude_none=True)

        if "business_type" in fields:
            business_type = BusinessType.parse(fields["business_type"])
            if business_type is None:
                raise ValidationError(
                    "Please select a business type.", field="business_type"
                )
            fields["business_type"] = business_type.value
        if "zip_code" in fields and not validate_ca_zip_code(fields["zip_code"]):
            raise ValidationError(
                "Please enter a valid California ZIP code.", field="zip_code"
            )
        _check_contact(fields.get("email"), fields.get("phone"))
        for required in ("business_name", "address_line1", "city"):
            if required in fields and not fields[required].strip():
                raise ValidationError(
                    f"{required.replace('_', ' ').capitalize()} cannot be empty.",
                    field=required,
                )

        if not fields:
            return profile
        fields["updated_at"] = self._clock()
        updated = await self._businesses.update_fields(
            {"_id": profile.id, "user_id": user.user_id}, fields
        )
        if updated is None:
            raise NotFoundError(BUSINESS_NOT_FOUND)

        # Keep the onboarding snapshot in step with the edited profile
        dashboard = await self._onboarding.load_dashboard(user.user_id)
        if dashboard is not None:
            dashboard["businessProfile"] = updated.to_public()
            await self._onboarding.save_dashboard(user.user_id, dashboard)
        log.info("business_profile_updated", profile_id=str(updated.id))
        return updated

    async def documents(self, user: CurrentUser) -> list[FormationDocument]:
        return (await self.get_business(user)).documents
