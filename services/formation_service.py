"""
Business formation intake.

Validation follows the intake wizard: required fields are checked in form
order and the first failure is reported on its own, so the client can show
one message at a time. A successful submission stores the application,
opens the client's business profile with its document checklist, and hands
the intake over to the pricing step through ``businessFormData``.
"""

from __future__ import annotations

from typing import Optional

from errors import ConflictError, ValidationError
from repositories.business_repository import (
    ApplicationRepository,
    BusinessProfileRepository,
)
from schemas.dto.requests.business import ApplicationRequest
from schemas.models.business import (
    MAX_MEMBERS,
    ApplicationDoc,
    ApplicationStatus,
    BusinessProfileDoc,
    BusinessType,
    FormationMember,
)
from services.auth.identity import CurrentUser
from services.onboarding_store import OnboardingStore
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger, mask_email
from shared.validators import validate_ca_zip_code, validate_email

log = get_logger(__name__)

SUBMITTED_MESSAGE = "Your business formation application has been submitted for review."

_REQUIRED_FIELDS: list[tuple[str, str]] = [
    ("business_name", "Business name is required."),
    ("business_address", "Business address is required."),
    ("business_city", "Business city is required."),
    ("business_zip_code", "Business ZIP code is required."),
]
_OWNER_FIELDS: list[tuple[str, str]] = [
    ("owner_name", "Business owner name is required."),
    ("owner_phone", "Business owner phone number is required."),
    ("owner_address", "Business owner address is required."),
    ("owner_email", "Business owner email is required."),
]


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def validate_application(req: ApplicationRequest) -> BusinessType:
    """Raise ValidationError for the first problem in *req*; return its type."""
    for field, message in _REQUIRED_FIELDS:
        if _blank(getattr(req, field)):
            raise ValidationError(message, field=field)

    if not validate_ca_zip_code(req.business_zip_code):
        raise ValidationError(
            "Please enter a valid California ZIP code.", field="business_zip_code"
        )
    if (req.business_state or "CA").strip().upper() != "CA":
        raise ValidationError(
            "We currently only form businesses in California.", field="business_state"
        )

    if _blank(req.business_email):
        raise ValidationError("Business email is required.", field="business_email")
    if not validate_email(req.business_email.strip()):
        raise ValidationError(
            "Please enter a valid business email address.", field="business_email"
        )
    if _blank(req.business_phone):
        raise ValidationError(
            "Business phone number is required.", field="business_phone"
        )

    business_type = BusinessType.parse(req.business_type)
    if business_type is None:
        raise ValidationError("Please select a business type.", field="business_type")

    for field, message in _OWNER_FIELDS:
        if _blank(getattr(req, field)):
            raise ValidationError(message, field=field)
    if not validate_email(req.owner_email.strip()):
        raise ValidationError(
            "Please enter a valid owner email address.", field="owner_email"
        )

    if len(req.members) > MAX_MEMBERS:
        raise ValidationError(
            f"You can only add up to {MAX_MEMBERS} team members.", field="members"
        )
    for member in req.members:
        if _blank(member.name) or _blank(member.email):
            raise ValidationError(
                "Please fill in at least the name and email for the member.",
                field="members",
            )

    return business_type


def business_form_data(req: ApplicationRequest, business_type: BusinessType) -> dict:
    """The intake as handed to the pricing step (camelCase keys)."""
    return {
        "businessName": req.business_name.strip(),
        "businessType": business_type.value,
        "businessAddress": req.business_address.strip(),
        "city": req.business_city.strip(),
        "state": "CA",
        "zipCode": req.business_zip_code.strip(),
        "phoneNumber": req.business_phone.strip(),
        "businessEmail": req.business_email.strip(),
        "businessDescription": req.business_description,
        "ownerName": req.owner_name.strip(),
        "ownerPhone": req.owner_phone.strip(),
        "ownerAddress": req.owner_address.strip(),
        "ownerEmail": req.owner_email.strip(),
        "members": [m.model_dump() for m in req.members],
    }


class FormationService:
    def __init__(
        self,
        applications: ApplicationRepository,
        business_profiles: BusinessProfileRepository,
        onboarding: OnboardingStore,
        clock: Clock = utc_now,
    ) -> None:
        self._applications = applications
        self._profiles = business_profiles
        self._onboarding = onboarding
        self._clock = clock

    async def _check_duplicates(self, business_email: str, owner_email: str) -> None:
        if await self._applications.find_one({"business_email": business_email}):
            raise ConflictError(
                "This business email is already registered. "
                "Please use a different email address.",
                field="business_email",
            )
        if await self._applications.find_one({"owner_email": owner_email}):
            raise ConflictError(
                "This owner email is already registered. "
                "Please use a different email address.",
                field="owner_email",
            )

    async def submit_application(
        self, user: CurrentUser, req: ApplicationRequest
    ) -> tuple[ApplicationDoc, BusinessProfileDoc]:
        business_type = validate_application(req)
        business_email = req.business_email.strip().lower()
        owner_email = req.owner_email.strip().lower()
        await self._check_duplicates(business_email, owner_email)

        now = self._clock()
        application = ApplicationDoc(
            user_id=user.user_id,
            business_name=req.business_name.strip(),
            business_description=req.business_description or None,
            business_address=req.business_address.strip(),
            business_city=req.business_city.strip(),
            business_zip_code=req.business_zip_code.strip(),
            business_email=business_email,
            business_phone=req.business_phone.strip(),
            business_type=business_type,
            owner_name=req.owner_name.strip(),
            owner_phone=req.owner_phone.strip(),
            owner_address=req.owner_address.strip(),
            owner_email=owner_email,
            owner_ssn_itin=req.owner_ssn_itin or None,
            members=[
                FormationMember(
                    name=m.name.strip(),
                    email=m.email.strip(),
                    phone=m.phone,
                    address=m.address,
                    position=m.position,
                )
                for m in req.members
            ],
            status=ApplicationStatus.SUBMITTED,
            created_at=now,
            last_updated=now,
        )
        application = await self._applications.insert(application)

        profile = BusinessProfileDoc(
            user_id=user.user_id,
            business_name=application.business_name,
            business_type=business_type,
            address_line1=application.business_address,
            city=application.business_city,
            zip_code=application.business_zip_code,
            phone=application.business_phone,
            email=business_email,
            description=application.business_description,
            owner_phone=application.owner_phone,
            status=ApplicationStatus.SUBMITTED,
            created_at=now,
            updated_at=now,
        )
        profile = await self._profiles.insert(profile)

        await self._onboarding.save_business_form(
            user.user_id, business_form_data(req, business_type)
        )
        log.info(
            "application_submitted",
            application_id=str(application.id),
            business_type=business_type.value,
            owner_email=mask_email(owner_email),
        )
        return application, profile
