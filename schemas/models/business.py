"""
Business formation document models.

ApplicationDoc: `applications` collection; one per intake submission,
                      members flattened into up to three embedded entries.
BusinessProfileDoc: `business_profiles` collection; the client's business as
                      tracked by the dashboard and reviewed by the admin,
                      carrying its document checklist.

Only California formations are offered, so `state` is always "CA".
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.base import MongoBaseModel
from shared.generators import generate_document_id

MAX_MEMBERS = 3


class BusinessType(str, Enum):
    LLC = "LLC"
    CORPORATION = "Corporation"
    PARTNERSHIP = "Partnership"
    SOLE_PROPRIETORSHIP = "Sole Proprietorship"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["BusinessType"]:
        """Resolve *value* case-insensitively; ``_`` is accepted for spaces."""
        if not value:
            return None
        normalised = value.strip().lower().replace("_", " ")
        for member in cls:
            if member.value.lower() == normalised:
                return member
        return None


class ApplicationStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    COMPLETED = "completed"


class FormationMember(BaseModel):
    """A co-owner or officer listed on an application."""

    id: str = Field(default_factory=generate_document_id)
    name: str
    email: str
    phone: str = ""
    address: str = ""
    position: str = ""


class FormationDocument(BaseModel):
    """One entry of a business profile's document checklist."""

    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(default_factory=generate_document_id)
    name: str
    type: str
    status: DocumentStatus = DocumentStatus.PENDING
    download_url: Optional[str] = None
    uploaded_at: Optional[datetime] = None


def default_documents() -> list[FormationDocument]:
    return [
        FormationDocument(name="Articles of Organization", type="formation"),
        FormationDocument(name="Operating Agreement", type="agreement"),
        FormationDocument(name="Tax ID (EIN) Certificate", type="tax"),
        FormationDocument(
            name="Compliance Calendar",
            type="compliance",
            status=DocumentStatus.READY,
            download_url="#",
        ),
    ]


class ApplicationDoc(MongoBaseModel):
    """Document model for the `applications` collection."""

    user_id: str

    business_name: str
    business_description: Optional[str] = None
    business_address: str
    business_city: str
    business_state: str = "CA"
    business_zip_code: str
    business_email: str
    business_phone: str
    business_type: BusinessType

    owner_name: str
    owner_phone: str
    owner_address: str
    owner_email: str
    owner_ssn_itin: Optional[str] = None

    members: list[FormationMember] = Field(default_factory=list, max_length=MAX_MEMBERS)

    notes: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None


class BusinessProfileDoc(MongoBaseModel):
    """Document model for the `business_profiles` collection."""

    user_id: str
    business_name: str
    business_type: BusinessType
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str = "CA"
    zip_code: str
    phone: str
    email: str
    tax_id: Optional[str] = None
    description: Optional[str] = None
    owner_phone: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    documents: list[FormationDocument] = Field(default_factory=default_documents)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
