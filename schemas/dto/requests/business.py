"""
Request DTOs for formation and package endpoints.

ApplicationRequest: POST /formation/applications
MemberRequest: entry of ApplicationRequest.members
SelectPackageRequest: POST /formation/packages/select
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MemberRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    position: str = ""


class ApplicationRequest(BaseModel):
    """Request body for POST /formation/applications.

    Required fields are checked by the formation service in the same order
    as the intake wizard, so clients get one message at a time.
    """

    model_config = ConfigDict(populate_by_name=True)

    business_name: str = ""
    business_description: Optional[str] = None
    business_address: str = ""
    business_city: str = ""
    business_state: str = "CA"
    business_zip_code: str = ""
    business_email: str = ""
    business_phone: str = ""
    business_type: str = ""

    owner_name: str = ""
    owner_phone: str = ""
    owner_address: str = ""
    owner_email: str = ""
    owner_ssn_itin: Optional[str] = None

    members: list[MemberRequest] = Field(default_factory=list)


class SelectPackageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    package_name: str
