"""
Request DTOs for the client and admin dashboards.

Update bodies are partial: only fields that are present are written.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.models.business import ApplicationStatus
from schemas.models.profile import TeamMemberStatus


class UpdateProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None


class TeamMemberRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[TeamMemberStatus] = None


class UpdateBusinessRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    business_name: Optional[str] = None
    business_type: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    tax_id: Optional[str] = None
    description: Optional[str] = None


class UpdateStatusRequest(BaseModel):
    """Request body for PATCH /admin/business-profiles/{id}/status."""

    model_config = ConfigDict(populate_by_name=True)

    status: ApplicationStatus
