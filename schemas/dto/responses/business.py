"""
Response DTOs for formation, package and dashboard endpoints.

Document models are returned through ``to_public()`` dicts, so most
endpoints declare plain dict payloads; the shapes with extra fields live
here.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class PackageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    price: int
    display_price: str
    description: str
    features: list[str]
    is_express: bool


class PackageListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    business_type: Optional[str] = None
    packages: list[PackageResponse]


class ApplicationSubmittedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    application: dict[str, Any]
    business_profile: dict[str, Any]


class PackageSelectedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    order: dict[str, Any]
    dashboard_data: dict[str, Any]


class OnboardingResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    completed: bool
