"""
Business formation and package routes (authenticated).

POST /formation/applications     submit the intake wizard
GET  /formation/packages         packages for the stored (or given) business type
POST /formation/packages/select  choose a package; completes onboarding
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from dependencies import get_current_user, get_formation_service, get_pricing_service
from schemas.dto.requests.business import ApplicationRequest, SelectPackageRequest
from schemas.dto.responses.business import (
    ApplicationSubmittedResponse,
    PackageListResponse,
    PackageResponse,
    PackageSelectedResponse,
)
from services.auth.identity import CurrentUser
from services.formation_service import SUBMITTED_MESSAGE, FormationService
from services.pricing_service import PricingService

router = APIRouter(prefix="/formation", tags=["formation"])


@router.post(
    "/applications", response_model=ApplicationSubmittedResponse, status_code=201
)
async def submit_application(
    body: ApplicationRequest,
    user: CurrentUser = Depends(get_current_user),
    service: FormationService = Depends(get_formation_service),
) -> ApplicationSubmittedResponse:
    application, profile = await service.submit_application(user, body)
    public = application.to_public()
    # The SSN/ITIN is stored but never echoed back
    public.pop("owner_ssn_itin", None)
    return ApplicationSubmittedResponse(
        message=SUBMITTED_MESSAGE,
        application=public,
        business_profile=profile.to_public(),
    )


@router.get("/packages", response_model=PackageListResponse)
async def list_packages(
    business_type: Optional[str] = Query(default=None),
    user: CurrentUser = Depends(get_current_user),
    service: PricingService = Depends(get_pricing_service),
) -> PackageListResponse:
    label, packages = await service.list_packages(user, business_type)
    return PackageListResponse(
        business_type=label,
        packages=[
            PackageResponse(**p.model_dump(), display_price=p.display_price)
            for p in packages
        ],
    )


@router.post("/packages/select", response_model=PackageSelectedResponse, status_code=201)
async def select_package(
    body: SelectPackageRequest,
    user: CurrentUser = Depends(get_current_user),
    service: PricingService = Depends(get_pricing_service),
) -> PackageSelectedResponse:
    order, dashboard_data = await service.select_package(user, body.package_name)
    return PackageSelectedResponse(
        message=f"{order.package_name} selected. Our team will contact you about payment.",
        order=order.to_public(),
        dashboard_data=dashboard_data,
    )
