"""
Client dashboard routes (authenticated, owner-scoped).

GET        /dashboard/onboarding
GET, PUT   /dashboard/profile
GET, POST  /dashboard/team-members
PUT, DELETE /dashboard/team-members/{member_id}
GET, PUT   /dashboard/business
GET        /dashboard/documents
GET        /dashboard/orders
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends

from dependencies import get_current_user, get_dashboard_service
from schemas.dto.requests.dashboard import (
    TeamMemberRequest,
    UpdateBusinessRequest,
    UpdateProfileRequest,
)
from schemas.dto.responses.business import OnboardingResponse
from schemas.dto.responses.common import MessageResponse
from services.auth.identity import CurrentUser
from services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/onboarding", response_model=OnboardingResponse)
async def onboarding(
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> OnboardingResponse:
    return OnboardingResponse(completed=await service.onboarding_completed(user))


@router.get("/profile")
async def get_profile(
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return (await service.get_or_create_profile(user)).to_public()


@router.put("/profile")
async def update_profile(
    body: UpdateProfileRequest,
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return (await service.update_profile(user, body)).to_public()


@router.get("/team-members")
async def list_team_members(
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> list[dict]:
    return [m.to_public() for m in await service.list_team(user)]


@router.post("/team-members", status_code=201)
async def add_team_member(
    body: Optional[TeamMemberRequest] = Body(default=None),
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return (await service.add_team_member(user, body)).to_public()


@router.put("/team-members/{member_id}")
async def update_team_member(
    member_id: str,
    body: TeamMemberRequest,
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return (await service.update_team_member(user, member_id, body)).to_public()


@router.delete("/team-members/{member_id}", response_model=MessageResponse)
async def delete_team_member(
    member_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> MessageResponse:
    await service.delete_team_member(user, member_id)
    return MessageResponse(success=True, message="Team member removed successfully!")


@router.get("/business")
async def get_business(
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return (await service.get_business(user)).to_public()


@router.put("/business")
async def update_business(
    body: UpdateBusinessRequest,
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return (await service.update_business(user, body)).to_public()


@router.get("/documents")
async def list_documents(
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> list[dict]:
    return [d.model_dump(mode="json") for d in await service.documents(user)]


@router.get("/orders")
async def list_orders(
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> list[dict]:
    return [o.to_public() for o in await service.list_orders(user)]
