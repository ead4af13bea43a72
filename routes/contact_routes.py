"""POST /contact: forward the site's contact form to the team."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_contact_service
from schemas.dto.requests.contact import ContactRequest
from schemas.dto.responses.common import MessageResponse
from services.contact_service import ContactService

router = APIRouter(tags=["contact"])


@router.post("/contact", response_model=MessageResponse)
async def submit_contact(
    body: ContactRequest,
    service: ContactService = Depends(get_contact_service),
) -> MessageResponse:
    return MessageResponse(success=True, message=await service.submit(body))
