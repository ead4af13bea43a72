"""
Administrator routes (admin emails only).

GET   /admin/business-profiles?search=&status=
PATCH /admin/business-profiles/{profile_id}/status
GET   /admin/business-profiles/{profile_id}/documents
POST  /admin/business-profiles/{profile_id}/documents/{document_id}/upload
GET   /admin/export?format=json|csv
GET   /admin/export/{table}?format=json|csv
"""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from dependencies import get_admin_service, get_export_service, require_admin
from schemas.dto.requests.dashboard import UpdateStatusRequest
from services.admin_service import AdminService
from services.export_service import ExportFile, ExportService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _download(export: ExportFile) -> Response:
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("/business-profiles")
async def list_business_profiles(
    search: str = Query(default=""),
    status: Optional[str] = Query(default=None),
    service: AdminService = Depends(get_admin_service),
) -> list[dict]:
    return [p.to_public() for p in await service.list_profiles(search, status)]


@router.patch("/business-profiles/{profile_id}/status")
async def update_business_profile_status(
    profile_id: str,
    body: UpdateStatusRequest,
    service: AdminService = Depends(get_admin_service),
) -> dict:
    return (await service.update_status(profile_id, body.status)).to_public()


@router.get("/business-profiles/{profile_id}/documents")
async def list_business_documents(
    profile_id: str,
    service: AdminService = Depends(get_admin_service),
) -> list[dict]:
    return [d.model_dump(mode="json") for d in await service.documents(profile_id)]


@router.post("/business-profiles/{profile_id}/documents/{document_id}/upload")
async def upload_business_document(
    profile_id: str,
    document_id: str,
    service: AdminService = Depends(get_admin_service),
) -> dict:
    document = await service.mark_document_uploaded(profile_id, document_id)
    return document.model_dump(mode="json")


@router.get("/export")
async def export_all(
    format: Literal["json", "csv"] = Query(default="json"),
    service: ExportService = Depends(get_export_service),
) -> Response:
    return _download(await service.export_all(format))


@router.get("/export/{table}")
async def export_table(
    table: str,
    format: Literal["json", "csv"] = Query(default="csv"),
    service: ExportService = Depends(get_export_service),
) -> Response:
    return _download(await service.export_table(table, format))
