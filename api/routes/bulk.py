"""Bulk job submission, progress polling and export."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import Response

from api.routes.common import get_service, unwrap
from api.schemas import BulkRequest, BulkSubmitResponse
from isnad_engine.jobs.models import BulkJob

router = APIRouter(prefix="/bulk", tags=["Bulk"])

MEDIA_TYPES = {"json": "application/json", "csv": "text/csv"}


@router.post("", response_model=BulkSubmitResponse, status_code=202)
async def submit_bulk(payload: BulkRequest, request: Request):
    """Start a background job; poll ``GET /bulk/{job_id}`` for progress."""

    service = get_service(request)
    data = unwrap(await service.submit_bulk(payload.texts, user_id=payload.user_id))
    return BulkSubmitResponse(job_id=data["job_id"], total=len(payload.texts))


@router.get("/{job_id}", response_model=BulkJob)
async def bulk_progress(job_id: str, request: Request):
    service = get_service(request)
    return unwrap(await service.get_progress(job_id))


@router.get("/{job_id}/export")
async def export_bulk(job_id: str, request: Request, format: str = Query(default="json")):
    service = get_service(request)
    body = unwrap(await service.export_job(job_id, format))
    fmt = format.lower()
    return Response(
        content=body,
        media_type=f"{MEDIA_TYPES[fmt]}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{job_id}.{fmt}"'},
    )
