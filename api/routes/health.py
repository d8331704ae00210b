"""Health and readiness routes."""

from __future__ import annotations

from fastapi import APIRouter, Request
from sqlalchemy import text

from api.schemas import HealthResponse

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Returns API status, database connected flag and the job store kind."""

    service = getattr(request.app.state, "service", None)
    database_connected = False
    job_store = "unavailable"
    running_jobs = 0

    if service is not None:
        job_store = service.orchestrator.store.kind
        running_jobs = service.orchestrator.running_jobs
        # Best-effort probe for current database connectivity when an engine exists.
        if service.engine is not None:
            try:
                with service.engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                database_connected = True
            except Exception:
                database_connected = False

    return HealthResponse(
        status="healthy",
        database_connected=database_connected,
        job_store=job_store,
        running_jobs=running_jobs,
    )
