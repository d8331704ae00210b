"""Helpers shared by the API routes."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request

from isnad_engine.errors import ErrorKind
from isnad_engine.service import HadithService, ServiceResult

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.LOOKUP: 503,
    ErrorKind.TIMEOUT: 503,
    ErrorKind.PROCESSING: 500,
}


def get_service(request: Request) -> HadithService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Hadith analysis service is not available.")
    return service


def unwrap(result: ServiceResult) -> Any:
    """Return the result data or raise the HTTP error matching its kind."""
    if result.success:
        return result.data
    error = result.error
    raise HTTPException(
        status_code=STATUS_BY_KIND.get(error.kind, 500),
        detail={"message": error.user_message, "kind": error.kind.value, "retryable": error.retryable},
    )
