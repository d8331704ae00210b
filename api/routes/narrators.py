"""Narrator directory and search history routes."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query, Request

from api.routes.common import get_service, unwrap
from api.schemas import BookmarkRequest, NarratorOpinionsResponse
from isnad_engine.models import BookmarkStatus, NarratorProfile, SearchRecord

router = APIRouter(tags=["Narrators"])


@router.get("/narrators/search", response_model=List[NarratorProfile])
async def search_narrators(request: Request, name: str = Query(...), limit: int = Query(default=10)):
    service = get_service(request)
    return unwrap(await service.search_narrators(name, limit))


@router.get("/narrators/{narrator_id}/opinions", response_model=NarratorOpinionsResponse)
async def narrator_opinions(narrator_id: int, request: Request):
    """Narrator record plus every scholar verdict recorded for it."""

    service = get_service(request)
    return unwrap(await service.narrator_opinions(narrator_id))


@router.post("/narrators/{narrator_id}/bookmark", response_model=BookmarkStatus)
async def toggle_bookmark(narrator_id: int, payload: BookmarkRequest, request: Request):
    """Bookmark the narrator for the user, or remove an existing bookmark."""

    service = get_service(request)
    return unwrap(await service.toggle_bookmark(narrator_id, payload.user_id))


@router.get("/narrators/{narrator_id}/bookmark", response_model=BookmarkStatus)
async def bookmark_status(narrator_id: int, request: Request, user_id: Optional[str] = Query(default=None)):
    service = get_service(request)
    return unwrap(await service.bookmark_status(narrator_id, user_id))


@router.get("/searches/recent", response_model=List[SearchRecord])
async def recent_searches(
    request: Request,
    limit: int = Query(default=20),
    user_id: Optional[str] = Query(default=None),
):
    service = get_service(request)
    return unwrap(await service.recent_searches(limit, user_id=user_id))
