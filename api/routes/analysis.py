"""Single-text analysis and similarity routes."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Request

from api.routes.common import get_service, unwrap
from api.schemas import AnalyzeRequest, SimilarRequest
from isnad_engine.models import HadithTextAnalysis, SimilarityResult

router = APIRouter(tags=["Analysis"])


@router.post("/analyze", response_model=HadithTextAnalysis)
async def analyze_text(payload: AnalyzeRequest, request: Request):
    """
    Analyze one hadith text.

    Pipeline:
    1. Normalize input text
    2. Extract narrator candidates and the chain summary
    3. Score the structure and aggregate an overall confidence
    4. Resolve names against the narrator directory
    5. Optionally match against the search history
    """

    service = get_service(request)
    result = await service.analyze(
        payload.text,
        include_similar=payload.include_similar,
        record_search=payload.record_search,
        user_id=payload.user_id,
    )
    return unwrap(result)


@router.post("/similar", response_model=List[SimilarityResult])
async def similar_texts(payload: SimilarRequest, request: Request):
    service = get_service(request)
    result = await service.find_similar(payload.text, threshold=payload.threshold, top_k=payload.top_k)
    return unwrap(result)
