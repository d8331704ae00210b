"""Pydantic request/response schemas for the hadith analysis API."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from isnad_engine.models import NarratorProfile, ScholarOpinion


class AnalyzeRequest(BaseModel):
    """Input payload for single-text analysis."""

    text: str = Field(..., min_length=1, description="Raw hadith text, Arabic or mixed")
    include_similar: bool = Field(default=True, description="Compare against the search history")
    record_search: bool = Field(default=False, description="Append the text to the search history")
    user_id: Optional[str] = Field(default=None, max_length=64)


class SimilarRequest(BaseModel):
    text: str = Field(..., min_length=1)
    threshold: Optional[float] = Field(default=None, description="Minimum Jaccard similarity, 0..1")
    top_k: Optional[int] = Field(default=None, description="Maximum number of matches")


class BulkRequest(BaseModel):
    texts: List[str] = Field(..., description="Hadith texts processed in submission order")
    user_id: Optional[str] = Field(default=None, max_length=64)


class BulkSubmitResponse(BaseModel):
    job_id: str
    status: str = "processing"
    total: int


class BookmarkRequest(BaseModel):
    user_id: Optional[str] = Field(default=None, max_length=64, description="Bookmark owner")


class HealthResponse(BaseModel):
    status: str
    database_connected: bool
    job_store: str
    running_jobs: int


class NarratorOpinionsResponse(BaseModel):
    narrator: NarratorProfile
    opinions: List[ScholarOpinion]
