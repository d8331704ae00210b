"""Pydantic data models shared by the extraction, scoring and job layers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

NarratorKind = Literal["companion", "scholar", "narrator", "uncertain"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NameCandidate(BaseModel):
    """A narrator name span found by a marker pattern."""

    name: str = Field(..., min_length=2, max_length=80)
    confidence: float = Field(..., ge=0.0, le=1.0)
    position: int = Field(..., ge=0, description="Offset of the name in the normalized text")
    marker: Optional[str] = Field(default=None, description="Marker phrase, None for the lineage fallback")
    kind: NarratorKind = "uncertain"


class NarratorChainResult(BaseModel):
    extracted_names: List[str] = Field(default_factory=list)
    chain_length: int = 0
    has_traditional_markers: bool = False
    confidence: int = Field(default=0, ge=0, le=100)


class StructuralAnalysis(BaseModel):
    has_isnad: bool = False
    has_matn: bool = False
    structure_score: int = Field(default=0, ge=0, le=100)
    traditional_formula: bool = False


class LinguisticFeatures(BaseModel):
    length: int = 0
    word_count: int = 0
    arabic_word_count: int = 0
    english_word_count: int = 0
    has_traditional_markers: bool = False
    has_narrator_indicators: bool = False
    text_complexity: float = 0.0
    language: str = "mixed"


class SimilarityResult(BaseModel):
    id: str
    text: str
    similarity: float = Field(..., ge=0.0, le=1.0)
    source: str = "user_search"
    timestamp: Optional[datetime] = None


class ScholarOpinion(BaseModel):
    id: int
    narrator_id: int
    scholar: str
    verdict: str
    reason: Optional[str] = None
    source_ref: Optional[str] = None


class NarratorProfile(BaseModel):
    """Narrator record as read from the directory; the engine never owns it."""

    id: int
    name_arabic: str
    name_transliteration: Optional[str] = None
    credibility: str = Field(..., description="trustworthy or weak")
    biography: Optional[str] = None
    birth_year: Optional[int] = None
    death_year: Optional[int] = None
    region: Optional[str] = None
    matched_name: Optional[str] = Field(default=None, description="Extracted name that resolved to this record")


class SearchRecord(BaseModel):
    id: str
    text: str
    result_found: bool = False
    user_id: Optional[str] = None
    timestamp: Optional[datetime] = None


class BookmarkStatus(BaseModel):
    narrator_id: int
    user_id: str
    is_bookmarked: bool


class HadithTextAnalysis(BaseModel):
    original_text: str
    normalized_text: str
    linguistic_features: LinguisticFeatures
    candidates: List[NameCandidate] = Field(default_factory=list)
    narrator_chain: NarratorChainResult
    structural_analysis: StructuralAnalysis
    similar_texts: List[SimilarityResult] = Field(default_factory=list)
    narrators: List[NarratorProfile] = Field(default_factory=list)
    confidence: int = Field(..., ge=0, le=100)
    timestamp: datetime = Field(default_factory=utcnow)
