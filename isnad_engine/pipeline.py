"""Single-text hadith analysis pipeline."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional

from isnad_engine.analysis.confidence import aggregate
from isnad_engine.analysis.features import extract_linguistic_features
from isnad_engine.analysis.structure import StructuralAnalyzer
from isnad_engine.errors import InputValidationError
from isnad_engine.extraction.patterns import NarratorPatternExtractor, build_narrator_chain
from isnad_engine.history.store import DEFAULT_SCAN_LIMIT
from isnad_engine.models import HadithTextAnalysis, SimilarityResult
from isnad_engine.narrators.resolver import NarratorResolver
from isnad_engine.preprocessing.normalize import ArabicNormalizer
from isnad_engine.similarity.engine import DEFAULT_THRESHOLD, DEFAULT_TOP_K, SimilarityEngine, validate_params

logger = logging.getLogger(__name__)


class HadithAnalyzer:
    """
    Pipeline:
    1. Normalize text
    2. Extract linguistic features and narrator name candidates
    3. Summarize the narrator chain and score the text structure
    4. Aggregate both scores into one confidence percentage
    5. Optionally resolve names against the narrator directory and find
       similar texts in the search history
    """

    def __init__(
        self,
        normalizer: Optional[ArabicNormalizer] = None,
        extractor: Optional[NarratorPatternExtractor] = None,
        structure_analyzer: Optional[StructuralAnalyzer] = None,
        similarity_engine: Optional[SimilarityEngine] = None,
        resolver: Optional[NarratorResolver] = None,
        history: Any = None,
        *,
        history_scan_limit: int = DEFAULT_SCAN_LIMIT,
        similarity_threshold: float = DEFAULT_THRESHOLD,
        similarity_top_k: int = DEFAULT_TOP_K,
    ):
        self.normalizer = normalizer or ArabicNormalizer()
        self.extractor = extractor or NarratorPatternExtractor()
        self.structure_analyzer = structure_analyzer or StructuralAnalyzer()
        self.similarity_engine = similarity_engine or SimilarityEngine(self.normalizer)
        self.resolver = resolver
        self.history = history
        self.history_scan_limit = history_scan_limit
        self.similarity_threshold = similarity_threshold
        self.similarity_top_k = similarity_top_k

    def analyze_text(self, text: str) -> HadithTextAnalysis:
        """Pure, I/O-free part of the analysis."""
        normalized_text = self.normalizer.normalize(text)
        candidates = self.extractor.extract_candidates(normalized_text)
        chain = build_narrator_chain(candidates, normalized_text)
        structure = self.structure_analyzer.analyze_structure(normalized_text)

        return HadithTextAnalysis(
            original_text=text or "",
            normalized_text=normalized_text,
            linguistic_features=extract_linguistic_features(normalized_text),
            candidates=candidates,
            narrator_chain=chain,
            structural_analysis=structure,
            confidence=aggregate(chain, structure),
        )

    async def analyze(self, text: str, *, include_similar: bool = True) -> HadithTextAnalysis:
        if not isinstance(text, str) or not text.strip():
            raise InputValidationError("Please provide a valid hadith text.")

        analysis = self.analyze_text(text)
        logger.debug(
            "Analyzed text: %d candidates, confidence %d%%",
            len(analysis.candidates),
            analysis.confidence,
        )

        update = {}
        if self.resolver is not None and analysis.narrator_chain.extracted_names:
            update["narrators"] = await self.resolver.resolve_all(analysis.narrator_chain.extracted_names)
        if include_similar and self.history is not None:
            update["similar_texts"] = await self._similar_from_history(analysis.normalized_text)

        if update:
            analysis = analysis.model_copy(update=update)
        return analysis

    async def find_similar(
        self,
        text: str,
        threshold: Optional[float] = None,
        top_k: Optional[int] = None,
    ) -> List[SimilarityResult]:
        """Rank stored searches by similarity to ``text``; raises on bad parameters."""
        if not isinstance(text, str) or not text.strip():
            raise InputValidationError("Please provide a valid hadith text.")
        threshold = self.similarity_threshold if threshold is None else threshold
        top_k = self.similarity_top_k if top_k is None else top_k
        validate_params(threshold, top_k)
        if self.history is None:
            return []

        corpus = await asyncio.to_thread(self.history.recent, self.history_scan_limit)
        return self.similarity_engine.find_similar(text, corpus, threshold=threshold, top_k=top_k)

    async def _similar_from_history(self, normalized_text: str) -> List[SimilarityResult]:
        try:
            return await self.find_similar(normalized_text)
        except Exception:
            logger.exception("Error reading search history for similarity matching")
            return []
