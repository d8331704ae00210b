"""Token-set (Jaccard) similarity between a query and stored texts."""

from __future__ import annotations

from typing import Iterable, List, Optional

from isnad_engine.errors import InputValidationError
from isnad_engine.models import SearchRecord, SimilarityResult
from isnad_engine.preprocessing.normalize import ArabicNormalizer

DEFAULT_THRESHOLD = 0.7
DEFAULT_TOP_K = 10


def _token_set(text: str) -> set:
    return set((text or "").lower().split())


def jaccard_similarity(text1: str, text2: str) -> float:
    """|A ∩ B| / |A ∪ B| over lowercase whitespace tokens; 0.0 when both are empty."""

    words1 = _token_set(text1)
    words2 = _token_set(text2)
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def validate_params(threshold: float, top_k: int) -> None:
    if not 0.0 <= threshold <= 1.0:
        raise InputValidationError(f"Similarity threshold must be between 0 and 1, got {threshold}.")
    if top_k < 1:
        raise InputValidationError(f"top_k must be a positive integer, got {top_k}.")


class SimilarityEngine:
    """
    Full-scan similarity search. Cost grows with corpus size times text length,
    so callers bound the corpus (the search history scan reads the most recent
    1000 records).
    """

    def __init__(self, normalizer: Optional[ArabicNormalizer] = None, source: str = "user_search"):
        self.normalizer = normalizer or ArabicNormalizer()
        self.source = source

    def find_similar(
        self,
        query_text: str,
        corpus: Iterable[SearchRecord],
        threshold: float = DEFAULT_THRESHOLD,
        top_k: int = DEFAULT_TOP_K,
    ) -> List[SimilarityResult]:
        validate_params(threshold, top_k)

        normalized_query = self.normalizer.normalize(query_text)
        matches: List[SimilarityResult] = []
        for record in corpus:
            similarity = jaccard_similarity(normalized_query, self.normalizer.normalize(record.text))
            if similarity < threshold:
                continue
            matches.append(
                SimilarityResult(
                    id=str(record.id),
                    text=record.text,
                    similarity=similarity,
                    source=self.source,
                    timestamp=record.timestamp,
                )
            )

        # list.sort is stable, so equal scores keep corpus order.
        matches.sort(key=lambda result: result.similarity, reverse=True)
        return matches[:top_k]
