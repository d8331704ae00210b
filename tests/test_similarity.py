"""Tests for Jaccard similarity search."""

from __future__ import annotations

import pytest

from isnad_engine.errors import InputValidationError
from isnad_engine.models import SearchRecord
from isnad_engine.preprocessing.normalize import normalize
from isnad_engine.similarity.engine import SimilarityEngine, jaccard_similarity

FORMULA = "قال رسول الله صلى الله عليه وسلم"


def test_identical_texts() -> None:
    assert jaccard_similarity(normalize(FORMULA), normalize(FORMULA)) == 1.0


def test_disjoint_texts() -> None:
    assert jaccard_similarity("حدثنا مالك", "hello world") == 0.0


def test_symmetry_and_range() -> None:
    pairs = [
        ("قال رسول الله", "قال رسول الله صلي"),
        ("حدثنا مالك عن نافع", "عن نافع عن ابن عمر"),
        ("Hello World", "hello there"),
    ]
    for left, right in pairs:
        score = jaccard_similarity(left, right)
        assert score == jaccard_similarity(right, left)
        assert 0.0 <= score <= 1.0


def test_case_insensitive_tokens() -> None:
    assert jaccard_similarity("Hello World", "hello world") == 1.0


def test_empty_token_sets() -> None:
    assert jaccard_similarity("", "") == 0.0
    assert jaccard_similarity("", "قال") == 0.0


def _corpus():
    return [
        SearchRecord(id="1", text="حدثنا مالك"),
        SearchRecord(id="2", text="قال رسول الله صلى"),
        SearchRecord(id="3", text="قَالَ رَسُولُ اللَّهِ"),
        SearchRecord(id="4", text="قال رسول الله"),
    ]


def test_find_similar_ranks_and_filters() -> None:
    results = SimilarityEngine().find_similar("قال رسول الله", _corpus())

    assert [result.id for result in results] == ["3", "4", "2"]
    assert results[0].similarity == 1.0
    assert results[2].similarity == 0.75
    assert all(result.source == "user_search" for result in results)
    # The stored text is returned as it was recorded.
    assert results[0].text == "قَالَ رَسُولُ اللَّهِ"


def test_find_similar_top_k() -> None:
    results = SimilarityEngine().find_similar("قال رسول الله", _corpus(), top_k=1)
    assert [result.id for result in results] == ["3"]


def test_disjoint_texts_only_pass_a_zero_threshold() -> None:
    engine = SimilarityEngine()
    assert [r.id for r in engine.find_similar("hello world", _corpus(), threshold=0.01)] == []
    assert len(engine.find_similar("hello world", _corpus(), threshold=0.0)) == 4


def test_empty_corpus() -> None:
    assert SimilarityEngine().find_similar("قال", []) == []


@pytest.mark.parametrize("threshold", [-0.1, 1.5])
def test_invalid_threshold(threshold: float) -> None:
    with pytest.raises(InputValidationError):
        SimilarityEngine().find_similar("قال", _corpus(), threshold=threshold)


def test_invalid_top_k() -> None:
    with pytest.raises(InputValidationError):
        SimilarityEngine().find_similar("قال", _corpus(), top_k=0)
