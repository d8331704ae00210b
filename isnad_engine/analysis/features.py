"""Surface-level linguistic features of a hadith text."""

from __future__ import annotations

import re

from isnad_engine.models import LinguisticFeatures

_ARABIC_WORD_RE = re.compile(r"[\u0600-\u06FF]+")
_ARABIC_CHAR_RE = re.compile(r"[\u0600-\u06FF]")
_LATIN_WORD_RE = re.compile(r"[a-zA-Z]+")
_LATIN_CHAR_RE = re.compile(r"[a-zA-Z]")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?؟]")
_TRADITIONAL_RE = re.compile(r"حدثنا|اخبرنا|عن|قال")
_NARRATOR_INDICATOR_RE = re.compile(r"ابو|بن|الحسن|الحسين")


def detect_language(text: str) -> str:
    arabic_chars = len(_ARABIC_CHAR_RE.findall(text))
    latin_chars = len(_LATIN_CHAR_RE.findall(text))
    total = arabic_chars + latin_chars
    if total == 0:
        return "mixed"

    ratio = arabic_chars / total
    if ratio > 0.7:
        return "arabic"
    if ratio < 0.3:
        return "english"
    return "mixed"


def text_complexity(text: str) -> float:
    """Average words per sentence scaled by 5 and capped at 100."""

    words = len(text.split())
    if words == 0:
        return 0.0
    sentences = max(len(_SENTENCE_SPLIT_RE.split(text)), 1)
    return round(min(words / sentences * 5, 100.0), 2)


def extract_linguistic_features(normalized_text: str) -> LinguisticFeatures:
    text = normalized_text or ""
    return LinguisticFeatures(
        length=len(text),
        word_count=len(text.split()),
        arabic_word_count=len(_ARABIC_WORD_RE.findall(text)),
        english_word_count=len(_LATIN_WORD_RE.findall(text)),
        has_traditional_markers=bool(_TRADITIONAL_RE.search(text)),
        has_narrator_indicators=bool(_NARRATOR_INDICATOR_RE.search(text)),
        text_complexity=text_complexity(text),
        language=detect_language(text),
    )
