"""Heuristic scoring of how much a text looks like a hadith."""

from __future__ import annotations

import re
from typing import Dict, Iterable, Tuple

from isnad_engine.models import StructuralAnalysis
from isnad_engine.preprocessing.normalize import ArabicNormalizer

_LINEAGE_WORD_RE = re.compile(r"(?<!\S)(?:بن|ابن|ابو|ابي|بنت)(?!\S)")


class StructuralAnalyzer:
    """
    Scores normalized text for isnad markers, traditional formulas and length.
    The weights are a scoring policy; override ``weights`` to tune them.
    """

    weights: Dict[str, int] = {
        "isnad": 30,
        "lineage": 20,
        "qala": 15,
        "formula": 25,
        "long_text": 10,
    }
    matn_min_length = 50
    long_text_length = 100

    def __init__(
        self,
        transmission_verbs: Iterable[str] = ("حدثنا", "أخبرنا", "حدثني", "أخبرني", "أنبأنا"),
        formulas: Iterable[str] = ("قال رسول الله", "صلى الله عليه وسلم", "رضي الله عنه"),
    ):
        normalizer = ArabicNormalizer()
        # Inputs arrive normalized, so the marker lists are normalized once here.
        self.transmission_verbs: Tuple[str, ...] = tuple(
            normalizer.normalize(verb) for verb in transmission_verbs
        )
        self.formulas: Tuple[str, ...] = tuple(
            normalizer.normalize(formula) for formula in formulas
        )
        self._qala = normalizer.normalize("قال")

    def analyze_structure(self, normalized_text: str) -> StructuralAnalysis:
        text = normalized_text or ""
        has_isnad = any(verb in text for verb in self.transmission_verbs)
        traditional_formula = any(formula in text for formula in self.formulas)

        score = 0
        if has_isnad:
            score += self.weights["isnad"]
        if _LINEAGE_WORD_RE.search(text):
            score += self.weights["lineage"]
        if self._qala in text:
            score += self.weights["qala"]
        if traditional_formula:
            score += self.weights["formula"]
        if len(text) > self.long_text_length:
            score += self.weights["long_text"]

        return StructuralAnalysis(
            has_isnad=has_isnad,
            has_matn=len(text) > self.matn_min_length,
            structure_score=max(0, min(score, 100)),
            traditional_formula=traditional_formula,
        )
