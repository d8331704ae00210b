"""Rule-based narrator name extraction from isnad marker phrases."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Set, Tuple

from isnad_engine.models import NameCandidate, NarratorChainResult, NarratorKind

# (marker, base confidence, marker word is part of the name), highest authority first.
MARKER_CONFIDENCES: Tuple[Tuple[str, float, bool], ...] = (
    ("حدثنا", 0.9, False),
    ("اخبرنا", 0.9, False),
    ("حدثني", 0.85, False),
    ("اخبرني", 0.85, False),
    ("انبانا", 0.85, False),
    ("ابو", 0.8, True),
    ("بن", 0.75, True),
    ("قال", 0.7, False),
    ("عن", 0.6, False),
    ("سمعت", 0.6, False),
)

LINEAGE_FALLBACK_CONFIDENCE = 0.65
TOKEN_BONUS = 0.02
MAX_CONFIDENCE = 0.99
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 80

TRADITIONAL_MARKERS = ("حدثنا", "اخبرنا", "عن", "قال")

_DELIMITERS = "،؛;.:!?؟"
_CONJUNCTIONS = ("و", "ف")
_CHAIN_STOP_TOKENS = {
    "حدثنا",
    "حدثني",
    "اخبرنا",
    "اخبرني",
    "انبانا",
    "سمعت",
    "سمع",
    "عن",
    "قال",
    "قالت",
    "ان",
    "انه",
}
_LINEAGE_PARTICLES = "ابو|ابي|ابن|بن|بنت"
# One or more chained particles ("ابن ابي ليلي"); the name word itself is never a particle.
_LINEAGE_RE = re.compile(
    rf"(?<!\S)(?:(?:{_LINEAGE_PARTICLES})\s+)+(?!(?:{_LINEAGE_PARTICLES})(?!\S))[ء-ي]{{2,40}}"
)


class NarratorPatternExtractor:
    """
    Scans normalized hadith text for isnad marker phrases and emits the name
    spans that follow them, each with a per-marker confidence.
    """

    _companions = (
        "ابو بكر",
        "عمر",
        "عثمان",
        "علي",
        "ابو هريره",
        "انس",
        "عائشه",
        "عبد الله بن مسعود",
        "عبد الله بن عباس",
    )
    _scholars = ("الذهبي", "ابن حجر", "النووي", "العجلي", "البخاري", "مسلم")

    def __init__(self, markers: Iterable[Tuple[str, float, bool]] = MARKER_CONFIDENCES):
        self.markers = tuple(markers)
        self._marker_patterns = [
            (marker, confidence, keep_marker, self._compile_marker(marker))
            for marker, confidence, keep_marker in self.markers
        ]

    @staticmethod
    def _compile_marker(marker: str) -> re.Pattern[str]:
        # The capture sits inside a lookahead so that a later marker inside the
        # captured window is still visited as its own occurrence.
        prefixes = "".join(_CONJUNCTIONS)
        return re.compile(
            rf"(?<!\S)[{prefixes}]?(?P<marker>{re.escape(marker)})"
            rf"(?=\s+(?P<span>[^{re.escape(_DELIMITERS)}]{{2,60}}))"
        )

    def extract_candidates(self, normalized_text: str) -> List[NameCandidate]:
        """
        Main method. Returns unique name candidates in order of first
        discovery across marker passes, then the lineage fallback pass.
        """
        if not normalized_text:
            return []

        results: List[NameCandidate] = []
        seen: Set[str] = set()

        for marker, confidence, keep_marker, pattern in self._marker_patterns:
            for match in pattern.finditer(normalized_text):
                span = self._span_from_match(normalized_text, match, keep_marker)
                if span is None:
                    continue
                name, position = span
                if name in seen:
                    continue

                seen.add(name)
                token_count = len(name.split())
                adjusted = min(confidence + token_count * TOKEN_BONUS, MAX_CONFIDENCE)
                results.append(
                    NameCandidate(
                        name=name,
                        confidence=round(adjusted, 2),
                        position=position,
                        marker=marker,
                        kind=self.classify_narrator(name),
                    )
                )

        for match in _LINEAGE_RE.finditer(normalized_text):
            name = match.group(0).strip()
            if not self._acceptable(name) or name in seen:
                continue
            seen.add(name)
            results.append(
                NameCandidate(
                    name=name,
                    confidence=LINEAGE_FALLBACK_CONFIDENCE,
                    position=match.start(),
                    marker=None,
                    kind=self.classify_narrator(name),
                )
            )

        return results

    def classify_narrator(self, name: str) -> NarratorKind:
        if any(companion in name for companion in self._companions):
            return "companion"
        if any(scholar in name for scholar in self._scholars):
            return "scholar"
        tokens = name.split()
        if "ابن" in tokens or "بن" in tokens:
            return "narrator"
        return "uncertain"

    def _span_from_match(
        self,
        text: str,
        match: re.Match[str],
        keep_marker: bool,
    ) -> Optional[Tuple[str, int]]:
        raw = match.group("span")
        span_start = match.start("span")
        span_end = match.end("span")

        tokens = raw.split()
        # The 60-char window may stop inside a word; drop that fragment.
        if span_end < len(text) and not text[span_end].isspace() and text[span_end] not in _DELIMITERS:
            if len(tokens) > 1 and not raw[-1].isspace():
                tokens = tokens[:-1]

        kept: List[str] = []
        for token in tokens:
            if self._is_chain_stop(token):
                break
            kept.append(token)

        if not kept:
            return None

        if keep_marker:
            kept.insert(0, match.group("marker"))
            position = match.start("marker")
        else:
            position = span_start + (len(raw) - len(raw.lstrip()))

        name = " ".join(kept).strip()
        if not self._acceptable(name):
            return None
        return name, position

    @staticmethod
    def _is_chain_stop(token: str) -> bool:
        if token in _CHAIN_STOP_TOKENS:
            return True
        return len(token) > 2 and token[0] in _CONJUNCTIONS and token[1:] in _CHAIN_STOP_TOKENS

    @staticmethod
    def _acceptable(name: str) -> bool:
        return MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH


def build_narrator_chain(
    candidates: Iterable[NameCandidate],
    normalized_text: str,
) -> NarratorChainResult:
    """Summarize extracted candidates into a chain result with a 0-100 score."""

    names: List[str] = []
    for candidate in candidates:
        if candidate.name not in names:
            names.append(candidate.name)

    text = normalized_text or ""
    return NarratorChainResult(
        extracted_names=names,
        chain_length=len(names),
        has_traditional_markers=any(marker in text for marker in TRADITIONAL_MARKERS),
        confidence=min(len(names) * 20, 100),
    )
