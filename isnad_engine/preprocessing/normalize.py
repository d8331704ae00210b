"""Arabic text normalization utilities for preprocessing.

This module exposes ``ArabicNormalizer`` which applies a consistent cleaning
pipeline for Arabic text before narrator extraction, structure scoring, or
similarity matching. All downstream matching works on its output, so marker
lists elsewhere are stored in normalized form.
"""

from __future__ import annotations

import re
from typing import Optional


class ArabicNormalizer:
    """Normalize Arabic text into a canonical, diacritic-insensitive form.

    The class provides small focused methods for each normalization rule and a
    ``normalize`` orchestrator that applies them in a stable order.
    """

    _tashkeel_re = re.compile(r"[\u0610-\u061A\u064B-\u065F\u0670\u06D6-\u06ED]")
    _tatweel_re = re.compile(r"\u0640")
    _alif_re = re.compile(r"[\u0622\u0623\u0625\u0671]")
    _taa_marbuta_re = re.compile(r"\u0629")
    _yaa_re = re.compile(r"[\u0649\u06CC]")
    _waw_hamza_re = re.compile(r"\u0624")
    _yaa_hamza_re = re.compile(r"\u0626")
    _whitespace_re = re.compile(r"\s+")

    def normalize(self, text: Optional[str]) -> str:
        """Run the full normalization pipeline in the required order.

        Marks are stripped before letters are folded so that a hamza written
        as a combining mark never survives as a separate character. The
        result is idempotent: normalizing it again returns it unchanged.
        """

        if not text:
            return ""

        text = self.remove_tashkeel(text)
        text = self.remove_tatweel(text)
        text = self.normalize_alif(text)
        text = self.normalize_taa_marbuta(text)
        text = self.normalize_yaa(text)
        text = self.normalize_hamza_carriers(text)
        text = self.remove_extra_whitespace(text)
        return text

    def remove_tashkeel(self, text: str) -> str:
        """Remove Arabic diacritics (tashkeel/harakat) and Quranic marks.

        This removes combining marks in ``\\u0610-\\u061A``,
        ``\\u064B-\\u065F``, ``\\u0670`` and ``\\u06D6-\\u06ED``.
        """

        return self._tashkeel_re.sub("", text)

    def remove_tatweel(self, text: str) -> str:
        """Remove Tatweel/Kashida elongation marks (U+0640)."""

        return self._tatweel_re.sub("", text)

    def normalize_alif(self, text: str) -> str:
        """Normalize Alif variants to bare Alif.

        Replaces ``أ`` (U+0623), ``إ`` (U+0625), ``آ`` (U+0622) and ``ٱ``
        (U+0671) with ``ا``.
        """

        return self._alif_re.sub("ا", text)

    def normalize_taa_marbuta(self, text: str) -> str:
        """Replace ``ة`` (U+0629) with ``ه`` (U+0647)."""

        return self._taa_marbuta_re.sub("ه", text)

    def normalize_yaa(self, text: str) -> str:
        """Fold Alif Maqsura ``ى`` and Farsi Yeh ``ی`` into ``ي`` (U+064A)."""

        return self._yaa_re.sub("ي", text)

    def normalize_hamza_carriers(self, text: str) -> str:
        """Fold ``ؤ`` to ``و`` and ``ئ`` to ``ي``."""

        text = self._waw_hamza_re.sub("و", text)
        return self._yaa_hamza_re.sub("ي", text)

    def remove_extra_whitespace(self, text: str) -> str:
        """Collapse repeated whitespace and trim text boundaries."""

        return self._whitespace_re.sub(" ", text).strip()


_default_normalizer = ArabicNormalizer()


def normalize(text: Optional[str]) -> str:
    """Normalize ``text`` with a shared ``ArabicNormalizer`` instance."""

    return _default_normalizer.normalize(text)
