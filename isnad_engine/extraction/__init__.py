"""Narrator name candidates from isnad marker phrases."""

from isnad_engine.extraction.patterns import NarratorPatternExtractor, build_narrator_chain

__all__ = ["NarratorPatternExtractor", "build_narrator_chain"]
