"""Hadith isnad engine: narrator extraction, structure scoring and bulk analysis of hadith texts."""

__version__ = "1.0.0"
