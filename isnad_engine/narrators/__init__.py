"""Narrator directory access."""

from isnad_engine.narrators.directory import NarratorDirectory
from isnad_engine.narrators.resolver import NarratorResolver

__all__ = ["NarratorDirectory", "NarratorResolver"]
