"""Combine narrator-chain and structural scores into one percentage."""

from __future__ import annotations

import math

from isnad_engine.models import NarratorChainResult, StructuralAnalysis

CHAIN_WEIGHT = 0.4
STRUCTURE_WEIGHT = 0.6


def aggregate(chain: NarratorChainResult, structure: StructuralAnalysis) -> int:
    """Weighted 0-100 confidence, rounded half up."""

    raw = chain.confidence * CHAIN_WEIGHT + structure.structure_score * STRUCTURE_WEIGHT
    # Half-up rounding; float products such as 15 * 0.6 may land just below .5.
    rounded = int(math.floor(raw + 0.5 + 1e-9))
    return max(0, min(rounded, 100))
