"""Export analysis results as JSON or CSV."""

from __future__ import annotations

import json
from typing import Iterable, List

import pandas as pd

from isnad_engine.errors import InputValidationError
from isnad_engine.models import HadithTextAnalysis

EXPORT_FORMATS = ("json", "csv")
CSV_COLUMNS = [
    "Text",
    "Word Count",
    "Arabic Words",
    "English Words",
    "Narrator Count",
    "Confidence",
    "Has Isnad",
    "Structure Score",
    "Timestamp",
]
TEXT_PREVIEW_LENGTH = 100


def _csv_rows(analyses: List[HadithTextAnalysis]) -> List[dict]:
    rows = []
    for analysis in analyses:
        text = analysis.original_text
        if len(text) > TEXT_PREVIEW_LENGTH:
            text = text[:TEXT_PREVIEW_LENGTH] + "..."
        features = analysis.linguistic_features
        rows.append(
            {
                "Text": text,
                "Word Count": features.word_count,
                "Arabic Words": features.arabic_word_count,
                "English Words": features.english_word_count,
                "Narrator Count": analysis.narrator_chain.chain_length,
                "Confidence": analysis.confidence,
                "Has Isnad": analysis.structural_analysis.has_isnad,
                "Structure Score": analysis.structural_analysis.structure_score,
                "Timestamp": analysis.timestamp.isoformat(),
            }
        )
    return rows


def export_analyses(analyses: Iterable[HadithTextAnalysis], fmt: str = "json") -> str:
    items = list(analyses)
    fmt = (fmt or "").lower()

    if fmt == "json":
        return json.dumps([item.model_dump(mode="json") for item in items], ensure_ascii=False, indent=2)
    if fmt == "csv":
        frame = pd.DataFrame(_csv_rows(items), columns=CSV_COLUMNS)
        return frame.to_csv(index=False)

    raise InputValidationError(
        f"Unsupported export format {fmt!r}; expected one of {', '.join(EXPORT_FORMATS)}."
    )
