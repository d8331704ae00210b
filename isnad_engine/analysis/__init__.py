from isnad_engine.analysis.confidence import aggregate
from isnad_engine.analysis.features import detect_language, extract_linguistic_features
from isnad_engine.analysis.structure import StructuralAnalyzer

__all__ = ["StructuralAnalyzer", "aggregate", "detect_language", "extract_linguistic_features"]
