from isnad_engine.preprocessing.normalize import ArabicNormalizer, normalize

__all__ = ["ArabicNormalizer", "normalize"]
