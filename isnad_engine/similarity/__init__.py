from isnad_engine.similarity.engine import SimilarityEngine, jaccard_similarity, validate_params

__all__ = ["SimilarityEngine", "jaccard_similarity", "validate_params"]
