"""Hybrid search: ranking, hysteresis, and the suggestion engine."""

from versecue.search.engine import SuggestionEngine
from versecue.search.hysteresis import stabilize
from versecue.search.ranking import (
    cosine_similarity,
    dense_top,
    reciprocal_rank_fusion,
    rerank,
)

__all__ = [
    "SuggestionEngine",
    "cosine_similarity",
    "dense_top",
    "reciprocal_rank_fusion",
    "rerank",
    "stabilize",
]
