"""Recall: lexical, semantic and multi-concept queries over fact stores."""

from __future__ import annotations

from .backend import (
    Backend,
    DualBackend,
    SingleBackend,
    StoreTarget,
    candidate_writer,
    targets_for,
    writer_for,
)
from .concepts import MAX_CONCEPTS, MIN_CONCEPTS, ConceptMatch, rank_by_concepts
from .engine import RecallEngine, RecallSettings
from .indexing import fact_text, index_embeddings
from .results import (
    ConflictView,
    Explanation,
    ExplanationStatus,
    FoundExplanation,
    MissingExplanation,
    RecallResult,
)
from .similarity import ScoredFact, cosine_similarity, top_k

__all__ = [
    "MAX_CONCEPTS",
    "MIN_CONCEPTS",
    "Backend",
    "ConceptMatch",
    "ConflictView",
    "DualBackend",
    "Explanation",
    "ExplanationStatus",
    "FoundExplanation",
    "MissingExplanation",
    "RecallEngine",
    "RecallResult",
    "RecallSettings",
    "ScoredFact",
    "SingleBackend",
    "StoreTarget",
    "candidate_writer",
    "cosine_similarity",
    "fact_text",
    "index_embeddings",
    "rank_by_concepts",
    "targets_for",
    "top_k",
    "writer_for",
]
