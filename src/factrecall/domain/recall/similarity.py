"""Vector similarity over stored fact embeddings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from factrecall.domain.model import EmbeddingCandidate


@dataclass(frozen=True, slots=True)
class ScoredFact:
    fact_id: UUID
    similarity: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity clipped to ``[0, 1]``; zero vectors score 0."""

    left = np.asarray(a, dtype=np.float64)
    right = np.asarray(b, dtype=np.float64)
    if left.shape != right.shape:
        raise ValueError(f"Vector dimensions differ: {left.shape[0]} != {right.shape[0]}")
    denominator = float(np.linalg.norm(left) * np.linalg.norm(right))
    if denominator == 0.0:
        return 0.0
    return float(np.clip(np.dot(left, right) / denominator, 0.0, 1.0))


def top_k(
    query: Sequence[float],
    candidates: Sequence[EmbeddingCandidate],
    k: int,
    *,
    floor: float = 0.0,
) -> list[ScoredFact]:
    """Best ``k`` candidates scoring strictly above ``floor``, highest first.

    Candidates whose vector length differs from the query are skipped. Equal
    scores keep the order of ``candidates``.
    """

    if k <= 0 or not candidates:
        return []
    query_vector = np.asarray(query, dtype=np.float64)
    query_norm = float(np.linalg.norm(query_vector))
    if query_norm == 0.0:
        return []

    usable = [c for c in candidates if len(c.vector) == query_vector.shape[0]]
    if not usable:
        return []
    matrix = np.asarray([c.vector for c in usable], dtype=np.float64)
    norms = np.linalg.norm(matrix, axis=1) * query_norm
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(norms > 0.0, matrix @ query_vector / norms, 0.0)
    scores = np.clip(scores, 0.0, 1.0)

    order = np.argsort(-scores, kind="stable")
    ranked: list[ScoredFact] = []
    for index in order:
        score = float(scores[index])
        if score <= floor:
            break
        ranked.append(ScoredFact(fact_id=usable[index].fact_id, similarity=score))
        if len(ranked) >= k:
            break
    return ranked
