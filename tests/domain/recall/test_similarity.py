from __future__ import annotations

from uuid import uuid4

import pytest

from factrecall.domain.model import EmbeddingCandidate
from factrecall.domain.recall import cosine_similarity, top_k


def _candidate(*vector: float) -> EmbeddingCandidate:
    return EmbeddingCandidate(fact_id=uuid4(), vector=tuple(vector))


def test_cosine_similarity_bounds() -> None:
    assert cosine_similarity([1.0, 0.0], [2.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0


def test_cosine_similarity_rejects_mismatched_dimensions() -> None:
    with pytest.raises(ValueError, match="dimensions"):
        cosine_similarity([1.0], [1.0, 0.0])


def test_top_k_ranks_and_limits() -> None:
    exact = _candidate(1.0, 0.0)
    close = _candidate(1.0, 1.0)
    orthogonal = _candidate(0.0, 1.0)

    ranked = top_k([1.0, 0.0], [orthogonal, close, exact], k=2)

    assert [hit.fact_id for hit in ranked] == [exact.fact_id, close.fact_id]
    assert ranked[0].similarity == pytest.approx(1.0)


def test_top_k_drops_scores_at_or_below_the_floor() -> None:
    close = _candidate(1.0, 1.0)
    orthogonal = _candidate(0.0, 1.0)

    assert top_k([1.0, 0.0], [close, orthogonal], k=5) == top_k([1.0, 0.0], [close], k=5)
    assert top_k([1.0, 0.0], [close], k=5, floor=0.9) == []


def test_top_k_skips_other_dimensions_and_zero_queries() -> None:
    wrong_size = _candidate(1.0, 0.0, 0.0)
    good = _candidate(1.0, 0.0)

    assert [hit.fact_id for hit in top_k([1.0, 0.0], [wrong_size, good], k=5)] == [good.fact_id]
    assert top_k([0.0, 0.0], [good], k=5) == []
    assert top_k([1.0, 0.0], [good], k=0) == []


def test_top_k_keeps_candidate_order_on_ties() -> None:
    first = _candidate(2.0, 0.0)
    second = _candidate(1.0, 0.0)

    ranked = top_k([1.0, 0.0], [first, second], k=2)

    assert [hit.fact_id for hit in ranked] == [first.fact_id, second.fact_id]
