"""Multi-concept ranking: facts relevant to every concept at once."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from factrecall.domain.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from .similarity import ScoredFact

MIN_CONCEPTS = 2
MAX_CONCEPTS = 5


@dataclass(frozen=True, slots=True)
class ConceptMatch:
    fact_id: UUID
    similarity: float
    concept_similarities: tuple[float, ...]


def validate_concepts(concepts: Sequence[str]) -> list[str]:
    cleaned = [concept.strip() for concept in concepts]
    if not MIN_CONCEPTS <= len(cleaned) <= MAX_CONCEPTS:
        raise ValidationError(
            f"Expected between {MIN_CONCEPTS} and {MAX_CONCEPTS} concepts, got {len(cleaned)}"
        )
    if any(not concept for concept in cleaned):
        raise ValidationError("Concepts must not be blank")
    return cleaned


def rank_by_concepts(per_concept: Sequence[Sequence[ScoredFact]]) -> list[ConceptMatch]:
    """Intersect per-concept hits and rank by mean similarity.

    A fact is kept only when it appears in the hits of every concept. Ties
    keep the order in which facts were first seen across the hit lists.
    """

    if not per_concept:
        return []

    scores: dict[UUID, list[float | None]] = {}
    for index, hits in enumerate(per_concept):
        for hit in hits:
            slots = scores.setdefault(hit.fact_id, [None] * len(per_concept))
            if slots[index] is None:
                slots[index] = hit.similarity

    matches: list[ConceptMatch] = []
    for fact_id, slots in scores.items():
        if any(score is None for score in slots):
            continue
        similarities = tuple(score for score in slots if score is not None)
        matches.append(
            ConceptMatch(
                fact_id=fact_id,
                similarity=sum(similarities) / len(similarities),
                concept_similarities=similarities,
            )
        )
    matches.sort(key=lambda match: -match.similarity)
    return matches
