"""Pure ordering and deduplication of recall results.

Every function here is deterministic: ties always fall back to input order
(Python's sort is stable), so identical inputs give identical output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from factrecall.domain.model import FactScope, Source

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from .results import RecallResult


def source_priority(result: RecallResult) -> int:
    """0 for project results, 1 for global ones.

    Results from a legacy single store are ranked by the scope of their fact.
    """

    if result.source == Source.LEGACY:
        return 0 if result.fact.scope == FactScope.PROJECT else 1
    return 0 if result.source == Source.PROJECT else 1


def dedupe_by_signature(results: Iterable[RecallResult]) -> list[RecallResult]:
    seen: set[tuple[str | None, str, str | None]] = set()
    unique: list[RecallResult] = []
    for result in results:
        if result.signature in seen:
            continue
        seen.add(result.signature)
        unique.append(result)
    return unique


def dedupe_and_sort(results: Iterable[RecallResult], limit: int) -> list[RecallResult]:
    """Lexical merge: first signature wins, then project before global, oldest first."""

    unique = dedupe_by_signature(results)
    unique.sort(key=lambda item: (source_priority(item), item.fact.created_at))
    return unique[:limit]


def _score(result: RecallResult) -> float:
    return result.similarity if result.similarity is not None else 0.0


def sort_by_similarity(results: Iterable[RecallResult]) -> list[RecallResult]:
    return sorted(results, key=lambda item: -_score(item))


def dedupe_by_fact_id(results: Iterable[RecallResult], limit: int) -> list[RecallResult]:
    """Keep the best scoring result per fact id, highest similarity first."""

    best: dict[UUID, RecallResult] = {}
    for result in results:
        current = best.get(result.fact_id)
        if current is None or _score(current) < _score(result):
            best[result.fact_id] = result
    return sort_by_similarity(best.values())[:limit]


def merge_search_results(
    vector_results: Sequence[RecallResult],
    text_results: Sequence[RecallResult],
    limit: int,
) -> list[RecallResult]:
    """Combine both search modes; a vector score always beats the text default."""

    combined: dict[UUID, RecallResult] = {result.fact_id: result for result in vector_results}
    for result in text_results:
        combined.setdefault(result.fact_id, result)
    return sort_by_similarity(combined.values())[:limit]


def sort_by_timestamp(results: Iterable[RecallResult], limit: int) -> list[RecallResult]:
    """Newest first; equal timestamps keep input order."""

    return sorted(results, key=lambda item: item.fact.created_at, reverse=True)[:limit]
