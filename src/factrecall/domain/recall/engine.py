"""Recall over one or two fact stores.

Every per-store read runs inside a single unit of work, so a query never
observes a half-applied resolution. Reads never retry.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

from factrecall.domain.errors import ValidationError
from factrecall.domain.model import (
    NO_PROJECT,
    RecallScope,
    SearchMode,
    parse_recall_scope,
    parse_search_mode,
)

from .backend import targets_for
from .collect import collect_ordered_fact_ids
from .concepts import rank_by_concepts, validate_concepts
from .ranking import (
    dedupe_and_sort,
    dedupe_by_fact_id,
    dedupe_by_signature,
    merge_search_results,
    sort_by_similarity,
    sort_by_timestamp,
)
from .results import (
    ConflictView,
    FoundExplanation,
    MissingExplanation,
    RecallResult,
    build_results,
)
from .similarity import top_k

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from factrecall.domain.model import ScopeContext
    from factrecall.domain.ports import Embedder, FactStoreRepositories

    from .backend import Backend, StoreTarget
    from .results import Explanation

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RecallSettings:
    overfetch_factor: int = 3
    candidate_cap: int = 5000
    text_similarity: float = 0.5
    similarity_floor: float = 0.0
    concept_overfetch_factor: int = 5


@dataclass(slots=True)
class RecallEngine:
    backend: Backend
    embedder: Embedder | None = None
    settings: RecallSettings = field(default_factory=RecallSettings)

    # Lexical ---------------------------------------------------------------

    def query(
        self,
        text: str,
        *,
        limit: int = 10,
        scope: RecallScope | str = RecallScope.ALL,
        context: ScopeContext = NO_PROJECT,
    ) -> list[RecallResult]:
        """Facts supported by content matching ``text``.

        Per store this issues a fixed number of statements (lexical search,
        provenance by content, facts, receipts) whatever ``limit`` is.
        """

        _check_limit(limit)
        targets = targets_for(self.backend, parse_recall_scope(scope), context)
        results: list[RecallResult] = []
        for target in targets:
            with target.unit_of_work() as uow:
                results.extend(self._lexical(uow.repositories, target, text, limit))
        return dedupe_and_sort(results, limit)

    def _lexical(
        self,
        repositories: FactStoreRepositories,
        target: StoreTarget,
        text: str,
        limit: int,
        similarity: float | None = None,
    ) -> list[RecallResult]:
        content_ids = repositories.content.search(text, limit=limit * self.settings.overfetch_factor)
        if not content_ids:
            return []
        links = repositories.provenance.fact_ids_for_content(
            content_ids, scope_filter=target.scope_filter
        )
        fact_ids = collect_ordered_fact_ids(content_ids, links, limit)
        if not fact_ids:
            return []
        records = repositories.facts.records(fact_ids, scope_filter=target.scope_filter)
        receipts = repositories.provenance.receipts_for([record.id for record in records])
        similarities = dict.fromkeys(fact_ids, similarity) if similarity is not None else None
        return build_results(
            records,
            receipts,
            source=target.source,
            order=fact_ids,
            similarities=similarities,
        )

    # Semantic --------------------------------------------------------------

    def query_semantic(
        self,
        text: str,
        *,
        limit: int = 10,
        scope: RecallScope | str = RecallScope.ALL,
        mode: SearchMode | str = SearchMode.BOTH,
        context: ScopeContext = NO_PROJECT,
    ) -> list[RecallResult]:
        _check_limit(limit)
        search_mode = parse_search_mode(mode)
        targets = targets_for(self.backend, parse_recall_scope(scope), context)
        query_vector = self._embed(text) if search_mode != SearchMode.TEXT else None
        fetch = limit * self.settings.overfetch_factor

        results: list[RecallResult] = []
        for target in targets:
            with target.unit_of_work() as uow:
                repositories = uow.repositories
                vector_hits: list[RecallResult] = []
                text_hits: list[RecallResult] = []
                if query_vector is not None:
                    vector_hits = self._vector(repositories, target, query_vector, fetch)
                if search_mode != SearchMode.VECTOR:
                    text_hits = self._lexical(
                        repositories,
                        target,
                        text,
                        fetch,
                        similarity=self.settings.text_similarity,
                    )
            results.extend(merge_search_results(vector_hits, text_hits, fetch))
        return dedupe_by_fact_id(results, limit)

    def _vector(
        self,
        repositories: FactStoreRepositories,
        target: StoreTarget,
        query_vector: Sequence[float],
        fetch: int,
    ) -> list[RecallResult]:
        candidates = repositories.facts.embedding_candidates(
            limit=self.settings.candidate_cap, scope_filter=target.scope_filter
        )
        scored = top_k(query_vector, candidates, fetch, floor=self.settings.similarity_floor)
        if not scored:
            return []
        order = [hit.fact_id for hit in scored]
        records = repositories.facts.records(order)
        receipts = repositories.provenance.receipts_for(order)
        return build_results(
            records,
            receipts,
            source=target.source,
            order=order,
            similarities={hit.fact_id: hit.similarity for hit in scored},
        )

    def query_concepts(
        self,
        concepts: Sequence[str],
        *,
        limit: int = 10,
        scope: RecallScope | str = RecallScope.ALL,
        context: ScopeContext = NO_PROJECT,
    ) -> list[RecallResult]:
        """Facts relevant to every concept, ranked by mean similarity."""

        cleaned = validate_concepts(concepts)
        _check_limit(limit)
        targets = targets_for(self.backend, parse_recall_scope(scope), context)
        vectors = [self._embed(concept) for concept in cleaned]
        fetch = limit * self.settings.concept_overfetch_factor

        results: list[RecallResult] = []
        for target in targets:
            with target.unit_of_work() as uow:
                repositories = uow.repositories
                candidates = repositories.facts.embedding_candidates(
                    limit=self.settings.candidate_cap, scope_filter=target.scope_filter
                )
                per_concept = [
                    top_k(vector, candidates, fetch, floor=self.settings.similarity_floor)
                    for vector in vectors
                ]
                matches = rank_by_concepts(per_concept)[:limit]
                if not matches:
                    continue
                order = [match.fact_id for match in matches]
                records = repositories.facts.records(order)
                receipts = repositories.provenance.receipts_for(order)
            by_id = {match.fact_id: match for match in matches}
            results.extend(
                dataclasses.replace(
                    result,
                    concept_similarities=by_id[result.fact_id].concept_similarities,
                )
                for result in build_results(
                    records,
                    receipts,
                    source=target.source,
                    order=order,
                    similarities={match.fact_id: match.similarity for match in matches},
                )
            )
        return sort_by_similarity(results)[:limit]

    def _embed(self, text: str) -> list[float]:
        if self.embedder is None:
            raise ValidationError("Vector search needs an embedder; use text mode instead")
        if not text.strip():
            raise ValidationError("Search text must not be blank")
        return self.embedder.embed(text)

    # Inspection ------------------------------------------------------------

    def explain(
        self,
        fact_id: UUID | str,
        *,
        scope: RecallScope | str = RecallScope.ALL,
        context: ScopeContext = NO_PROJECT,
    ) -> Explanation:
        wanted = _parse_fact_id(fact_id)
        for target in targets_for(self.backend, parse_recall_scope(scope), context):
            with target.unit_of_work() as uow:
                repositories = uow.repositories
                records = repositories.facts.records([wanted], scope_filter=target.scope_filter)
                if not records:
                    continue
                receipts = repositories.provenance.receipts_for([wanted])
                return FoundExplanation(
                    fact=records[0],
                    receipts=tuple(receipts.get(wanted, ())),
                    supersedes=tuple(repositories.links.supersedes(wanted)),
                    superseded_by=tuple(repositories.links.superseded_by(wanted)),
                    conflicts=tuple(repositories.conflicts.for_fact(wanted)),
                    source=target.source,
                )
        log.debug("No store knows fact %s", wanted)
        return MissingExplanation(fact_id=wanted)

    def conflicts(
        self,
        *,
        scope: RecallScope | str = RecallScope.ALL,
        context: ScopeContext = NO_PROJECT,
    ) -> list[ConflictView]:
        views: list[ConflictView] = []
        for target in targets_for(self.backend, parse_recall_scope(scope), context):
            with target.unit_of_work() as uow:
                repositories = uow.repositories
                open_conflicts = repositories.conflicts.open_conflicts()
                if not open_conflicts:
                    continue
                fact_ids = list(
                    dict.fromkeys(
                        fact_id
                        for conflict in open_conflicts
                        for fact_id in (conflict.fact_a_id, conflict.fact_b_id)
                    )
                )
                records = {
                    record.id: record
                    for record in repositories.facts.records(
                        fact_ids, scope_filter=target.scope_filter
                    )
                }
            for conflict in open_conflicts:
                fact_a = records.get(conflict.fact_a_id)
                fact_b = records.get(conflict.fact_b_id)
                if fact_a is None or fact_b is None:
                    continue
                views.append(
                    ConflictView(conflict=conflict, fact_a=fact_a, fact_b=fact_b, source=target.source)
                )
        return views

    def changes(
        self,
        since: datetime,
        *,
        limit: int = 50,
        scope: RecallScope | str = RecallScope.ALL,
        context: ScopeContext = NO_PROJECT,
    ) -> list[RecallResult]:
        """Facts created at or after ``since``, newest first."""

        _check_limit(limit)
        results: list[RecallResult] = []
        for target in targets_for(self.backend, parse_recall_scope(scope), context):
            with target.unit_of_work() as uow:
                repositories = uow.repositories
                records = repositories.facts.changed_since(
                    since, limit=limit, scope_filter=target.scope_filter
                )
                if not records:
                    continue
                receipts = repositories.provenance.receipts_for([record.id for record in records])
            results.extend(build_results(records, receipts, source=target.source))
        return sort_by_timestamp(dedupe_by_signature(results), limit)


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValidationError(f"limit must be at least 1, got {limit}")


def _parse_fact_id(value: UUID | str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"Invalid fact id {value!r}") from exc
