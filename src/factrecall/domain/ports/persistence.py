"""Ports for persisting facts and querying a fact store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from factrecall.domain.model import Conflict, Entity, Fact, FactLink, Provenance

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from factrecall.domain.model import (
        ConflictRecord,
        ContentItem,
        EmbeddingCandidate,
        FactRecord,
        FactStatus,
        Receipt,
        ScopeFilter,
    )
    from factrecall.domain.resolution.plan import Slot


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent record."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class EntityRepository(Repository[Entity], Protocol):
    def get(self, entity_id: UUID) -> Entity | None: ...

    def find_or_create(self, *, type: str, canonical_name: str) -> Entity: ...  # noqa: A002


@runtime_checkable
class ContentRepository(Protocol):
    """Content items and the lexical index over their text."""

    def add(self, item: ContentItem, text: str) -> None: ...

    def search(self, query: str, *, limit: int) -> list[UUID]:
        """Return content item ids ordered by lexical rank, best first."""
        ...


@runtime_checkable
class FactRepository(Repository[Fact], Protocol):
    def get(self, fact_id: UUID) -> Fact | None: ...

    def slot_facts(self, slot: Slot) -> list[Fact]:
        """Active, disputed and proposed facts occupying ``slot``."""
        ...

    def set_status(
        self, fact_id: UUID, status: FactStatus, *, valid_to: datetime | None = None
    ) -> None: ...

    def records(
        self, fact_ids: Sequence[UUID], *, scope_filter: ScopeFilter | None = None
    ) -> list[FactRecord]: ...

    def embedding_candidates(
        self, *, limit: int, scope_filter: ScopeFilter | None = None
    ) -> list[EmbeddingCandidate]: ...

    def missing_embeddings(self, *, limit: int) -> list[FactRecord]: ...

    def set_embedding(self, fact_id: UUID, vector: Sequence[float]) -> None: ...

    def clear_embeddings(self) -> int: ...

    def changed_since(
        self, since: datetime, *, limit: int, scope_filter: ScopeFilter | None = None
    ) -> list[FactRecord]: ...


@runtime_checkable
class ProvenanceRepository(Repository[Provenance], Protocol):
    def fact_ids_for_content(
        self, content_item_ids: Sequence[UUID], *, scope_filter: ScopeFilter | None = None
    ) -> list[tuple[UUID, UUID]]:
        """Return ``(content_item_id, fact_id)`` pairs for the given content items.

        With a ``scope_filter`` only facts inside that scope are paired.
        """
        ...

    def receipts_for(self, fact_ids: Sequence[UUID]) -> dict[UUID, list[Receipt]]: ...


@runtime_checkable
class LinkRepository(Repository[FactLink], Protocol):
    def supersedes(self, fact_id: UUID) -> list[UUID]: ...

    def superseded_by(self, fact_id: UUID) -> list[UUID]: ...


@runtime_checkable
class ConflictRepository(Repository[Conflict], Protocol):
    def open_involving(self, fact_ids: Sequence[UUID]) -> list[Conflict]: ...

    def for_fact(self, fact_id: UUID) -> list[ConflictRecord]: ...

    def open_conflicts(self) -> list[ConflictRecord]: ...
