"""Repository implementations backed by SQLAlchemy sessions.

Writes go through the ORM so they join the session's transaction. Read models
are loaded with Core selects so each batch costs exactly one statement.
"""

from __future__ import annotations

import re
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, insert, or_, select, text, update

from factrecall.adapters.sqlalchemy.mappings import (
    conflict_table,
    content_fts,
    content_item_table,
    entity_table,
    fact_link_table,
    fact_table,
    provenance_table,
)
from factrecall.domain.model import (
    Conflict,
    ConflictRecord,
    ConflictStatus,
    EmbeddingCandidate,
    Entity,
    Fact,
    FactRecord,
    FactScope,
    FactStatus,
    LinkType,
    Receipt,
    slugify,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy.orm import Session

    from factrecall.domain.model import ContentItem, FactLink, Provenance, ScopeFilter
    from factrecall.domain.resolution.plan import Slot

_SEARCH_TOKEN = re.compile(r"\w+", re.UNICODE)

_SEARCH_SQL = text(
    "SELECT content_item_id FROM content_fts WHERE content_fts MATCH :query "
    "ORDER BY rank LIMIT :limit"
)

_subject = entity_table.alias("subject")

_RECORD_COLUMNS = (
    fact_table.c.id,
    _subject.c.canonical_name.label("subject_name"),
    _subject.c.type.label("subject_type"),
    fact_table.c.predicate,
    fact_table.c.object_literal,
    fact_table.c.polarity,
    fact_table.c.status,
    fact_table.c.confidence,
    fact_table.c.scope,
    fact_table.c.project_path,
    fact_table.c.valid_from,
    fact_table.c.valid_to,
    fact_table.c.created_at,
)


def build_match_query(query: str) -> str | None:
    """Turn free text into an FTS5 expression of quoted, OR-ed terms.

    >>> build_match_query('auth "JWT" tokens?')
    '"auth" OR "jwt" OR "tokens"'
    """

    terms = list(dict.fromkeys(token.lower() for token in _SEARCH_TOKEN.findall(query)))
    if not terms:
        return None
    return " OR ".join(f'"{term}"' for term in terms)


def _records_select() -> Select[Any]:
    return select(*_RECORD_COLUMNS).select_from(
        fact_table.outerjoin(_subject, fact_table.c.subject_entity_id == _subject.c.id)
    )


def _apply_scope_filter(stmt: Select[Any], scope_filter: ScopeFilter | None) -> Select[Any]:
    if scope_filter is None:
        return stmt
    if scope_filter.scope == FactScope.GLOBAL:
        return stmt.where(fact_table.c.scope == FactScope.GLOBAL)
    return stmt.where(fact_table.c.scope == FactScope.PROJECT).where(
        fact_table.c.project_path == scope_filter.project_path
    )


def _to_record(row: Any) -> FactRecord:
    return FactRecord(**row._mapping)  # noqa: SLF001


class SqlAlchemyEntityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Entity) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> Entity | None:
        return self.session.get(Entity, entity_id)

    def find_or_create(self, *, type: str, canonical_name: str) -> Entity:  # noqa: A002
        name = canonical_name.strip()
        stmt = (
            select(Entity)
            .where(entity_table.c.type == type)
            .where(entity_table.c.slug == slugify(name))
            .limit(1)
        )
        existing = self.session.execute(stmt).scalar_one_or_none()
        if existing is not None:
            return existing
        entity = Entity(type=type, canonical_name=name)
        self.session.add(entity)
        return entity


class SqlAlchemyContentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, item: ContentItem, text: str) -> None:
        self.session.add(item)
        self.session.execute(insert(content_fts).values(content_item_id=item.id.hex, text=text))

    def search(self, query: str, *, limit: int) -> list[uuid.UUID]:
        match = build_match_query(query)
        if match is None or limit <= 0:
            return []
        rows = self.session.execute(_SEARCH_SQL, {"query": match, "limit": limit})
        return [uuid.UUID(str(value)) for (value,) in rows]


class SqlAlchemyFactRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Fact) -> None:
        self.session.add(entity)

    def get(self, fact_id: uuid.UUID) -> Fact | None:
        return self.session.get(Fact, fact_id)

    def slot_facts(self, slot: Slot) -> list[Fact]:
        stmt = (
            select(Fact)
            .where(fact_table.c.subject_entity_id == slot.subject_entity_id)
            .where(fact_table.c.predicate == slot.predicate)
            .where(fact_table.c.scope == slot.scope)
            .where(fact_table.c.project_path == slot.project_path)
            .where(
                fact_table.c.status.in_(
                    (FactStatus.ACTIVE, FactStatus.DISPUTED, FactStatus.PROPOSED)
                )
            )
            .order_by(fact_table.c.created_at, fact_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def set_status(
        self, fact_id: uuid.UUID, status: FactStatus, *, valid_to: datetime | None = None
    ) -> None:
        fact = self.session.get(Fact, fact_id)
        if fact is None:
            raise LookupError(f"Fact {fact_id} does not exist")
        fact.status = status
        if valid_to is not None:
            fact.valid_to = valid_to

    def records(
        self, fact_ids: Sequence[uuid.UUID], *, scope_filter: ScopeFilter | None = None
    ) -> list[FactRecord]:
        if not fact_ids:
            return []
        stmt = _apply_scope_filter(
            _records_select().where(fact_table.c.id.in_(list(fact_ids))), scope_filter
        )
        return [_to_record(row) for row in self.session.execute(stmt)]

    def embedding_candidates(
        self, *, limit: int, scope_filter: ScopeFilter | None = None
    ) -> list[EmbeddingCandidate]:
        stmt = (
            select(fact_table.c.id, fact_table.c.embedding)
            .where(fact_table.c.status == FactStatus.ACTIVE)
            .where(fact_table.c.embedding.is_not(None))
            .order_by(fact_table.c.created_at.desc(), fact_table.c.id)
            .limit(limit)
        )
        stmt = _apply_scope_filter(stmt, scope_filter)
        return [
            EmbeddingCandidate(fact_id=fact_id, vector=vector)
            for fact_id, vector in self.session.execute(stmt)
            if vector
        ]

    def missing_embeddings(self, *, limit: int) -> list[FactRecord]:
        stmt = (
            _records_select()
            .where(fact_table.c.status == FactStatus.ACTIVE)
            .where(fact_table.c.embedding.is_(None))
            .order_by(fact_table.c.created_at, fact_table.c.id)
            .limit(limit)
        )
        return [_to_record(row) for row in self.session.execute(stmt)]

    def set_embedding(self, fact_id: uuid.UUID, vector: Sequence[float]) -> None:
        self.session.execute(
            update(fact_table).where(fact_table.c.id == fact_id).values(embedding=tuple(vector))
        )

    def clear_embeddings(self) -> int:
        result = self.session.execute(
            update(fact_table).where(fact_table.c.embedding.is_not(None)).values(embedding=None)
        )
        return int(getattr(result, "rowcount", 0) or 0)

    def changed_since(
        self, since: datetime, *, limit: int, scope_filter: ScopeFilter | None = None
    ) -> list[FactRecord]:
        stmt = (
            _records_select()
            .where(fact_table.c.created_at >= since)
            .order_by(fact_table.c.created_at.desc(), fact_table.c.id)
            .limit(limit)
        )
        stmt = _apply_scope_filter(stmt, scope_filter)
        return [_to_record(row) for row in self.session.execute(stmt)]


class SqlAlchemyProvenanceRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Provenance) -> None:
        self.session.add(entity)

    def fact_ids_for_content(
        self,
        content_item_ids: Sequence[uuid.UUID],
        *,
        scope_filter: ScopeFilter | None = None,
    ) -> list[tuple[uuid.UUID, uuid.UUID]]:
        if not content_item_ids:
            return []
        stmt = (
            select(provenance_table.c.content_item_id, provenance_table.c.fact_id)
            .select_from(
                provenance_table.join(fact_table, provenance_table.c.fact_id == fact_table.c.id)
            )
            .where(provenance_table.c.content_item_id.in_(list(content_item_ids)))
            .order_by(provenance_table.c.created_at, provenance_table.c.id)
        )
        stmt = _apply_scope_filter(stmt, scope_filter)
        return [(content_id, fact_id) for content_id, fact_id in self.session.execute(stmt)]


    def receipts_for(self, fact_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, list[Receipt]]:
        if not fact_ids:
            return {}
        stmt = (
            select(
                provenance_table.c.id,
                provenance_table.c.fact_id,
                provenance_table.c.content_item_id,
                provenance_table.c.quote,
                provenance_table.c.strength,
                content_item_table.c.session_id,
                content_item_table.c.occurred_at,
            )
            .select_from(
                provenance_table.outerjoin(
                    content_item_table,
                    provenance_table.c.content_item_id == content_item_table.c.id,
                )
            )
            .where(provenance_table.c.fact_id.in_(list(fact_ids)))
            .order_by(provenance_table.c.created_at, provenance_table.c.id)
        )
        receipts: dict[uuid.UUID, list[Receipt]] = {}
        for row in self.session.execute(stmt):
            receipt = Receipt(**row._mapping)  # noqa: SLF001
            receipts.setdefault(receipt.fact_id, []).append(receipt)
        return receipts


class SqlAlchemyLinkRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: FactLink) -> None:
        self.session.add(entity)

    def supersedes(self, fact_id: uuid.UUID) -> list[uuid.UUID]:
        stmt = (
            select(fact_link_table.c.to_fact_id)
            .where(fact_link_table.c.from_fact_id == fact_id)
            .where(fact_link_table.c.link_type == LinkType.SUPERSEDES)
        )
        return list(self.session.execute(stmt).scalars())

    def superseded_by(self, fact_id: uuid.UUID) -> list[uuid.UUID]:
        stmt = (
            select(fact_link_table.c.from_fact_id)
            .where(fact_link_table.c.to_fact_id == fact_id)
            .where(fact_link_table.c.link_type == LinkType.SUPERSEDES)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyConflictRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Conflict) -> None:
        self.session.add(entity)

    def open_involving(self, fact_ids: Sequence[uuid.UUID]) -> list[Conflict]:
        if not fact_ids:
            return []
        ids = list(fact_ids)
        stmt = (
            select(Conflict)
            .where(conflict_table.c.status == ConflictStatus.OPEN)
            .where(or_(conflict_table.c.fact_a_id.in_(ids), conflict_table.c.fact_b_id.in_(ids)))
            .order_by(conflict_table.c.detected_at, conflict_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def for_fact(self, fact_id: uuid.UUID) -> list[ConflictRecord]:
        stmt = (
            select(conflict_table)
            .where(or_(conflict_table.c.fact_a_id == fact_id, conflict_table.c.fact_b_id == fact_id))
            .order_by(conflict_table.c.detected_at, conflict_table.c.id)
        )
        return [ConflictRecord(**row._mapping) for row in self.session.execute(stmt)]  # noqa: SLF001

    def open_conflicts(self) -> list[ConflictRecord]:
        stmt = (
            select(conflict_table)
            .where(conflict_table.c.status == ConflictStatus.OPEN)
            .order_by(conflict_table.c.detected_at, conflict_table.c.id)
        )
        return [ConflictRecord(**row._mapping) for row in self.session.execute(stmt)]  # noqa: SLF001
