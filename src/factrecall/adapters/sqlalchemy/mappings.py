"""SQLAlchemy mapping metadata for the fact store."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    DDL,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    column,
    event,
    orm,
    table,
)
from sqlalchemy.orm import configure_mappers

from factrecall.domain.model import (
    Conflict,
    ConflictStatus,
    ContentItem,
    Entity,
    Fact,
    FactLink,
    FactScope,
    FactStatus,
    LinkType,
    Polarity,
    Provenance,
    Strength,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class EmbeddingType(TypeDecorator[tuple[float, ...]]):
    """Fixed-length float vector stored as a JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: tuple[float, ...] | list[float] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps([float(component) for component in value])

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[float, ...] | None:
        _ = dialect
        if value is None:
            return None
        try:
            loaded = json.loads(value)
        except json.JSONDecodeError:
            log.warning("Ignoring unreadable embedding payload")
            return None
        if not isinstance(loaded, list):
            return None
        items = cast(list[Any], loaded)
        return tuple(float(item) for item in items if isinstance(item, int | float))


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Tables ----------------------------------------------------------------------

entity_table = Table(
    "entity",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("type", String, nullable=False),
    Column("canonical_name", String, nullable=False),
    Column("slug", String, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("type", "slug"),
)

content_item_table = Table(
    "content_item",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("source", String, nullable=False),
    Column("session_id", String, nullable=True),
    Column("occurred_at", UTCDateTime(), nullable=True),
    Column("text_hash", String(64), nullable=False),
    Column("byte_len", Integer, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Index(None, "text_hash"),
)

fact_table = Table(
    "fact",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("subject_entity_id", UUIDColumnType, ForeignKey("entity.id"), nullable=True),
    Column("predicate", String, nullable=False),
    Column("object_literal", String, nullable=True),
    Column("object_entity_id", UUIDColumnType, ForeignKey("entity.id"), nullable=True),
    Column("polarity", Enum(Polarity, native_enum=False), nullable=False),
    Column("confidence", Float, nullable=False),
    Column("status", Enum(FactStatus, native_enum=False), nullable=False),
    Column("scope", Enum(FactScope, native_enum=False), nullable=False),
    Column("project_path", String, nullable=True),
    Column("valid_from", UTCDateTime(), nullable=True),
    Column("valid_to", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("created_from", String, nullable=True),
    Column("embedding", EmbeddingType(), nullable=True),
    Index(None, "subject_entity_id", "predicate", "scope", "project_path"),
    Index(None, "created_at"),
    Index(None, "status"),
)

provenance_table = Table(
    "provenance",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("fact_id", UUIDColumnType, ForeignKey("fact.id", ondelete="CASCADE"), nullable=False),
    Column("content_item_id", UUIDColumnType, ForeignKey("content_item.id"), nullable=True),
    Column("quote", Text, nullable=True),
    Column("strength", Enum(Strength, native_enum=False), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Index(None, "fact_id"),
    Index(None, "content_item_id"),
)

fact_link_table = Table(
    "fact_link",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "from_fact_id", UUIDColumnType, ForeignKey("fact.id", ondelete="CASCADE"), nullable=False
    ),
    Column("to_fact_id", UUIDColumnType, ForeignKey("fact.id", ondelete="CASCADE"), nullable=False),
    Column("link_type", Enum(LinkType, native_enum=False), nullable=False),
    Index(None, "from_fact_id"),
    Index(None, "to_fact_id"),
)

conflict_table = Table(
    "conflict",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("fact_a_id", UUIDColumnType, ForeignKey("fact.id", ondelete="CASCADE"), nullable=False),
    Column("fact_b_id", UUIDColumnType, ForeignKey("fact.id", ondelete="CASCADE"), nullable=False),
    Column("status", Enum(ConflictStatus, native_enum=False), nullable=False),
    Column("notes", Text, nullable=True),
    Column("detected_at", UTCDateTime(), nullable=False),
    Column("resolved_at", UTCDateTime(), nullable=True),
    Index(None, "status"),
)

# Lexical index -----------------------------------------------------------------

# FTS5 virtual tables cannot be expressed as a Table, so the index is created by
# DDL and queried through a lightweight table clause.
content_fts = table("content_fts", column("content_item_id"), column("text"))

event.listen(
    mapper_registry.metadata,
    "after_create",
    DDL(
        "CREATE VIRTUAL TABLE IF NOT EXISTS content_fts USING fts5("
        "content_item_id UNINDEXED, text, tokenize='porter unicode61')"
    ).execute_if(dialect="sqlite"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Entity, entity_table)
    mapper_registry.map_imperatively(ContentItem, content_item_table)
    mapper_registry.map_imperatively(Fact, fact_table)
    mapper_registry.map_imperatively(Provenance, provenance_table)
    mapper_registry.map_imperatively(FactLink, fact_link_table)
    mapper_registry.map_imperatively(Conflict, conflict_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables (and the lexical index) for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
