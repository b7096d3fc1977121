"""Facts and the records hanging off them: provenance, supersession links, conflicts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from factrecall.domain.model.base import Record, utcnow
from factrecall.domain.model.enums import (
    ConflictStatus,
    FactScope,
    FactStatus,
    LinkType,
    Polarity,
    Strength,
)

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


def normalize_object(value: str | None) -> str:
    """Comparison form of an object literal."""

    return (value or "").strip().casefold()


@dataclass(eq=False, kw_only=True)
class Fact(Record):
    """A subject/predicate/object statement living in exactly one scope."""

    subject_entity_id: UUID | None
    predicate: str
    object_literal: str | None = None
    object_entity_id: UUID | None = None
    polarity: Polarity = Polarity.POSITIVE
    confidence: float = 1.0
    status: FactStatus = FactStatus.ACTIVE
    scope: FactScope = FactScope.PROJECT
    project_path: str | None = None
    valid_from: datetime = field(default_factory=utcnow)
    valid_to: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    created_from: str | None = None
    embedding: tuple[float, ...] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")
        if self.scope == FactScope.PROJECT and not self.project_path:
            raise ValueError("project scoped facts require a project_path")
        if self.scope == FactScope.GLOBAL and self.project_path is not None:
            raise ValueError("global facts must not carry a project_path")

    @property
    def is_active(self) -> bool:
        return self.status == FactStatus.ACTIVE

    def same_object(self, object_literal: str | None) -> bool:
        return normalize_object(self.object_literal) == normalize_object(object_literal)


@dataclass(eq=False, kw_only=True)
class Provenance(Record):
    """Evidence receipt linking a fact to the text it was derived from."""

    fact_id: UUID
    content_item_id: UUID | None = None
    quote: str | None = None
    strength: Strength = Strength.STATED
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class FactLink(Record):
    """Directed edge; ``from_fact_id`` supersedes ``to_fact_id``."""

    from_fact_id: UUID
    to_fact_id: UUID
    link_type: LinkType = LinkType.SUPERSEDES


@dataclass(eq=False, kw_only=True)
class Conflict(Record):
    fact_a_id: UUID
    fact_b_id: UUID
    status: ConflictStatus = ConflictStatus.OPEN
    notes: str | None = None
    detected_at: datetime = field(default_factory=utcnow)
    resolved_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.fact_a_id == self.fact_b_id:
            raise ValueError("A conflict needs two distinct facts")

    @property
    def is_open(self) -> bool:
        return self.status == ConflictStatus.OPEN

    def involves(self, fact_id: UUID) -> bool:
        return fact_id in (self.fact_a_id, self.fact_b_id)
