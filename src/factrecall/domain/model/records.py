"""Read models returned by store queries.

These are flat, immutable projections (a fact joined with its subject name, a
provenance row joined with its content item) and are never written back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from factrecall.domain.model.enums import (
        ConflictStatus,
        FactScope,
        FactStatus,
        Polarity,
        Strength,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class FactRecord:
    id: UUID
    subject_name: str | None
    subject_type: str | None
    predicate: str
    object_literal: str | None
    polarity: Polarity
    status: FactStatus
    confidence: float
    scope: FactScope
    project_path: str | None
    valid_from: datetime | None
    valid_to: datetime | None
    created_at: datetime

    @property
    def signature(self) -> tuple[str | None, str, str | None]:
        return (self.subject_name, self.predicate, self.object_literal)


@dataclass(frozen=True, slots=True, kw_only=True)
class Receipt:
    id: UUID
    fact_id: UUID
    content_item_id: UUID | None
    quote: str | None
    strength: Strength
    session_id: str | None = None
    occurred_at: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictRecord:
    id: UUID
    fact_a_id: UUID
    fact_b_id: UUID
    status: ConflictStatus
    notes: str | None
    detected_at: datetime
    resolved_at: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class EmbeddingCandidate:
    fact_id: UUID
    vector: tuple[float, ...]
