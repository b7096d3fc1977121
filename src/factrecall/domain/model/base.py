"""Base building blocks shared by persisted records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(eq=False, kw_only=True)
class Record:
    """Internal identity exists immediately in the domain.

    Identifiers are assigned at construction so that a write-set can reference
    rows which have not been inserted yet.
    """

    id: UUID = field(default_factory=new_id)
