"""Write-set types shared by the decision, apply and engine stages.

The write-set is the contract between the pure decision and the transactional
apply step: it names every row the resolution inserts or changes, with ids
assigned up front so links and conflicts can reference the new fact.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from factrecall.domain.model import FactStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from factrecall.domain.model import Conflict, Fact, FactLink, FactScope, Provenance


class ResolveAction(StrEnum):
    INSERT = "insert"
    EQUIVALENT = "equivalent"
    SUPERSEDE = "supersede"
    CONFLICT = "conflict"


@dataclass(frozen=True, slots=True, kw_only=True)
class Slot:
    """Key under which an exclusive predicate keeps its single active value."""

    subject_entity_id: UUID
    predicate: str
    scope: FactScope
    project_path: str | None

    def describe(self) -> str:
        where = self.project_path if self.project_path else self.scope.value
        return f"slot {self.predicate} of {self.subject_entity_id} in {where}"


@dataclass(frozen=True, slots=True)
class SlotState:
    """Facts currently occupying a slot, as read inside the resolve transaction."""

    facts: tuple[Fact, ...] = ()
    open_conflicts: tuple[Conflict, ...] = ()

    @property
    def active(self) -> tuple[Fact, ...]:
        return tuple(fact for fact in self.facts if fact.status == FactStatus.ACTIVE)

    @property
    def disputed(self) -> tuple[Fact, ...]:
        return tuple(fact for fact in self.facts if fact.status == FactStatus.DISPUTED)

    @property
    def proposed(self) -> tuple[Fact, ...]:
        return tuple(fact for fact in self.facts if fact.status == FactStatus.PROPOSED)


@dataclass(frozen=True, slots=True)
class StatusChange:
    fact_id: UUID
    status: FactStatus
    valid_to: datetime | None = None


@dataclass(frozen=True, slots=True)
class ResolveOutcome:
    action: ResolveAction
    fact_id: UUID
    conflict_id: UUID | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class WriteSet:
    action: ResolveAction
    fact_id: UUID
    new_fact: Fact | None = None
    status_changes: tuple[StatusChange, ...] = ()
    provenance: tuple[Provenance, ...] = ()
    links: tuple[FactLink, ...] = ()
    conflict: Conflict | None = None
    conflict_id: UUID | None = None
    reason: str = ""

    @property
    def outcome(self) -> ResolveOutcome:
        return ResolveOutcome(action=self.action, fact_id=self.fact_id, conflict_id=self.conflict_id)
