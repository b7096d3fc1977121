"""Transactional resolver: lookup, decide, apply and commit as one unit."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from factrecall.domain.errors import ValidationError
from factrecall.domain.model import utcnow
from factrecall.domain.retry import RetryPolicy

from .apply import apply_write_set
from .candidates import Evidence
from .plan import Slot, SlotState
from .policy import PredicatePolicy
from .resolve import decide

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime
    from uuid import UUID

    from factrecall.domain.model import ScopeContext
    from factrecall.domain.ports import FactStoreRepositories, UnitOfWorkFactory

    from .candidates import CandidateFact
    from .plan import ResolveOutcome, WriteSet

log = logging.getLogger(__name__)


@dataclass(slots=True)
class FactResolver:
    """Resolve candidate facts into one store.

    ``writer_for`` picks the store a candidate of a given scope is written to;
    it is normally derived from a backend (see ``factrecall.domain.recall.backend``).
    """

    writer_for: Callable[[CandidateFact, ScopeContext], UnitOfWorkFactory]
    policy: PredicatePolicy = field(default_factory=PredicatePolicy)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    clock: Callable[[], datetime] = utcnow
    activation_threshold: float = 0.0

    def resolve(
        self,
        candidate: CandidateFact,
        context: ScopeContext,
        *,
        content_item_id: UUID | None = None,
        receipts: Sequence[Evidence] | None = None,
    ) -> ResolveOutcome:
        project_path = context.project_path_for(candidate.scope)
        if receipts is not None and not receipts:
            raise ValidationError("Explicit receipts must not be empty")
        evidence = (
            tuple(receipts)
            if receipts is not None
            else (Evidence.from_candidate(candidate, content_item_id=content_item_id),)
        )
        unit_of_work = self.writer_for(candidate, context)
        where = f"{candidate.subject}/{candidate.predicate} in {project_path or candidate.scope}"

        def attempt() -> ResolveOutcome:
            with unit_of_work() as uow:
                write_set = self._plan(uow.repositories, candidate, project_path, evidence)
                apply_write_set(uow.repositories, write_set)
                uow.commit()
            return write_set.outcome

        outcome = self.retry.run(attempt, context=where)
        log.info("Resolved %s as %s (fact %s)", where, outcome.action, outcome.fact_id)
        return outcome

    def _plan(
        self,
        repositories: FactStoreRepositories,
        candidate: CandidateFact,
        project_path: str | None,
        evidence: tuple[Evidence, ...],
    ) -> WriteSet:
        subject = repositories.entities.find_or_create(
            type=candidate.subject_type, canonical_name=candidate.subject
        )
        object_entity_id = None
        if candidate.object_type:
            object_entity_id = repositories.entities.find_or_create(
                type=candidate.object_type, canonical_name=candidate.object
            ).id
        slot = Slot(
            subject_entity_id=subject.id,
            predicate=candidate.predicate.strip(),
            scope=candidate.scope,
            project_path=project_path,
        )
        facts = repositories.facts.slot_facts(slot)
        conflicts = repositories.conflicts.open_involving([fact.id for fact in facts]) if facts else []
        write_set = decide(
            candidate,
            slot=slot,
            state=SlotState(facts=tuple(facts), open_conflicts=tuple(conflicts)),
            classification=self.policy.classify(slot.predicate),
            evidence=evidence,
            now=self.clock(),
            object_entity_id=object_entity_id,
            activation_threshold=self.activation_threshold,
        )
        log.debug("Decided %s: %s", write_set.action, write_set.reason)
        return write_set

