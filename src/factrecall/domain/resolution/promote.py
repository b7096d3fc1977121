"""Promote a project fact into the global store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from factrecall.domain.errors import ValidationError
from factrecall.domain.model import DEFAULT_SUBJECT_TYPE, FactScope, RecallScope, Strength
from factrecall.domain.recall.backend import targets_for

from .candidates import CandidateFact, Evidence

if TYPE_CHECKING:
    from uuid import UUID

    from factrecall.domain.model import FactRecord, Receipt, ScopeContext
    from factrecall.domain.recall.backend import Backend

    from .engine import FactResolver
    from .plan import ResolveOutcome

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PromotionResult:
    source_fact_id: UUID
    outcome: ResolveOutcome | None = None

    @property
    def promoted(self) -> bool:
        return self.outcome is not None


def promote_fact(
    fact_id: UUID,
    *,
    backend: Backend,
    resolver: FactResolver,
    context: ScopeContext,
) -> PromotionResult:
    """Copy a project fact into the global scope through the resolver.

    Receipts are copied without their content item reference since content
    items only exist in the store they were recorded in. An unknown fact, or
    one that is not project scoped, is reported as not promoted.
    """

    found: tuple[FactRecord, list[Receipt]] | None = None
    for target in targets_for(backend, RecallScope.PROJECT, context):
        with target.unit_of_work() as uow:
            records = uow.repositories.facts.records([fact_id], scope_filter=target.scope_filter)
            if records and records[0].scope == FactScope.PROJECT:
                receipts = uow.repositories.provenance.receipts_for([fact_id])
                found = (records[0], receipts.get(fact_id, []))
                break

    if found is None:
        log.info("Fact %s not found in the project scope; nothing promoted", fact_id)
        return PromotionResult(source_fact_id=fact_id)

    record, receipts = found
    if not record.subject_name or not record.object_literal:
        raise ValidationError(f"Fact {fact_id} has no subject or object literal to promote")

    first = receipts[0] if receipts else None
    candidate = CandidateFact(
        subject=record.subject_name,
        subject_type=record.subject_type or DEFAULT_SUBJECT_TYPE,
        predicate=record.predicate,
        object=record.object_literal,
        polarity=record.polarity,
        confidence=record.confidence,
        quote=first.quote if first else None,
        strength=first.strength if first else Strength.STATED,
        scope=FactScope.GLOBAL,
        created_from=f"promoted:{record.project_path}:{record.id}",
    )
    copies = [Evidence(quote=receipt.quote, strength=receipt.strength) for receipt in receipts]
    outcome = resolver.resolve(
        candidate,
        context,
        receipts=copies or [Evidence.from_candidate(candidate)],
    )
    log.info("Promoted fact %s to global fact %s (%s)", fact_id, outcome.fact_id, outcome.action)
    return PromotionResult(source_fact_id=fact_id, outcome=outcome)
