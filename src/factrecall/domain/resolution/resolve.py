"""Pure resolution decision: candidate + slot state -> write-set.

The decision reads nothing and writes nothing. Given the same candidate, slot
state, classification and clock value it always returns the same write-set
(up to freshly generated ids).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from factrecall.domain.model import (
    Conflict,
    Fact,
    FactLink,
    FactStatus,
    LinkType,
    Provenance,
    normalize_object,
)

from .plan import ResolveAction, StatusChange, WriteSet

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime
    from uuid import UUID

    from .candidates import CandidateFact, Evidence
    from .plan import Slot, SlotState
    from .policy import PredicateClassification


def decide(
    candidate: CandidateFact,
    *,
    slot: Slot,
    state: SlotState,
    classification: PredicateClassification,
    evidence: Sequence[Evidence],
    now: datetime,
    object_entity_id: UUID | None = None,
    activation_threshold: float = 0.0,
) -> WriteSet:
    """Decide how ``candidate`` lands in ``slot``.

    1. An active or proposed fact with the same object makes the candidate
       EQUIVALENT. A confident candidate activates the proposed fact when the
       slot has room for it.
    2. Multi-value predicates otherwise INSERT.
    3. Exclusive predicates INSERT into an empty slot.
    4. With a supersession signal every active fact is SUPERSEDEd.
    5. Without one the candidate is recorded as a disputed CONFLICT.

    Candidates below ``activation_threshold`` are inserted as proposed and
    never displace an active fact.
    """

    active = state.active
    matching = _find_matching(active, candidate.object, object_entity_id)
    if matching is not None:
        return WriteSet(
            action=ResolveAction.EQUIVALENT,
            fact_id=matching.id,
            provenance=_receipts(matching.id, evidence),
            reason=f"{candidate.object!r} already active in {slot.describe()}",
        )

    tentative = candidate.confidence < activation_threshold
    exclusive = classification.is_single and classification.exclusive

    pending = _find_matching(state.proposed, candidate.object, object_entity_id)
    if pending is not None:
        activate = not tentative and (not exclusive or not active)
        return WriteSet(
            action=ResolveAction.EQUIVALENT,
            fact_id=pending.id,
            status_changes=(
                (StatusChange(fact_id=pending.id, status=FactStatus.ACTIVE),) if activate else ()
            ),
            provenance=_receipts(pending.id, evidence),
            reason=f"{candidate.object!r} already proposed in {slot.describe()}",
        )

    if not exclusive or not active:
        status = FactStatus.PROPOSED if tentative else FactStatus.ACTIVE
        fact = _new_fact(candidate, slot, status=status, now=now, object_entity_id=object_entity_id)
        return WriteSet(
            action=ResolveAction.INSERT,
            fact_id=fact.id,
            new_fact=fact,
            provenance=_receipts(fact.id, evidence),
            reason="multi-value predicate" if not exclusive else f"empty {slot.describe()}",
        )

    if candidate.supersession_signal and not tentative:
        fact = _new_fact(
            candidate, slot, status=FactStatus.ACTIVE, now=now, object_entity_id=object_entity_id
        )
        return WriteSet(
            action=ResolveAction.SUPERSEDE,
            fact_id=fact.id,
            new_fact=fact,
            status_changes=tuple(
                StatusChange(fact_id=old.id, status=FactStatus.SUPERSEDED, valid_to=now)
                for old in active
            ),
            links=tuple(
                FactLink(from_fact_id=fact.id, to_fact_id=old.id, link_type=LinkType.SUPERSEDES)
                for old in active
            ),
            provenance=_receipts(fact.id, evidence),
            reason=f"supersedes {len(active)} active fact(s) in {slot.describe()}",
        )

    return _conflict(
        candidate,
        slot=slot,
        state=state,
        incumbent=active[0],
        evidence=evidence,
        now=now,
        object_entity_id=object_entity_id,
    )


def _conflict(
    candidate: CandidateFact,
    *,
    slot: Slot,
    state: SlotState,
    incumbent: Fact,
    evidence: Sequence[Evidence],
    now: datetime,
    object_entity_id: UUID | None,
) -> WriteSet:
    disputed = _find_matching(state.disputed, candidate.object, object_entity_id)
    if disputed is not None:
        existing = next(
            (
                conflict
                for conflict in state.open_conflicts
                if conflict.involves(incumbent.id) and conflict.involves(disputed.id)
            ),
            None,
        )
        if existing is not None:
            return WriteSet(
                action=ResolveAction.CONFLICT,
                fact_id=disputed.id,
                conflict_id=existing.id,
                provenance=_receipts(disputed.id, evidence),
                reason=f"repeated contradiction in {slot.describe()}",
            )
        conflict = _open_conflict(incumbent, disputed, candidate, now)
        return WriteSet(
            action=ResolveAction.CONFLICT,
            fact_id=disputed.id,
            conflict=conflict,
            conflict_id=conflict.id,
            provenance=_receipts(disputed.id, evidence),
            reason=f"reopened contradiction in {slot.describe()}",
        )

    fact = _new_fact(
        candidate, slot, status=FactStatus.DISPUTED, now=now, object_entity_id=object_entity_id
    )
    conflict = _open_conflict(incumbent, fact, candidate, now)
    return WriteSet(
        action=ResolveAction.CONFLICT,
        fact_id=fact.id,
        new_fact=fact,
        conflict=conflict,
        conflict_id=conflict.id,
        provenance=_receipts(fact.id, evidence),
        reason=f"contradicts {incumbent.object_literal!r} in {slot.describe()}",
    )


def _find_matching(
    facts: Iterable[Fact], object_literal: str, object_entity_id: UUID | None
) -> Fact | None:
    wanted = normalize_object(object_literal)
    for fact in facts:
        if normalize_object(fact.object_literal) == wanted:
            return fact
        if object_entity_id is not None and fact.object_entity_id == object_entity_id:
            return fact
    return None


def _new_fact(
    candidate: CandidateFact,
    slot: Slot,
    *,
    status: FactStatus,
    now: datetime,
    object_entity_id: UUID | None,
) -> Fact:
    return Fact(
        subject_entity_id=slot.subject_entity_id,
        predicate=slot.predicate,
        object_literal=candidate.object.strip(),
        object_entity_id=object_entity_id,
        polarity=candidate.polarity,
        confidence=candidate.confidence,
        status=status,
        scope=slot.scope,
        project_path=slot.project_path,
        valid_from=now,
        created_at=now,
        created_from=candidate.created_from,
    )


def _open_conflict(incumbent: Fact, challenger: Fact, candidate: CandidateFact, now: datetime) -> Conflict:
    return Conflict(
        fact_a_id=incumbent.id,
        fact_b_id=challenger.id,
        notes=f"Contradicting {candidate.predicate} claims",
        detected_at=now,
    )


def _receipts(fact_id: UUID, evidence: Sequence[Evidence]) -> tuple[Provenance, ...]:
    return tuple(
        Provenance(
            fact_id=fact_id,
            content_item_id=item.content_item_id,
            quote=item.quote,
            strength=item.strength,
        )
        for item in evidence
    )
