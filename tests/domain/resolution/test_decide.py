from __future__ import annotations

from uuid import uuid4

from factrecall.domain.model import Conflict, Fact, FactScope, FactStatus, LinkType
from factrecall.domain.resolution import (
    MULTI_VALUE,
    SINGLE_EXCLUSIVE,
    Evidence,
    ResolveAction,
    Slot,
    SlotState,
    decide,
)
from tests.helpers.facts import EPOCH, PROJECT_PATH, make_candidate

SUBJECT_ID = uuid4()
SLOT = Slot(
    subject_entity_id=SUBJECT_ID,
    predicate="uses_database",
    scope=FactScope.PROJECT,
    project_path=PROJECT_PATH,
)


def _fact(object_literal: str, *, status: FactStatus = FactStatus.ACTIVE) -> Fact:
    return Fact(
        subject_entity_id=SUBJECT_ID,
        predicate="uses_database",
        object_literal=object_literal,
        status=status,
        scope=FactScope.PROJECT,
        project_path=PROJECT_PATH,
    )


def _evidence(quote: str = "we use it") -> tuple[Evidence, ...]:
    return (Evidence(quote=quote),)


def test_insert_into_empty_exclusive_slot() -> None:
    write_set = decide(
        make_candidate("postgresql"),
        slot=SLOT,
        state=SlotState(),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
    )

    assert write_set.action is ResolveAction.INSERT
    assert write_set.new_fact is not None
    assert write_set.new_fact.id == write_set.fact_id
    assert write_set.new_fact.status is FactStatus.ACTIVE
    assert write_set.new_fact.valid_from == EPOCH
    assert write_set.new_fact.project_path == PROJECT_PATH
    assert [receipt.fact_id for receipt in write_set.provenance] == [write_set.fact_id]
    assert write_set.conflict is None


def test_matching_active_object_is_equivalent_case_insensitively() -> None:
    existing = _fact("PostgreSQL")

    write_set = decide(
        make_candidate(" postgresql "),
        slot=SLOT,
        state=SlotState(facts=(existing,)),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence("again"),
        now=EPOCH,
    )

    assert write_set.action is ResolveAction.EQUIVALENT
    assert write_set.fact_id == existing.id
    assert write_set.new_fact is None
    assert [receipt.quote for receipt in write_set.provenance] == ["again"]


def test_matching_object_entity_is_equivalent() -> None:
    entity_id = uuid4()
    existing = _fact("postgres")
    existing.object_entity_id = entity_id

    write_set = decide(
        make_candidate("PostgreSQL 16"),
        slot=SLOT,
        state=SlotState(facts=(existing,)),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
        object_entity_id=entity_id,
    )

    assert write_set.action is ResolveAction.EQUIVALENT
    assert write_set.fact_id == existing.id


def test_multi_value_predicate_accumulates() -> None:
    existing = _fact("postgresql")

    write_set = decide(
        make_candidate("redis"),
        slot=SLOT,
        state=SlotState(facts=(existing,)),
        classification=MULTI_VALUE,
        evidence=_evidence(),
        now=EPOCH,
    )

    assert write_set.action is ResolveAction.INSERT
    assert write_set.status_changes == ()


def test_supersession_signal_replaces_every_active_fact() -> None:
    first = _fact("mysql")
    second = _fact("sqlite")

    write_set = decide(
        make_candidate("postgresql", supersession_signal=True),
        slot=SLOT,
        state=SlotState(facts=(first, second)),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
    )

    assert write_set.action is ResolveAction.SUPERSEDE
    assert {change.fact_id for change in write_set.status_changes} == {first.id, second.id}
    assert all(change.status is FactStatus.SUPERSEDED for change in write_set.status_changes)
    assert all(change.valid_to == EPOCH for change in write_set.status_changes)
    assert {(link.from_fact_id, link.to_fact_id) for link in write_set.links} == {
        (write_set.fact_id, first.id),
        (write_set.fact_id, second.id),
    }
    assert all(link.link_type is LinkType.SUPERSEDES for link in write_set.links)


def test_contradiction_without_signal_opens_conflict() -> None:
    incumbent = _fact("mysql")

    write_set = decide(
        make_candidate("postgresql"),
        slot=SLOT,
        state=SlotState(facts=(incumbent,)),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
    )

    assert write_set.action is ResolveAction.CONFLICT
    assert write_set.new_fact is not None
    assert write_set.new_fact.status is FactStatus.DISPUTED
    assert write_set.conflict is not None
    assert write_set.conflict_id == write_set.conflict.id
    assert write_set.conflict.fact_a_id == incumbent.id
    assert write_set.conflict.fact_b_id == write_set.fact_id
    assert write_set.status_changes == ()


def test_repeated_contradiction_reuses_disputed_fact_and_conflict() -> None:
    incumbent = _fact("mysql")
    disputed = _fact("postgresql", status=FactStatus.DISPUTED)
    conflict = Conflict(fact_a_id=incumbent.id, fact_b_id=disputed.id)

    write_set = decide(
        make_candidate("PostgreSQL"),
        slot=SLOT,
        state=SlotState(facts=(incumbent, disputed), open_conflicts=(conflict,)),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
    )

    assert write_set.action is ResolveAction.CONFLICT
    assert write_set.fact_id == disputed.id
    assert write_set.conflict_id == conflict.id
    assert write_set.new_fact is None
    assert write_set.conflict is None
    assert [receipt.fact_id for receipt in write_set.provenance] == [disputed.id]


def test_disputed_fact_without_open_conflict_gets_a_new_one() -> None:
    incumbent = _fact("mysql")
    disputed = _fact("postgresql", status=FactStatus.DISPUTED)

    write_set = decide(
        make_candidate("postgresql"),
        slot=SLOT,
        state=SlotState(facts=(incumbent, disputed)),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
    )

    assert write_set.fact_id == disputed.id
    assert write_set.new_fact is None
    assert write_set.conflict is not None
    assert write_set.conflict.fact_b_id == disputed.id


def test_tentative_candidate_is_proposed_and_never_supersedes() -> None:
    incumbent = _fact("mysql")

    empty = decide(
        make_candidate("postgresql", confidence=0.3),
        slot=SLOT,
        state=SlotState(),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
        activation_threshold=0.5,
    )
    signalled = decide(
        make_candidate("postgresql", confidence=0.3, supersession_signal=True),
        slot=SLOT,
        state=SlotState(facts=(incumbent,)),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
        activation_threshold=0.5,
    )

    assert empty.new_fact is not None
    assert empty.new_fact.status is FactStatus.PROPOSED
    assert signalled.action is ResolveAction.CONFLICT
    assert signalled.status_changes == ()


def test_matching_proposed_fact_is_equivalent() -> None:
    pending = _fact("postgresql", status=FactStatus.PROPOSED)

    write_set = decide(
        make_candidate("PostgreSQL", confidence=0.3),
        slot=SLOT,
        state=SlotState(facts=(pending,)),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
        activation_threshold=0.5,
    )

    assert write_set.action is ResolveAction.EQUIVALENT
    assert write_set.fact_id == pending.id
    assert write_set.new_fact is None
    assert write_set.status_changes == ()
    assert [receipt.fact_id for receipt in write_set.provenance] == [pending.id]


def test_confident_evidence_activates_a_proposed_fact_only_in_a_free_slot() -> None:
    pending = _fact("postgresql", status=FactStatus.PROPOSED)

    free = decide(
        make_candidate("postgresql", confidence=0.9),
        slot=SLOT,
        state=SlotState(facts=(pending,)),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
        activation_threshold=0.5,
    )
    occupied = decide(
        make_candidate("postgresql", confidence=0.9),
        slot=SLOT,
        state=SlotState(facts=(_fact("mysql"), pending)),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
        activation_threshold=0.5,
    )

    assert free.action is ResolveAction.EQUIVALENT
    assert [(change.fact_id, change.status) for change in free.status_changes] == [
        (pending.id, FactStatus.ACTIVE)
    ]
    assert occupied.action is ResolveAction.EQUIVALENT
    assert occupied.fact_id == pending.id
    assert occupied.status_changes == ()



def test_decision_carries_creation_origin() -> None:
    write_set = decide(
        make_candidate("postgresql", created_from="promoted:/work/app:1"),
        slot=SLOT,
        state=SlotState(),
        classification=SINGLE_EXCLUSIVE,
        evidence=_evidence(),
        now=EPOCH,
    )

    assert write_set.new_fact is not None
    assert write_set.new_fact.created_from == "promoted:/work/app:1"
    assert write_set.outcome.action is ResolveAction.INSERT
