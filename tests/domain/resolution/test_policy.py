from __future__ import annotations

import pytest

from factrecall.domain.errors import ValidationError
from factrecall.domain.model import Cardinality, FactScope, Strength
from factrecall.domain.resolution import (
    MULTI_VALUE,
    SINGLE_EXCLUSIVE,
    CandidateFact,
    Evidence,
    PredicateClassification,
    PredicatePolicy,
)
from tests.helpers.facts import make_candidate


@pytest.mark.parametrize(
    "predicate", ["auth_method", "uses_database", "uses_framework", "deployment_platform"]
)
def test_default_exclusive_predicates(predicate: str) -> None:
    assert PredicatePolicy().is_exclusive(predicate)


@pytest.mark.parametrize("predicate", ["convention", "decision", "never_heard_of"])
def test_other_predicates_are_multi_value(predicate: str) -> None:
    policy = PredicatePolicy()

    assert not policy.is_exclusive(predicate)
    assert policy.classify(predicate) == MULTI_VALUE


def test_single_but_not_exclusive_predicates_accumulate() -> None:
    lenient = PredicateClassification(cardinality=Cardinality.SINGLE, exclusive=False)
    policy = PredicatePolicy.with_overrides({"uses_database": lenient})

    assert not policy.is_exclusive("uses_database")
    assert policy.classify("auth_method") == SINGLE_EXCLUSIVE


@pytest.mark.parametrize(
    "overrides",
    [
        {"subject": "  "},
        {"predicate": ""},
        {"object_": " "},
        {"confidence": 1.5},
        {"confidence": -0.1},
    ],
)
def test_invalid_candidates_are_rejected(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        make_candidate(**overrides)  # type: ignore[arg-type]


def test_candidate_defaults() -> None:
    candidate = CandidateFact(subject="app", predicate="decision", object="use uv")

    assert candidate.scope is FactScope.PROJECT
    assert candidate.strength is Strength.STATED
    assert candidate.confidence == 1.0
    assert not candidate.supersession_signal


def test_evidence_from_candidate() -> None:
    candidate = make_candidate(quote="we use it", strength=Strength.INFERRED)

    evidence = Evidence.from_candidate(candidate)

    assert evidence.quote == "we use it"
    assert evidence.strength is Strength.INFERRED
    assert evidence.content_item_id is None
