"""Predicate cardinality policy.

Exclusive predicates hold one active value per slot; everything else
accumulates. Unknown predicates are treated as multi-valued so that a new
predicate never silently replaces information.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from factrecall.domain.model import Cardinality

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class PredicateClassification:
    cardinality: Cardinality
    exclusive: bool

    @property
    def is_single(self) -> bool:
        return self.cardinality == Cardinality.SINGLE


SINGLE_EXCLUSIVE = PredicateClassification(cardinality=Cardinality.SINGLE, exclusive=True)
MULTI_VALUE = PredicateClassification(cardinality=Cardinality.MULTI, exclusive=False)

DEFAULT_POLICIES: dict[str, PredicateClassification] = {
    "auth_method": SINGLE_EXCLUSIVE,
    "uses_database": SINGLE_EXCLUSIVE,
    "uses_framework": SINGLE_EXCLUSIVE,
    "deployment_platform": SINGLE_EXCLUSIVE,
    "convention": MULTI_VALUE,
    "decision": MULTI_VALUE,
}


@dataclass(frozen=True, slots=True)
class PredicatePolicy:
    policies: Mapping[str, PredicateClassification] = field(
        default_factory=lambda: dict(DEFAULT_POLICIES)
    )
    default: PredicateClassification = MULTI_VALUE

    @classmethod
    def with_overrides(cls, overrides: Mapping[str, PredicateClassification]) -> PredicatePolicy:
        return cls(policies={**DEFAULT_POLICIES, **overrides})

    def classify(self, predicate: str) -> PredicateClassification:
        return self.policies.get(predicate, self.default)

    def is_exclusive(self, predicate: str) -> bool:
        classification = self.classify(predicate)
        return classification.is_single and classification.exclusive
