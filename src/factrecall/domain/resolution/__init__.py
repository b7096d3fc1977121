"""Fact resolution: decide how a candidate fact lands in its slot, then apply it."""

from __future__ import annotations

from .apply import ApplyResult, apply_write_set
from .candidates import CandidateFact, Evidence
from .engine import FactResolver
from .plan import ResolveAction, ResolveOutcome, Slot, SlotState, StatusChange, WriteSet
from .policy import (
    DEFAULT_POLICIES,
    MULTI_VALUE,
    SINGLE_EXCLUSIVE,
    PredicateClassification,
    PredicatePolicy,
)
from .promote import PromotionResult, promote_fact
from .resolve import decide

__all__ = [
    "DEFAULT_POLICIES",
    "MULTI_VALUE",
    "SINGLE_EXCLUSIVE",
    "ApplyResult",
    "CandidateFact",
    "Evidence",
    "FactResolver",
    "PredicateClassification",
    "PredicatePolicy",
    "PromotionResult",
    "ResolveAction",
    "ResolveOutcome",
    "Slot",
    "SlotState",
    "StatusChange",
    "WriteSet",
    "apply_write_set",
    "decide",
    "promote_fact",
]
