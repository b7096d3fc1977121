"""Result values returned by the recall engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from uuid import UUID

    from factrecall.domain.model import ConflictRecord, FactRecord, Receipt, Source


@dataclass(frozen=True, slots=True, kw_only=True)
class RecallResult:
    fact: FactRecord
    receipts: tuple[Receipt, ...]
    source: Source
    similarity: float | None = None
    concept_similarities: tuple[float, ...] = ()

    @property
    def fact_id(self) -> UUID:
        return self.fact.id

    @property
    def signature(self) -> tuple[str | None, str, str | None]:
        return self.fact.signature


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictView:
    """An open conflict with both of its facts loaded."""

    conflict: ConflictRecord
    fact_a: FactRecord
    fact_b: FactRecord
    source: Source


class ExplanationStatus(StrEnum):
    FOUND = "found"
    MISSING = "missing"


@dataclass(frozen=True, slots=True, kw_only=True)
class FoundExplanation:
    fact: FactRecord
    receipts: tuple[Receipt, ...]
    supersedes: tuple[UUID, ...]
    superseded_by: tuple[UUID, ...]
    conflicts: tuple[ConflictRecord, ...]
    source: Source
    status: Literal[ExplanationStatus.FOUND] = ExplanationStatus.FOUND

    @property
    def fact_id(self) -> UUID:
        return self.fact.id

    @property
    def found(self) -> bool:
        return True


@dataclass(frozen=True, slots=True, kw_only=True)
class MissingExplanation:
    """Explanation of a fact id no store knows about; every collection is empty."""

    fact_id: UUID
    fact: None = None
    receipts: tuple[Receipt, ...] = ()
    supersedes: tuple[UUID, ...] = ()
    superseded_by: tuple[UUID, ...] = ()
    conflicts: tuple[ConflictRecord, ...] = ()
    source: Source | None = None
    status: Literal[ExplanationStatus.MISSING] = ExplanationStatus.MISSING

    @property
    def found(self) -> bool:
        return False


type Explanation = FoundExplanation | MissingExplanation


def build_results(
    records: Iterable[FactRecord],
    receipts_by_fact: Mapping[UUID, Sequence[Receipt]],
    *,
    source: Source,
    order: Sequence[UUID] | None = None,
    similarities: Mapping[UUID, float] | None = None,
) -> list[RecallResult]:
    """Pair fact records with their receipts.

    When ``order`` is given results follow it and ids without a record (for
    example filtered out by scope) are dropped.
    """

    by_id = {record.id: record for record in records}
    ids = list(order) if order is not None else list(by_id)
    results: list[RecallResult] = []
    for fact_id in ids:
        record = by_id.get(fact_id)
        if record is None:
            continue
        results.append(
            RecallResult(
                fact=record,
                receipts=tuple(receipts_by_fact.get(fact_id, ())),
                source=source,
                similarity=similarities.get(fact_id) if similarities is not None else None,
            )
        )
    return results
