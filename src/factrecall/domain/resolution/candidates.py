"""Candidate facts handed to the resolver by the extraction collaborator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from factrecall.domain.errors import ValidationError
from factrecall.domain.model import DEFAULT_SUBJECT_TYPE, FactScope, Polarity, Strength

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class CandidateFact:
    """One proposed statement.

    ``supersession_signal`` is taken at face value: it is the extractor's
    judgement that this statement replaces what was known before.
    """

    subject: str
    predicate: str
    object: str
    polarity: Polarity = Polarity.POSITIVE
    confidence: float = 1.0
    quote: str | None = None
    strength: Strength = Strength.STATED
    scope: FactScope = FactScope.PROJECT
    supersession_signal: bool = False
    subject_type: str = DEFAULT_SUBJECT_TYPE
    object_type: str | None = None
    created_from: str | None = None

    def __post_init__(self) -> None:
        if not self.subject.strip():
            raise ValidationError("Candidate fact subject must not be blank")
        if not self.predicate.strip():
            raise ValidationError("Candidate fact predicate must not be blank")
        if not self.object.strip():
            raise ValidationError("Candidate fact object must not be blank")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValidationError(
                f"Candidate fact confidence must be within [0, 1], got {self.confidence}"
            )


@dataclass(frozen=True, slots=True, kw_only=True)
class Evidence:
    """A provenance receipt to attach to whichever fact the resolution lands on."""

    quote: str | None
    strength: Strength = Strength.STATED
    content_item_id: UUID | None = None

    @classmethod
    def from_candidate(
        cls, candidate: CandidateFact, *, content_item_id: UUID | None = None
    ) -> Evidence:
        return cls(
            quote=candidate.quote,
            strength=candidate.strength,
            content_item_id=content_item_id,
        )
