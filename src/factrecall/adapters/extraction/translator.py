"""Translate extraction payloads into candidate facts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from factrecall.domain.errors import ValidationError
from factrecall.domain.model import DEFAULT_SUBJECT_TYPE
from factrecall.domain.resolution import CandidateFact

from .schema import ExtractionPayload

if TYPE_CHECKING:
    from .schema import CandidateFactPayload


def parse_extraction(raw: str | bytes) -> ExtractionPayload:
    """Validate a JSON extraction document."""

    try:
        return ExtractionPayload.model_validate_json(raw)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid extraction payload: {exc}") from exc


def parse_extraction_data(data: object) -> ExtractionPayload:
    try:
        return ExtractionPayload.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid extraction payload: {exc}") from exc


def to_candidate(fact: CandidateFactPayload, *, entity_types: dict[str, str] | None = None) -> CandidateFact:
    types = entity_types or {}
    return CandidateFact(
        subject=fact.subject,
        predicate=fact.predicate,
        object=fact.object,
        polarity=fact.polarity,
        confidence=fact.confidence,
        quote=fact.quote,
        strength=fact.strength,
        scope=fact.scope,
        supersession_signal=fact.supersession_signal,
        subject_type=types.get(fact.subject.strip().casefold(), DEFAULT_SUBJECT_TYPE),
        object_type=types.get(fact.object.strip().casefold()),
    )


def to_candidates(payload: ExtractionPayload) -> list[CandidateFact]:
    entity_types = payload.entity_types()
    return [to_candidate(fact, entity_types=entity_types) for fact in payload.facts]

