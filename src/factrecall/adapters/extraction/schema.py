"""Pydantic models describing extraction payloads."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from factrecall.domain.model import FactScope, Polarity, Strength


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _lowercase(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class ExtractionBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EntityPayload(ExtractionBaseModel):
    type: str = Field(min_length=1)
    name: str = Field(min_length=1)


class CandidateFactPayload(ExtractionBaseModel):
    subject: str = Field(min_length=1)
    predicate: str = Field(min_length=1)
    object: str = Field(min_length=1)
    polarity: Polarity = Polarity.POSITIVE
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    quote: str | None = None
    strength: Strength = Strength.STATED
    scope: FactScope = Field(
        default=FactScope.PROJECT, validation_alias=AliasChoices("scope", "scope_hint")
    )
    supersession_signal: bool = Field(
        default=False, validation_alias=AliasChoices("supersession_signal", "supersedes")
    )

    @field_validator("quote", mode="before")
    @classmethod
    def _normalize_quote(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("polarity", "strength", "scope", mode="before")
    @classmethod
    def _normalize_enums(cls, value: object) -> object:
        return _lowercase(value)


class ExtractionPayload(ExtractionBaseModel):
    entities: list[EntityPayload] = Field(default_factory=list)
    facts: list[CandidateFactPayload] = Field(default_factory=list)

    def entity_types(self) -> dict[str, str]:
        """Map entity names (case-insensitively) to their declared type."""

        return {entity.name.strip().casefold(): entity.type for entity in self.entities}

