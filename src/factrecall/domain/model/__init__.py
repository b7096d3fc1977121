"""Public domain model surface."""

from __future__ import annotations

from factrecall.domain.model.base import Record, new_id, utcnow
from factrecall.domain.model.entity import DEFAULT_SUBJECT_TYPE, ContentItem, Entity, slugify
from factrecall.domain.model.enums import (
    Cardinality,
    ConflictStatus,
    FactScope,
    FactStatus,
    LinkType,
    Polarity,
    RecallScope,
    SearchMode,
    Source,
    Strength,
)
from factrecall.domain.model.fact import (
    Conflict,
    Fact,
    FactLink,
    Provenance,
    normalize_object,
)
from factrecall.domain.model.records import (
    ConflictRecord,
    EmbeddingCandidate,
    FactRecord,
    Receipt,
)
from factrecall.domain.model.scope import (
    NO_PROJECT,
    ScopeContext,
    ScopeFilter,
    parse_fact_scope,
    parse_recall_scope,
    parse_search_mode,
)

__all__ = [  # noqa: RUF022
    # base
    "Record",
    "new_id",
    "utcnow",
    # entities
    "DEFAULT_SUBJECT_TYPE",
    "ContentItem",
    "Entity",
    "slugify",
    # enums
    "Cardinality",
    "ConflictStatus",
    "FactScope",
    "FactStatus",
    "LinkType",
    "Polarity",
    "RecallScope",
    "SearchMode",
    "Source",
    "Strength",
    # facts
    "Conflict",
    "Fact",
    "FactLink",
    "Provenance",
    "normalize_object",
    # read models
    "ConflictRecord",
    "EmbeddingCandidate",
    "FactRecord",
    "Receipt",
    # scope
    "NO_PROJECT",
    "ScopeContext",
    "ScopeFilter",
    "parse_fact_scope",
    "parse_recall_scope",
    "parse_search_mode",
]
