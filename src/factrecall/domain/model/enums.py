"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class FactStatus(StrEnum):
    PROPOSED = "proposed"
    ACTIVE = "active"
    DISPUTED = "disputed"
    SUPERSEDED = "superseded"
    EXPIRED = "expired"


class FactScope(StrEnum):
    """Where a fact applies: the current project only, or every project of the user."""

    PROJECT = "project"
    GLOBAL = "global"


class Polarity(StrEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class Strength(StrEnum):
    STATED = "stated"
    INFERRED = "inferred"


class LinkType(StrEnum):
    SUPERSEDES = "supersedes"


class ConflictStatus(StrEnum):
    OPEN = "open"
    RESOLVED = "resolved"


class Cardinality(StrEnum):
    SINGLE = "single"
    MULTI = "multi"


class RecallScope(StrEnum):
    """Query-side scope selector."""

    PROJECT = "project"
    GLOBAL = "global"
    ALL = "all"


class Source(StrEnum):
    """Store a recall result was read from."""

    PROJECT = "project"
    GLOBAL = "global"
    LEGACY = "legacy"


class SearchMode(StrEnum):
    VECTOR = "vector"
    TEXT = "text"
    BOTH = "both"
