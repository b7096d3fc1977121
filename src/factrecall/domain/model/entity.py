"""Named things facts are about, and the content items facts are derived from."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from factrecall.domain.model.base import Record, utcnow

if TYPE_CHECKING:
    from datetime import datetime

DEFAULT_SUBJECT_TYPE = "repo"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Normalise a canonical name into its slug form.

    Names without ASCII letters or digits get a stable hash-based slug. It
    starts with ``_``, which a normalised slug never does.

    >>> slugify("  PostgreSQL 16 ")
    'postgresql_16'
    """

    stripped = name.strip().lower()
    slug = _NON_ALNUM.sub("_", stripped).strip("_")
    if slug or not stripped:
        return slug
    return "_" + hashlib.sha256(stripped.encode("utf-8")).hexdigest()[:16]


@dataclass(eq=False, kw_only=True)
class Entity(Record):
    """A subject (or object) entity. ``(type, slug)`` is unique per store."""

    type: str
    canonical_name: str
    slug: str = ""
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.type.strip():
            raise ValueError("Entity type must not be blank")
        if not self.canonical_name.strip():
            raise ValueError("Entity canonical_name must not be blank")
        if not self.slug:
            self.slug = slugify(self.canonical_name)


@dataclass(eq=False, kw_only=True)
class ContentItem(Record):
    """One ingested piece of text (a transcript chunk, a note, ...)."""

    source: str
    session_id: str | None = None
    occurred_at: datetime | None = None
    text_hash: str = ""
    byte_len: int = 0
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def for_text(
        cls,
        text: str,
        *,
        source: str,
        session_id: str | None = None,
        occurred_at: datetime | None = None,
    ) -> ContentItem:
        encoded = text.encode("utf-8")
        return cls(
            source=source,
            session_id=session_id,
            occurred_at=occurred_at,
            text_hash=hashlib.sha256(encoded).hexdigest(),
            byte_len=len(encoded),
        )
