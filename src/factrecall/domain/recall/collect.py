"""Resolve ordered content hits into ordered fact ids."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID


def collect_ordered_fact_ids(
    content_ids: Sequence[UUID],
    links: Iterable[tuple[UUID, UUID]],
    limit: int,
) -> list[UUID]:
    """Walk content hits in index order and gather the facts they support.

    ``links`` holds ``(content_item_id, fact_id)`` pairs. The first content item
    that mentions a fact decides its position; at most ``limit`` ids are
    returned.
    """

    if limit <= 0:
        return []

    facts_by_content: dict[UUID, list[UUID]] = {}
    for content_id, fact_id in links:
        facts_by_content.setdefault(content_id, []).append(fact_id)

    seen: set[UUID] = set()
    ordered: list[UUID] = []
    for content_id in content_ids:
        for fact_id in facts_by_content.get(content_id, ()):
            if fact_id in seen:
                continue
            seen.add(fact_id)
            ordered.append(fact_id)
            if len(ordered) >= limit:
                return ordered
    return ordered
