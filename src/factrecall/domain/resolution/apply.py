"""Apply a write-set through the repositories of an open unit of work."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from factrecall.domain.model import FactStatus

if TYPE_CHECKING:
    from factrecall.domain.ports import FactStoreRepositories

    from .plan import WriteSet


@dataclass(slots=True)
class ApplyResult:
    facts_created: int = 0
    facts_superseded: int = 0
    facts_activated: int = 0
    links_created: int = 0
    conflicts_created: int = 0
    provenance_created: int = 0


def apply_write_set(repositories: FactStoreRepositories, write_set: WriteSet) -> ApplyResult:
    """Stage every row of ``write_set``; the caller owns the commit."""

    result = ApplyResult()
    if write_set.new_fact is not None:
        repositories.facts.add(write_set.new_fact)
        result.facts_created += 1
    for change in write_set.status_changes:
        repositories.facts.set_status(change.fact_id, change.status, valid_to=change.valid_to)
        if change.status == FactStatus.SUPERSEDED:
            result.facts_superseded += 1
        else:
            result.facts_activated += 1
    for link in write_set.links:
        repositories.links.add(link)
        result.links_created += 1
    if write_set.conflict is not None:
        repositories.conflicts.add(write_set.conflict)
        result.conflicts_created += 1
    for receipt in write_set.provenance:
        repositories.provenance.add(receipt)
        result.provenance_created += 1
    return result
