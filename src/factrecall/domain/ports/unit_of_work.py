"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from factrecall.domain.ports.persistence import (
        ConflictRepository,
        ContentRepository,
        EntityRepository,
        FactRepository,
        LinkRepository,
        ProvenanceRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection.

    Everything done between ``__enter__`` and ``commit`` runs in one
    transaction of the underlying store.
    """

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class FactStoreRepositories(RepositoryCollection):
    """Repositories of one fact store."""

    entities: EntityRepository
    content: ContentRepository
    facts: FactRepository
    provenance: ProvenanceRepository
    links: LinkRepository
    conflicts: ConflictRepository


type FactStoreUnitOfWork = UnitOfWork[FactStoreRepositories]
type UnitOfWorkFactory = Callable[[], FactStoreUnitOfWork]
