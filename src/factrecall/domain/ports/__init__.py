"""Domain port definitions for adapters."""

from __future__ import annotations

from .indexing import Embedder
from .persistence import (
    ConflictRepository,
    ContentRepository,
    EntityRepository,
    FactRepository,
    LinkRepository,
    ProvenanceRepository,
    Repository,
)
from .unit_of_work import (
    FactStoreRepositories,
    FactStoreUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
    UnitOfWorkFactory,
)

__all__ = [
    "ConflictRepository",
    "ContentRepository",
    "Embedder",
    "EntityRepository",
    "FactRepository",
    "FactStoreRepositories",
    "FactStoreUnitOfWork",
    "LinkRepository",
    "ProvenanceRepository",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
