"""SQLAlchemy adapter package for factrecall."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyConflictRepository,
    SqlAlchemyContentRepository,
    SqlAlchemyEntityRepository,
    SqlAlchemyFactRepository,
    SqlAlchemyLinkRepository,
    SqlAlchemyProvenanceRepository,
    build_match_query,
)
from .unit_of_work import (
    SqlAlchemyStore,
    SqlAlchemyUnitOfWork,
    StartupError,
    configure_sqlite_engine,
)

__all__ = [
    "SqlAlchemyConflictRepository",
    "SqlAlchemyContentRepository",
    "SqlAlchemyEntityRepository",
    "SqlAlchemyFactRepository",
    "SqlAlchemyLinkRepository",
    "SqlAlchemyProvenanceRepository",
    "SqlAlchemyStore",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "build_match_query",
    "configure_sqlite_engine",
    "create_all_tables",
    "mapper_registry",
    "start_mappers",
]
