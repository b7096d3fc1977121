"""Storage topology: one legacy store holding every scope, or a project/global pair.

The topology is chosen once when the engine is built. Query code asks for
the list of ``StoreTarget`` values to read from and never branches on the
topology itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from factrecall.domain.errors import ValidationError
from factrecall.domain.model import FactScope, RecallScope, ScopeFilter, Source

if TYPE_CHECKING:
    from collections.abc import Callable

    from factrecall.domain.model import ScopeContext
    from factrecall.domain.ports import UnitOfWorkFactory
    from factrecall.domain.resolution.candidates import CandidateFact


@dataclass(frozen=True, slots=True)
class SingleBackend:
    """One database holding facts of every scope; rows are filtered per query."""

    store: UnitOfWorkFactory


@dataclass(frozen=True, slots=True)
class DualBackend:
    """Separate project and global databases.

    ``project_store`` is ``None`` when the caller is not inside a project.
    """

    global_store: UnitOfWorkFactory
    project_store: UnitOfWorkFactory | None = None


type Backend = SingleBackend | DualBackend


@dataclass(frozen=True, slots=True)
class StoreTarget:
    source: Source
    unit_of_work: UnitOfWorkFactory
    scope_filter: ScopeFilter | None = None


def targets_for(backend: Backend, scope: RecallScope, context: ScopeContext) -> list[StoreTarget]:
    """Stores to read for ``scope``, in source priority order (project first)."""

    match backend:
        case SingleBackend(store=store):
            return [
                StoreTarget(
                    source=Source.LEGACY,
                    unit_of_work=store,
                    scope_filter=ScopeFilter.for_recall(scope, context),
                )
            ]
        case DualBackend(global_store=global_store, project_store=project_store):
            targets: list[StoreTarget] = []
            if scope in (RecallScope.PROJECT, RecallScope.ALL) and project_store is not None:
                targets.append(StoreTarget(source=Source.PROJECT, unit_of_work=project_store))
            if scope in (RecallScope.GLOBAL, RecallScope.ALL):
                targets.append(StoreTarget(source=Source.GLOBAL, unit_of_work=global_store))
            return targets


def writer_for(backend: Backend, scope: FactScope) -> UnitOfWorkFactory:
    """Store that facts of ``scope`` are written to."""

    match backend:
        case SingleBackend(store=store):
            return store
        case DualBackend(global_store=global_store, project_store=project_store):
            if scope == FactScope.GLOBAL:
                return global_store
            if project_store is None:
                raise ValidationError("No project store is open; cannot write project scoped facts")
            return project_store


def candidate_writer(backend: Backend) -> Callable[[CandidateFact, ScopeContext], UnitOfWorkFactory]:
    """Adapt ``writer_for`` to the resolver's store selection hook."""

    def select(candidate: CandidateFact, context: ScopeContext) -> UnitOfWorkFactory:
        _ = context
        return writer_for(backend, candidate.scope)

    return select
