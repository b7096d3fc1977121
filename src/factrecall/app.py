"""Application orchestration entry points."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from factrecall.adapters.embeddings import HashingEmbedder
from factrecall.adapters.extraction import to_candidates
from factrecall.adapters.sqlalchemy import SqlAlchemyStore
from factrecall.config import (
    get_database_config,
    get_storage_config,
    get_write_retry_config,
)
from factrecall.domain.model import (
    ContentItem,
    FactScope,
    RecallScope,
    ScopeContext,
    parse_recall_scope,
)
from factrecall.domain.recall import (
    DualBackend,
    RecallEngine,
    SingleBackend,
    candidate_writer,
    index_embeddings,
    targets_for,
    writer_for,
)
from factrecall.domain.resolution import FactResolver, promote_fact
from factrecall.domain.retry import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from types import TracebackType
    from uuid import UUID

    from factrecall.adapters.extraction import ExtractionPayload
    from factrecall.config import DatabaseConfig, StorageConfig
    from factrecall.domain.ports import Embedder, UnitOfWorkFactory
    from factrecall.domain.recall import Backend
    from factrecall.domain.resolution import PromotionResult, ResolveAction, ResolveOutcome


log = getLogger(__name__)


@dataclass(slots=True)
class Application:
    """Opened stores plus the resolver and recall engine built on top of them."""

    backend: Backend
    context: ScopeContext
    resolver: FactResolver
    recall: RecallEngine
    embedder: Embedder
    retry: RetryPolicy
    stores: tuple[SqlAlchemyStore, ...] = ()

    def close(self) -> None:
        for store in self.stores:
            store.shutdown()

    def __enter__(self) -> Application:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.close()
        return False


def build_application(
    backend: Backend,
    *,
    context: ScopeContext,
    embedder: Embedder | None = None,
    retry: RetryPolicy | None = None,
    clock: Callable[[], datetime] | None = None,
    stores: tuple[SqlAlchemyStore, ...] = (),
) -> Application:
    effective_embedder = embedder or HashingEmbedder()
    effective_retry = retry or RetryPolicy()
    resolver = FactResolver(writer_for=candidate_writer(backend), retry=effective_retry)
    if clock is not None:
        resolver.clock = clock
    return Application(
        backend=backend,
        context=context,
        resolver=resolver,
        recall=RecallEngine(backend=backend, embedder=effective_embedder),
        embedder=effective_embedder,
        retry=effective_retry,
        stores=stores,
    )


def open_application(
    *,
    database: DatabaseConfig | None = None,
    storage: StorageConfig | None = None,
    embedder: Embedder | None = None,
) -> Application:
    """Open the configured stores and wire the engines."""

    storage_config = storage or get_storage_config()
    database_config = database or get_database_config(storage=storage_config)
    project_path = storage_config.project_path
    context = ScopeContext(
        project_path=str(project_path.expanduser().resolve()) if project_path else None
    )
    retry = RetryPolicy.from_config(get_write_retry_config())

    backend: Backend
    if database_config.legacy_uri is not None:
        legacy = SqlAlchemyStore(label="legacy store").startup(
            database_uri=database_config.legacy_uri,
            busy_timeout_ms=database_config.busy_timeout_ms,
        )
        backend = SingleBackend(store=legacy.unit_of_work)
        stores: tuple[SqlAlchemyStore, ...] = (legacy,)
    else:
        global_store = SqlAlchemyStore(label="global store").startup(
            database_uri=database_config.global_uri,
            busy_timeout_ms=database_config.busy_timeout_ms,
        )
        stores = (global_store,)
        project_uow: UnitOfWorkFactory | None = None
        if database_config.project_uri is not None:
            try:
                project_store = SqlAlchemyStore(label="project store").startup(
                    database_uri=database_config.project_uri,
                    busy_timeout_ms=database_config.busy_timeout_ms,
                )
            except Exception:
                global_store.shutdown()
                raise
            stores = (project_store, global_store)
            project_uow = project_store.unit_of_work
        backend = DualBackend(global_store=global_store.unit_of_work, project_store=project_uow)

    log.info("Opened %d store(s), project=%s", len(stores), context.project_path)
    return build_application(
        backend, context=context, embedder=embedder, retry=retry, stores=stores
    )


# Content and extraction ----------------------------------------------------


def record_content(
    app: Application,
    text: str,
    *,
    source: str,
    scope: FactScope = FactScope.PROJECT,
    session_id: str | None = None,
    occurred_at: datetime | None = None,
) -> UUID:
    """Store a piece of text and index it for lexical recall."""

    return _record_into(
        writer_for(app.backend, scope),
        app.retry,
        text,
        source=source,
        session_id=session_id,
        occurred_at=occurred_at,
    )


def _record_into(
    unit_of_work: UnitOfWorkFactory,
    retry: RetryPolicy,
    text: str,
    *,
    source: str,
    session_id: str | None,
    occurred_at: datetime | None,
) -> UUID:
    item = ContentItem.for_text(text, source=source, session_id=session_id, occurred_at=occurred_at)

    def write() -> UUID:
        with unit_of_work() as uow:
            uow.repositories.content.add(item, text)
            uow.commit()
        return item.id

    return retry.run(write, context=f"record content from {source}")


@dataclass(slots=True)
class IngestResult:
    content_item_ids: list[UUID] = field(default_factory=list)
    outcomes: list[ResolveOutcome] = field(default_factory=list)

    def counts(self) -> Counter[ResolveAction]:
        return Counter(outcome.action for outcome in self.outcomes)


def ingest_extraction(
    app: Application,
    payload: ExtractionPayload,
    *,
    text: str | None = None,
    source: str = "extraction",
    session_id: str | None = None,
    occurred_at: datetime | None = None,
) -> IngestResult:
    """Resolve every fact of an extraction, recording its source text first.

    The source text is recorded once per store the facts land in, since
    provenance may only reference content items of its own store.
    """

    result = IngestResult()
    content_ids: dict[UnitOfWorkFactory, UUID] = {}
    for candidate in to_candidates(payload):
        store = writer_for(app.backend, candidate.scope)
        content_item_id: UUID | None = None
        if text is not None:
            content_item_id = content_ids.get(store)
            if content_item_id is None:
                content_item_id = _record_into(
                    store,
                    app.retry,
                    text,
                    source=source,
                    session_id=session_id,
                    occurred_at=occurred_at,
                )
                content_ids[store] = content_item_id
                result.content_item_ids.append(content_item_id)
        result.outcomes.append(
            app.resolver.resolve(candidate, app.context, content_item_id=content_item_id)
        )
    log.info("Ingested %d fact(s): %s", len(result.outcomes), dict(result.counts()))
    return result


# Maintenance -----------------------------------------------------------------


def promote(app: Application, fact_id: UUID) -> PromotionResult:
    return promote_fact(fact_id, backend=app.backend, resolver=app.resolver, context=app.context)


def index(
    app: Application,
    *,
    scope: RecallScope | str = RecallScope.ALL,
    batch_size: int = 100,
    force: bool = False,
) -> int:
    """Embed facts missing a vector in every store selected by ``scope``."""

    total = 0
    for target in targets_for(app.backend, parse_recall_scope(scope), app.context):
        log.info("Indexing %s store", target.source)
        total += index_embeddings(
            target.unit_of_work,
            app.embedder,
            batch_size=batch_size,
            force=force,
            retry=app.retry,
        )
    return total
