from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

from factrecall.adapters.sqlalchemy import SqlAlchemyStore
from factrecall.adapters.sqlalchemy.unit_of_work import configure_sqlite_engine
from factrecall.app import build_application
from factrecall.domain.model import ScopeContext
from factrecall.domain.recall import DualBackend, SingleBackend
from factrecall.domain.retry import RetryPolicy
from tests.helpers.facts import PROJECT_PATH, KeywordEmbedder, StepClock

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine

    from factrecall.app import Application


def memory_engine() -> Engine:
    engine = create_engine(
        "sqlite+pysqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite_engine(engine)
    return engine


def _started(label: str) -> Iterator[SqlAlchemyStore]:
    store = SqlAlchemyStore(label=label).startup(engine=memory_engine())
    try:
        yield store
    finally:
        store.shutdown()


@pytest.fixture
def project_store() -> Iterator[SqlAlchemyStore]:
    yield from _started("project store")


@pytest.fixture
def global_store() -> Iterator[SqlAlchemyStore]:
    yield from _started("global store")


@pytest.fixture
def legacy_store() -> Iterator[SqlAlchemyStore]:
    yield from _started("legacy store")


@pytest.fixture
def dual_backend(project_store: SqlAlchemyStore, global_store: SqlAlchemyStore) -> DualBackend:
    return DualBackend(
        global_store=global_store.unit_of_work, project_store=project_store.unit_of_work
    )


@pytest.fixture
def single_backend(legacy_store: SqlAlchemyStore) -> SingleBackend:
    return SingleBackend(store=legacy_store.unit_of_work)


@pytest.fixture
def project_context() -> ScopeContext:
    return ScopeContext(project_path=PROJECT_PATH)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def fast_retry() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, sleep=lambda _delay: None, rng=lambda: 0.0)


@pytest.fixture
def embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def app(
    dual_backend: DualBackend,
    project_context: ScopeContext,
    embedder: KeywordEmbedder,
    fast_retry: RetryPolicy,
    clock: StepClock,
) -> Application:
    return build_application(
        dual_backend, context=project_context, embedder=embedder, retry=fast_retry, clock=clock
    )


@pytest.fixture
def legacy_app(
    single_backend: SingleBackend,
    project_context: ScopeContext,
    embedder: KeywordEmbedder,
    fast_retry: RetryPolicy,
    clock: StepClock,
) -> Application:
    return build_application(
        single_backend, context=project_context, embedder=embedder, retry=fast_retry, clock=clock
    )


class StatementCounter:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.statements: list[str] = []

    def __call__(self, conn: object, cursor: object, statement: str, *args: object) -> None:
        _ = (conn, cursor, args)
        self.statements.append(statement)

    def __enter__(self) -> StatementCounter:
        event.listen(self.engine, "before_cursor_execute", self)
        return self

    def __exit__(self, *exc_info: object) -> None:
        event.remove(self.engine, "before_cursor_execute", self)

    @property
    def queries(self) -> list[str]:
        return [statement for statement in self.statements if statement.strip() != "BEGIN"]


@pytest.fixture
def count_statements() -> type[StatementCounter]:
    return StatementCounter
