"""SQLAlchemy-backed fact stores and their units of work."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from factrecall.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from factrecall.adapters.sqlalchemy.repositories import (
    SqlAlchemyConflictRepository,
    SqlAlchemyContentRepository,
    SqlAlchemyEntityRepository,
    SqlAlchemyFactRepository,
    SqlAlchemyLinkRepository,
    SqlAlchemyProvenanceRepository,
)
from factrecall.config.storage import DEFAULT_BUSY_TIMEOUT_MS
from factrecall.domain.errors import ContentionError
from factrecall.domain.ports.unit_of_work import FactStoreRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine

log = logging.getLogger(__name__)

_CONTENTION_MARKERS = ("database is locked", "database table is locked", "database is busy")


class StartupError(RuntimeError):
    """Raised when a store is used before it was started (or after shutdown)."""


def is_contention(error: OperationalError) -> bool:
    message = str(error.orig if error.orig is not None else error).lower()
    return any(marker in message for marker in _CONTENTION_MARKERS)


def configure_sqlite_engine(engine: Engine, *, busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS) -> None:
    """Make pysqlite transactions explicit.

    The driver's own transaction handling is switched off and SQLAlchemy emits
    ``BEGIN`` itself, so every unit of work (reads included) is one SQLite
    transaction. ``busy_timeout`` makes SQLite wait for a lock before giving up.
    """

    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:  # pyright: ignore[reportUnusedFunction]
        _ = connection_record
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection: Connection) -> None:  # pyright: ignore[reportUnusedFunction]
        connection.exec_driver_sql("BEGIN")


class SqlAlchemyStore:
    """One fact database: engine, schema and session factory."""

    def __init__(self, *, label: str = "store") -> None:
        self.label = label
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    def startup(
        self,
        *,
        engine: Engine | None = None,
        database_uri: str | None = None,
        busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
        force: bool = False,
    ) -> SqlAlchemyStore:
        """Open the engine, create the schema and prepare sessions."""

        if self._engine is not None and not force:
            raise StartupError(f"{self.label} already started. Pass force=True to reconfigure.")
        if engine is None:
            if database_uri is None:
                raise StartupError(f"{self.label} needs an engine or a database URI")
            engine = create_engine(database_uri)
            configure_sqlite_engine(engine, busy_timeout_ms=busy_timeout_ms)

        start_mappers()
        create_all_tables(engine)
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        log.info("Started %s at %s", self.label, engine.url.render_as_string(hide_password=True))
        return self

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StartupError(f"{self.label} not started. Call startup() before using it.")
        return self._engine

    @property
    def is_started(self) -> bool:
        return self._engine is not None

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            raise StartupError(f"{self.label} not started. Call startup() before using it.")
        return self._session_factory

    def shutdown(self) -> None:
        """Dispose the engine and reset state."""

        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def unit_of_work(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self.session_factory, label=self.label)


class SqlAlchemyUnitOfWork:
    """One transaction against one store.

    Lock and busy errors from SQLite surface as ``ContentionError`` so callers
    can retry the whole transaction; other database errors propagate as is.
    """

    def __init__(self, session_factory: sessionmaker[Session], *, label: str = "store") -> None:
        self.session_factory = session_factory
        self.label = label
        self._session: Session | None = None
        self._repositories: FactStoreRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session = self.session_factory()
        self._repositories = _build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
            self.session.close()
        finally:
            self._session = None
            self._repositories = None
        if isinstance(exc_value, OperationalError) and is_contention(exc_value):
            raise ContentionError(f"{self.label} is locked", context=str(exc_value.orig)) from exc_value
        return False

    def commit(self) -> None:
        try:
            self.session.commit()
        except OperationalError as exc:
            if is_contention(exc):
                raise ContentionError(f"{self.label} is locked", context=str(exc.orig)) from exc
            raise

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> FactStoreRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


def _build_repositories(session: Session) -> FactStoreRepositories:
    return FactStoreRepositories(
        entities=SqlAlchemyEntityRepository(session),
        content=SqlAlchemyContentRepository(session),
        facts=SqlAlchemyFactRepository(session),
        provenance=SqlAlchemyProvenanceRepository(session),
        links=SqlAlchemyLinkRepository(session),
        conflicts=SqlAlchemyConflictRepository(session),
    )


if TYPE_CHECKING:
    from factrecall.domain.ports.unit_of_work import FactStoreUnitOfWork

    _uow_check: FactStoreUnitOfWork = SqlAlchemyUnitOfWork(sessionmaker())
