"""SQLAlchemy unit of work for building and executing snapshots.

``startup`` binds one engine for the process. Every unit of work opens its own
session from that binding, or from a session factory handed in directly.
Uncommitted work is discarded when the ``with`` block exits.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Self

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from maapsnap.adapters.sqlalchemy.mappings import start_mappers
from maapsnap.adapters.sqlalchemy.migrations import current_revision, upgrade_head
from maapsnap.adapters.sqlalchemy.repositories import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyCheckInRepository,
    SqlAlchemySnapshotRepository,
    SqlAlchemyTeammateRepository,
    SqlAlchemyTenureRepository,
)
from maapsnap.config import get_database_config
from maapsnap.domain.ports import RepositoryCollection, SnapshotRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter or a unit of work is used in the wrong state."""


@dataclass(frozen=True, slots=True)
class _Binding:
    engine: Engine
    sessions: sessionmaker[Session]


class _AdapterState:
    __slots__ = ("binding",)

    def __init__(self) -> None:
        self.binding: _Binding | None = None

    def bind(self, engine: Engine) -> None:
        self.binding = _Binding(
            engine=engine, sessions=sessionmaker(bind=engine, expire_on_commit=False)
        )

    def require(self) -> _Binding:
        if self.binding is None:
            raise StartupError(
                "SQLAlchemy adapter not started. Call "
                "maapsnap.adapters.sqlalchemy.startup() before opening a unit of work."
            )
        return self.binding


_STATE = _AdapterState()


def _create_engine(database_uri: str | None) -> Engine:
    if database_uri is not None:
        return create_engine(database_uri, future=True)
    config = get_database_config()
    return create_engine(config.uri, echo=config.echo, future=True)


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
    migrate: bool = True,
) -> None:
    """Bind the adapter to an engine, mapping the entities and migrating the schema.

    ``force`` replaces an existing binding. ``migrate=False`` skips Alembic for
    callers that prepared the schema themselves.
    """

    if _STATE.binding is not None and not force:
        raise StartupError("SQLAlchemy adapter already started. Pass force=True to rebind.")

    resolved_engine = engine or _create_engine(database_uri)
    start_mappers()
    if migrate:
        upgrade_head(engine=resolved_engine)
        log.debug("Database schema at revision %s", current_revision(resolved_engine))
    _STATE.bind(resolved_engine)
    log.debug("SQLAlchemy adapter bound to %s", resolved_engine.url)


def configured_engine() -> Engine | None:
    return _STATE.binding.engine if _STATE.binding is not None else None


def is_started() -> bool:
    return _STATE.binding is not None


def shutdown() -> None:
    """Dispose the bound engine; a later ``startup`` may bind a new one."""

    if _STATE.binding is not None:
        _STATE.binding.engine.dispose()
    _STATE.binding = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session and its repositories for the length of a ``with`` block."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory or _STATE.require().sessions
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> Self:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._session_factory()
        self._repositories = self._build_repositories(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self._require_session()
        try:
            if exc_type is not None:
                log.debug("Rolling back unit of work after %s", exc_type.__name__)
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    def _require_session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open; use it as a context manager")
        return self._session

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open; use it as a context manager")
        return self._repositories

    def commit(self) -> None:
        self._require_session().commit()

    def rollback(self) -> None:
        self._require_session().rollback()


class SqlAlchemySnapshotUnitOfWork(BaseSqlAlchemyUnitOfWork[SnapshotRepositories]):
    def _build_repositories(self, session: Session) -> SnapshotRepositories:
        return SnapshotRepositories(
            teammates=SqlAlchemyTeammateRepository(session),
            catalog=SqlAlchemyCatalogRepository(session),
            tenures=SqlAlchemyTenureRepository(session),
            check_ins=SqlAlchemyCheckInRepository(session),
            snapshots=SqlAlchemySnapshotRepository(session),
        )


if TYPE_CHECKING:
    from maapsnap.domain.ports import SnapshotUnitOfWork

    _uow_check: SnapshotUnitOfWork = SqlAlchemySnapshotUnitOfWork()
