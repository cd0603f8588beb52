"""SQLAlchemy adapter package for maapsnap."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyCheckInRepository,
    SqlAlchemySnapshotRepository,
    SqlAlchemyTeammateRepository,
    SqlAlchemyTenureRepository,
)
from .unit_of_work import (
    SqlAlchemySnapshotUnitOfWork,
    StartupError,
    configured_engine,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCatalogRepository",
    "SqlAlchemyCheckInRepository",
    "SqlAlchemySnapshotRepository",
    "SqlAlchemySnapshotUnitOfWork",
    "SqlAlchemyTeammateRepository",
    "SqlAlchemyTenureRepository",
    "StartupError",
    "configured_engine",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
