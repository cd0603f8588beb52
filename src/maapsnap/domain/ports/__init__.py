"""Ports (interfaces) for the snapshot domain."""

from __future__ import annotations

from maapsnap.domain.ports.persistence import (
    CatalogEntity,
    CatalogRepository,
    CheckInRepository,
    Repository,
    SnapshotRepository,
    TeammateRepository,
    TenureRecord,
    TenureRepository,
)
from maapsnap.domain.ports.unit_of_work import (
    RepositoryCollection,
    SnapshotRepositories,
    SnapshotUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "CatalogEntity",
    "CatalogRepository",
    "CheckInRepository",
    "Repository",
    "RepositoryCollection",
    "SnapshotRepositories",
    "SnapshotRepository",
    "SnapshotUnitOfWork",
    "TeammateRepository",
    "TenureRecord",
    "TenureRepository",
    "UnitOfWork",
]
