"""Transaction boundary used by the snapshot services.

Services open a unit of work, read and write through ``repositories`` and call
``commit``. Leaving the block without committing discards the writes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from maapsnap.domain.ports.persistence import (
        CatalogRepository,
        CheckInRepository,
        SnapshotRepository,
        TeammateRepository,
        TenureRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker for the repository bundle a unit of work hands out."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
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


@dataclass(frozen=True, slots=True)
class SnapshotRepositories(RepositoryCollection):
    """Everything needed to read one teammate's records and store snapshots."""

    teammates: TeammateRepository
    catalog: CatalogRepository
    tenures: TenureRepository
    check_ins: CheckInRepository
    snapshots: SnapshotRepository


type SnapshotUnitOfWork = UnitOfWork[SnapshotRepositories]
