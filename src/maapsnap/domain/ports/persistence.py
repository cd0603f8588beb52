"""Ports for persisting and reading teammate records."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from maapsnap.domain.model import (
    Ability,
    Aspiration,
    AspirationCheckIn,
    Assignment,
    AssignmentCheckIn,
    AssignmentTenure,
    CheckIn,
    EmploymentTenure,
    MaapSnapshot,
    PositionCheckIn,
    Teammate,
    TeammateMilestone,
)

type CatalogEntity = Assignment | Ability | Aspiration
type TenureRecord = EmploymentTenure | AssignmentTenure | TeammateMilestone


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class TeammateRepository(Repository[Teammate], Protocol):
    """Repository contract for teammates."""

    def get(self, teammate_id: int) -> Teammate | None: ...


@runtime_checkable
class CatalogRepository(Repository[CatalogEntity], Protocol):
    """Organization-scoped lookups for the rateable catalog."""

    def assignments(self, organization_id: int) -> tuple[Assignment, ...]: ...

    def abilities(self, organization_id: int) -> tuple[Ability, ...]: ...

    def aspirations(self, organization_id: int) -> tuple[Aspiration, ...]: ...


@runtime_checkable
class TenureRepository(Repository[TenureRecord], Protocol):
    """All tenures and milestones of one teammate, open and closed."""

    def employment_tenures(self, teammate_id: int) -> tuple[EmploymentTenure, ...]: ...

    def assignment_tenures(self, teammate_id: int) -> tuple[AssignmentTenure, ...]: ...

    def milestones(self, teammate_id: int) -> tuple[TeammateMilestone, ...]: ...


@runtime_checkable
class CheckInRepository(Repository[CheckIn], Protocol):
    """Check-ins of one teammate, open and finalized."""

    def assignment_check_ins(self, teammate_id: int) -> tuple[AssignmentCheckIn, ...]: ...

    def position_check_ins(self, teammate_id: int) -> tuple[PositionCheckIn, ...]: ...

    def aspiration_check_ins(self, teammate_id: int) -> tuple[AspirationCheckIn, ...]: ...


@runtime_checkable
class SnapshotRepository(Repository[MaapSnapshot], Protocol):
    """Repository contract for persisted snapshots."""

    def get(self, snapshot_id: int) -> MaapSnapshot | None: ...

    def for_teammate(self, teammate_id: int) -> tuple[MaapSnapshot, ...]:
        """Return the teammate's snapshots, newest first."""
        ...
