"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from maapsnap.adapters.sqlalchemy.mappings import (
    ability_table,
    aspiration_check_in_table,
    aspiration_table,
    assignment_check_in_table,
    assignment_table,
    assignment_tenure_table,
    employment_tenure_table,
    maap_snapshot_table,
    position_check_in_table,
    teammate_milestone_table,
)
from maapsnap.domain.model import (
    Ability,
    Aspiration,
    AspirationCheckIn,
    Assignment,
    AssignmentCheckIn,
    AssignmentTenure,
    EmploymentTenure,
    MaapSnapshot,
    PositionCheckIn,
    Teammate,
    TeammateMilestone,
)

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.orm import Session

    from maapsnap.domain.model import CheckIn
    from maapsnap.domain.ports import CatalogEntity, TenureRecord


class _SessionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _all_for_teammate[TEntity](
        self, entity_cls: type[TEntity], table: Table, teammate_id: int
    ) -> tuple[TEntity, ...]:
        stmt = select(entity_cls).where(table.c.teammate_id == teammate_id).order_by(table.c.id)
        return tuple(self.session.execute(stmt).scalars())


class SqlAlchemyTeammateRepository(_SessionRepository):
    def add(self, entity: Teammate) -> None:
        self.session.add(entity)

    def get(self, teammate_id: int) -> Teammate | None:
        return self.session.get(Teammate, teammate_id)


class SqlAlchemyCatalogRepository(_SessionRepository):
    def add(self, entity: CatalogEntity) -> None:
        self.session.add(entity)

    def assignments(self, organization_id: int) -> tuple[Assignment, ...]:
        stmt = (
            select(Assignment)
            .where(assignment_table.c.company_id == organization_id)
            .order_by(assignment_table.c.id)
        )
        return tuple(self.session.execute(stmt).scalars())

    def abilities(self, organization_id: int) -> tuple[Ability, ...]:
        stmt = (
            select(Ability)
            .where(ability_table.c.organization_id == organization_id)
            .order_by(ability_table.c.id)
        )
        return tuple(self.session.execute(stmt).scalars())

    def aspirations(self, organization_id: int) -> tuple[Aspiration, ...]:
        stmt = (
            select(Aspiration)
            .where(aspiration_table.c.organization_id == organization_id)
            .order_by(aspiration_table.c.sort_order, aspiration_table.c.id)
        )
        return tuple(self.session.execute(stmt).scalars())


class SqlAlchemyTenureRepository(_SessionRepository):
    def add(self, entity: TenureRecord) -> None:
        self.session.add(entity)

    def employment_tenures(self, teammate_id: int) -> tuple[EmploymentTenure, ...]:
        return self._all_for_teammate(EmploymentTenure, employment_tenure_table, teammate_id)

    def assignment_tenures(self, teammate_id: int) -> tuple[AssignmentTenure, ...]:
        return self._all_for_teammate(AssignmentTenure, assignment_tenure_table, teammate_id)

    def milestones(self, teammate_id: int) -> tuple[TeammateMilestone, ...]:
        return self._all_for_teammate(TeammateMilestone, teammate_milestone_table, teammate_id)


class SqlAlchemyCheckInRepository(_SessionRepository):
    def add(self, entity: CheckIn) -> None:
        self.session.add(entity)

    def assignment_check_ins(self, teammate_id: int) -> tuple[AssignmentCheckIn, ...]:
        return self._all_for_teammate(AssignmentCheckIn, assignment_check_in_table, teammate_id)

    def position_check_ins(self, teammate_id: int) -> tuple[PositionCheckIn, ...]:
        return self._all_for_teammate(PositionCheckIn, position_check_in_table, teammate_id)

    def aspiration_check_ins(self, teammate_id: int) -> tuple[AspirationCheckIn, ...]:
        return self._all_for_teammate(AspirationCheckIn, aspiration_check_in_table, teammate_id)


class SqlAlchemySnapshotRepository(_SessionRepository):
    def add(self, entity: MaapSnapshot) -> None:
        self.session.add(entity)
        # callers report the new id before commit
        self.session.flush([entity])

    def get(self, snapshot_id: int) -> MaapSnapshot | None:
        return self.session.get(MaapSnapshot, snapshot_id)

    def for_teammate(self, teammate_id: int) -> tuple[MaapSnapshot, ...]:
        stmt = (
            select(MaapSnapshot)
            .where(maap_snapshot_table.c.employee_teammate_id == teammate_id)
            .order_by(maap_snapshot_table.c.created_at.desc(), maap_snapshot_table.c.id.desc())
        )
        return tuple(self.session.execute(stmt).scalars())


if TYPE_CHECKING:
    from maapsnap.domain.ports import (
        CatalogRepository,
        CheckInRepository,
        SnapshotRepository,
        TeammateRepository,
        TenureRepository,
    )

    _session: Session
    _teammates_check: TeammateRepository = SqlAlchemyTeammateRepository(_session)
    _catalog_check: CatalogRepository = SqlAlchemyCatalogRepository(_session)
    _tenures_check: TenureRepository = SqlAlchemyTenureRepository(_session)
    _check_ins_check: CheckInRepository = SqlAlchemyCheckInRepository(_session)
    _snapshots_check: SnapshotRepository = SqlAlchemySnapshotRepository(_session)
