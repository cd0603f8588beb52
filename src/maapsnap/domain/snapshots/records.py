"""Loaded teammate records handed to the pure assembly core."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from maapsnap.domain.snapshots.errors import TeammateNotFoundError

if TYPE_CHECKING:
    from maapsnap.domain.model import (
        Ability,
        Aspiration,
        AspirationCheckIn,
        Assignment,
        AssignmentCheckIn,
        AssignmentTenure,
        CheckIn,
        EmploymentTenure,
        PositionCheckIn,
        Teammate,
        TeammateMilestone,
    )
    from maapsnap.domain.ports import SnapshotRepositories

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class TeammateRecords:
    """Everything the reader needs about one teammate, loaded up front.

    Tenures and check-ins cover every organization and both open and closed
    records; filtering happens in the reader.
    """

    teammate: Teammate
    employment_tenures: tuple[EmploymentTenure, ...] = ()
    assignment_tenures: tuple[AssignmentTenure, ...] = ()
    milestones: tuple[TeammateMilestone, ...] = ()
    assignment_check_ins: tuple[AssignmentCheckIn, ...] = ()
    position_check_ins: tuple[PositionCheckIn, ...] = ()
    aspiration_check_ins: tuple[AspirationCheckIn, ...] = ()
    assignments: tuple[Assignment, ...] = ()
    abilities: tuple[Ability, ...] = ()
    aspirations: tuple[Aspiration, ...] = ()

    def check_ins(self) -> tuple[CheckIn, ...]:
        return (*self.assignment_check_ins, *self.position_check_ins, *self.aspiration_check_ins)


def load_teammate_records(
    repositories: SnapshotRepositories,
    *,
    teammate_id: int,
    organization_id: int,
) -> TeammateRecords:
    teammate = repositories.teammates.get(teammate_id)
    if teammate is None:
        raise TeammateNotFoundError(teammate_id)

    records = TeammateRecords(
        teammate=teammate,
        employment_tenures=repositories.tenures.employment_tenures(teammate_id),
        assignment_tenures=repositories.tenures.assignment_tenures(teammate_id),
        milestones=repositories.tenures.milestones(teammate_id),
        assignment_check_ins=repositories.check_ins.assignment_check_ins(teammate_id),
        position_check_ins=repositories.check_ins.position_check_ins(teammate_id),
        aspiration_check_ins=repositories.check_ins.aspiration_check_ins(teammate_id),
        assignments=repositories.catalog.assignments(organization_id),
        abilities=repositories.catalog.abilities(organization_id),
        aspirations=repositories.catalog.aspirations(organization_id),
    )
    log.debug(
        "Loaded records for teammate %s: %d assignment tenures, %d check-ins",
        teammate_id,
        len(records.assignment_tenures),
        len(records.check_ins()),
    )
    return records
