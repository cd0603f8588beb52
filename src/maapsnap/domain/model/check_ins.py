"""Recurring review records for one open tenure.

Each check-in collects an employee side, a manager side and, once both sides
are complete, an official rating recorded by the finalizer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from maapsnap.domain.model.entity import Entity
from maapsnap.domain.model.enums import DimensionKind

if TYPE_CHECKING:
    from datetime import date, datetime

type Rating = str | int


@dataclass(eq=False, kw_only=True)
class CheckIn(Entity, ABC):
    DIMENSION_KIND: ClassVar[DimensionKind]

    teammate_id: int
    check_in_started_on: date | None = None

    employee_rating: Rating | None = None
    employee_private_notes: str | None = None
    employee_completed_at: datetime | None = None

    manager_rating: Rating | None = None
    manager_private_notes: str | None = None
    manager_completed_at: datetime | None = None
    manager_completed_by_id: int | None = None

    shared_notes: str | None = None
    official_rating: Rating | None = None
    official_check_in_completed_at: datetime | None = None
    finalized_by_id: int | None = None

    maap_snapshot_id: int | None = None

    @property
    @abstractmethod
    def dimension_id(self) -> int:
        """Id of the assignment, position or aspiration this check-in rates."""

    @property
    def is_open(self) -> bool:
        return self.official_check_in_completed_at is None

    @property
    def employee_completed(self) -> bool:
        return self.employee_completed_at is not None

    @property
    def manager_completed(self) -> bool:
        return self.manager_completed_at is not None

    @property
    def ready_for_finalization(self) -> bool:
        return self.employee_completed and self.manager_completed and self.is_open


@dataclass(eq=False, kw_only=True)
class AssignmentCheckIn(CheckIn):
    DIMENSION_KIND: ClassVar[DimensionKind] = DimensionKind.ASSIGNMENT

    assignment_id: int
    actual_energy_percentage: int | None = None
    employee_personal_alignment: str | None = None

    @property
    def dimension_id(self) -> int:
        return self.assignment_id


@dataclass(eq=False, kw_only=True)
class PositionCheckIn(CheckIn):
    """Check-in against the position held through ``employment_tenure_id``."""

    DIMENSION_KIND: ClassVar[DimensionKind] = DimensionKind.POSITION

    employment_tenure_id: int
    position_id: int

    @property
    def dimension_id(self) -> int:
        return self.position_id


@dataclass(eq=False, kw_only=True)
class AspirationCheckIn(CheckIn):
    DIMENSION_KIND: ClassVar[DimensionKind] = DimensionKind.ASPIRATION

    aspiration_id: int

    @property
    def dimension_id(self) -> int:
        return self.aspiration_id
