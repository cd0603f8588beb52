"""Time-bounded records tying a teammate to a dimension value.

At most one tenure per (teammate, dimension) is open at a time. That invariant is
enforced by the write side; readers assume it holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from maapsnap.domain.model.entity import Entity

if TYPE_CHECKING:
    from datetime import date, datetime


@dataclass(eq=False, kw_only=True)
class Tenure(Entity):
    teammate_id: int
    started_at: datetime
    ended_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.ended_at is None

    def close(self, ended_at: datetime) -> None:
        if not self.is_active:
            raise ValueError(f"Tenure {self.id} already ended on {self.ended_at}")
        self.ended_at = ended_at


@dataclass(eq=False, kw_only=True)
class EmploymentTenure(Tenure):
    """Holds the teammate's position; ``official_position_rating`` is set on close."""

    company_id: int
    position_id: int
    manager_id: int | None = None
    seat_id: int | None = None
    employment_type: str = "full_time"
    official_position_rating: int | None = None

    def successor(self, *, started_at: datetime) -> EmploymentTenure:
        """Return the open tenure that continues this one from ``started_at``."""
        return EmploymentTenure(
            teammate_id=self.teammate_id,
            company_id=self.company_id,
            position_id=self.position_id,
            manager_id=self.manager_id,
            seat_id=self.seat_id,
            employment_type=self.employment_type,
            started_at=started_at,
        )


@dataclass(eq=False, kw_only=True)
class AssignmentTenure(Tenure):
    assignment_id: int
    anticipated_energy_percentage: int | None = None
    official_rating: str | None = None

    def successor(
        self, *, started_at: datetime, anticipated_energy_percentage: int | None = None
    ) -> AssignmentTenure:
        """Return the open tenure that continues this one; energy defaults to this one's."""
        if anticipated_energy_percentage is None:
            anticipated_energy_percentage = self.anticipated_energy_percentage
        return AssignmentTenure(
            teammate_id=self.teammate_id,
            assignment_id=self.assignment_id,
            anticipated_energy_percentage=anticipated_energy_percentage,
            started_at=started_at,
        )


@dataclass(eq=False, kw_only=True)
class TeammateMilestone(Entity):
    """An ability milestone attained by a teammate."""

    teammate_id: int
    ability_id: int
    milestone_level: int
    attained_at: date
    certified_by_id: int | None = None
