"""Public domain model surface."""

from __future__ import annotations

from maapsnap.domain.model.catalog import Ability, Aspiration, Assignment, Rateable
from maapsnap.domain.model.check_ins import (
    AspirationCheckIn,
    AssignmentCheckIn,
    CheckIn,
    PositionCheckIn,
    Rating,
)
from maapsnap.domain.model.entity import Entity
from maapsnap.domain.model.enums import ChangeType, DimensionKind
from maapsnap.domain.model.snapshot import JsonObject, MaapSnapshot
from maapsnap.domain.model.teammate import Teammate
from maapsnap.domain.model.tenures import (
    AssignmentTenure,
    EmploymentTenure,
    TeammateMilestone,
    Tenure,
)

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "Teammate",
    # catalog
    "Rateable",
    "Assignment",
    "Ability",
    "Aspiration",
    # tenures
    "Tenure",
    "EmploymentTenure",
    "AssignmentTenure",
    "TeammateMilestone",
    # check-ins
    "CheckIn",
    "AssignmentCheckIn",
    "PositionCheckIn",
    "AspirationCheckIn",
    "Rating",
    # snapshots
    "MaapSnapshot",
    "JsonObject",
    # enums
    "ChangeType",
    "DimensionKind",
]
