"""SQLAlchemy mapping metadata for the maapsnap domain model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    orm,
)

from maapsnap.domain.model import (
    Ability,
    Aspiration,
    AspirationCheckIn,
    Assignment,
    AssignmentCheckIn,
    AssignmentTenure,
    ChangeType,
    EmploymentTenure,
    MaapSnapshot,
    PositionCheckIn,
    Teammate,
    TeammateMilestone,
)

if TYPE_CHECKING:
    from sqlalchemy.types import TypeEngine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Teammates and catalog ---------------------------------------------------------

teammate_table = Table(
    "teammate",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("person_id", Integer, nullable=False),
    Column("organization_id", Integer, nullable=False, index=True),
    Column("display_name", String, nullable=False, default=""),
)

assignment_table = Table(
    "assignment",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("company_id", Integer, nullable=False, index=True),
    Column("title", String, nullable=False),
)

ability_table = Table(
    "ability",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("organization_id", Integer, nullable=False, index=True),
    Column("name", String, nullable=False),
)

aspiration_table = Table(
    "aspiration",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("organization_id", Integer, nullable=False, index=True),
    Column("name", String, nullable=False),
    Column("sort_order", Integer, nullable=False, default=0),
)

# Tenures -----------------------------------------------------------------------

employment_tenure_table = Table(
    "employment_tenure",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("teammate_id", Integer, ForeignKey("teammate.id"), nullable=False, index=True),
    Column("company_id", Integer, nullable=False),
    Column("position_id", Integer, nullable=False),
    Column("manager_id", Integer, nullable=True),
    Column("seat_id", Integer, nullable=True),
    Column("employment_type", String, nullable=False, default="full_time"),
    Column("official_position_rating", Integer, nullable=True),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("ended_at", UTCDateTime(), nullable=True),
)

assignment_tenure_table = Table(
    "assignment_tenure",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("teammate_id", Integer, ForeignKey("teammate.id"), nullable=False, index=True),
    Column("assignment_id", Integer, ForeignKey("assignment.id"), nullable=False),
    Column("anticipated_energy_percentage", Integer, nullable=True),
    Column("official_rating", String, nullable=True),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("ended_at", UTCDateTime(), nullable=True),
)

teammate_milestone_table = Table(
    "teammate_milestone",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("teammate_id", Integer, ForeignKey("teammate.id"), nullable=False, index=True),
    Column("ability_id", Integer, ForeignKey("ability.id"), nullable=False),
    Column("milestone_level", Integer, nullable=False),
    Column("certified_by_id", Integer, nullable=True),
    Column("attained_at", Date, nullable=False),
)

# Check-ins ---------------------------------------------------------------------


def _check_in_columns(rating_type: type[TypeEngine[object]]) -> list[Column[object]]:
    return [
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("teammate_id", Integer, ForeignKey("teammate.id"), nullable=False, index=True),
        Column("check_in_started_on", Date, nullable=True),
        Column("employee_rating", rating_type, nullable=True),
        Column("employee_private_notes", Text, nullable=True),
        Column("employee_completed_at", UTCDateTime(), nullable=True),
        Column("manager_rating", rating_type, nullable=True),
        Column("manager_private_notes", Text, nullable=True),
        Column("manager_completed_at", UTCDateTime(), nullable=True),
        Column("manager_completed_by_id", Integer, nullable=True),
        Column("shared_notes", Text, nullable=True),
        Column("official_rating", rating_type, nullable=True),
        Column("official_check_in_completed_at", UTCDateTime(), nullable=True),
        Column("finalized_by_id", Integer, nullable=True),
        Column("maap_snapshot_id", Integer, ForeignKey("maap_snapshot.id"), nullable=True),
    ]


assignment_check_in_table = Table(
    "assignment_check_in",
    mapper_registry.metadata,
    *_check_in_columns(String),
    Column("assignment_id", Integer, ForeignKey("assignment.id"), nullable=False),
    Column("actual_energy_percentage", Integer, nullable=True),
    Column("employee_personal_alignment", String, nullable=True),
)

position_check_in_table = Table(
    "position_check_in",
    mapper_registry.metadata,
    *_check_in_columns(Integer),
    Column(
        "employment_tenure_id",
        Integer,
        ForeignKey("employment_tenure.id"),
        nullable=False,
    ),
    Column("position_id", Integer, nullable=False),
)

aspiration_check_in_table = Table(
    "aspiration_check_in",
    mapper_registry.metadata,
    *_check_in_columns(String),
    Column("aspiration_id", Integer, ForeignKey("aspiration.id"), nullable=False),
)

# Snapshots ---------------------------------------------------------------------

maap_snapshot_table = Table(
    "maap_snapshot",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("employee_teammate_id", Integer, ForeignKey("teammate.id"), nullable=True),
    Column("creator_teammate_id", Integer, nullable=True),
    Column("company_id", Integer, nullable=False),
    Column("change_type", Enum(ChangeType, native_enum=False), nullable=False),
    Column("reason", String, nullable=False),
    Column("maap_data", JSON, nullable=False),
    Column("form_params", JSON, nullable=False),
    Column("request_info", JSON, nullable=False),
    Column("applied_changes", JSON, nullable=False),
    Column("effective_date", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_maap_snapshot_employee_created", "employee_teammate_id", "created_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    for entity, table in (
        (Teammate, teammate_table),
        (Assignment, assignment_table),
        (Ability, ability_table),
        (Aspiration, aspiration_table),
        (EmploymentTenure, employment_tenure_table),
        (AssignmentTenure, assignment_tenure_table),
        (TeammateMilestone, teammate_milestone_table),
        (AssignmentCheckIn, assignment_check_in_table),
        (PositionCheckIn, position_check_in_table),
        (AspirationCheckIn, aspiration_check_in_table),
        (MaapSnapshot, maap_snapshot_table),
    ):
        mapper_registry.map_imperatively(entity, table)

    orm.configure_mappers()
    return mapper_registry
