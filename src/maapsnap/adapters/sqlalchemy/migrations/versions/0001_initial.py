"""Initial schema: teammates, catalog, tenures, check-ins and snapshots.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_CHANGE_TYPES = (
    "ASSIGNMENT_MANAGEMENT",
    "POSITION_TENURE",
    "MILESTONE_MANAGEMENT",
    "ASPIRATION_MANAGEMENT",
    "EXPLORATION",
    "BULK_UPDATE",
    "BULK_CHECK_IN_FINALIZATION",
)


def _check_in_columns(rating_type: type[sa.types.TypeEngine[object]]) -> list[sa.Column[object]]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("teammate_id", sa.Integer(), sa.ForeignKey("teammate.id"), nullable=False),
        sa.Column("check_in_started_on", sa.Date(), nullable=True),
        sa.Column("employee_rating", rating_type(), nullable=True),
        sa.Column("employee_private_notes", sa.Text(), nullable=True),
        sa.Column("employee_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("manager_rating", rating_type(), nullable=True),
        sa.Column("manager_private_notes", sa.Text(), nullable=True),
        sa.Column("manager_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("manager_completed_by_id", sa.Integer(), nullable=True),
        sa.Column("shared_notes", sa.Text(), nullable=True),
        sa.Column("official_rating", rating_type(), nullable=True),
        sa.Column("official_check_in_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finalized_by_id", sa.Integer(), nullable=True),
        sa.Column(
            "maap_snapshot_id", sa.Integer(), sa.ForeignKey("maap_snapshot.id"), nullable=True
        ),
    ]


def _teammate_index(table: str) -> None:
    op.create_index(f"ix_{table}_teammate_id", table, ["teammate_id"])


def upgrade() -> None:
    op.create_table(
        "teammate",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
    )
    op.create_index("ix_teammate_organization_id", "teammate", ["organization_id"])

    op.create_table(
        "assignment",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
    )
    op.create_index("ix_assignment_company_id", "assignment", ["company_id"])

    op.create_table(
        "ability",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
    )
    op.create_index("ix_ability_organization_id", "ability", ["organization_id"])

    op.create_table(
        "aspiration",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
    )
    op.create_index("ix_aspiration_organization_id", "aspiration", ["organization_id"])

    op.create_table(
        "employment_tenure",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("teammate_id", sa.Integer(), sa.ForeignKey("teammate.id"), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("position_id", sa.Integer(), nullable=False),
        sa.Column("manager_id", sa.Integer(), nullable=True),
        sa.Column("seat_id", sa.Integer(), nullable=True),
        sa.Column("employment_type", sa.String(), nullable=False),
        sa.Column("official_position_rating", sa.Integer(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
    )
    _teammate_index("employment_tenure")

    op.create_table(
        "assignment_tenure",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("teammate_id", sa.Integer(), sa.ForeignKey("teammate.id"), nullable=False),
        sa.Column("assignment_id", sa.Integer(), sa.ForeignKey("assignment.id"), nullable=False),
        sa.Column("anticipated_energy_percentage", sa.Integer(), nullable=True),
        sa.Column("official_rating", sa.String(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
    )
    _teammate_index("assignment_tenure")

    op.create_table(
        "teammate_milestone",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("teammate_id", sa.Integer(), sa.ForeignKey("teammate.id"), nullable=False),
        sa.Column("ability_id", sa.Integer(), sa.ForeignKey("ability.id"), nullable=False),
        sa.Column("milestone_level", sa.Integer(), nullable=False),
        sa.Column("certified_by_id", sa.Integer(), nullable=True),
        sa.Column("attained_at", sa.Date(), nullable=False),
    )
    _teammate_index("teammate_milestone")

    op.create_table(
        "maap_snapshot",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "employee_teammate_id", sa.Integer(), sa.ForeignKey("teammate.id"), nullable=True
        ),
        sa.Column("creator_teammate_id", sa.Integer(), nullable=True),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column(
            "change_type",
            sa.Enum(*_CHANGE_TYPES, name="changetype", native_enum=False),
            nullable=False,
        ),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("maap_data", sa.JSON(), nullable=False),
        sa.Column("form_params", sa.JSON(), nullable=False),
        sa.Column("request_info", sa.JSON(), nullable=False),
        sa.Column("effective_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_maap_snapshot_employee_created",
        "maap_snapshot",
        ["employee_teammate_id", "created_at"],
    )

    op.create_table(
        "assignment_check_in",
        *_check_in_columns(sa.String),
        sa.Column("assignment_id", sa.Integer(), sa.ForeignKey("assignment.id"), nullable=False),
        sa.Column("actual_energy_percentage", sa.Integer(), nullable=True),
        sa.Column("employee_personal_alignment", sa.String(), nullable=True),
    )
    _teammate_index("assignment_check_in")

    op.create_table(
        "position_check_in",
        *_check_in_columns(sa.Integer),
        sa.Column(
            "employment_tenure_id",
            sa.Integer(),
            sa.ForeignKey("employment_tenure.id"),
            nullable=False,
        ),
        sa.Column("position_id", sa.Integer(), nullable=False),
    )
    _teammate_index("position_check_in")

    op.create_table(
        "aspiration_check_in",
        *_check_in_columns(sa.String),
        sa.Column("aspiration_id", sa.Integer(), sa.ForeignKey("aspiration.id"), nullable=False),
    )
    _teammate_index("aspiration_check_in")


def downgrade() -> None:
    for table in (
        "aspiration_check_in",
        "position_check_in",
        "assignment_check_in",
        "maap_snapshot",
        "teammate_milestone",
        "assignment_tenure",
        "employment_tenure",
        "aspiration",
        "ability",
        "assignment",
        "teammate",
    ):
        op.drop_table(table)
