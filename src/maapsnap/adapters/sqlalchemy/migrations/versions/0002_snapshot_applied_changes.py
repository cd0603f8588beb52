"""Record which fields each snapshot changed.

Revision ID: 0002_snapshot_applied_changes
Revises: 0001_initial
Create Date: 2026-10-19 14:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0002_snapshot_applied_changes"
down_revision: str | None = "0001_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column(
        "maap_snapshot",
        sa.Column("applied_changes", sa.JSON(), server_default="[]", nullable=False),
    )


def downgrade() -> None:
    with op.batch_alter_table("maap_snapshot") as batch_op:
        batch_op.drop_column("applied_changes")
