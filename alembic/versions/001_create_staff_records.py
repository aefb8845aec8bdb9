"""Create staff_records table

Revision ID: 001_staff_records
Revises:
Create Date: 2026-10-19

This migration:
1. Creates the staff_records table in the public schema
2. Indexes created_at, the default list ordering
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_staff_records"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "staff_records",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("resumption_date", sa.Date(), nullable=False),
        sa.Column("exit_date", sa.Text(), server_default="", nullable=True),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("designation", sa.Text(), nullable=False),
        sa.Column("hiring_officer", sa.Text(), nullable=True),
        sa.Column("picture_url", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "ix_staff_records_created_at",
        "staff_records",
        ["created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_staff_records_created_at", table_name="staff_records")
    op.drop_table("staff_records")
