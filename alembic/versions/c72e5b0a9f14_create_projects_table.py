"""create projects table

Revision ID: c72e5b0a9f14
Revises: 8a41c2e9d3f5
Create Date: 2025-08-30 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'c72e5b0a9f14'
down_revision: Union[str, Sequence[str], None] = '8a41c2e9d3f5'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUSES = ("ACTIVE", "CLOSED", "CANCELLED")


def upgrade() -> None:
    op.execute("CREATE TYPE enum_projects_status AS ENUM ('ACTIVE', 'CLOSED', 'CANCELLED')")
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("images", postgresql.ARRAY(sa.String()), nullable=True, server_default=sa.text("'{}'")),
        sa.Column("targetAmount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currentAmount", sa.Numeric(12, 2), nullable=True, server_default=sa.text("0")),
        sa.Column("startDate", sa.DateTime(timezone=True), nullable=False),
        sa.Column("endDate", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM(*STATUSES, name="enum_projects_status", create_type=False),
            nullable=False,
            server_default="ACTIVE",
        ),
        sa.Column(
            "fundraiserId",
            sa.Uuid(),
            sa.ForeignKey(
                "users.id",
                name="projects_fundraiserId_fkey",
                onupdate="CASCADE",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updatedAt", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="projects_pkey"),
    )
    op.create_index("ix_projects_fundraiserId", "projects", ["fundraiserId"], unique=False)
    op.create_index("ix_projects_status", "projects", ["status"], unique=False)
    op.create_index("ix_projects_endDate", "projects", ["endDate"], unique=False)
    op.create_index("ix_projects_title", "projects", ["title"], unique=False)


def downgrade() -> None:
    op.drop_table("projects")  # indexes go with the table
    op.execute("DROP TYPE IF EXISTS enum_projects_status")
