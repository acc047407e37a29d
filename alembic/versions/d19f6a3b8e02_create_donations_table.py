"""create donations table

Revision ID: d19f6a3b8e02
Revises: c72e5b0a9f14
Create Date: 2025-08-30 10:00:01.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'd19f6a3b8e02'
down_revision: Union[str, Sequence[str], None] = 'c72e5b0a9f14'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "donations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("isAnonymous", sa.Boolean(), nullable=True, server_default=sa.text("false")),
        sa.Column("donorName", sa.String(255), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column(
            "projectId",
            sa.Uuid(),
            sa.ForeignKey(
                "projects.id",
                name="donations_projectId_fkey",
                onupdate="CASCADE",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column(
            "userId",
            sa.Uuid(),
            sa.ForeignKey(
                "users.id",
                name="donations_userId_fkey",
                onupdate="CASCADE",
                ondelete="SET NULL",
            ),
            nullable=True,
        ),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updatedAt", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="donations_pkey"),
    )
    op.create_index("ix_donations_projectId", "donations", ["projectId"], unique=False)
    op.create_index("ix_donations_userId", "donations", ["userId"], unique=False)
    op.create_index("ix_donations_createdAt", "donations", ["createdAt"], unique=False)


def downgrade() -> None:
    op.drop_table("donations")
