"""add role to users

Revision ID: 8a41c2e9d3f5
Revises: 3f0c9a1d2b7e
Create Date: 2025-08-30 05:44:59.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '8a41c2e9d3f5'
down_revision: Union[str, Sequence[str], None] = '3f0c9a1d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLES = ("ADMIN", "USER", "FUNDRAISER")


def upgrade() -> None:
    # Type is created explicitly so offline (--sql) output contains it too
    op.execute("CREATE TYPE enum_users_role AS ENUM ('ADMIN', 'USER', 'FUNDRAISER')")
    op.add_column(
        "users",
        sa.Column(
            "role",
            postgresql.ENUM(*ROLES, name="enum_users_role", create_type=False),
            nullable=False,
            server_default="USER",
        ),
    )
    op.create_index("ix_users_role", "users", ["role"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_users_role", table_name="users")
    op.drop_column("users", "role")
    op.execute("DROP TYPE IF EXISTS enum_users_role")
