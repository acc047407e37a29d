"""add payment status to donations

Revision ID: 2c6d8a0f5e97
Revises: 1b9e4f6c2d80
Create Date: 2025-08-30 15:00:01.000000

Existing donations get payment_status PENDING via the server default, as
does any insert that leaves the column out.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '2c6d8a0f5e97'
down_revision: Union[str, Sequence[str], None] = '1b9e4f6c2d80'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUSES = ("PENDING", "PAID", "EXPIRED", "FAILED", "CANCELLED")
METHODS = ("INVOICE", "VIRTUAL_ACCOUNT", "EWALLET", "CARD")


def upgrade() -> None:
    op.execute(
        "CREATE TYPE enum_donations_payment_status AS ENUM "
        "('PENDING', 'PAID', 'EXPIRED', 'FAILED', 'CANCELLED')"
    )
    op.execute(
        "CREATE TYPE enum_donations_payment_method AS ENUM "
        "('INVOICE', 'VIRTUAL_ACCOUNT', 'EWALLET', 'CARD')"
    )
    op.add_column(
        "donations",
        sa.Column(
            "payment_status",
            postgresql.ENUM(*STATUSES, name="enum_donations_payment_status", create_type=False),
            nullable=False,
            server_default="PENDING",
        ),
    )
    op.add_column(
        "donations",
        sa.Column(
            "payment_method",
            postgresql.ENUM(*METHODS, name="enum_donations_payment_method", create_type=False),
            nullable=True,
        ),
    )
    op.create_index("ix_donations_payment_status", "donations", ["payment_status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_donations_payment_status", table_name="donations")
    op.drop_column("donations", "payment_method")
    op.drop_column("donations", "payment_status")
    op.execute("DROP TYPE IF EXISTS enum_donations_payment_method")
    op.execute("DROP TYPE IF EXISTS enum_donations_payment_status")
