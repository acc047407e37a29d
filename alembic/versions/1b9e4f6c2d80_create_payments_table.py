"""create payments table

Revision ID: 1b9e4f6c2d80
Revises: f2a7d9e1c4b3
Create Date: 2025-08-30 15:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '1b9e4f6c2d80'
down_revision: Union[str, Sequence[str], None] = 'f2a7d9e1c4b3'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

METHODS = ("INVOICE", "VIRTUAL_ACCOUNT", "EWALLET", "CARD")
STATUSES = ("PENDING", "PAID", "EXPIRED", "FAILED", "CANCELLED")


def upgrade() -> None:
    op.execute("CREATE TYPE enum_payments_method AS ENUM ('INVOICE', 'VIRTUAL_ACCOUNT', 'EWALLET', 'CARD')")
    op.execute(
        "CREATE TYPE enum_payments_status AS ENUM ('PENDING', 'PAID', 'EXPIRED', 'FAILED', 'CANCELLED')"
    )
    op.create_table(
        "payments",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "donation_id",
            sa.String(26),
            sa.ForeignKey("donations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("external_id", sa.String(255), nullable=False),
        sa.Column("xendit_id", sa.String(255), nullable=True),
        sa.Column("amount", sa.Numeric(15, 0), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="IDR"),
        sa.Column(
            "method",
            postgresql.ENUM(*METHODS, name="enum_payments_method", create_type=False),
            nullable=False,
        ),
        sa.Column(
            "status",
            postgresql.ENUM(*STATUSES, name="enum_payments_status", create_type=False),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("payment_url", sa.Text(), nullable=True),
        sa.Column("virtual_account", postgresql.JSONB, nullable=True),
        sa.Column("ewallet_type", sa.String(50), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expired_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("failure_code", sa.String(100), nullable=True),
        sa.Column("webhook_data", postgresql.JSONB, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_payments_donation_id", "payments", ["donation_id"], unique=False)
    op.create_index("ix_payments_external_id", "payments", ["external_id"], unique=True)
    op.create_index("ix_payments_xendit_id", "payments", ["xendit_id"], unique=False)
    op.create_index("ix_payments_status", "payments", ["status"], unique=False)
    op.create_index("ix_payments_created_at", "payments", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_table("payments")
    op.execute("DROP TYPE IF EXISTS enum_payments_status")
    op.execute("DROP TYPE IF EXISTS enum_payments_method")
