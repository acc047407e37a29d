"""create withdrawals table

Revision ID: 4e3a1b7c9d52
Revises: 2c6d8a0f5e97
Create Date: 2025-08-30 16:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4e3a1b7c9d52'
down_revision: Union[str, Sequence[str], None] = '2c6d8a0f5e97'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

METHODS = ("BANK_TRANSFER", "XENDIT_DISBURSEMENT", "MANUAL")
STATUSES = ("PENDING", "PROCESSING", "APPROVED", "REJECTED", "COMPLETED", "FAILED", "CANCELLED")

INDEXES = (
    ("withdrawals_user_id_idx", ["user_id"]),
    ("withdrawals_project_id_idx", ["project_id"]),
    ("withdrawals_status_idx", ["status"]),
    ("withdrawals_requested_at_idx", ["requested_at"]),
    ("withdrawals_status_requested_at_idx", ["status", "requested_at"]),
    ("withdrawals_admin_queries_idx", ["status", "method", "requested_at"]),
)


def upgrade() -> None:
    op.execute("CREATE TYPE enum_withdrawals_method AS ENUM ('BANK_TRANSFER', 'XENDIT_DISBURSEMENT', 'MANUAL')")
    op.execute(
        "CREATE TYPE enum_withdrawals_status AS ENUM "
        "('PENDING', 'PROCESSING', 'APPROVED', 'REJECTED', 'COMPLETED', 'FAILED', 'CANCELLED')"
    )
    op.create_table(
        "withdrawals",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(26),
            sa.ForeignKey("users.id", onupdate="CASCADE", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "project_id",
            sa.String(26),
            sa.ForeignKey("projects.id", onupdate="CASCADE", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(15, 0), nullable=False,
                  comment="Amount requested for withdrawal in smallest currency unit"),
        sa.Column("available_amount", sa.Numeric(15, 0), nullable=False,
                  comment="Available amount at time of request"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="IDR"),
        sa.Column(
            "method",
            postgresql.ENUM(*METHODS, name="enum_withdrawals_method", create_type=False),
            nullable=False,
        ),
        sa.Column(
            "status",
            postgresql.ENUM(*STATUSES, name="enum_withdrawals_status", create_type=False),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        # bank details
        sa.Column("bank_name", sa.String(100), nullable=True),
        sa.Column("bank_code", sa.String(10), nullable=True),
        sa.Column("account_number", sa.String(50), nullable=True),
        sa.Column("account_holder_name", sa.String(100), nullable=True),
        # Xendit disbursement
        sa.Column("xendit_disbursement_id", sa.String(100), nullable=True),
        sa.Column("disbursement_data", postgresql.JSONB, nullable=True),
        # fees
        sa.Column("processing_fee", sa.Numeric(15, 0), nullable=False, server_default=sa.text("0")),
        sa.Column("net_amount", sa.Numeric(15, 0), nullable=False, server_default=sa.text("0")),
        # audit
        sa.Column("approved_by", sa.String(26), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("processed_by", sa.String(26), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("rejected_by", sa.String(26), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    for name, columns in INDEXES:
        op.create_index(name, "withdrawals", columns, unique=False)


def downgrade() -> None:
    for name, _columns in reversed(INDEXES):
        op.drop_index(name, table_name="withdrawals")
    op.drop_table("withdrawals")
    op.execute("DROP TYPE IF EXISTS enum_withdrawals_status")
    op.execute("DROP TYPE IF EXISTS enum_withdrawals_method")
