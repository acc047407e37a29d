"""update currency to idr

Revision ID: e5b80c4d7a61
Revises: d19f6a3b8e02
Create Date: 2025-08-30 12:00:00.000000

Amounts move from USD with cents to whole rupiah. Rows still at USD scale
(below the thresholds in services.currency_conversion) are multiplied by
the USD -> IDR rate; larger values are assumed to be IDR already.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from services.currency_conversion import (
    DONATION_USD_THRESHOLD,
    PROJECT_USD_THRESHOLD,
    to_idr_using,
    to_usd_using,
)


# revision identifiers, used by Alembic.
revision: str = 'e5b80c4d7a61'
down_revision: Union[str, Sequence[str], None] = 'd19f6a3b8e02'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # currentAmount first: its USING clause reads the not-yet-converted targetAmount
    op.alter_column(
        "projects",
        "currentAmount",
        type_=sa.Numeric(15, 0),
        existing_type=sa.Numeric(12, 2),
        existing_nullable=True,
        postgresql_using=to_idr_using("currentAmount", "targetAmount", PROJECT_USD_THRESHOLD),
    )
    op.alter_column(
        "projects",
        "targetAmount",
        type_=sa.Numeric(15, 0),
        existing_type=sa.Numeric(12, 2),
        existing_nullable=False,
        postgresql_using=to_idr_using("targetAmount", "targetAmount", PROJECT_USD_THRESHOLD),
    )
    op.alter_column(
        "donations",
        "amount",
        type_=sa.Numeric(15, 0),
        existing_type=sa.Numeric(10, 2),
        existing_nullable=False,
        postgresql_using=to_idr_using("amount", "amount", DONATION_USD_THRESHOLD),
    )


def downgrade() -> None:
    op.alter_column(
        "projects",
        "currentAmount",
        type_=sa.Numeric(12, 2),
        existing_type=sa.Numeric(15, 0),
        existing_nullable=True,
        postgresql_using=to_usd_using("currentAmount", "targetAmount", PROJECT_USD_THRESHOLD),
    )
    op.alter_column(
        "projects",
        "targetAmount",
        type_=sa.Numeric(12, 2),
        existing_type=sa.Numeric(15, 0),
        existing_nullable=False,
        postgresql_using=to_usd_using("targetAmount", "targetAmount", PROJECT_USD_THRESHOLD),
    )
    op.alter_column(
        "donations",
        "amount",
        type_=sa.Numeric(10, 2),
        existing_type=sa.Numeric(15, 0),
        existing_nullable=False,
        postgresql_using=to_usd_using("amount", "amount", DONATION_USD_THRESHOLD),
    )
