# models/withdrawal.py
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Numeric, String, Text, func
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column

from database import Base
from utils.ulid import ULID_LENGTH, generate_ulid


class WithdrawalMethod(str, enum.Enum):
    BANK_TRANSFER = "BANK_TRANSFER"
    XENDIT_DISBURSEMENT = "XENDIT_DISBURSEMENT"
    MANUAL = "MANUAL"


class WithdrawalStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class Withdrawal(Base):
    __tablename__ = "withdrawals"
    __table_args__ = (
        Index("withdrawals_user_id_idx", "user_id"),
        Index("withdrawals_project_id_idx", "project_id"),
        Index("withdrawals_status_idx", "status"),
        Index("withdrawals_requested_at_idx", "requested_at"),
        Index("withdrawals_status_requested_at_idx", "status", "requested_at"),
        # admin queue: filter by status + method, newest first
        Index("withdrawals_admin_queries_idx", "status", "method", "requested_at"),
    )

    id: Mapped[str] = mapped_column(String(ULID_LENGTH), primary_key=True, default=generate_ulid)
    user_id: Mapped[str] = mapped_column(
        String(ULID_LENGTH), ForeignKey("users.id", onupdate="CASCADE", ondelete="RESTRICT")
    )
    project_id: Mapped[str] = mapped_column(
        String(ULID_LENGTH), ForeignKey("projects.id", onupdate="CASCADE", ondelete="RESTRICT")
    )

    # Amounts in whole rupiah
    amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 0), comment="Amount requested for withdrawal in smallest currency unit"
    )
    available_amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 0), comment="Available amount at time of request"
    )
    currency: Mapped[str] = mapped_column(String(3), default="IDR", server_default="IDR")
    method: Mapped[WithdrawalMethod] = mapped_column(Enum(WithdrawalMethod, name="enum_withdrawals_method"))
    status: Mapped[WithdrawalStatus] = mapped_column(
        Enum(WithdrawalStatus, name="enum_withdrawals_status"),
        default=WithdrawalStatus.PENDING,
        server_default=WithdrawalStatus.PENDING.value,
    )

    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    bank_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bank_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    account_holder_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    xendit_disbursement_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    disbursement_data: Mapped[dict | None] = mapped_column(postgresql.JSONB, nullable=True)

    processing_fee: Mapped[Decimal] = mapped_column(Numeric(15, 0), default=0, server_default="0")
    net_amount: Mapped[Decimal] = mapped_column(Numeric(15, 0), default=0, server_default="0")

    approved_by: Mapped[str | None] = mapped_column(String(ULID_LENGTH), ForeignKey("users.id"), nullable=True)
    processed_by: Mapped[str | None] = mapped_column(String(ULID_LENGTH), ForeignKey("users.id"), nullable=True)
    rejected_by: Mapped[str | None] = mapped_column(String(ULID_LENGTH), ForeignKey("users.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
