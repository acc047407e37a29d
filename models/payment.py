# models/payment.py
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Numeric, String, Text, func
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base
from models.donation import PaymentMethod, PaymentStatus
from utils.ulid import ULID_LENGTH, generate_ulid


class Payment(Base):
    """One payment attempt (Xendit invoice / VA / e-wallet / card) for a donation."""

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(ULID_LENGTH), primary_key=True, default=generate_ulid)
    donation_id: Mapped[str] = mapped_column(
        String(ULID_LENGTH), ForeignKey("donations.id", ondelete="CASCADE"), index=True
    )
    external_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    xendit_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 0))
    currency: Mapped[str] = mapped_column(String(3), default="IDR", server_default="IDR")
    method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod, name="enum_payments_method"))
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="enum_payments_status"),
        default=PaymentStatus.PENDING,
        server_default=PaymentStatus.PENDING.value,
        index=True,
    )
    payment_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    virtual_account: Mapped[dict | None] = mapped_column(postgresql.JSONB, nullable=True)
    ewallet_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expired_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    failure_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    webhook_data: Mapped[dict | None] = mapped_column(postgresql.JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    donation = relationship("Donation", back_populates="payments")
