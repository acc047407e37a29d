# models/donation.py
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base
from utils.ulid import ULID_LENGTH, generate_ulid


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, enum.Enum):
    INVOICE = "INVOICE"
    VIRTUAL_ACCOUNT = "VIRTUAL_ACCOUNT"
    EWALLET = "EWALLET"
    CARD = "CARD"


class Donation(Base):
    __tablename__ = "donations"

    id: Mapped[str] = mapped_column(String(ULID_LENGTH), primary_key=True, default=generate_ulid)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 0))

    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="enum_donations_payment_status"),
        default=PaymentStatus.PENDING,
        server_default=PaymentStatus.PENDING.value,
        index=True,
    )
    payment_method: Mapped[PaymentMethod | None] = mapped_column(
        Enum(PaymentMethod, name="enum_donations_payment_method"),
        nullable=True,
    )

    is_anonymous: Mapped[bool | None] = mapped_column(
        "isAnonymous", Boolean, default=False, server_default="false", nullable=True
    )
    donor_name: Mapped[str | None] = mapped_column("donorName", String(255), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    project_id: Mapped[str] = mapped_column(
        "projectId",
        String(ULID_LENGTH),
        ForeignKey("projects.id", name="donations_projectId_fkey", onupdate="CASCADE", ondelete="CASCADE"),
        index=True,
    )
    # Nullable: guest donations, and donations whose user was deleted.
    user_id: Mapped[str | None] = mapped_column(
        "userId",
        String(ULID_LENGTH),
        ForeignKey("users.id", name="donations_userId_fkey", onupdate="CASCADE", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime(timezone=True), index=True)
    updated_at: Mapped[datetime] = mapped_column("updatedAt", DateTime(timezone=True))

    project = relationship("Project", back_populates="donations")
    user = relationship("User", back_populates="donations")
    payments = relationship("Payment", back_populates="donation", cascade="all, delete-orphan")
