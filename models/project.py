# models/project.py
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base
from utils.ulid import ULID_LENGTH, generate_ulid


class ProjectStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(ULID_LENGTH), primary_key=True, default=generate_ulid)
    title: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[str] = mapped_column(Text)
    images: Mapped[list[str] | None] = mapped_column(
        postgresql.ARRAY(String), default=list, server_default="{}", nullable=True
    )

    # Whole rupiah (IDR), no fractional part.
    target_amount: Mapped[Decimal] = mapped_column("targetAmount", Numeric(15, 0))
    current_amount: Mapped[Decimal | None] = mapped_column(
        "currentAmount", Numeric(15, 0), default=0, server_default="0", nullable=True
    )

    start_date: Mapped[datetime] = mapped_column("startDate", DateTime(timezone=True))
    end_date: Mapped[datetime] = mapped_column("endDate", DateTime(timezone=True), index=True)
    status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, name="enum_projects_status"),
        default=ProjectStatus.ACTIVE,
        server_default=ProjectStatus.ACTIVE.value,
        index=True,
    )

    fundraiser_id: Mapped[str] = mapped_column(
        "fundraiserId",
        String(ULID_LENGTH),
        ForeignKey("users.id", name="projects_fundraiserId_fkey", onupdate="CASCADE", ondelete="CASCADE"),
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column("updatedAt", DateTime(timezone=True))

    fundraiser = relationship("User", back_populates="projects")
    donations = relationship("Donation", back_populates="project")
