# models/user.py
import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base
from utils.ulid import ULID_LENGTH, generate_ulid


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"
    FUNDRAISER = "FUNDRAISER"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(ULID_LENGTH), primary_key=True, default=generate_ulid)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    username: Mapped[str] = mapped_column(String(255), unique=True)
    password: Mapped[str] = mapped_column(String(255))
    first_name: Mapped[str] = mapped_column("firstName", String(255))
    last_name: Mapped[str] = mapped_column("lastName", String(255))
    is_active: Mapped[bool] = mapped_column("isActive", Boolean, default=True, server_default="true")
    last_login_at: Mapped[datetime | None] = mapped_column("lastLoginAt", DateTime(timezone=True), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="enum_users_role"),
        default=UserRole.USER,
        server_default=UserRole.USER.value,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column("updatedAt", DateTime(timezone=True))

    projects = relationship("Project", back_populates="fundraiser")
    donations = relationship("Donation", back_populates="user")
