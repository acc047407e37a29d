# models/identifier_remap_archive.py
from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from database import Base
from services.identifier_remap import ARCHIVE_TABLE
from utils.ulid import ULID_LENGTH


class IdentifierRemapArchive(Base):
    """
    Original UUID of every users/projects/donations row and the ULID that
    replaced it. Created by the UUID -> ULID migration, read by its
    downgrade. Declared here so autogenerate does not propose dropping it.
    """

    __tablename__ = ARCHIVE_TABLE
    __table_args__ = (
        UniqueConstraint("new_id", name=f"uq_{ARCHIVE_TABLE}_new_id"),
    )

    table_name: Mapped[str] = mapped_column(String(63), primary_key=True)
    old_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    new_id: Mapped[str] = mapped_column(String(ULID_LENGTH))
    remapped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
